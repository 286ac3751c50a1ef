"""Timestamps in the configured application timezone."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from taskpilot.config import get_settings

logger = logging.getLogger(__name__)

UTC = timezone.utc


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the ``APP_TIMEZONE`` zone, or UTC when it is unset or unknown."""

    name = (get_settings().app_timezone or "").strip()
    if not name:
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown APP_TIMEZONE %r, using UTC", name)
        return UTC


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Current local time without ``tzinfo``; used as the column default."""

    return now_in_app_timezone().replace(tzinfo=None)


def days_ago(days: int) -> datetime:
    return now_in_app_timezone() - timedelta(days=days)


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the app timezone; naive values are taken as local."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return ``value`` in local time with ``tzinfo`` stripped, as it is stored."""

    localized = ensure_app_timezone(value)
    return localized.replace(tzinfo=None) if localized is not None else None
