"""Run repository calls in worker threads with a dedicated session."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import anyio
from sqlalchemy.orm import Session

T = TypeVar("T")


async def run_in_session(
    session_factory: Callable[[], Session],
    work: Callable[[Session], T],
) -> T:
    """Open a session, run ``work`` with it in a worker thread and close it."""

    def _run() -> T:
        with session_factory() as session:
            return work(session)

    return await anyio.to_thread.run_sync(_run)


__all__ = ["run_in_session"]
