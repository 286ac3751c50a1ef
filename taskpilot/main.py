from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskpilot.application.use_cases import get_activity_dispatcher
from taskpilot.application.use_cases.notifications import run_due_soon_reminders
from taskpilot.config import get_settings
from taskpilot.infrastructure.database import SessionLocal, engine, initialize_database
from taskpilot.infrastructure.email import SendGridMailer
from taskpilot.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema, run the reminder sweep and flush pending dispatches on exit."""

    settings = get_settings()
    initialize_database()
    dispatcher = get_activity_dispatcher()

    async with anyio.create_task_group() as tg:
        if settings.due_soon_check_interval_minutes > 0:
            tg.start_soon(
                lambda: run_due_soon_reminders(
                    SessionLocal,
                    dispatcher,
                    interval_minutes=settings.due_soon_check_interval_minutes,
                    window_hours=settings.due_soon_window_hours,
                    mailer=SendGridMailer(SessionLocal),
                )
            )
            logger.info(
                "Due date reminders scheduled every %s minutes",
                settings.due_soon_check_interval_minutes,
            )
        try:
            yield
        finally:
            tg.cancel_scope.cancel()

    await dispatcher.drain()
    engine.dispose()


def create_app() -> FastAPI:
    """Build the FastAPI application."""

    configure_logging()
    settings = get_settings()
    app = FastAPI(title=settings.company_name, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
