"""ASGI entry point: ``uvicorn main:app``."""

from taskpilot.main import app, create_app

__all__ = ["app", "create_app"]
