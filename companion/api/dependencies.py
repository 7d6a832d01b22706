"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from companion.assist.session import SessionController


def get_session(request: Request) -> SessionController:
    """The process-wide session controller created at startup."""
    return request.app.state.session
