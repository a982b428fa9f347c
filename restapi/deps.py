"""Shared FastAPI dependencies."""

from fastapi import Request

from components.preferences.context import AppContext


def get_app_context(request: Request) -> AppContext:
    """The preferences context created with the application."""
    return request.app.state.app_context
