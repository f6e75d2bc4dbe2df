from __future__ import annotations

from fastapi import Request
from fastapi.responses import HTMLResponse

from contourz.auth import AuthService
from contourz.models import User
from contourz.supabase import SupabaseClient


def templates(request: Request):
    return request.app.state.templates


def client(request: Request) -> SupabaseClient:
    return request.app.state.client


def auth(request: Request) -> AuthService:
    return request.app.state.auth


def current_user(request: Request) -> User:
    """The signed-in user. AuthError is turned into a redirect to /login by the app."""
    return auth(request).require_user()


def render(request: Request, name: str, context: dict, status_code: int = 200) -> HTMLResponse:
    context = {"user": auth(request).user, **context}
    return templates(request).TemplateResponse(request, name, context, status_code=status_code)
