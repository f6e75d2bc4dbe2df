from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from contourz.auth import AuthService
from contourz.config import get_settings
from contourz.db import SessionStorage
from contourz.errors import AuthError, BackendError, NotFoundError
from contourz.routes import auth, contacts, home, meetings, profile, tasks, transactions
from contourz.supabase import SupabaseClient

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


def create_app(client: SupabaseClient | None = None) -> FastAPI:
    if client is None:
        settings = get_settings()
        client = SupabaseClient.from_settings(settings, SessionStorage(settings.db_path))

    auth_service = AuthService(client)
    auth_service.load()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        client.close()

    app = FastAPI(title="Contourz", lifespan=lifespan)
    app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")

    templates = Jinja2Templates(directory=BASE_DIR / "templates")
    app.state.templates = templates
    app.state.client = client
    app.state.auth = auth_service

    app.include_router(auth.router)
    app.include_router(home.router)
    app.include_router(contacts.router)
    app.include_router(tasks.router)
    app.include_router(meetings.router)
    app.include_router(transactions.router)
    app.include_router(profile.router)

    @app.exception_handler(AuthError)
    async def not_signed_in(request: Request, exc: AuthError):
        if request.headers.get("HX-Request"):
            return HTMLResponse(headers={"HX-Redirect": "/login"}, status_code=401)
        return RedirectResponse(url="/login", status_code=303)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return templates.TemplateResponse(
            request, "error.html",
            {"user": auth_service.user, "title": "Not found", "message": str(exc)},
            status_code=404,
        )

    @app.exception_handler(BackendError)
    async def backend_error(request: Request, exc: BackendError):
        logger.error("Backend error on %s: %s", request.url.path, exc)
        return templates.TemplateResponse(
            request, "error.html",
            {"user": auth_service.user, "title": "Something went wrong", "message": str(exc)},
            status_code=502,
        )

    return app
