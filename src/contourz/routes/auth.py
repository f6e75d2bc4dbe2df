from __future__ import annotations

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from contourz.errors import AuthError, BackendError, ValidationError
from contourz.routes.common import auth, render

router = APIRouter(tags=["auth"])


@router.get("/login", response_class=HTMLResponse)
async def login_form(request: Request):
    return render(request, "auth/login.html", {"errors": {}, "email": "", "active": "login"})


@router.post("/login")
async def login(request: Request, email: str = Form(""), password: str = Form("")):
    try:
        auth(request).sign_in(email, password)
    except ValidationError as exc:
        return render(
            request, "auth/login.html",
            {"errors": exc.errors, "email": email, "active": "login"}, status_code=422,
        )
    except (AuthError, BackendError) as exc:
        return render(
            request, "auth/login.html",
            {"errors": {"form": f"Login failed: {exc}"}, "email": email, "active": "login"},
            status_code=401,
        )
    return RedirectResponse(url="/", status_code=303)


@router.get("/signup", response_class=HTMLResponse)
async def signup_form(request: Request):
    return render(request, "auth/signup.html", {"errors": {}, "email": "", "active": "signup"})


@router.post("/signup")
async def signup(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
):
    service = auth(request)
    try:
        service.sign_up(email, password, confirm_password)
    except ValidationError as exc:
        return render(
            request, "auth/signup.html",
            {"errors": exc.errors, "email": email, "active": "signup"}, status_code=422,
        )
    except (AuthError, BackendError) as exc:
        return render(
            request, "auth/signup.html",
            {"errors": {"form": f"Signup failed: {exc}"}, "email": email, "active": "signup"},
            status_code=400,
        )
    if service.is_authenticated:
        return RedirectResponse(url="/", status_code=303)
    return render(
        request, "auth/login.html",
        {
            "errors": {},
            "email": email,
            "message": "We sent you a confirmation link. Please verify your email to continue.",
            "active": "login",
        },
    )


@router.post("/logout")
async def logout(request: Request):
    auth(request).sign_out()
    return RedirectResponse(url="/login", status_code=303)
