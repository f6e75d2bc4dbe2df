from __future__ import annotations

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from contourz.errors import BackendError, NotFoundError, ValidationError
from contourz.models import Tag
from contourz.routes.common import auth, client, current_user, render
from contourz.services import profile as svc
from contourz.services.tags import ProfileTagEditor, suggest_tags

router = APIRouter(prefix="/profile", tags=["profile"])


def _profile_page(request: Request, error: str = "", status_code: int = 200):
    profile = auth(request).profile
    return render(
        request,
        "profile/detail.html",
        {
            "profile": profile,
            "completion": svc.check_profile_completion(profile),
            "error": error,
            "active": "profile",
        },
        status_code=status_code,
    )


def _editor(request: Request) -> ProfileTagEditor:
    profile = auth(request).profile
    if profile is None:
        raise NotFoundError("Profile not found")
    return ProfileTagEditor(client(request), profile)


@router.get("", response_class=HTMLResponse)
async def show_profile(request: Request):
    current_user(request)
    auth(request).refresh_profile()
    return _profile_page(request)


@router.get("/edit", response_class=HTMLResponse)
async def edit_profile(request: Request):
    current_user(request)
    form = svc.ProfileForm.from_profile(auth(request).profile)
    return render(request, "profile/form.html", {"form": form, "errors": {}, "active": "profile"})


@router.post("/edit")
async def save_profile(
    request: Request,
    username: str = Form(""),
    display_name: str = Form(""),
    bio: str = Form(""),
    is_public: bool = Form(False),
):
    user = current_user(request)
    service = auth(request)
    form = svc.ProfileForm(username, display_name, bio, is_public)
    try:
        service.profile = svc.save_profile(client(request), user.id, form, service.profile)
    except (ValidationError, BackendError) as exc:
        errors = exc.errors if isinstance(exc, ValidationError) else {"form": str(exc)}
        return render(
            request, "profile/form.html",
            {"form": form, "errors": errors, "active": "profile"}, status_code=422,
        )
    return RedirectResponse(url="/profile", status_code=303)


@router.get("/tags/suggest", response_class=HTMLResponse)
async def tag_suggestions(request: Request, type: str, q: str = ""):
    current_user(request)
    profile = auth(request).profile
    existing = [pt.tag_id for pt in profile.tags] if profile else []
    try:
        tags = suggest_tags(client(request), type, q, exclude=existing)
    except ValidationError:
        return render(
            request, "profile/_suggestions.html", {"tags": [], "q": q, "type": type},
            status_code=422,
        )
    return render(
        request, "profile/_suggestions.html", {"tags": tags, "q": q, "type": type}
    )


@router.post("/tags")
async def add_tag(
    request: Request,
    tag_id: str = Form(...),
    name: str = Form(""),
    tag_type: str = Form("offer"),
):
    current_user(request)
    try:
        _editor(request).add_tag(Tag(id=tag_id, name=name, tag_type=tag_type))
    except BackendError as exc:
        return _profile_page(request, str(exc), status_code=502)
    return RedirectResponse(url="/profile", status_code=303)


@router.post("/tags/{tag_id}/remove")
async def remove_tag(request: Request, tag_id: str):
    current_user(request)
    try:
        _editor(request).remove_tag(Tag(id=tag_id))
    except BackendError as exc:
        return _profile_page(request, str(exc), status_code=502)
    return RedirectResponse(url="/profile", status_code=303)
