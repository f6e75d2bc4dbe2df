from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from contourz.routes.common import client, current_user, render
from contourz.services import dashboard

router = APIRouter(tags=["home"])


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, q: str = ""):
    current_user(request)
    stats = dashboard.get_stats(client(request))
    results = dashboard.search(client(request), q) if q.strip() else []
    return render(
        request, "home.html", {"stats": stats, "q": q, "results": results, "active": "home"}
    )
