"""Web routes: landing page and the protected page."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from app.dependencies import require_user
from app.templating import render

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def home(request: Request):
    return render(request, "home.html")


@router.get("/secret/", response_class=HTMLResponse)
async def secret(request: Request, user_id: Annotated[int, Depends(require_user)]):
    return render(request, "secret.html", {"user_id": user_id})
