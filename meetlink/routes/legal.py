"""
Static informational pages.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from meetlink.utils.config import Settings, get_settings
from meetlink.utils.pages import render

router = APIRouter(tags=["pages"])


@router.get("/home", response_class=HTMLResponse)
async def home(request: Request, settings: Settings = Depends(get_settings)):
    return render(request, "home.html", settings=settings)


@router.get("/tnc", response_class=HTMLResponse)
async def terms(request: Request, settings: Settings = Depends(get_settings)):
    return render(request, "tnc.html", settings=settings)


@router.get("/privacy-policy", response_class=HTMLResponse)
async def privacy(request: Request, settings: Settings = Depends(get_settings)):
    return render(request, "privacy.html", settings=settings)
