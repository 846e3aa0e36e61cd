from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.monitor import MonitorService, build_default_monitor
from settings import get_settings


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

_WINDOW_CHOICES = (1, 6, 24, 72, 168)
_LIVE_REFRESH_SECONDS = 30
_GRAPH_REFRESH_SECONDS = 300


def get_monitor() -> MonitorService:
    return build_default_monitor()


def _window_choices(default_hours: int) -> list[int]:
    return sorted({*_WINDOW_CHOICES, default_hours})


router = APIRouter(include_in_schema=False)


@router.get("/", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    monitor: MonitorService = Depends(get_monitor),
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "device_url": monitor.client.device_url,
            "storage_enabled": monitor.storage_enabled,
            "refresh_seconds": _LIVE_REFRESH_SECONDS,
        },
    )


@router.get("/graphs", name="ui_graphs", response_class=HTMLResponse)
async def ui_graphs(
    request: Request,
    monitor: MonitorService = Depends(get_monitor),
) -> HTMLResponse:
    default_hours = get_settings().default_window_hours
    return templates.TemplateResponse(
        request,
        "ui/graphs.html",
        {
            "storage_enabled": monitor.storage_enabled,
            "window_choices": _window_choices(default_hours),
            "default_hours": default_hours,
            "refresh_seconds": _GRAPH_REFRESH_SECONDS,
        },
    )
