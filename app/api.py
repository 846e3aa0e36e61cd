"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from app.schemas import HealthResponse, MeasurementSummary, WindowStatistics
from datastore.errors import QueryFailed, StoreClosed
from services.monitor import MonitorService, StorageDisabled, build_default_monitor
from services.report import format_reading
from services.sensor_client import SensorUnavailable
from settings import get_settings

router = APIRouter()


def get_monitor() -> MonitorService:
    return build_default_monitor()


def parse_window_hours(raw: Optional[str], default: Optional[int] = None) -> int:
    """Lenient ``hours`` parsing: anything but a positive integer gives the default."""
    fallback = default if default is not None else get_settings().default_window_hours
    if raw is None:
        return fallback
    try:
        hours = int(raw.strip())
    except ValueError:
        return fallback
    return hours if hours > 0 else fallback


def _sensor_error(exc: SensorUnavailable) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Error fetching data: {exc}",
    )


def _history_error(exc: Exception) -> HTTPException:
    if isinstance(exc, StorageDisabled):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not available",
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Error fetching measurements: {exc}",
    )


@router.get(
    "/data",
    response_class=PlainTextResponse,
    summary="Current sensor reading as formatted text.",
)
def get_data_text(monitor: MonitorService = Depends(get_monitor)) -> str:
    try:
        reading = monitor.fetch_current(record=False)
    except SensorUnavailable as exc:
        raise _sensor_error(exc) from exc
    return format_reading(reading)


@router.get(
    "/data/json",
    summary="Current sensor reading using the device's keys; the reading is also recorded.",
)
def get_data_json(monitor: MonitorService = Depends(get_monitor)) -> Dict[str, Any]:
    try:
        reading = monitor.fetch_current(record=True)
    except SensorUnavailable as exc:
        raise _sensor_error(exc) from exc
    return reading.model_dump(mode="json", by_alias=True)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(monitor: MonitorService = Depends(get_monitor)) -> HealthResponse:
    return HealthResponse(
        timestamp=datetime.now(timezone.utc),
        storage="enabled" if monitor.storage_enabled else "disabled",
    )


@router.get(
    "/api/measurements",
    response_model=List[MeasurementSummary],
    summary="Measurements recorded in the trailing window, oldest first.",
)
def get_measurements(
    hours: Optional[str] = Query(None, description="Window size in hours."),
    monitor: MonitorService = Depends(get_monitor),
) -> List[MeasurementSummary]:
    window_hours = parse_window_hours(hours)
    try:
        return monitor.recent_measurements(window_hours)
    except (StorageDisabled, QueryFailed, StoreClosed) as exc:
        raise _history_error(exc) from exc


@router.get(
    "/api/stats",
    response_model=WindowStatistics,
    summary="Aggregate statistics for the trailing window.",
)
def get_stats(
    hours: Optional[str] = Query(None, description="Window size in hours."),
    monitor: MonitorService = Depends(get_monitor),
) -> WindowStatistics:
    window_hours = parse_window_hours(hours)
    try:
        return monitor.window_stats(window_hours)
    except (StorageDisabled, QueryFailed, StoreClosed) as exc:
        raise _history_error(exc) from exc
