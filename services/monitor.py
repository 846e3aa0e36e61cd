"""Coordinates the sensor client and the measurement store."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from app.schemas import DeviceReading, MeasurementSummary, WindowStatistics
from datastore.errors import StorageUnavailable, StoreClosed, WriteFailed
from datastore.measurements import MeasurementStore, build_default_store
from services.sensor_client import SensorClient
from settings import get_settings

logger = logging.getLogger(__name__)


class StorageDisabled(Exception):
    """Raised for history queries while running without a store."""


class MonitorService:
    """Fetches live readings, records them, and serves history from the store.

    ``store`` may be ``None`` when the database could not be opened; live
    readings keep working and history queries raise ``StorageDisabled``.
    """

    def __init__(self, client: SensorClient, store: Optional[MeasurementStore] = None) -> None:
        self.client = client
        self.store = store

    @property
    def storage_enabled(self) -> bool:
        return self.store is not None

    def fetch_current(self, record: bool = True) -> DeviceReading:
        """Fetch the live reading and, if ``record`` is set, append it to the store.

        A failed append is logged and otherwise ignored so the caller still gets
        the reading.
        """
        reading = self.client.fetch_snapshot()
        if record and self.store is not None:
            try:
                self.store.append(reading)
            except (WriteFailed, StoreClosed) as exc:
                logger.warning(
                    "Failed to store measurement",
                    extra={"sensor_id": reading.sensor_id, "reason": str(exc)},
                )
        return reading

    def recent_measurements(self, window_hours: int) -> list[MeasurementSummary]:
        summaries = self._require_store().recent_measurements(window_hours)
        logger.debug(
            "Fetched recent measurements",
            extra={"window_hours": window_hours, "row_count": len(summaries)},
        )
        return summaries

    def window_stats(self, window_hours: int) -> WindowStatistics:
        return self._require_store().window_stats(window_hours)

    def shutdown(self) -> None:
        """Close the HTTP client and the store during application shutdown."""
        self.client.close()
        if self.store is not None:
            self.store.close()

    def _require_store(self) -> MeasurementStore:
        if self.store is None:
            raise StorageDisabled("Database not available")
        return self.store


@lru_cache
def build_default_monitor() -> MonitorService:
    """Factory that wires the monitor from settings, degrading to no storage."""
    settings = get_settings()
    client = SensorClient(settings.device_url, timeout=settings.request_timeout)

    store: Optional[MeasurementStore] = None
    if settings.database_path:
        try:
            store = build_default_store()
        except StorageUnavailable as exc:
            logger.warning(
                "Failed to initialize database; data storage and graphing will be disabled",
                extra={"database_path": settings.database_path, "reason": str(exc)},
            )
    else:
        logger.warning("DATABASE_PATH is empty; data storage and graphing will be disabled")

    return MonitorService(client=client, store=store)
