"""HTTP client for the sensor's JSON endpoint."""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx
from pydantic import ValidationError

from app.schemas import DeviceReading

logger = logging.getLogger(__name__)


class SensorUnavailable(Exception):
    """The sensor could not be reached or returned an unusable payload."""


class SensorClient:
    """Fetches and decodes snapshots from a single device URL."""

    def __init__(
        self,
        device_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.device_url = device_url
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch_snapshot(self) -> DeviceReading:
        start = time.perf_counter()
        try:
            response = self._client.get(self.device_url)
        except httpx.HTTPError as exc:
            raise SensorUnavailable(f"Failed to make HTTP request: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            logger.warning(
                "Sensor request failed",
                extra={"device_url": self.device_url, "status_code": response.status_code},
            )
            raise SensorUnavailable(
                f"HTTP request failed with status: {response.status_code}"
            )

        try:
            reading = DeviceReading.model_validate_json(response.content)
        except ValidationError as exc:
            raise SensorUnavailable(f"Failed to parse JSON: {exc}") from exc

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.debug(
            "Fetched sensor snapshot",
            extra={
                "device_url": self.device_url,
                "sensor_id": reading.sensor_id,
                "elapsed_ms": elapsed_ms,
            },
        )
        return reading
