from __future__ import annotations

from typing import Any, Dict, List

import pytest
from typer.testing import CliRunner

from app.schemas import DeviceReading
from cli.app import app
from services.sensor_client import SensorUnavailable
from settings import get_settings


class StubClient:
    def __init__(self, device_url: str, timeout: float = 10.0) -> None:
        self.device_url = device_url
        self.timeout = timeout
        self.error: Exception | None = None
        self.reading = DeviceReading(
            sensor_id="84:f3:eb:7b:c8:a1",
            geo="PurpleAir-c8a1",
            current_temp_f=71.5,
            current_humidity=42,
            pm25_aqi=12,
            p25aqic="rgb(0,228,0)",
            pm25_cf1=2.9,
            mem=19872,
        )
        self.closed = False

    def fetch_snapshot(self) -> DeviceReading:
        if self.error is not None:
            raise self.error
        return self.reading

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stubs(monkeypatch) -> List[StubClient]:
    created: List[StubClient] = []

    def factory(device_url: str, timeout: float = 10.0) -> StubClient:
        stub = StubClient(device_url, timeout)
        created.append(stub)
        return stub

    monkeypatch.setattr("cli.app.SensorClient", factory)
    return created


def test_fetch_prints_formatted_reading(runner: CliRunner, stubs: List[StubClient]) -> None:
    result = runner.invoke(app, ["--device-url", "http://sensor.local/json", "fetch"])

    assert result.exit_code == 0
    assert "Fetching air quality data from: http://sensor.local/json" in result.stdout
    assert "=== Air Quality Sensor Data ===" in result.stdout
    assert "Sensor ID: 84:f3:eb:7b:c8:a1" in result.stdout
    assert "Temperature: 71.5 F" in result.stdout
    assert "PM2.5 AQI: 12 (rgb(0,228,0))" in result.stdout
    assert "Air Quality (Channel B)" not in result.stdout
    assert stubs[0].device_url == "http://sensor.local/json"
    assert stubs[0].closed is True


def test_fetch_uses_configured_defaults(monkeypatch, runner: CliRunner, stubs: List[StubClient]) -> None:
    monkeypatch.setenv("SENSOR_DEVICE_URL", "http://env-sensor/json")
    monkeypatch.setenv("SENSOR_REQUEST_TIMEOUT", "3.5")
    get_settings.cache_clear()
    try:
        result = runner.invoke(app, ["fetch"])
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 0
    assert stubs[0].device_url == "http://env-sensor/json"
    assert stubs[0].timeout == 3.5


def test_fetch_failure_exits_with_error(monkeypatch, runner: CliRunner) -> None:
    def factory(device_url: str, timeout: float = 10.0) -> StubClient:
        stub = StubClient(device_url, timeout)
        stub.error = SensorUnavailable("HTTP request failed with status: 500")
        return stub

    monkeypatch.setattr("cli.app.SensorClient", factory)

    result = runner.invoke(app, ["fetch"])

    assert result.exit_code == 1
    assert "Sensor ID" not in result.stdout


def test_serve_runs_uvicorn_with_overrides(monkeypatch, runner: CliRunner, stubs: List[StubClient]) -> None:
    calls: List[Dict[str, Any]] = []

    def fake_run(target: str, **kwargs: Any) -> None:
        calls.append({"target": target, **kwargs})

    monkeypatch.setattr("cli.app.uvicorn.run", fake_run)
    monkeypatch.setenv("SENSOR_DEVICE_URL", "http://original/json")
    monkeypatch.setenv("SENSOR_REQUEST_TIMEOUT", "10")
    get_settings.cache_clear()
    try:
        result = runner.invoke(
            app,
            ["--device-url", "http://sensor.local/json", "serve", "--host", "127.0.0.1", "--port", "9000"],
        )
        served_settings = get_settings()
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 0
    assert calls == [{"target": "app.main:app", "host": "127.0.0.1", "port": 9000}]
    assert served_settings.device_url == "http://sensor.local/json"
    assert "Graphs: http://127.0.0.1:9000/graphs" in result.stdout
