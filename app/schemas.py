"""Pydantic schemas shared by the sensor client, the store and the HTTP layer."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SensorSnapshot(BaseModel):
    """One decoded sensor reading.

    Aliases match the keys of the device's ``/json`` payload. Every field is
    optional because firmware revisions and single-channel hardware omit
    different subsets. The persisted ``measurements`` table has one column per
    field declared here, so adding a field is a single change.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Identity and location
    sensor_id: Optional[str] = Field(default=None, alias="SensorId")
    device_datetime: Optional[str] = Field(default=None, alias="DateTime")
    geo: Optional[str] = Field(default=None, alias="Geo")
    lat: Optional[float] = None
    lon: Optional[float] = None
    place: Optional[str] = None
    version: Optional[str] = None
    uptime: Optional[int] = None
    rssi: Optional[int] = None
    wlstate: Optional[str] = None
    ssid: Optional[str] = None

    # Environmental
    current_temp_f: Optional[float] = None
    current_humidity: Optional[float] = None
    current_dewpoint_f: Optional[float] = None
    pressure: Optional[float] = None
    gas_680: Optional[float] = None

    # Particulate matter, channel A
    pm25_aqi: Optional[int] = Field(default=None, alias="pm2.5_aqi")
    pm10_cf1: Optional[float] = Field(default=None, alias="pm1_0_cf_1")
    pm25_cf1: Optional[float] = Field(default=None, alias="pm2_5_cf_1")
    pm100_cf1: Optional[float] = Field(default=None, alias="pm10_0_cf_1")
    pm10_atm: Optional[float] = Field(default=None, alias="pm1_0_atm")
    pm25_atm: Optional[float] = Field(default=None, alias="pm2_5_atm")
    pm100_atm: Optional[float] = Field(default=None, alias="pm10_0_atm")

    # Particulate matter, channel B (absent on single-channel hardware)
    pm25_aqi_b: Optional[int] = Field(default=None, alias="pm2.5_aqi_b")
    pm10_cf1_b: Optional[float] = Field(default=None, alias="pm1_0_cf_1_b")
    pm25_cf1_b: Optional[float] = Field(
        default=None,
        alias="pm2_5_cf_1_b",
        validation_alias=AliasChoices("pm2_5_cf_1_b", "pm2.5_cf_1_b"),
    )
    pm100_cf1_b: Optional[float] = Field(default=None, alias="pm10_0_cf_1_b")
    pm10_atm_b: Optional[float] = Field(default=None, alias="pm1_0_atm_b")
    pm25_atm_b: Optional[float] = Field(default=None, alias="pm2_5_atm_b")
    pm100_atm_b: Optional[float] = Field(default=None, alias="pm10_0_atm_b")

    # System and health
    mem: Optional[int] = Field(default=None, alias="Mem")
    memfrag: Optional[int] = None
    memfb: Optional[int] = None
    memcs: Optional[int] = None
    adc: Optional[float] = Field(default=None, alias="Adc")
    httpsuccess: Optional[int] = None
    httpsends: Optional[int] = None
    pa_latency: Optional[int] = None
    status_0: Optional[int] = None
    status_1: Optional[int] = None
    status_2: Optional[int] = None
    status_3: Optional[int] = None
    status_4: Optional[int] = None


class DeviceReading(SensorSnapshot):
    """Snapshot plus display-only fields that are reported but never persisted."""

    device_index: Optional[int] = Field(default=None, alias="Id")
    logging_rate: Optional[int] = Field(default=None, alias="loggingrate")
    period: Optional[int] = None
    hardware_version: Optional[str] = Field(default=None, alias="hardwareversion")
    hardware_discovered: Optional[str] = Field(default=None, alias="hardwarediscovered")

    # Second environmental sensor (BME680)
    current_temp_f_680: Optional[float] = None
    current_humidity_680: Optional[float] = None
    current_dewpoint_f_680: Optional[float] = None
    pressure_680: Optional[float] = None

    # AQI colours and particle counts per 0.1 L
    p25aqic: Optional[str] = None
    p25aqic_b: Optional[str] = None
    p_0_3_um: Optional[float] = None
    p_0_5_um: Optional[float] = None
    p_1_0_um: Optional[float] = None
    p_2_5_um: Optional[float] = None
    p_5_0_um: Optional[float] = None
    p_10_0_um: Optional[float] = None
    p_0_3_um_b: Optional[float] = None
    p_0_5_um_b: Optional[float] = None
    p_1_0_um_b: Optional[float] = None
    p_2_5_um_b: Optional[float] = None
    p_5_0_um_b: Optional[float] = None
    p_10_0_um_b: Optional[float] = None


class MeasurementSummary(BaseModel):
    """Subset of a stored measurement used for charting."""

    timestamp: datetime
    sensor_id: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    gas_680: Optional[float] = None
    pm25_aqi: Optional[int] = None
    pm25_cf1: Optional[float] = None
    pm100_cf1: Optional[float] = None
    pm25_aqi_b: Optional[int] = None
    pm25_cf1_b: Optional[float] = None
    pm100_cf1_b: Optional[float] = None
    memory: Optional[int] = None
    rssi: Optional[int] = None
    pa_latency: Optional[int] = None


class WindowStatistics(BaseModel):
    """Aggregates over a trailing window. Empty aggregates are ``None``."""

    count: int = Field(default=0, ge=0)
    avg_temp: Optional[float] = None
    avg_humidity: Optional[float] = None
    avg_pressure: Optional[float] = None
    avg_pm25_aqi: Optional[float] = None
    avg_pm25_cf1: Optional[float] = None
    avg_pm100_cf1: Optional[float] = None
    max_pm25_aqi: Optional[int] = None
    min_pm25_aqi: Optional[int] = None
    max_temp: Optional[float] = None
    min_temp: Optional[float] = None


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    timestamp: datetime
    service: str = "air-quality-monitor"
    storage: Literal["enabled", "disabled"]
