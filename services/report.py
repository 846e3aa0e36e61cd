"""Human-readable sections for a live device reading."""

from __future__ import annotations

from typing import Optional

from app.schemas import DeviceReading

Section = tuple[str, list[tuple[str, str]]]

_MISSING = "n/a"


def _num(value: Optional[float], digits: int, unit: str = "") -> str:
    if value is None:
        return _MISSING
    return f"{value:.{digits}f}{unit}"


def _text(value: object) -> str:
    return _MISSING if value is None else str(value)


def _aqi(value: Optional[int], category: Optional[str]) -> str:
    if value is None:
        return _MISSING
    return f"{value} ({category})" if category else str(value)


def _uptime(seconds: Optional[int]) -> str:
    if seconds is None:
        return _MISSING
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m ({seconds} seconds)"


def _channel(
    aqi: Optional[int],
    category: Optional[str],
    concentrations: tuple[Optional[float], ...],
) -> list[tuple[str, str]]:
    labels = (
        "PM1.0 (CF1)",
        "PM2.5 (CF1)",
        "PM10.0 (CF1)",
        "PM1.0 (ATM)",
        "PM2.5 (ATM)",
        "PM10.0 (ATM)",
    )
    pairs = [("PM2.5 AQI", _aqi(aqi, category))]
    pairs.extend(
        (label, _num(value, 2, " ug/m3")) for label, value in zip(labels, concentrations)
    )
    return pairs


def reading_sections(reading: DeviceReading) -> list[Section]:
    location = _text(reading.geo)
    if reading.lat is not None and reading.lon is not None:
        location = f"{location} ({reading.lat:.6f}, {reading.lon:.6f})"

    statuses = (
        reading.status_0,
        reading.status_1,
        reading.status_2,
        reading.status_3,
        reading.status_4,
    )

    sections: list[Section] = [
        (
            "Air Quality Sensor Data",
            [
                ("Sensor ID", _text(reading.sensor_id)),
                ("Location", location),
                ("DateTime", _text(reading.device_datetime)),
                ("Place", _text(reading.place)),
                ("Version", _text(reading.version)),
                ("Hardware", _text(reading.hardware_version)),
                ("Uptime", _uptime(reading.uptime)),
                ("WiFi", f"{_text(reading.wlstate)} (RSSI: {_text(reading.rssi)})"),
                ("SSID", _text(reading.ssid)),
            ],
        ),
        (
            "Environmental Data",
            [
                ("Temperature", _num(reading.current_temp_f, 1, " F")),
                ("Humidity", _num(reading.current_humidity, 0, "%")),
                ("Dew Point", _num(reading.current_dewpoint_f, 1, " F")),
                ("Pressure", _num(reading.pressure, 2, " hPa")),
                ("Gas (BME680)", _num(reading.gas_680, 2, " kOhm")),
            ],
        ),
        (
            "Air Quality (Channel A)",
            _channel(
                reading.pm25_aqi,
                reading.p25aqic,
                (
                    reading.pm10_cf1,
                    reading.pm25_cf1,
                    reading.pm100_cf1,
                    reading.pm10_atm,
                    reading.pm25_atm,
                    reading.pm100_atm,
                ),
            ),
        ),
    ]

    if reading.pm25_aqi_b is not None or reading.pm25_cf1_b is not None:
        sections.append(
            (
                "Air Quality (Channel B)",
                _channel(
                    reading.pm25_aqi_b,
                    reading.p25aqic_b,
                    (
                        reading.pm10_cf1_b,
                        reading.pm25_cf1_b,
                        reading.pm100_cf1_b,
                        reading.pm10_atm_b,
                        reading.pm25_atm_b,
                        reading.pm100_atm_b,
                    ),
                ),
            )
        )

    sections.append(
        (
            "System Status",
            [
                (
                    "Memory",
                    f"{_text(reading.mem)} bytes (frag: {_text(reading.memfrag)}%, "
                    f"free: {_text(reading.memfb)}, cache: {_text(reading.memcs)})",
                ),
                ("ADC", _num(reading.adc, 2, "V")),
                ("HTTP Success/Sends", f"{_text(reading.httpsuccess)}/{_text(reading.httpsends)}"),
                ("PurpleAir Latency", f"{_text(reading.pa_latency)}ms"),
                ("Status", "/".join(_text(value) for value in statuses)),
            ],
        )
    )
    return sections


def format_reading(reading: DeviceReading) -> str:
    """Render ``reading`` as plain text, one ``=== heading ===`` block per section."""
    blocks = []
    for heading, pairs in reading_sections(reading):
        lines = [f"=== {heading} ==="]
        lines.extend(f"{label}: {value}" for label, value in pairs)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"
