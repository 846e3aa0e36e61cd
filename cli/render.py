from __future__ import annotations

from typing import Iterable

import typer

from app.schemas import DeviceReading
from services.report import reading_sections


def echo_heading(text: str) -> None:
    typer.secho(f"=== {text} ===", bold=True)


def echo_key_values(pairs: Iterable[tuple[str, str]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_reading(reading: DeviceReading) -> None:
    for index, (heading, pairs) in enumerate(reading_sections(reading)):
        if index:
            typer.echo()
        echo_heading(heading)
        echo_key_values(pairs)
