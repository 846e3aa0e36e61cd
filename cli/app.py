from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import typer
import uvicorn

from cli.config import CLIConfig, load_config
from cli.render import render_reading
from services.sensor_client import SensorClient, SensorUnavailable
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: SensorClient


app = typer.Typer(
    help="Fetch readings from an air quality sensor or run the monitoring server.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    device_url: Optional[str] = typer.Option(
        None,
        "--device-url",
        "-d",
        help="Sensor JSON endpoint (defaults to SENSOR_DEVICE_URL env or http://192.168.1.100/json).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the sensor to respond.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(device_url=device_url, timeout=timeout)
    client = SensorClient(config.device_url, timeout=config.timeout)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("fetch")
def fetch_command(ctx: typer.Context) -> None:
    """Fetch one reading from the sensor and print it."""
    state = _get_state(ctx)
    typer.echo(f"Fetching air quality data from: {state.config.device_url}")
    typer.echo()
    try:
        reading = state.client.fetch_snapshot()
    except SensorUnavailable as exc:
        typer.secho(f"Error fetching air quality data: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    render_reading(reading)


@app.command("serve")
def serve_command(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on."),
) -> None:
    """Run the web server with dashboards and the measurement API."""
    state = _get_state(ctx)
    config = load_config(
        device_url=state.config.device_url,
        timeout=state.config.timeout,
        host=host,
        port=port,
    )

    # The server reads its settings from the environment.
    os.environ["SENSOR_DEVICE_URL"] = config.device_url
    os.environ["SENSOR_REQUEST_TIMEOUT"] = str(config.timeout)
    get_settings.cache_clear()

    typer.echo(f"Device URL: {config.device_url}")
    typer.echo(f"Web interface: http://{config.host}:{config.port}/")
    typer.echo(f"Graphs: http://{config.host}:{config.port}/graphs")
    uvicorn.run("app.main:app", host=config.host, port=config.port)
