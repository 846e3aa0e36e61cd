"""Command-line entry points for the air quality monitor.

The Typer application lives in ``cli.app``.
"""
