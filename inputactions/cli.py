"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from inputactions.core.config_loader import load_config
from inputactions.core.device_match import device_matches
from inputactions.core.errors import ConfigLoadError, InputActionsError
from inputactions.core.model import Config
from inputactions.core.service import InputActionsDaemon
from inputactions.devices.evdev_backend import EvdevBackend

app = typer.Typer(help="Run commands on key events from a named input device")

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Config file (default: $INPUTACTION_CONFIG, then ~/.config/inputactions/config.yaml)",
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every device and input event"),
) -> None:
    _configure_logging(verbose)


@app.command("run")
def run_daemon(config_path: Path | None = CONFIG_OPTION) -> None:
    """Watch for the configured device and run actions on its key events."""
    try:
        config = load_config(config_path)
        InputActionsDaemon(config).run()
    except KeyboardInterrupt:
        typer.echo("Interrupted", err=True)
    except InputActionsError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("check")
def check_config(config_path: Path | None = CONFIG_OPTION) -> None:
    """Validate the configuration and print its rules in match order."""
    try:
        config = load_config(config_path)
    except InputActionsError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(f"Device: {config.name}")
    if not config.rules:
        typer.echo("No actions configured")
        return
    for rule in config.rules:
        typer.echo(f"  {rule.key} ({rule.on.value}): {' '.join(rule.action.argv)}")


def _optional_config(config_path: Path | None) -> Config | None:
    if config_path is not None:
        return load_config(config_path)
    try:
        return load_config()
    except ConfigLoadError:
        return None


@app.command("devices")
def list_devices(config_path: Path | None = CONFIG_OPTION) -> None:
    """List input devices, marking the one matching the configured name."""
    try:
        config = _optional_config(config_path)
        found = False
        for device in EvdevBackend().enumerate():
            found = True
            marker = " <- match" if config and device_matches(config, device) else ""
            typer.echo(f"{device.path} {device.name or '<no-name>'}{marker}")
            device.close()
        if not found:
            typer.echo("No readable input devices found")
    except InputActionsError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
