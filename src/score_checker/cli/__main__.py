from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import typer

from score_checker import __version__
from score_checker.config import (
    Settings,
    SettingsError,
    SettingsLoadResult,
    load_settings,
    parse_interval,
)
from score_checker.services import DaemonScheduler, ScoreCheckRunner

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
LOG_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"

app = typer.Typer(
    add_completion=False,
    help=(
        "Check Sonarr episodes and Radarr movies for negative custom format scores "
        "and optionally trigger searches for better versions."
    ),
)


@app.callback(invoke_without_command=True)
def _cli_entry(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(
        None, "--config", help="Path to a TOML configuration file."
    ),
    trigger_search: bool | None = typer.Option(
        None,
        "--trigger-search/--no-trigger-search",
        help="Trigger searches for better versions instead of only reporting.",
    ),
    batch_size: int | None = typer.Option(
        None, min=0, help="Number of low-score items to process per instance per run (0 = unlimited)."
    ),
    interval: str | None = typer.Option(
        None, help="Interval between daemon runs (e.g. 30m, 1h, 2h30m)."
    ),
    log_level: str | None = typer.Option(
        None, help="Log level (ERROR, WARNING, INFO, DEBUG, VERBOSE)."
    ),
) -> None:
    """Check once when no command is given."""
    overrides: dict[str, Any] = {}
    if trigger_search is not None:
        overrides["trigger_search"] = trigger_search
    if batch_size is not None:
        overrides["batch_size"] = batch_size
    if interval is not None:
        try:
            overrides["interval"] = parse_interval(interval)
        except ValueError as exc:
            typer.secho(f"Invalid interval: {exc}", fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc
    if log_level is not None:
        overrides["log_level"] = log_level

    ctx.obj = {"config_path": config_path, "overrides": overrides}
    if ctx.invoked_subcommand is None:
        _run_once(ctx)


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(__version__)


@app.command()
def run(ctx: typer.Context) -> None:
    """Check every configured instance once and exit."""
    _run_once(ctx)


@app.command()
def daemon(ctx: typer.Context) -> None:
    """Run as a daemon, checking at the configured interval."""
    settings = _settings_or_exit(ctx)
    _setup_logging(settings)

    runner = ScoreCheckRunner(settings)
    scheduler = DaemonScheduler(runner, settings.interval)
    try:
        asyncio.run(_run_daemon(scheduler))
    except KeyboardInterrupt:
        typer.echo("Received second shutdown signal, exiting without waiting for the current pass")


@app.command()
def config(
    ctx: typer.Context,
    show_sources: bool = typer.Option(False, help="Display where settings were resolved from."),
) -> None:
    """Describe the resolved configuration."""
    load_result = _safe_load_settings(ctx)
    if load_result is None:
        raise typer.Exit(code=1)

    settings = load_result.settings
    values: dict[str, Any] = {
        "trigger_search": settings.trigger_search,
        "batch_size": settings.batch_size,
        "interval": settings.interval,
        "log_level": settings.log_level,
        "log_file": settings.log_file or "<unset>",
    }
    for key, value in values.items():
        typer.echo(f"{key}: {value}")

    for service, instances in (("sonarr", settings.sonarr), ("radarr", settings.radarr)):
        if not instances:
            typer.echo(f"{service}: <none>")
            continue
        for instance in instances:
            api_key = "<set>" if instance.api_key else "<unset>"
            typer.echo(f"{service}[{instance.name}]: {instance.base_url} (api_key: {api_key})")

    if show_sources:
        source_hint = load_result.source_path or "<env/.env>"
        typer.echo(f"resolved_from: {source_hint}")


def main() -> None:
    """Expose Typer app for the console script."""
    app()


def _run_once(ctx: typer.Context) -> None:
    settings = _settings_or_exit(ctx)
    _setup_logging(settings)
    runner = ScoreCheckRunner(settings)
    asyncio.run(runner.run_once())


async def _run_daemon(scheduler: DaemonScheduler) -> None:
    _install_stop_handlers(asyncio.get_running_loop(), scheduler.stop)
    await scheduler.run()


def _install_stop_handlers(
    loop: asyncio.AbstractEventLoop, stop: Callable[[], None]
) -> list[int]:
    """Route SIGINT/SIGTERM to ``stop`` once; a second signal gets the default handling."""
    installed: list[int] = []

    def _request_stop() -> None:
        stop()
        for signum in installed:
            loop.remove_signal_handler(signum)

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, _request_stop)
        except (NotImplementedError, RuntimeError):  # pragma: no cover - non-POSIX loops
            continue
        installed.append(signum)
    return installed


def _safe_load_settings(ctx: typer.Context) -> SettingsLoadResult | None:
    options = ctx.obj or {}
    try:
        load_result = load_settings(options.get("config_path"))
        overrides = options.get("overrides") or {}
        if overrides:
            merged = {**load_result.settings.model_dump(), **overrides}
            settings = Settings.model_validate(merged)
            load_result = SettingsLoadResult(settings=settings, source_path=load_result.source_path)
        return load_result
    except SettingsError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        return None
    except ValueError as exc:
        typer.secho(f"Invalid option: {exc}", fg=typer.colors.RED)
        return None


def _settings_or_exit(ctx: typer.Context) -> Settings:
    load_result = _safe_load_settings(ctx)
    if load_result is None:
        raise typer.Exit(code=1)
    return load_result.settings


def _setup_logging(settings: Settings) -> None:
    """Log to stdout and, when configured, append to the log file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file is not None:
        try:
            settings.log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))
        except OSError as exc:
            typer.secho(
                f"Warning: failed to initialize file logging: {exc}",
                fg=typer.colors.YELLOW,
            )

    logging.basicConfig(
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        level=settings.log_level,
        handlers=handlers,
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


if __name__ == "__main__":
    main()
