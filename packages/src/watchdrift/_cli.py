"""Command-line interface (Typer-based).

Commands:

- ``watchdrift measure`` (also the default when no command is given)
  runs one measurement cycle and stores the result.
- ``watchdrift history`` lists stored measurements.

Settings come from the environment / ``.env`` (see
:class:`~watchdrift._settings.Settings`); CLI options override them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Annotated, Any, get_args

import typer
from pydantic import ValidationError

from watchdrift import __version__
from watchdrift._clock import SystemClock
from watchdrift._engine import CycleStatus, DriftEngine, describe_offset
from watchdrift._errors import StorageError
from watchdrift._logging import configure_logging
from watchdrift._reference import NtpReferenceClock
from watchdrift._resolver import ResolutionMode
from watchdrift._settings import LoggingSettings, Settings
from watchdrift._store import MeasurementStore

logger = logging.getLogger(__name__)

SERVICE = "watchdrift"

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

# 2 is left to Click, which uses it for usage errors (bad options).
EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_RUNTIME_ERROR = 3
EXIT_RESOLUTION_ERROR = 4
EXIT_STORAGE_ERROR = 5
EXIT_REFERENCE_ERROR = 6
EXIT_CAPTURE_ERROR = 7

STATUS_EXIT_CODES: dict[CycleStatus, int] = {
    CycleStatus.RECORDED: EXIT_OK,
    CycleStatus.CANCELLED: EXIT_OK,
    CycleStatus.REFERENCE_FAILED: EXIT_REFERENCE_ERROR,
    CycleStatus.CAPTURE_FAILED: EXIT_CAPTURE_ERROR,
    CycleStatus.RESOLUTION_FAILED: EXIT_RESOLUTION_ERROR,
    CycleStatus.STORAGE_FAILED: EXIT_STORAGE_ERROR,
}

# ---------------------------------------------------------------------------
# Allowed values (extracted from the settings Literal types)
# ---------------------------------------------------------------------------

_VALID_LOG_LEVELS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["level"].annotation,
)
_VALID_LOG_FORMATS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["format"].annotation,
)
_VALID_MODES: tuple[str, ...] = get_args(Settings.model_fields["mode"].annotation)
_VALID_FRONT_ENDS: tuple[str, ...] = get_args(
    Settings.model_fields["front_end"].annotation,
)


def _check_choice(value: str | None, choices: tuple[str, ...], option: str) -> None:
    if value is not None and value not in choices:
        raise typer.BadParameter(
            f"Invalid value '{value}'. Choose from: {', '.join(choices)}",
            param_hint=f"'{option}'",
        )


def engine_from_settings(settings: Settings) -> DriftEngine:
    """Build a production engine: ntplib, the chosen front end, SQLite.

    Engine and front end share one monotonic clock, so the reaction
    time is measured from the arrival of the reference reply.
    """
    clock = SystemClock()
    if settings.front_end == "graphical":
        from watchdrift._dialog import DialogFrontEnd

        front_end: Any = DialogFrontEnd(clock=clock)
    else:
        from watchdrift._terminal import TerminalFrontEnd

        front_end = TerminalFrontEnd(clock=clock)

    return DriftEngine(
        reference=NtpReferenceClock(),
        front_end=front_end,
        store=MeasurementStore(settings.data),
        server=settings.reference.server,
        timeout=settings.reference.timeout,
        max_wait=settings.capture.max_wait,
        poll_interval=settings.capture.poll_interval,
        mode=ResolutionMode(settings.mode),
        monotonic=clock,
    )


def build_cli(
    *,
    engine_factory: Callable[[Settings], DriftEngine] = engine_from_settings,
    settings_class: type[Settings] = Settings,
) -> typer.Typer:
    """Construct the Typer application.

    Args:
        engine_factory: Turns loaded settings into a :class:`DriftEngine`.
            Tests pass a factory that wires fakes.
        settings_class: Settings model to load; tests pass an isolated one.
    """
    cli = typer.Typer(
        help=f"{SERVICE} v{__version__}: measure how far a watch drifts from true time.",
        no_args_is_help=False,
    )

    def load_settings(ctx: typer.Context, **overrides: Any) -> Settings:
        state = ctx.obj or {}
        try:
            settings: Settings = settings_class(_env_file=state.get("env_file", ".env"))  # type: ignore[call-arg]
            updates = {k: v for k, v in overrides.items() if v is not None}
            if updates:
                data = settings.model_dump()
                for key, value in updates.items():
                    # nested groups are merged, not replaced
                    if isinstance(value, dict):
                        data[key] = {**data[key], **value}
                    else:
                        data[key] = value
                settings = settings_class.model_validate(data)
        except ValidationError as exc:
            typer.echo(f"Configuration error: {exc}", err=True)
            raise typer.Exit(EXIT_CONFIG_ERROR) from exc

        logging_updates: dict[str, str] = {}
        if state.get("log_level") is not None:
            logging_updates["level"] = state["log_level"]
        if state.get("log_format") is not None:
            logging_updates["format"] = state["log_format"]
        if logging_updates:
            settings.logging = settings.logging.model_copy(update=logging_updates)

        configure_logging(settings.logging, service=SERVICE, version=__version__)
        return settings

    # -- measure ------------------------------------------------------------

    @cli.command("measure")
    def measure(
        ctx: typer.Context,
        sync: Annotated[
            bool | None,
            typer.Option("--sync/--no-sync", help="Flag this sample as a sync point."),
        ] = None,
        name: Annotated[
            str | None, typer.Option("--name", help="Watch identifier.")
        ] = None,
        data: Annotated[
            str | None, typer.Option("--data", help="SQLite store path.")
        ] = None,
        comment: Annotated[
            str | None, typer.Option("--comment", help="Free-text comment.")
        ] = None,
        mode: Annotated[
            str | None,
            typer.Option("--mode", help="Minute resolution: automatic or interactive."),
        ] = None,
        front_end: Annotated[
            str | None,
            typer.Option("--front-end", help="Capture front end: terminal or graphical."),
        ] = None,
        server: Annotated[
            str | None, typer.Option("--server", help="NTP server as host[:port].")
        ] = None,
    ) -> None:
        """Measure the watch once and store the result."""
        _check_choice(mode, _VALID_MODES, "--mode")
        _check_choice(front_end, _VALID_FRONT_ENDS, "--front-end")

        settings = load_settings(
            ctx,
            sync=sync,
            name=name,
            data=data,
            comment=comment,
            mode=mode,
            front_end=front_end,
            reference=None if server is None else {"server": server},
        )

        try:
            engine = engine_factory(settings)
            outcome = engine.measure(
                settings.name, sync=settings.sync, comment=settings.comment
            )
        except Exception as exc:
            logger.exception("Runtime error")
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(EXIT_RUNTIME_ERROR) from exc

        if outcome.ok:
            typer.echo(outcome.message)
        elif outcome.status is CycleStatus.REFERENCE_FAILED:
            typer.echo(f"Could not get the reference time: {outcome.message}")
        elif outcome.status is CycleStatus.CAPTURE_FAILED:
            typer.echo(f"Could not capture the click: {outcome.message}")
        elif outcome.status is CycleStatus.RESOLUTION_FAILED:
            typer.echo(f"Measurement rejected: {outcome.message}")
        else:
            typer.echo(f"Measurement not saved: {outcome.message}")

        raise typer.Exit(STATUS_EXIT_CODES[outcome.status])

    # -- history ------------------------------------------------------------

    @cli.command("history")
    def history(
        ctx: typer.Context,
        name: Annotated[
            str | None,
            typer.Option("--name", help="Only this watch (default: all)."),
        ] = None,
        data: Annotated[
            str | None, typer.Option("--data", help="SQLite store path.")
        ] = None,
        limit: Annotated[
            int | None,
            typer.Option("--limit", min=1, help="Show only the latest N records."),
        ] = None,
    ) -> None:
        """List stored measurements, oldest first."""
        settings = load_settings(ctx, data=data)
        store = MeasurementStore(settings.data)
        try:
            records = store.history(name=name, limit=limit)
        except StorageError as exc:
            typer.echo(f"Cannot read measurements: {exc}")
            raise typer.Exit(EXIT_STORAGE_ERROR) from exc

        if not records:
            typer.echo("No measurements yet.")
            return
        for record in records:
            when = datetime.fromtimestamp(record.timestamp, tz=UTC).isoformat()
            flag = " sync" if record.sync else ""
            line = f"{when}  {record.name}  {record.diff:+d}s ({describe_offset(record.diff)}){flag}"
            if record.comment:
                line += f"  # {record.comment}"
            typer.echo(line)

    # -- global options -----------------------------------------------------

    @cli.callback(invoke_without_command=True)
    def main(
        ctx: typer.Context,
        version_flag: Annotated[
            bool | None,
            typer.Option("--version", is_eager=True, help="Show version and exit."),
        ] = None,
        log_level: Annotated[
            str | None, typer.Option("--log-level", help="Override log level.")
        ] = None,
        log_format: Annotated[
            str | None, typer.Option("--log-format", help="Override log format.")
        ] = None,
        env_file: Annotated[
            str, typer.Option("--env-file", help="Path to .env file.")
        ] = ".env",
    ) -> None:
        if version_flag:
            typer.echo(f"{SERVICE} v{__version__}")
            raise typer.Exit()

        if log_level is not None and log_level.upper() not in _VALID_LOG_LEVELS:
            raise typer.BadParameter(
                f"Invalid log level '{log_level}'. "
                f"Choose from: {', '.join(_VALID_LOG_LEVELS)}",
                param_hint="'--log-level'",
            )
        if log_format is not None and log_format.lower() not in _VALID_LOG_FORMATS:
            raise typer.BadParameter(
                f"Invalid log format '{log_format}'. "
                f"Choose from: {', '.join(_VALID_LOG_FORMATS)}",
                param_hint="'--log-format'",
            )

        ctx.obj = {
            "env_file": env_file,
            "log_level": log_level.upper() if log_level else None,
            "log_format": log_format.lower() if log_format else None,
        }

        if ctx.invoked_subcommand is None:
            measure(ctx)

    return cli


def main() -> None:
    """Console-script entry point."""
    build_cli()(prog_name=SERVICE)
