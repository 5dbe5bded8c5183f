"""Configuration via pydantic-settings.

Settings are loaded from ``WATCHDRIFT_``-prefixed environment variables
and/or a ``.env`` file.  Nested models use ``__`` as the delimiter,
e.g. ``WATCHDRIFT_REFERENCE__SERVER=time.cloudflare.com:123``.

Three groups of knobs exist:

* **Measurement**: which watch, where to store it, sync flag, comment,
  resolution mode and capture front end.
* **Reference / capture**: NTP server, network timeout, capture
  ceiling and poll interval.
* **Logging**: level, format, optional file sink.

All durations are in **seconds**.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from watchdrift._reference import parse_server_address

DEFAULT_SERVER = "time.google.com:123"
"""Reference time server used when none is configured."""

# -------------------------------------------------------------------
# Sub-models (BaseModel, NOT BaseSettings: nested via composition)
# -------------------------------------------------------------------


class ReferenceSettings(BaseModel):
    """Reference-time acquisition.

    Environment variables (with ``__`` nesting)::

        WATCHDRIFT_REFERENCE__SERVER=time.cloudflare.com:123
        WATCHDRIFT_REFERENCE__TIMEOUT=2
    """

    server: str = Field(
        default=DEFAULT_SERVER,
        min_length=1,
        description="NTP server as 'host[:port]'. Port defaults to 123.",
    )
    timeout: Annotated[float, Field(gt=0)] = Field(
        default=2.0,
        description="Seconds to wait for the NTP reply before giving up.",
    )

    @field_validator("server")
    @classmethod
    def _check_server(cls, value: str) -> str:
        parse_server_address(value)
        return value


class CaptureSettings(BaseModel):
    """Operator capture timing."""

    max_wait: Annotated[float, Field(gt=0)] = Field(
        default=70.0,
        description=(
            "Seconds the capture session waits for the operator before "
            "asking 'Still there?' and giving up."
        ),
    )
    poll_interval: Annotated[float, Field(gt=0)] = Field(
        default=0.5,
        description=(
            "Upper bound in seconds for one blocking input poll.  "
            "Cancellation and timeout are checked between polls."
        ),
    )


class LoggingSettings(BaseModel):
    """Logging configuration.

    The tool is interactive, so the defaults are quiet human-readable
    lines on stderr.  ``format="json"`` switches to NDJSON for runs
    driven by cron or a supervisor; ``file`` adds a rotating file sink.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Root log level.",
    )
    format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format: 'text' lines or 'json' lines.",
    )
    file: str | None = Field(
        default=None,
        description="Optional log file path. ``None`` means stderr only.",
    )
    max_file_size_mb: Annotated[int, Field(ge=1)] = Field(
        default=10,
        description="Log file size in megabytes that triggers rotation.",
    )
    backup_count: Annotated[int, Field(ge=0)] = Field(
        default=3,
        description="Number of rotated log files to keep.",
    )


# -------------------------------------------------------------------
# Root settings
# -------------------------------------------------------------------


class Settings(BaseSettings):
    """Root settings for a measurement run.

    Example ``.env``::

        WATCHDRIFT_NAME=speedmaster
        WATCHDRIFT_DATA=/home/me/watches.sqlite
        WATCHDRIFT_MODE=interactive
        WATCHDRIFT_FRONT_END=graphical
        WATCHDRIFT_REFERENCE__SERVER=time.cloudflare.com:123
        WATCHDRIFT_LOGGING__LEVEL=DEBUG

    CLI options override whatever is loaded here.
    """

    model_config = SettingsConfigDict(
        env_prefix="WATCHDRIFT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    name: str = Field(
        default="main",
        min_length=1,
        description="Identifier of the watch being measured.",
    )
    data: str = Field(
        default="watch.sqlite",
        min_length=1,
        description="Path of the SQLite measurement store.",
    )
    comment: str = Field(
        default="",
        description="Free text stored with the measurement.",
    )
    sync: bool = Field(
        default=False,
        description="Flag this sample as a trusted sync point.",
    )
    mode: Literal["automatic", "interactive"] = Field(
        default="automatic",
        description=(
            "'automatic' picks the nearest minute boundary; "
            "'interactive' asks which minute the hand was approaching."
        ),
    )
    front_end: Literal["terminal", "graphical"] = Field(
        default="terminal",
        description="Capture front end: curses terminal or Tk dialog.",
    )
    reference: ReferenceSettings = Field(
        default_factory=ReferenceSettings,
        description="Reference-time acquisition settings.",
    )
    capture: CaptureSettings = Field(
        default_factory=CaptureSettings,
        description="Capture session timing.",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration.",
    )
