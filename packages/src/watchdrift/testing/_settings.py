"""Test factory for Settings.

Provides :func:`make_settings`, which creates
:class:`~watchdrift._settings.Settings` instances that never read the
host environment or a ``.env`` file.
"""

from __future__ import annotations

from typing import Any

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from watchdrift._settings import Settings


class IsolatedSettings(Settings):
    """Settings whose only source is constructor arguments."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],  # noqa: ARG003
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings,)


def make_settings(**overrides: Any) -> Settings:
    """Create a ``Settings`` instance from model defaults plus *overrides*.

    Example::

        settings = make_settings(name="speedmaster")
        assert settings.data == "watch.sqlite"
    """
    return IsolatedSettings(_env_file=None, **overrides)  # type: ignore[call-arg]
