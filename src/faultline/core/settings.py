"""Process-wide settings for faultline.

Settings are read once at start-up and injected into the reporter and the
call-site resolver. Nothing in the core combinators reads them.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Bad values fail at start-up, not mid-request
    - **Environment-driven:** ``FAULTLINE_*`` env vars and ``.env`` files
    - **Injected:** ``Reporter(settings=...)`` beats hidden global lookups
    - **Sensible defaults:** Works out of the box

Examples:
    >>> settings = FaultlineSettings(owning_component="myapp", log_adapter="json")
    >>> settings.error_code_length
    8

Tags:
    settings, configuration, pydantic, environment, faultline

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_MESSAGE_TEMPLATE = "There was an error. Refer to code: {code}"


class FaultlineSettings(BaseSettings):
    """Settings for the reporter, resolver and shrinker.

    Fields
    ──────
    owning_component      : Module prefix of the owning application
    log_adapter           : ``plain`` or ``json`` log lines
    max_list_items        : Longest list the shrinker keeps unabridged
    error_code_length     : Length of correlation codes in user messages
    user_message_template : Generic user message, formatted with ``code``
    logger_name           : structlog logger of the default sink, and the
                            ``service`` field set by ``configure_logging``
    log_level             : Level filter applied by ``configure_logging``
    """

    model_config = SettingsConfigDict(
        env_prefix="FAULTLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Call sites ───────────────────────────────────────────────
    owning_component: str | None = None

    # ── Output ───────────────────────────────────────────────────
    log_adapter: Literal["plain", "json"] = "plain"
    max_list_items: int = Field(default=10, ge=1)
    error_code_length: int = Field(default=8, ge=4)
    user_message_template: str = DEFAULT_USER_MESSAGE_TEMPLATE

    # ── Logging ──────────────────────────────────────────────────
    logger_name: str = "faultline"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("user_message_template")
    @classmethod
    def _template_has_code(cls, value: str) -> str:
        if "{code}" not in value:
            raise ValueError("user_message_template must contain '{code}'")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


_settings_cache: dict[str, FaultlineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> FaultlineSettings:
    """Load, validate, and cache a :class:`FaultlineSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = FaultlineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "DEFAULT_USER_MESSAGE_TEMPLATE",
    "FaultlineSettings",
    "get_settings",
    "clear_settings_cache",
]
