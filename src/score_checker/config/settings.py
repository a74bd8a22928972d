from __future__ import annotations

import logging
import os
import re
import tomllib
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

CONFIG_PATH_ENV = "SCORECHECK_CONFIG"
LOG_FILE_NAME = "score-checker.log"
DEFAULT_INTERVAL = timedelta(hours=1)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}
_LOG_LEVEL_ALIASES = {"VERBOSE": "DEBUG", "WARN": "WARNING"}


class ServiceInstance(BaseModel):
    """Connection details for one Sonarr or Radarr instance."""

    name: str
    base_url: str = Field(min_length=1)
    api_key: str = Field(min_length=1)

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
        "extra": "ignore",
    }

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        value = value.rstrip("/")
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"invalid base_url {value!r}: {exc}") from exc
        if url.scheme not in {"http", "https"} or not url.host:
            raise ValueError(f"base_url must be an http(s) URL with a host, got {value!r}")
        return value


class Settings(BaseModel):
    """Run configuration resolved from env vars and an optional TOML file."""

    trigger_search: bool = Field(default=False)
    batch_size: int = Field(default=5, ge=0)
    interval: timedelta = Field(default=DEFAULT_INTERVAL)
    log_level: str = Field(default="INFO")
    log_file: Path | None = Field(default=None)
    sonarr: list[ServiceInstance] = Field(default_factory=list)
    radarr: list[ServiceInstance] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "extra": "ignore",
    }

    @field_validator("interval", mode="before")
    @classmethod
    def _parse_interval(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_interval(value)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return timedelta(seconds=value)
        return value

    @field_validator("interval")
    @classmethod
    def _positive_interval(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("interval must be greater than zero")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        level = _LOG_LEVEL_ALIASES.get(level, level)
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @model_validator(mode="after")
    def _unique_instance_names(self) -> Settings:
        for service, instances in (("sonarr", self.sonarr), ("radarr", self.radarr)):
            seen: set[str] = set()
            for instance in instances:
                if instance.name in seen:
                    raise ValueError(f"duplicate {service} instance name '{instance.name}'")
                seen.add(instance.name)
        return self

    @property
    def has_instances(self) -> bool:
        return bool(self.sonarr or self.radarr)


class SettingsError(RuntimeError):
    """Raised when configuration cannot be resolved."""


@dataclass(frozen=True)
class SettingsLoadResult:
    settings: Settings
    source_path: Path | None


def parse_interval(value: str) -> timedelta:
    """Parse a duration such as ``90s``, ``30m``, ``2h30m`` or a bare number of seconds."""

    text = value.strip().lower()
    if not text:
        raise ValueError("interval must not be empty")
    if re.fullmatch(r"\d+(?:\.\d+)?", text):
        return timedelta(seconds=float(text))

    position = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"invalid interval format '{value}'")
    return timedelta(seconds=seconds)


def load_settings(config_path: Path | None = None, *, load_env: bool = True) -> SettingsLoadResult:
    """Load settings from .env files, environment variables, and optional TOML configuration."""

    if load_env:
        load_dotenv()

    resolved_path = _determine_config_path(config_path)
    config_data: dict[str, Any] = {}

    if resolved_path and resolved_path.exists():
        try:
            with resolved_path.open("rb") as handle:
                toml_payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise SettingsError(f"Invalid config file {resolved_path}: {exc}") from exc
        config_data = _flatten_toml(toml_payload)
    elif config_path is not None:
        raise SettingsError(f"Config file not found: {config_path}")

    env_data = _collect_env_overrides()
    merged = {**config_data, **env_data}
    _apply_instance_shortcuts(merged)

    if resolved_path and resolved_path.exists() and not merged.get("log_file"):
        merged["log_file"] = resolved_path.parent / LOG_FILE_NAME

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as exc:
        raise SettingsError(str(exc)) from exc

    return SettingsLoadResult(settings=settings, source_path=resolved_path)


def _determine_config_path(config_path: Path | None) -> Path | None:
    if config_path:
        return config_path

    env_override = os.getenv(CONFIG_PATH_ENV)
    if env_override:
        return Path(env_override).expanduser().resolve()

    candidates = (
        Path.cwd() / "config.toml",
        Path.home() / ".config" / "score-checker" / "config.toml",
        Path("/etc/score-checker/config.toml"),
    )
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _flatten_toml(payload: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}

    general_cfg = payload.get("scorecheck", {})
    for key in ("trigger_search", "batch_size", "interval", "log_level", "log_file"):
        if key in general_cfg:
            result[key] = general_cfg.get(key)

    for service in ("sonarr", "radarr"):
        service_cfg = payload.get(service)
        if service_cfg is None:
            continue
        if isinstance(service_cfg, dict):
            service_cfg = [service_cfg]
        if not isinstance(service_cfg, list):
            raise SettingsError(f"'{service}' must be a table or an array of tables")
        result[service] = [
            _instance_entry(service, index, entry) for index, entry in enumerate(service_cfg)
        ]

    return result


def _instance_entry(service: str, index: int, entry: Any) -> dict[str, Any]:
    if not isinstance(entry, dict):
        raise SettingsError(f"{service} instance #{index + 1} must be a table")

    name = entry.get("name") or _default_instance_name(index)
    base_url = entry.get("base_url") or entry.get("baseurl")
    api_key = entry.get("api_key") or entry.get("apikey")
    if not base_url:
        raise SettingsError(f"{service.capitalize()} instance '{name}' missing base_url")
    if not api_key:
        raise SettingsError(f"{service.capitalize()} instance '{name}' missing api_key")
    return {"name": str(name), "base_url": str(base_url), "api_key": str(api_key)}


def _default_instance_name(index: int) -> str:
    return "default" if index == 0 else f"instance{index}"


def _collect_env_overrides() -> dict[str, Any]:
    mapping: dict[str, str] = {
        "SCORECHECK_TRIGGER_SEARCH": "trigger_search",
        "SCORECHECK_BATCH_SIZE": "batch_size",
        "SCORECHECK_INTERVAL": "interval",
        "SCORECHECK_LOG_LEVEL": "log_level",
        "SCORECHECK_LOG_FILE": "log_file",
    }

    result: dict[str, Any] = {}
    for env_name, field in mapping.items():
        if env_name not in os.environ:
            continue
        value = os.environ[env_name]
        if field == "batch_size":
            try:
                result[field] = int(value)
            except ValueError as exc:
                raise SettingsError(f"{env_name} must be an integer, got '{value}'") from exc
        elif field == "trigger_search":
            result[field] = value.lower() in {"true", "1", "yes", "on"}
        else:
            result[field] = value
    return result


def _apply_instance_shortcuts(merged: dict[str, Any]) -> None:
    for service in ("sonarr", "radarr"):
        if merged.get(service):
            continue
        base_url = os.getenv(f"{service.upper()}_BASE_URL")
        api_key = os.getenv(f"{service.upper()}_API_KEY")
        if not base_url and not api_key:
            continue
        merged[service] = [
            _instance_entry(service, 0, {"base_url": base_url, "api_key": api_key}),
        ]


__all__ = [
    "ServiceInstance",
    "Settings",
    "SettingsError",
    "SettingsLoadResult",
    "load_settings",
    "parse_interval",
]
