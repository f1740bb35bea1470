"""User configuration loaded from a YAML file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

from .durations import parse_duration


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or parsed."""


@dataclass
class WatchConfig:
    """Settings for the watch command."""

    interval: timedelta = timedelta(minutes=5)
    remind_after_idle: timedelta = timedelta(minutes=15)
    remind_after_pause: timedelta = timedelta(minutes=5)
    remind_after_active: timedelta = timedelta(hours=2)


@dataclass
class Config:
    """All application settings."""

    watch: WatchConfig = field(default_factory=WatchConfig)
    daily_goal: str = ""

    def parsed_daily_goal(self) -> timedelta:
        """The daily goal as a duration, or zero if unset or invalid."""
        if not self.daily_goal:
            return timedelta(0)
        try:
            return parse_duration(self.daily_goal)
        except ValueError:
            return timedelta(0)


def get_config_path() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        base = Path(config_home)
    else:
        try:
            base = Path.home() / ".config"
        except RuntimeError as exc:
            raise ConfigError(f"could not determine config path: {exc}") from exc
    return base / "flow" / "config.yml"


def _as_text(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ConfigError(f"failed to parse config file: {key} must be a string")
    return str(value)


def _duration_or(value: str, fallback: timedelta) -> timedelta:
    if not value:
        return fallback
    try:
        return parse_duration(value)
    except ValueError:
        return fallback


def load_config() -> Config:
    """Load the configuration file, filling in defaults.

    A missing file yields the defaults; invalid durations fall back to their
    defaults; an unreadable or malformed file raises ConfigError.
    """
    path = get_config_path()
    if not path.exists():
        return Config()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"could not read config file: {exc}") from exc
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse config file: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("failed to parse config file: expected a mapping")
    watch_raw = raw.get("watch") or {}
    if not isinstance(watch_raw, dict):
        raise ConfigError("failed to parse config file: watch must be a mapping")

    defaults = WatchConfig()
    watch = WatchConfig(
        interval=_duration_or(_as_text(watch_raw.get("interval"), "interval"), defaults.interval),
        remind_after_idle=_duration_or(
            _as_text(watch_raw.get("remind_after_idle"), "remind_after_idle"),
            defaults.remind_after_idle,
        ),
        remind_after_pause=_duration_or(
            _as_text(watch_raw.get("remind_after_pause"), "remind_after_pause"),
            defaults.remind_after_pause,
        ),
        remind_after_active=_duration_or(
            _as_text(watch_raw.get("remind_after_active"), "remind_after_active"),
            defaults.remind_after_active,
        ),
    )
    return Config(watch=watch, daily_goal=_as_text(raw.get("daily_goal"), "daily_goal"))