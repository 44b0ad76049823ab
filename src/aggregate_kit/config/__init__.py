"""Configuration – settings dataclasses, loaders and validation errors."""
from aggregate_kit.config.settings import (
    AggregateSettings,
    DotenvSettingsLoader,
    EnvSettingsLoader,
    Settings,
    SettingsLoader,
)
from aggregate_kit.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)


def load_settings() -> AggregateSettings:
    """Read :class:`AggregateSettings` from the environment."""
    return EnvSettingsLoader().load(AggregateSettings)


__all__ = [
    "AggregateSettings",
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
    "load_settings",
]
