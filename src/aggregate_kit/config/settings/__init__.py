"""Config settings – 12-factor env-based configuration."""
from aggregate_kit.config.settings.aggregate import AggregateSettings
from aggregate_kit.config.settings.base import Settings
from aggregate_kit.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = ["AggregateSettings", "DotenvSettingsLoader", "EnvSettingsLoader", "Settings", "SettingsLoader"]
