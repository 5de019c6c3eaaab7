"""Project configuration: discovery, validation and defaults."""

from vaulty.config.models import Config, ConfigInput, SecretConfig

__all__ = ["Config", "ConfigInput", "SecretConfig"]
