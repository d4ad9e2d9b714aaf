"""Configuration for cgen."""

from .config_loader import ConfigError, ConfigLoader, ConfigParsingError
from .config_schema import DEFAULT_SYSTEM_PROMPT, AppConfigSchema

__all__ = [
	"DEFAULT_SYSTEM_PROMPT",
	"AppConfigSchema",
	"ConfigError",
	"ConfigLoader",
	"ConfigParsingError",
]
