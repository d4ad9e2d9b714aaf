"""
Configuration loader for cgen.

Configuration is resolved in layers, later layers overriding earlier ones:

1. Defaults from :class:`AppConfigSchema`
2. Global YAML file at ``$XDG_CONFIG_HOME/cgen/config.yml``
3. ``.env`` file in the git repository root
4. ``ACR_*`` process environment variables

"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError
from xdg.BaseDirectory import xdg_config_home

from .config_schema import (
	DEFAULT_COMMIT_TEMPLATE,
	DEFAULT_REQUEST_TIMEOUT,
	DEFAULT_SYSTEM_PROMPT,
	DEFAULT_WARN_STAGED_FILES_THRESHOLD,
	AppConfigSchema,
)

if TYPE_CHECKING:
	from collections.abc import Mapping

logger = logging.getLogger(__name__)

ENV_PREFIX = "ACR_"
CONFIG_DIR_NAME = "cgen"
CONFIG_FILE_NAME = "config.yml"
LOCAL_ENV_FILE = ".env"

# ACR_ suffix -> (display label, schema field)
ENV_FIELD_MAP: dict[str, tuple[str, str]] = {
	"PROVIDER": ("Provider", "provider"),
	"MODEL": ("Model", "model"),
	"API_KEY": ("API Key", "api_key"),
	"API_URL": ("API URL", "api_url"),
	"API_HEADERS": ("API Headers", "api_headers"),
	"LOCALE": ("Locale", "locale"),
	"ONE_LINER": ("One-liner", "one_liner"),
	"COMMIT_TEMPLATE": ("Commit Template", "commit_template"),
	"LLM_SYSTEM_PROMPT": ("System Prompt", "llm_system_prompt"),
	"USE_GITMOJI": ("Use Gitmoji", "use_gitmoji"),
	"GITMOJI_FORMAT": ("Gitmoji Format", "gitmoji_format"),
	"REVIEW_COMMIT": ("Review Commit", "review_commit"),
	"SUPPRESS_TOOL_OUTPUT": ("Suppress Tool Output", "suppress_tool_output"),
	"WARN_STAGED_FILES_ENABLED": ("Warn Staged Files", "warn_staged_files_enabled"),
	"WARN_STAGED_FILES_THRESHOLD": ("Staged Warn Threshold", "warn_staged_files_threshold"),
	"FALLBACK_ENABLED": ("Fallback Enabled", "fallback_enabled"),
	"REQUEST_TIMEOUT": ("Request Timeout", "request_timeout"),
}

BOOL_FIELDS = frozenset(
	{
		"one_liner",
		"use_gitmoji",
		"review_commit",
		"suppress_tool_output",
		"warn_staged_files_enabled",
		"fallback_enabled",
	}
)
MAX_DISPLAY_LENGTH = 60
MASK_VISIBLE_CHARS = 4


class ConfigError(Exception):
	"""Exception raised for configuration errors."""


class ConfigParsingError(ConfigError):
	"""Exception raised when configuration file cannot be parsed."""


def parse_bool(value: str) -> bool:
	"""Interpret ``1`` or ``true`` (any case) as True, everything else as False."""
	value = value.strip()
	return value == "1" or value.lower() == "true"


def mask_key(key: str) -> str:
	"""Hide an API key, keeping the first and last four characters of long keys."""
	if len(key) <= MASK_VISIBLE_CHARS * 2:
		return "*" * len(key)
	return f"{key[:MASK_VISIBLE_CHARS]}...{key[-MASK_VISIBLE_CHARS:]}"


def truncate(text: str, max_length: int = MAX_DISPLAY_LENGTH) -> str:
	"""Shorten text for single-line display."""
	return text if len(text) <= max_length else f"{text[:max_length]}..."


def quote_env_value(value: str) -> str:
	"""
	Quote a value for a ``.env`` line when it would not read back unchanged.

	Newlines, quotes, backslashes, ``#`` and surrounding whitespace need double
	quotes; python-dotenv decodes the escapes used here.

	"""
	if value == value.strip() and not any(char in value for char in "\n\"'\\#"):
		return value
	escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
	return f'"{escaped}"'


def global_config_path() -> Path:
	"""Location of the global configuration file."""
	return Path(xdg_config_home) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def coerce_value(field_name: str, value: str) -> Any:  # noqa: ANN401
	"""
	Convert a raw string from ``.env`` or the environment into a field value.

	Args:
	    field_name: Schema field being set
	    value: Raw string value

	Returns:
	    The value in the type the schema expects

	"""
	if field_name in BOOL_FIELDS:
		return parse_bool(value)
	if field_name == "warn_staged_files_threshold":
		try:
			return int(value.strip())
		except ValueError:
			return DEFAULT_WARN_STAGED_FILES_THRESHOLD
	if field_name == "request_timeout":
		try:
			return float(value.strip())
		except ValueError:
			return DEFAULT_REQUEST_TIMEOUT
	return value


def default_if_out_of_range(field_name: str, value: Any) -> Any:  # noqa: ANN401
	"""Replace a negative threshold or a non-positive timeout with its default."""
	if field_name == "warn_staged_files_threshold" and value < 0:
		return DEFAULT_WARN_STAGED_FILES_THRESHOLD
	if field_name == "request_timeout" and not value > 0:
		return DEFAULT_REQUEST_TIMEOUT
	return value


class ConfigLoader:
	"""
	Loads and manages configuration for cgen.

	The loaded configuration is exposed through :attr:`get` and can be edited
	field by field with :meth:`set_field` before being saved globally or to the
	repository ``.env``.

	"""

	_instance: ConfigLoader | None = None

	@classmethod
	def get_instance(
		cls,
		config_file: Path | None = None,
		reload: bool = False,
		repo_root: Path | None = None,
	) -> ConfigLoader:
		"""
		Get the singleton instance of ConfigLoader.

		Args:
			config_file: Path to the global configuration file (optional)
			reload: Whether to reload config even if already loaded
			repo_root: Repository root holding the local ``.env`` (optional)

		Returns:
			ConfigLoader: Singleton instance

		"""
		if cls._instance is None:
			cls._instance = cls(config_file, repo_root=repo_root)
		elif reload:
			cls._instance.reload_config(config_file, repo_root)
		return cls._instance

	@classmethod
	def reset_instance(cls) -> None:
		"""Drop the singleton, mainly for tests."""
		cls._instance = None

	def __init__(
		self,
		config_file: Path | None = None,
		repo_root: Path | None = None,
		environ: Mapping[str, str] | None = None,
	) -> None:
		"""
		Initialize the configuration loader.

		Args:
			config_file: Path to the global configuration file (optional)
			repo_root: Repository root holding the local ``.env`` (optional)
			environ: Environment to read ``ACR_*`` variables from, defaults to ``os.environ``

		"""
		self.repo_root = repo_root
		self.config_file = config_file or global_config_path()
		self._environ = environ
		self._app_config = self._load_config()
		logger.debug("ConfigLoader initialized from %s", self.config_file)

	def reload_config(self, config_file: Path | None = None, repo_root: Path | None = None) -> None:
		"""
		Reload configuration with new settings.

		Args:
			config_file: New global configuration file path
			repo_root: New repository root path

		"""
		if config_file is not None:
			self.config_file = config_file
		if repo_root is not None:
			self.repo_root = repo_root
		self._app_config = self._load_config()
		logger.debug("Configuration reloaded")

	@staticmethod
	def _parse_yaml_file(file_path: Path) -> dict[str, Any]:
		"""
		Parse a YAML file into a dictionary.

		Args:
			file_path: Path to the YAML file to parse

		Returns:
			Parsed YAML content as a dictionary

		Raises:
			yaml.YAMLError: If the file cannot be parsed as a YAML mapping

		"""
		with file_path.open(encoding="utf-8") as f:
			content = yaml.safe_load(f)
			if content is None:
				return {}
			if not isinstance(content, dict):
				msg = f"File {file_path} does not contain a valid YAML dictionary"
				raise yaml.YAMLError(msg)
			return content

	def _read_global_layer(self) -> dict[str, Any]:
		if not self.config_file.exists():
			logger.debug("No global configuration at %s", self.config_file)
			return {}
		try:
			content = self._parse_yaml_file(self.config_file)
		except yaml.YAMLError as e:
			msg = f"Configuration file {self.config_file} does not contain a valid YAML dictionary."
			logger.exception(msg)
			raise ConfigParsingError(msg) from e
		except OSError as e:
			msg = f"Error accessing configuration file {self.config_file}: {e}"
			logger.exception(msg)
			raise ConfigParsingError(msg) from e
		logger.info("Loaded configuration from %s", self.config_file)
		# Blank values mean "not set" so they never clobber defaults
		return {key: value for key, value in content.items() if value is not None and value != ""}

	def _read_env_layer(self, env_map: Mapping[str, str | None]) -> dict[str, Any]:
		layer: dict[str, Any] = {}
		for suffix, (_label, field_name) in ENV_FIELD_MAP.items():
			value = env_map.get(f"{ENV_PREFIX}{suffix}")
			if value is not None:
				layer[field_name] = default_if_out_of_range(field_name, coerce_value(field_name, value))
		return layer

	def _load_config(self) -> AppConfigSchema:
		"""
		Load every configuration layer and validate the result.

		Returns:
			AppConfigSchema: Loaded and validated configuration

		Raises:
			ConfigParsingError: If a layer cannot be read or the merged values are invalid

		"""
		merged: dict[str, Any] = {}
		merged.update(self._read_global_layer())

		if self.repo_root is not None:
			env_path = self.repo_root / LOCAL_ENV_FILE
			if env_path.exists():
				merged.update(self._read_env_layer(dotenv_values(env_path)))
				logger.debug("Applied local overrides from %s", env_path)

		merged.update(self._read_env_layer(os.environ if self._environ is None else self._environ))

		try:
			return AppConfigSchema(**merged)
		except ValidationError as e:
			msg = f"Error parsing configuration into schema: {e}"
			logger.exception(msg)
			raise ConfigParsingError(msg) from e

	@property
	def get(self) -> AppConfigSchema:
		"""
		Get the current application configuration.

		Returns:
			AppConfigSchema: The current configuration

		"""
		return self._app_config

	def set_field(self, suffix: str, value: str) -> None:
		"""
		Set one field by its ``ACR_`` suffix, e.g. ``MODEL``.

		Args:
			suffix: Environment suffix, case-insensitive
			value: Raw string value

		Raises:
			ConfigError: If the suffix is unknown or the value is invalid

		"""
		key = suffix.upper().removeprefix(ENV_PREFIX)
		if key not in ENV_FIELD_MAP:
			msg = f"Unknown configuration key: {suffix}"
			raise ConfigError(msg)
		_label, field_name = ENV_FIELD_MAP[key]
		data = self._app_config.model_dump()
		data[field_name] = coerce_value(field_name, value)
		try:
			self._app_config = AppConfigSchema(**data)
		except ValidationError as e:
			msg = f"Invalid value for {key}: {value}"
			raise ConfigError(msg) from e

	def replace(self, config: AppConfigSchema) -> None:
		"""Swap in a whole configuration, e.g. one with a preset applied."""
		self._app_config = config

	def fields_display(self, mask_keys: bool = True) -> list[tuple[str, str, str]]:
		"""
		Describe every field for display.

		Args:
			mask_keys: Hide the API key

		Returns:
			``(label, env_suffix, value)`` rows in a stable order

		"""
		cfg = self._app_config
		rows = []
		for suffix, (label, field_name) in ENV_FIELD_MAP.items():
			value = getattr(cfg, field_name)
			if field_name == "api_key":
				shown = "(not set)" if not value else (mask_key(value) if mask_keys else value)
			elif field_name in {"api_url", "api_headers"}:
				shown = value or "(auto from provider)"
			elif field_name == "llm_system_prompt":
				shown = truncate(value)
			elif field_name in BOOL_FIELDS:
				shown = "1 (yes)" if value else "0 (no)"
			else:
				shown = str(value)
			rows.append((label, suffix, shown))
		return rows

	def save_global(self) -> Path:
		"""
		Write the current configuration to the global YAML file.

		Returns:
			Path of the written file

		"""
		self.config_file.parent.mkdir(parents=True, exist_ok=True)
		with self.config_file.open("w", encoding="utf-8") as f:
			yaml.safe_dump(self._app_config.model_dump(), f, sort_keys=False, allow_unicode=True)
		logger.info("Saved global configuration to %s", self.config_file)
		return self.config_file

	def save_local(self, repo_root: Path | None = None) -> Path:
		"""
		Write the current configuration as ``ACR_*`` entries to the repository ``.env``.

		Values equal to their defaults are omitted where the default is long or
		implied by the provider.

		Args:
			repo_root: Repository root; defaults to the loader's repo root

		Returns:
			Path of the written file

		Raises:
			ConfigError: If no repository root is known

		"""
		root = repo_root or self.repo_root
		if root is None:
			msg = "Not in a git repository"
			raise ConfigError(msg)

		cfg = self._app_config
		lines = []
		for suffix, (_label, field_name) in ENV_FIELD_MAP.items():
			value = getattr(cfg, field_name)
			if field_name in {"api_key", "api_url", "api_headers"} and not value:
				continue
			if field_name == "commit_template" and value == DEFAULT_COMMIT_TEMPLATE:
				continue
			if field_name == "llm_system_prompt" and value == DEFAULT_SYSTEM_PROMPT:
				continue
			if field_name in BOOL_FIELDS:
				value = "1" if value else "0"
			elif field_name == "request_timeout":
				value = f"{value:g}"
			lines.append(f"{ENV_PREFIX}{suffix}={quote_env_value(str(value))}")

		env_path = root / LOCAL_ENV_FILE
		env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
		logger.info("Saved local configuration to %s", env_path)
		return env_path
