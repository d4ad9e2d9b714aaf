"""
Persistent storage of provider presets and the fallback order.

Presets live in ``$XDG_CONFIG_HOME/cgen/presets.yml`` next to the global
configuration. The module-level functions operate on an in-memory
:class:`PresetsFile`; :class:`PresetStore` only loads and saves it.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError
from xdg.BaseDirectory import xdg_config_home

from .models import PRIMARY_PRESET_ID, FallbackConfig, LlmPresetFields, Preset, PresetsFile

if TYPE_CHECKING:
	from collections.abc import Iterable

	from cgen.config.config_schema import AppConfigSchema

logger = logging.getLogger(__name__)

PRESETS_FILE_NAME = "presets.yml"


class PresetError(Exception):
	"""Exception raised for preset storage errors."""


class PresetNotFoundError(PresetError):
	"""Exception raised when a preset id does not exist."""

	def __init__(self, preset_id: int) -> None:
		"""
		Initialize the error.

		Args:
		    preset_id: The missing preset id

		"""
		self.preset_id = preset_id
		super().__init__(f"Preset {preset_id} not found")


def default_presets_path() -> Path:
	"""Location of the presets file."""
	return Path(xdg_config_home) / "cgen" / PRESETS_FILE_NAME


def _dump_yaml(data: dict[str, Any]) -> str:
	return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def _parse_presets(text: str, source: str) -> PresetsFile:
	try:
		content = yaml.safe_load(text)
	except yaml.YAMLError as e:
		msg = f"Failed to parse {source}"
		raise PresetError(msg) from e
	if content is None:
		return PresetsFile()
	if not isinstance(content, dict):
		msg = f"{source} does not contain a valid YAML dictionary"
		raise PresetError(msg)
	try:
		return PresetsFile.model_validate(content)
	except ValidationError as e:
		msg = f"Invalid presets data in {source}: {e}"
		raise PresetError(msg) from e


class PresetStore:
	"""Loads and saves the presets file."""

	def __init__(self, path: Path | None = None) -> None:
		"""
		Initialize the store.

		Args:
		    path: Presets file location; defaults to the XDG config directory

		"""
		self.path = path or default_presets_path()

	def load(self) -> PresetsFile:
		"""
		Load presets from disk.

		Returns:
		    The stored presets, or an empty file when none exist yet

		Raises:
		    PresetError: If the file exists but cannot be read or parsed

		"""
		if not self.path.exists():
			logger.debug("No presets file at %s", self.path)
			return PresetsFile()
		try:
			text = self.path.read_text(encoding="utf-8")
		except OSError as e:
			msg = f"Failed to read {self.path}"
			raise PresetError(msg) from e
		return _parse_presets(text, str(self.path))

	def save(self, presets_file: PresetsFile) -> None:
		"""
		Save presets atomically by writing a temporary file and renaming it.

		Args:
		    presets_file: Presets to persist

		Raises:
		    PresetError: If the file cannot be written

		"""
		tmp_path = self.path.with_suffix(".yml.tmp")
		try:
			self.path.parent.mkdir(parents=True, exist_ok=True)
			tmp_path.write_text(_dump_yaml(presets_file.model_dump()), encoding="utf-8")
			tmp_path.replace(self.path)
		except OSError as e:
			msg = f"Failed to write {self.path}"
			raise PresetError(msg) from e
		logger.debug("Saved %d presets to %s", len(presets_file.presets), self.path)


def fields_from_config(config: AppConfigSchema) -> LlmPresetFields:
	"""Capture the provider settings of a configuration."""
	return LlmPresetFields(
		provider=config.provider,
		model=config.model,
		api_key=config.api_key,
		api_url=config.api_url,
		api_headers=config.api_headers,
	)


def apply_preset_to_config(config: AppConfigSchema, preset: Preset) -> AppConfigSchema:
	"""Return a copy of ``config`` using the preset's provider settings."""
	return config.model_copy(update=preset.to_fields().model_dump())


def primary_preset(config: AppConfigSchema) -> Preset:
	"""Wrap the active configuration as the first preset of a fallback pass."""
	return Preset(id=PRIMARY_PRESET_ID, name="primary", **fields_from_config(config).model_dump())


def find_duplicate(presets_file: PresetsFile, fields: LlmPresetFields) -> int | None:
	"""Return the id of a preset with the same dedup key, if any."""
	key = fields.dedup_key()
	return next((preset.id for preset in presets_file.presets if preset.dedup_key() == key), None)


def create_preset(presets_file: PresetsFile, name: str | None, fields: LlmPresetFields) -> int:
	"""
	Add a preset and return its new id.

	Args:
	    presets_file: Presets to modify
	    name: Display name; ``provider/model`` when omitted
	    fields: Provider settings

	Returns:
	    The id assigned to the new preset

	"""
	preset_id = presets_file.next_id
	presets_file.next_id += 1
	presets_file.presets.append(
		Preset(id=preset_id, name=name or f"{fields.provider}/{fields.model}", **fields.model_dump())
	)
	return preset_id


def _require(presets_file: PresetsFile, preset_id: int) -> Preset:
	preset = presets_file.get(preset_id)
	if preset is None:
		raise PresetNotFoundError(preset_id)
	return preset


def delete_preset(presets_file: PresetsFile, preset_id: int) -> None:
	"""Remove a preset and drop it from the fallback order."""
	_require(presets_file, preset_id)
	presets_file.presets = [preset for preset in presets_file.presets if preset.id != preset_id]
	presets_file.fallback.order = [fid for fid in presets_file.fallback.order if fid != preset_id]


def rename_preset(presets_file: PresetsFile, preset_id: int, new_name: str) -> None:
	"""Change a preset's display name."""
	_require(presets_file, preset_id).name = new_name


def duplicate_preset(presets_file: PresetsFile, preset_id: int) -> int:
	"""Copy a preset under the name ``"<name> (copy)"`` and return the copy's id."""
	preset = _require(presets_file, preset_id)
	return create_preset(presets_file, f"{preset.name} (copy)", preset.to_fields())


def set_fallback_order(presets_file: PresetsFile, preset_ids: Iterable[int]) -> list[int]:
	"""
	Replace the fallback order.

	Repeated ids keep their first position only.

	Args:
	    presets_file: Presets to modify
	    preset_ids: Preset ids in attempt order

	Returns:
	    The stored order

	Raises:
	    PresetNotFoundError: If an id does not name an existing preset

	"""
	order: list[int] = []
	for preset_id in preset_ids:
		_require(presets_file, preset_id)
		if preset_id not in order:
			order.append(preset_id)
	presets_file.fallback.order = order
	return order


def ordered_fallback_presets(presets_file: PresetsFile) -> list[Preset]:
	"""Resolve the fallback order to presets, skipping ids that no longer exist."""
	presets = []
	for preset_id in presets_file.fallback.order:
		preset = presets_file.get(preset_id)
		if preset is None:
			logger.debug("Fallback order references missing preset %d", preset_id)
			continue
		presets.append(preset)
	return presets


def export_presets(presets_file: PresetsFile, preset_ids: Iterable[int], include_keys: bool = False) -> str:
	"""
	Export presets as standalone YAML.

	Ids are reset because they are reassigned on import.

	Args:
	    presets_file: Source presets
	    preset_ids: Which presets to export; unknown ids are ignored
	    include_keys: Keep API keys instead of blanking them

	Returns:
	    YAML text suitable for :func:`import_presets`

	"""
	export = PresetsFile(fallback=FallbackConfig())
	for preset_id in preset_ids:
		preset = presets_file.get(preset_id)
		if preset is None:
			continue
		update: dict[str, Any] = {"id": 0}
		if not include_keys:
			update["api_key"] = ""
		export.presets.append(preset.model_copy(update=update))
	return _dump_yaml(export.model_dump(include={"presets"}))


def import_presets(presets_file: PresetsFile, data: str) -> int:
	"""
	Import presets from YAML produced by :func:`export_presets`.

	Presets duplicating an existing one are skipped.

	Args:
	    presets_file: Presets to add to
	    data: YAML text

	Returns:
	    Number of presets imported

	Raises:
	    PresetError: If the data cannot be parsed

	"""
	imported = _parse_presets(data, "imported presets data")
	count = 0
	for preset in imported.presets:
		fields = preset.to_fields()
		if find_duplicate(presets_file, fields) is not None:
			continue
		create_preset(presets_file, preset.name, fields)
		count += 1
	return count


def preset_display(preset: Preset) -> str:
	"""One-line summary such as ``work (openai/gpt-4o-mini, key set)``."""
	key_status = "key set" if preset.api_key else "no key"
	return f"{preset.name} ({preset.provider}/{preset.model}, {key_status})"
