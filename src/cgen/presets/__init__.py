"""Saved provider presets and fallback order."""

from .models import PRIMARY_PRESET_ID, FallbackConfig, LlmPresetFields, Preset, PresetsFile
from .store import PresetError, PresetNotFoundError, PresetStore

__all__ = [
	"PRIMARY_PRESET_ID",
	"FallbackConfig",
	"LlmPresetFields",
	"Preset",
	"PresetError",
	"PresetNotFoundError",
	"PresetStore",
	"PresetsFile",
]
