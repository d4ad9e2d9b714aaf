"""Schemas for saved provider presets and the fallback order."""

from __future__ import annotations

from pydantic import BaseModel, Field

PRIMARY_PRESET_ID = -1


class LlmPresetFields(BaseModel):
	"""Provider settings captured by a preset."""

	provider: str = ""
	model: str = ""
	api_key: str = ""
	api_url: str = ""
	api_headers: str = ""

	def dedup_key(self) -> tuple[str, str, str, str]:
		"""Identity used to detect duplicate presets; headers are ignored."""
		return (self.provider, self.model, self.api_key, self.api_url)


class Preset(LlmPresetFields):
	"""A named, saved snapshot of provider settings."""

	id: int = Field(description="Stable identifier, never reused")
	name: str = Field(description="Display name")

	def to_fields(self) -> LlmPresetFields:
		"""The provider settings without id and name."""
		return LlmPresetFields.model_validate(self.model_dump(exclude={"id", "name"}))


class FallbackConfig(BaseModel):
	"""Whether fallback is active and in which order presets are tried."""

	enabled: bool = True
	order: list[int] = Field(default_factory=list, description="Preset ids in attempt order")


class PresetsFile(BaseModel):
	"""On-disk document holding all presets."""

	next_id: int = 0
	presets: list[Preset] = Field(default_factory=list)
	fallback: FallbackConfig = Field(default_factory=FallbackConfig)

	def get(self, preset_id: int) -> Preset | None:
		"""Find a preset by id."""
		return next((preset for preset in self.presets if preset.id == preset_id), None)
