"""Global test fixtures and configuration."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from cgen.config import ConfigLoader
from cgen.presets.models import Preset


@pytest.fixture
def make_preset() -> Callable[..., Preset]:
	"""Factory for presets with sensible defaults."""

	def _make(preset_id: int = 0, name: str | None = None, **fields: str) -> Preset:
		fields.setdefault("provider", "openai")
		fields.setdefault("model", "gpt-4o-mini")
		fields.setdefault("api_key", f"sk-{preset_id}")
		return Preset(id=preset_id, name=name or f"preset-{preset_id}", **fields)

	return _make


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
	"""Point config and presets at a temporary directory and clear ACR_ variables."""
	config_home = tmp_path / "xdg"
	monkeypatch.setattr("cgen.config.config_loader.xdg_config_home", str(config_home))
	monkeypatch.setattr("cgen.presets.store.xdg_config_home", str(config_home))
	for name in list(os.environ):
		if name.startswith("ACR_"):
			monkeypatch.delenv(name)
	ConfigLoader.reset_instance()
	yield config_home
	ConfigLoader.reset_instance()
