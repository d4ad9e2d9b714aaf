"""Commands for managing provider presets and the fallback order."""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

if TYPE_CHECKING:
	from collections.abc import Callable

	from cgen.presets import PresetsFile, PresetStore

logger = logging.getLogger(__name__)

preset_app = typer.Typer(help="Manage saved provider presets.", no_args_is_help=True)
fallback_app = typer.Typer(help="Configure which presets are tried when the provider fails.", no_args_is_help=True)

PresetIdArg = Annotated[int, typer.Argument(help="Preset id (see 'cgen preset list')")]

YesFlag = Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")]


def register_command(app: typer.Typer) -> None:
	"""Register the preset commands with the CLI app."""

	@preset_app.command(name="list")
	def list_command() -> None:
		"""List saved presets."""
		_list_impl()

	@preset_app.command(name="create")
	def create_command(
		provider: Annotated[str, typer.Option("--provider", "-p", help="Provider id, e.g. openai")],
		model: Annotated[str, typer.Option("--model", "-m", help="Model; the provider default if omitted")] = "",
		api_key: Annotated[str, typer.Option("--api-key", help="API key")] = "",
		api_url: Annotated[str, typer.Option("--api-url", help="Endpoint URL template")] = "",
		api_headers: Annotated[str, typer.Option("--api-headers", help="Header template, 'Name: value, ...'")] = "",
		name: Annotated[str | None, typer.Option("--name", help="Display name")] = None,
	) -> None:
		"""Create a preset from explicit settings."""
		_create_impl(provider, model, api_key, api_url, api_headers, name)

	@preset_app.command(name="save-current")
	def save_current_command(
		name: Annotated[str | None, typer.Option("--name", help="Display name")] = None,
	) -> None:
		"""Save the active provider settings as a preset."""
		_save_current_impl(name)

	@preset_app.command(name="use")
	def use_command(preset_id: PresetIdArg, is_global: Annotated[bool, typer.Option("--global", "-g")] = False) -> None:
		"""Make a preset's provider settings the active configuration."""
		_use_impl(preset_id, is_global)

	@preset_app.command(name="rename")
	def rename_command(preset_id: PresetIdArg, new_name: Annotated[str, typer.Argument(help="New name")]) -> None:
		"""Rename a preset."""
		_mutate(lambda presets_file: _rename(presets_file, preset_id, new_name))

	@preset_app.command(name="duplicate")
	def duplicate_command(preset_id: PresetIdArg) -> None:
		"""Copy a preset."""
		_mutate(lambda presets_file: _duplicate(presets_file, preset_id))

	@preset_app.command(name="delete")
	def delete_command(preset_id: PresetIdArg, yes: YesFlag = False) -> None:
		"""Delete a preset and remove it from the fallback order."""
		_delete_impl(preset_id, yes)

	@preset_app.command(name="export")
	def export_command(
		preset_ids: Annotated[list[int], typer.Argument(help="Preset ids to export")],
		output: Annotated[Path | None, typer.Option("--output", "-o", help="Write to a file instead of stdout")] = None,
		include_keys: Annotated[bool, typer.Option("--include-keys", help="Keep API keys in the export")] = False,
	) -> None:
		"""Export presets as YAML."""
		_export_impl(preset_ids, output, include_keys)

	@preset_app.command(name="import")
	def import_command(
		source: Annotated[Path, typer.Argument(help="YAML file from 'cgen preset export'", exists=True, dir_okay=False)],
	) -> None:
		"""Import presets, skipping ones that already exist."""
		_import_impl(source)

	@fallback_app.command(name="show")
	def fallback_show_command() -> None:
		"""Show the fallback order."""
		_fallback_show_impl()

	@fallback_app.command(name="set")
	def fallback_set_command(
		preset_ids: Annotated[list[int], typer.Argument(help="Preset ids in the order they are tried")],
	) -> None:
		"""Replace the fallback order."""
		_mutate(lambda presets_file: _set_order(presets_file, preset_ids))

	@fallback_app.command(name="enable")
	def fallback_enable_command() -> None:
		"""Turn fallback on."""
		_mutate(lambda presets_file: _set_enabled(presets_file, True))

	@fallback_app.command(name="disable")
	def fallback_disable_command() -> None:
		"""Turn fallback off."""
		_mutate(lambda presets_file: _set_enabled(presets_file, False))

	preset_app.add_typer(fallback_app, name="fallback")
	app.add_typer(preset_app, name="preset")


def _open_store() -> tuple["PresetStore", "PresetsFile"]:
	from cgen.presets import PresetError, PresetStore
	from cgen.utils.cli_utils import exit_with_error

	store = PresetStore()
	try:
		return store, store.load()
	except PresetError as e:
		exit_with_error("Failed to load presets.", exception=e)
		raise


def _mutate(action: "Callable[[PresetsFile], str]") -> None:
	"""Load presets, apply ``action``, save, and print the message it returns."""
	from cgen.presets import PresetError
	from cgen.utils.cli_utils import exit_with_error
	from cgen.utils.log_setup import console

	store, presets_file = _open_store()
	try:
		message = action(presets_file)
		store.save(presets_file)
	except PresetError as e:
		exit_with_error(str(e))
		return
	console.print(f"[green]{message}[/green]")


def _rename(presets_file: "PresetsFile", preset_id: int, new_name: str) -> str:
	from cgen.presets.store import rename_preset

	rename_preset(presets_file, preset_id, new_name)
	return f"Renamed preset {preset_id} to '{new_name}'."


def _duplicate(presets_file: "PresetsFile", preset_id: int) -> str:
	from cgen.presets.store import duplicate_preset

	new_id = duplicate_preset(presets_file, preset_id)
	return f"Duplicated preset {preset_id} as {new_id}."


def _set_order(presets_file: "PresetsFile", preset_ids: list[int]) -> str:
	from cgen.presets.store import set_fallback_order

	order = set_fallback_order(presets_file, preset_ids)
	return f"Fallback order: {', '.join(str(preset_id) for preset_id in order) or '(empty)'}"


def _set_enabled(presets_file: "PresetsFile", enabled: bool) -> str:
	presets_file.fallback.enabled = enabled
	return f"Fallback {'enabled' if enabled else 'disabled'}."


def _add_preset(presets_file: "PresetsFile", name: str | None, fields) -> str:  # noqa: ANN001
	from cgen.presets import PresetError
	from cgen.presets.store import create_preset, find_duplicate

	existing = find_duplicate(presets_file, fields)
	if existing is not None:
		msg = f"An identical preset already exists (id {existing})"
		raise PresetError(msg)
	preset_id = create_preset(presets_file, name, fields)
	return f"Created preset {preset_id}."


def _list_impl() -> None:
	from rich.table import Table

	from cgen.utils.log_setup import console

	_store, presets_file = _open_store()
	if not presets_file.presets:
		console.print("No presets saved. Create one with 'cgen preset save-current'.")
		return

	order = presets_file.fallback.order
	table = Table(title="Presets")
	table.add_column("Id", justify="right")
	table.add_column("Name", style="cyan")
	table.add_column("Provider")
	table.add_column("Model")
	table.add_column("Key")
	table.add_column("Fallback", justify="right")
	for preset in presets_file.presets:
		position = str(order.index(preset.id) + 1) if preset.id in order else ""
		table.add_row(
			str(preset.id),
			preset.name,
			preset.provider,
			preset.model,
			"set" if preset.api_key else "",
			position,
		)
	console.print(table)


def _create_impl(provider: str, model: str, api_key: str, api_url: str, api_headers: str, name: str | None) -> None:
	from cgen.llm.providers import default_model_for
	from cgen.presets import LlmPresetFields

	fields = LlmPresetFields(
		provider=provider,
		model=model or default_model_for(provider),
		api_key=api_key,
		api_url=api_url,
		api_headers=api_headers,
	)
	_mutate(lambda presets_file: _add_preset(presets_file, name, fields))


def _save_current_impl(name: str | None) -> None:
	from cgen.config import ConfigError, ConfigLoader
	from cgen.git.utils import validate_repo_path
	from cgen.presets.store import fields_from_config
	from cgen.utils.cli_utils import exit_with_error

	try:
		config = ConfigLoader.get_instance(repo_root=validate_repo_path()).get
	except ConfigError as e:
		exit_with_error("Failed to load configuration.", exception=e)
		return
	fields = fields_from_config(config)
	_mutate(lambda presets_file: _add_preset(presets_file, name, fields))


def _use_impl(preset_id: int, is_global: bool) -> None:
	from cgen.config import ConfigError, ConfigLoader
	from cgen.git.utils import validate_repo_path
	from cgen.presets import PresetNotFoundError
	from cgen.presets.store import apply_preset_to_config, preset_display
	from cgen.utils.cli_utils import exit_with_error
	from cgen.utils.log_setup import console

	_store, presets_file = _open_store()
	preset = presets_file.get(preset_id)
	if preset is None:
		exit_with_error(str(PresetNotFoundError(preset_id)))
		return

	try:
		loader = ConfigLoader.get_instance(repo_root=validate_repo_path())
		loader.replace(apply_preset_to_config(loader.get, preset))
		saved_to = loader.save_global() if is_global or loader.repo_root is None else loader.save_local()
	except (ConfigError, OSError) as e:
		exit_with_error("Failed to save configuration.", exception=e)
		return
	console.print(f"[green]Now using {preset_display(preset)} (saved to {saved_to})[/green]")


def _delete_impl(preset_id: int, yes: bool) -> None:
	import questionary

	from cgen.presets import PresetNotFoundError
	from cgen.presets.store import delete_preset
	from cgen.utils.cli_utils import exit_with_error
	from cgen.utils.log_setup import console

	_store, presets_file = _open_store()
	preset = presets_file.get(preset_id)
	if preset is None:
		exit_with_error(str(PresetNotFoundError(preset_id)))
		return

	if not yes and not questionary.confirm(f"Delete preset '{preset.name}'?", default=False).ask():
		console.print("[yellow]Nothing deleted.[/yellow]")
		return

	def _delete(presets_file: "PresetsFile") -> str:
		delete_preset(presets_file, preset_id)
		return f"Deleted preset {preset_id}."

	_mutate(_delete)


def _export_impl(preset_ids: list[int], output: Path | None, include_keys: bool) -> None:
	from cgen.presets.store import export_presets
	from cgen.utils.cli_utils import exit_with_error
	from cgen.utils.log_setup import console

	_store, presets_file = _open_store()
	missing = [preset_id for preset_id in preset_ids if presets_file.get(preset_id) is None]
	if missing:
		exit_with_error(f"Unknown preset ids: {', '.join(str(preset_id) for preset_id in missing)}")
		return

	data = export_presets(presets_file, preset_ids, include_keys=include_keys)
	if output is None:
		typer.echo(data, nl=False)
		return
	try:
		output.write_text(data, encoding="utf-8")
	except OSError as e:
		exit_with_error(f"Failed to write {output}.", exception=e)
		return
	console.print(f"[green]Exported {len(preset_ids)} preset(s) to {output}[/green]")


def _import_impl(source: Path) -> None:
	from cgen.presets.store import import_presets

	data = source.read_text(encoding="utf-8")
	_mutate(lambda presets_file: f"Imported {import_presets(presets_file, data)} preset(s).")


def _fallback_show_impl() -> None:
	from cgen.presets.store import ordered_fallback_presets, preset_display
	from cgen.utils.log_setup import console

	_store, presets_file = _open_store()
	state = "enabled" if presets_file.fallback.enabled else "disabled"
	console.print(f"Fallback is [bold]{state}[/bold].")
	presets = ordered_fallback_presets(presets_file)
	if not presets:
		console.print("No fallback presets configured. Set them with 'cgen preset fallback set <ids>'.")
		return
	for position, preset in enumerate(presets, start=1):
		console.print(f"{position}. [{preset.id}] {preset_display(preset)}", markup=False)
