"""Commands for viewing and editing the cgen configuration."""

import logging
from typing import Annotated

import typer

logger = logging.getLogger(__name__)

config_app = typer.Typer(help="Show or change configuration.", no_args_is_help=True)

RevealFlag = Annotated[bool, typer.Option("--reveal", help="Show the API key unmasked")]

GlobalFlag = Annotated[
	bool, typer.Option("--global", "-g", help="Save to the global config instead of the repository .env")
]


def register_command(app: typer.Typer) -> None:
	"""Register the config commands with the CLI app."""

	@config_app.command(name="show")
	def show_command(reveal: RevealFlag = False) -> None:
		"""Show the effective configuration."""
		_show_impl(reveal=reveal)

	@config_app.command(name="set")
	def set_command(
		key: Annotated[str, typer.Argument(help="Setting name, e.g. MODEL or ACR_MODEL")],
		value: Annotated[str, typer.Argument(help="New value")],
		is_global: GlobalFlag = False,
	) -> None:
		"""Change one setting and save it."""
		_set_impl(key=key, value=value, is_global=is_global)

	app.add_typer(config_app, name="config")


def _load_loader():  # noqa: ANN202
	from cgen.config import ConfigError, ConfigLoader
	from cgen.git.utils import validate_repo_path
	from cgen.utils.cli_utils import exit_with_error

	try:
		return ConfigLoader.get_instance(repo_root=validate_repo_path())
	except ConfigError as e:
		exit_with_error("Failed to load configuration.", exception=e)
		raise


def _show_impl(reveal: bool) -> None:
	from rich.table import Table

	from cgen.config.config_loader import ENV_PREFIX
	from cgen.utils.log_setup import console

	loader = _load_loader()
	table = Table(title="cgen configuration")
	table.add_column("Setting", style="cyan")
	table.add_column("Variable", style="dim")
	table.add_column("Value")
	for label, suffix, value in loader.fields_display(mask_keys=not reveal):
		table.add_row(label, f"{ENV_PREFIX}{suffix}", value)
	console.print(table)


def _set_impl(key: str, value: str, is_global: bool) -> None:
	from cgen.config import ConfigError
	from cgen.config.config_loader import ENV_PREFIX
	from cgen.llm.providers import default_model_for
	from cgen.utils.cli_utils import exit_with_error
	from cgen.utils.log_setup import console

	loader = _load_loader()
	suffix = key.upper().removeprefix(ENV_PREFIX)
	try:
		loader.set_field(suffix, value)
		if suffix == "PROVIDER":
			default_model = default_model_for(value)
			if default_model:
				loader.set_field("MODEL", default_model)
				console.print(f"Model set to provider default '{default_model}'.")
		if is_global or loader.repo_root is None:
			saved_to = loader.save_global()
		else:
			saved_to = loader.save_local()
	except ConfigError as e:
		exit_with_error(str(e))
		return
	except OSError as e:
		exit_with_error("Failed to save configuration.", exception=e)
		return
	console.print(f"[green]Saved {ENV_PREFIX}{suffix} to {saved_to}[/green]")
