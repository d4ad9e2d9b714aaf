"""Command-line interface package for cgen."""

from __future__ import annotations

import logging
import sys
from typing import Annotated

import typer

from cgen import __version__
from cgen.utils.log_setup import setup_logging

from .commit_cmd import register_command as register_commit_command
from .config_cmd import register_command as register_config_command
from .preset_cmd import register_command as register_preset_command

logger = logging.getLogger(__name__)

app = typer.Typer(
	help=f"cgen - commit messages from staged changes, written by an LLM\n\nVersion: {__version__}",
	context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"cgen version: {__version__}")
		raise typer.Exit


@app.callback(invoke_without_command=True)
def global_options(
	ctx: typer.Context,
	is_verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup. Without a command, runs ``commit``."""
	ctx.meta["is_verbose"] = is_verbose
	setup_logging(is_verbose=is_verbose)

	if ctx.invoked_subcommand is None:
		from .commit_cmd import _commit_command_impl

		_commit_command_impl(dry_run=False, yes=False, extra_args=[])


register_commit_command(app)
register_config_command(app)
register_preset_command(app)


def main() -> int:
	"""Run the CLI application."""
	return app()


if __name__ == "__main__":
	sys.exit(main())
