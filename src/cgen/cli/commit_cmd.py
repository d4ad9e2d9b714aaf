"""Command for generating a commit message from the staged diff and committing it."""

import logging
from typing import Annotated

import typer

logger = logging.getLogger(__name__)

DryRunFlag = Annotated[bool, typer.Option("--dry-run", "-n", help="Print the message without committing")]

YesFlag = Annotated[bool, typer.Option("--yes", "-y", help="Commit without asking for review")]


def register_command(app: typer.Typer) -> None:
	"""Register the commit command with the CLI app."""

	@app.command(
		name="commit",
		context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
	)
	def commit_command(
		ctx: typer.Context,
		dry_run: DryRunFlag = False,
		yes: YesFlag = False,
	) -> None:
		"""
		Generate a commit message for the staged changes and commit.

		Arguments after the options are passed through to ``git commit``.

		"""
		_commit_command_impl(dry_run=dry_run, yes=yes, extra_args=list(ctx.args))


def _commit_command_impl(dry_run: bool, yes: bool, extra_args: list[str]) -> None:
	"""Actual implementation of the commit command."""
	import questionary

	from cgen.config import ConfigError, ConfigLoader
	from cgen.git.prompts import apply_commit_template, build_system_prompt
	from cgen.git.utils import GitError, commit, get_repo_root, get_staged_diff
	from cgen.llm import LLMClient, LLMError
	from cgen.llm.providers import is_builtin
	from cgen.presets import PresetError, PresetStore
	from cgen.utils.cli_utils import (
		exit_with_error,
		handle_keyboard_interrupt,
		loading_spinner,
		show_warning,
	)
	from cgen.utils.log_setup import console

	try:
		try:
			repo_root = get_repo_root()
			diff = get_staged_diff(repo_root)
		except GitError as e:
			exit_with_error(str(e))
			return

		try:
			config = ConfigLoader.get_instance(repo_root=repo_root).get
		except ConfigError as e:
			exit_with_error("Failed to load configuration.", exception=e)
			return

		if not config.api_key and is_builtin(config.provider):
			exit_with_error(
				f"No API key configured for provider '{config.provider}'. "
				"Run 'cgen config set API_KEY <key>' or set ACR_API_KEY."
			)

		if config.warn_staged_files_enabled and len(diff.files) > config.warn_staged_files_threshold:
			show_warning(
				f"{len(diff.files)} files are staged (threshold {config.warn_staged_files_threshold}). "
				"Consider splitting this into smaller commits."
			)

		client = LLMClient(config, preset_store=PresetStore())
		try:
			with loading_spinner("Generating commit message..."):
				result = client.generate_commit_message(build_system_prompt(config), diff.content)
		except (LLMError, PresetError) as e:
			exit_with_error("Failed to generate commit message.", exception=e)
			return

		if result.is_fallback:
			console.print(f"[yellow]Primary provider failed, used fallback preset '{result.preset_name}'.[/yellow]")
			for failure in result.failures:
				logger.debug("Skipped %s", failure)

		message = apply_commit_template(config.commit_template, result.text)
		console.print(message, markup=False, highlight=False)

		if dry_run:
			return

		if config.review_commit and not yes:
			confirmed = questionary.confirm("Commit with this message?", default=True).ask()
			if not confirmed:
				console.print("[yellow]Commit aborted.[/yellow]")
				return

		try:
			commit(message, extra_args, suppress_output=config.suppress_tool_output, cwd=repo_root)
		except GitError as e:
			exit_with_error("git commit failed.", exception=e)
			return
		console.print("[green]Committed.[/green]")
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
