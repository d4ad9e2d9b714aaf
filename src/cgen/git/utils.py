"""Git utilities for cgen."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class GitDiff:
	"""Staged changes: affected files and the patch text."""

	files: list[str]
	content: str


class GitError(Exception):
	"""Custom exception for Git-related errors."""


def run_git_command(command: list[str], cwd: Path | None = None) -> str:
	"""
	Run a Git command and return its output.

	Args:
	    command: Git command to run
	    cwd: Working directory (optional)

	Returns:
	    Command output as string

	Raises:
	    GitError: If the command fails

	"""
	try:
		result = subprocess.run(  # noqa: S603
			command,
			cwd=cwd,
			capture_output=True,
			text=True,
			check=True,
		)
	except FileNotFoundError as e:
		msg = "git executable not found"
		raise GitError(msg) from e
	except subprocess.CalledProcessError as e:
		error_msg = f"Git command failed: {' '.join(command)}\nError: {e.stderr}"
		logger.debug(error_msg)
		raise GitError(error_msg) from e
	else:
		return result.stdout


def get_repo_root(path: Path | None = None) -> Path:
	"""
	Get the root directory of the Git repository.

	Args:
	    path: Optional path to start searching from

	Returns:
	    Path to repository root

	Raises:
	    GitError: If not in a Git repository

	"""
	try:
		result = run_git_command(["git", "rev-parse", "--show-toplevel"], path)
		return Path(result.strip())
	except GitError as e:
		msg = "Not in a Git repository"
		raise GitError(msg) from e


def validate_repo_path(path: Path | None = None) -> Path | None:
	"""Return the repository root for ``path`` (default: cwd), or None outside a repository."""
	try:
		return get_repo_root(path or Path.cwd())
	except GitError:
		return None


def list_staged_files(cwd: Path | None = None) -> list[str]:
	"""
	List the paths of staged files.

	Raises:
	    GitError: If git command fails

	"""
	output = run_git_command(["git", "diff", "--staged", "--name-only"], cwd)
	return [line.strip() for line in output.splitlines() if line.strip()]


def get_staged_diff(cwd: Path | None = None) -> GitDiff:
	"""
	Get the diff of staged changes.

	Args:
	    cwd: Repository directory (optional)

	Returns:
	    GitDiff object containing staged changes

	Raises:
	    GitError: If git command fails or nothing is staged

	"""
	try:
		diff_content = run_git_command(["git", "diff", "--staged"], cwd)
		staged_files = list_staged_files(cwd)
	except GitError as e:
		msg = "Failed to get staged changes"
		raise GitError(msg) from e

	if not diff_content.strip():
		msg = "No staged changes found. Stage files with 'git add <files>' first."
		raise GitError(msg)

	return GitDiff(files=staged_files, content=diff_content)


def commit(
	message: str,
	extra_args: list[str] | None = None,
	suppress_output: bool = False,
	cwd: Path | None = None,
) -> None:
	"""
	Run ``git commit -m <message>`` with optional extra arguments.

	Args:
	    message: Commit message
	    extra_args: Additional arguments forwarded to ``git commit``
	    suppress_output: Hide git's own output
	    cwd: Repository directory (optional)

	Raises:
	    GitError: If commit fails

	"""
	command = ["git", "commit", "-m", message, *(extra_args or [])]
	output = subprocess.DEVNULL if suppress_output else None
	try:
		subprocess.run(  # noqa: S603
			command,
			cwd=cwd,
			stdout=output,
			stderr=output,
			check=True,
		)
	except FileNotFoundError as e:
		msg = "git executable not found"
		raise GitError(msg) from e
	except subprocess.CalledProcessError as e:
		msg = f"git commit exited with status {e.returncode}"
		raise GitError(msg) from e
	logger.info("Created commit with message: %s", message.splitlines()[0] if message else "")
