"""Tests for the Git utilities."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cgen.git.utils import (
	GitError,
	commit,
	get_repo_root,
	get_staged_diff,
	list_staged_files,
	run_git_command,
	validate_repo_path,
)


@pytest.mark.unit
@pytest.mark.git
class TestRunGitCommand:
	"""Test cases for run_git_command."""

	def test_returns_stdout(self) -> None:
		"""Output of a successful command is returned."""
		with patch("cgen.git.utils.subprocess.run") as mock_run:
			mock_run.return_value = MagicMock(stdout="main\n")
			assert run_git_command(["git", "branch", "--show-current"]) == "main\n"
			assert mock_run.call_args.kwargs["check"] is True

	def test_failure_raises_git_error(self) -> None:
		"""Non-zero exits become GitError with stderr."""
		error = subprocess.CalledProcessError(128, ["git", "status"], stderr="fatal: not a git repository")
		with patch("cgen.git.utils.subprocess.run", side_effect=error), pytest.raises(GitError, match="fatal"):
			run_git_command(["git", "status"])

	def test_missing_git(self) -> None:
		"""A missing executable is reported as GitError."""
		with patch("cgen.git.utils.subprocess.run", side_effect=FileNotFoundError), pytest.raises(
			GitError, match="not found"
		):
			run_git_command(["git", "status"])


@pytest.mark.unit
@pytest.mark.git
class TestRepository:
	"""Test cases for repository helpers."""

	def test_repo_root(self) -> None:
		"""The toplevel path is stripped and wrapped."""
		with patch("cgen.git.utils.run_git_command", return_value="/work/repo\n"):
			assert get_repo_root() == Path("/work/repo")

	def test_not_a_repo(self) -> None:
		"""Outside a repository get_repo_root raises and validate_repo_path returns None."""
		with patch("cgen.git.utils.run_git_command", side_effect=GitError("fatal")):
			with pytest.raises(GitError, match="Not in a Git repository"):
				get_repo_root()
			assert validate_repo_path() is None


@pytest.mark.unit
@pytest.mark.git
class TestStagedChanges:
	"""Test cases for staged diff helpers."""

	def test_list_staged_files(self) -> None:
		"""Blank lines are ignored."""
		with patch("cgen.git.utils.run_git_command", return_value="a.py\n\nb/c.py\n"):
			assert list_staged_files() == ["a.py", "b/c.py"]

	def test_staged_diff(self) -> None:
		"""Diff text and file names are collected."""
		outputs = {
			("git", "diff", "--staged"): "diff --git a/a.py b/a.py\n+x\n",
			("git", "diff", "--staged", "--name-only"): "a.py\n",
		}
		with patch("cgen.git.utils.run_git_command", side_effect=lambda cmd, _cwd=None: outputs[tuple(cmd)]):
			diff = get_staged_diff()
		assert diff.files == ["a.py"]
		assert diff.content.startswith("diff --git")

	def test_nothing_staged(self) -> None:
		"""An empty diff tells the user to stage files."""
		with patch("cgen.git.utils.run_git_command", return_value=""), pytest.raises(GitError, match="git add"):
			get_staged_diff()


@pytest.mark.unit
@pytest.mark.git
class TestCommit:
	"""Test cases for commit."""

	def test_commit_passes_extra_args(self) -> None:
		"""Message and extra arguments reach git commit."""
		with patch("cgen.git.utils.subprocess.run") as mock_run:
			commit("feat: add x", ["--no-verify"], suppress_output=True)
		command = mock_run.call_args.args[0]
		assert command == ["git", "commit", "-m", "feat: add x", "--no-verify"]
		assert mock_run.call_args.kwargs["stdout"] is subprocess.DEVNULL

	def test_commit_shows_output_by_default(self) -> None:
		"""Git's own output is not hidden unless asked."""
		with patch("cgen.git.utils.subprocess.run") as mock_run:
			commit("fix: y")
		assert mock_run.call_args.kwargs["stdout"] is None

	def test_commit_failure(self) -> None:
		"""A failing commit, e.g. a hook, raises GitError."""
		error = subprocess.CalledProcessError(1, ["git", "commit"])
		with patch("cgen.git.utils.subprocess.run", side_effect=error), pytest.raises(GitError, match="status 1"):
			commit("fix: y")
