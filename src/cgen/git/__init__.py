"""Git utilities for cgen."""

from cgen.git.utils import GitDiff, GitError, commit, get_repo_root, get_staged_diff, run_git_command

__all__ = [
	"GitDiff",
	"GitError",
	"commit",
	"get_repo_root",
	"get_staged_diff",
	"run_git_command",
]
