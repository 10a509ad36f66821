"""Git utilities for pr-utils."""

from pr_utils.git.utils import GitError, GitRepoContext, run_git_command

__all__ = [
	"GitError",
	"GitRepoContext",
	"run_git_command",
]
