"""Git utilities for pr-utils."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from pygit2 import discover_repository
from pygit2.repository import Repository

logger = logging.getLogger(__name__)


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
	    GitError: If the command fails or git is not installed

	"""
	try:
		# Arguments are passed as a list without a shell
		result = subprocess.run(  # noqa: S603
			command,
			cwd=cwd,
			capture_output=True,
			text=True,
			check=True,
		)
	except subprocess.CalledProcessError as e:
		error_msg = f"Git command failed: {' '.join(command)}\nError: {(e.stderr or '').strip()}"
		logger.debug(error_msg)
		raise GitError(error_msg) from e
	except FileNotFoundError as e:
		error_msg = f"Git executable not found while running: {' '.join(command)}"
		logger.exception(error_msg)
		raise GitError(error_msg) from e
	else:
		return result.stdout


class GitRepoContext:
	"""Context for Git operations on the local checkout using pygit2."""

	@classmethod
	def get_repo_root(cls, path: Path | None = None) -> Path:
		"""Get the root directory of the Git repository."""
		git_dir = discover_repository(str(path or Path.cwd()))
		if git_dir is None:
			msg = "Not a git repository"
			logger.error(msg)
			raise GitError(msg)
		return Path(git_dir)

	def __init__(self, path: Path | None = None) -> None:
		"""Open the repository containing ``path`` (defaults to the current directory)."""
		self.repo = Repository(str(self.get_repo_root(path)))
		self.branch = self._get_branch()

	@property
	def workdir(self) -> Path | None:
		"""Working directory of the repository, None for bare repositories."""
		return Path(self.repo.workdir) if self.repo.workdir else None

	def _get_branch(self) -> str:
		"""
		Get the current branch name of the Git repository.

		Returns:
			str: The current branch name, or empty string if detached or unborn.
		"""
		if self.repo.head_is_unborn or self.repo.head_is_detached:
			return ""
		return self.repo.head.shorthand or ""

	def git(self, *args: str) -> str:
		"""Run a git subcommand inside the repository working directory."""
		return run_git_command(["git", *args], cwd=self.workdir)
