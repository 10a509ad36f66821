"""Git operations used to build staging pull requests."""

from __future__ import annotations

import logging

from pygit2 import Commit
from pygit2 import GitError as Pygit2GitError

from pr_utils.git.utils import GitError, GitRepoContext

logger = logging.getLogger(__name__)

# Unit separator between fields of one commit line
LOG_FIELD_SEPARATOR = "\x1f"
LOG_FORMAT = "%H%x1f%s%x1f%an%x1f%aI%x1f%D"


class StagingGitUtils(GitRepoContext):
	"""Provides Git operations for staging PR generation using pygit2 and the git CLI."""

	_staging_git_utils_instance: StagingGitUtils | None = None

	@classmethod
	def get_instance(cls) -> StagingGitUtils:
		"""Get an instance of the StagingGitUtils class."""
		if cls._staging_git_utils_instance is None:
			cls._staging_git_utils_instance = cls()
		return cls._staging_git_utils_instance

	def get_current_branch(self) -> str:
		"""
		Get the name of the checked out branch.

		Raises:
		    GitError: If HEAD is detached or unborn

		"""
		if self.repo.head_is_unborn:
			msg = "Repository has no commits yet; cannot determine the current branch"
			raise GitError(msg)
		if self.repo.head_is_detached:
			msg = "HEAD is detached; check out a branch or pass --feature-branch"
			raise GitError(msg)
		return self.repo.head.shorthand

	def is_clean(self) -> bool:
		"""Whether the working tree has no modified, staged or untracked files."""
		try:
			return not self.repo.status()
		except Pygit2GitError as e:
			msg = f"Failed to read repository status: {e}"
			raise GitError(msg) from e

	def fetch(self, remote: str = "origin") -> None:
		"""Fetch the latest refs from ``remote``."""
		try:
			self.git("fetch", remote)
		except GitError as e:
			msg = f"Failed to fetch from remote '{remote}': {e}"
			raise GitError(msg) from e
		logger.info("Fetched latest changes from '%s'", remote)

	def list_local_branches(self) -> list[str]:
		"""Names of local branches."""
		return list(self.repo.branches.local)

	def list_remote_branches(self) -> list[str]:
		"""Names of remote-tracking branches, e.g. ``origin/feat/x``, without symbolic HEAD refs."""
		return [name for name in self.repo.branches.remote if not name.endswith("/HEAD")]

	def branch_exists(self, branch_name: str, remote: str = "origin") -> bool:
		"""Check whether ``branch_name`` exists locally or as ``<remote>/<branch_name>``."""
		if branch_name in self.list_local_branches():
			return True
		return f"{remote}/{branch_name}" in self.list_remote_branches()

	def get_commit_log(
		self,
		revision_range: str,
		*,
		no_merges: bool = True,
		first_parent: bool = False,
	) -> str:
		"""
		Get the raw log for ``revision_range`` in the staging log format.

		Each line holds hash, subject, author name, strict ISO author date and
		ref decorations separated by ``LOG_FIELD_SEPARATOR``.

		Args:
		    revision_range: A two-dot range such as ``origin/staging..origin/feat``
		    no_merges: Exclude merge commits
		    first_parent: Follow only the first parent of merge commits

		Returns:
		    Raw ``git log`` output

		Raises:
		    GitError: If the range cannot be resolved

		"""
		args = ["log", revision_range, f"--format={LOG_FORMAT}"]
		if no_merges:
			args.append("--no-merges")
		if first_parent:
			args.append("--first-parent")
		return self.git(*args)

	def create_branch(self, branch_name: str, from_reference: str) -> None:
		"""
		Create a new branch at ``from_reference`` and check it out.

		Raises:
		    GitError: If the reference cannot be resolved or checkout fails

		"""
		try:
			source_commit = self.repo.revparse_single(from_reference).peel(Commit)
			branch = self.repo.create_branch(branch_name, source_commit)
			self.repo.checkout(branch)
			self.branch = branch_name
			logger.info("Branch '%s' created from '%s' (%s)", branch_name, from_reference, source_commit.id)
		except (Pygit2GitError, KeyError, ValueError) as e:
			msg = f"Failed to create branch '{branch_name}' from '{from_reference}': {e}"
			logger.exception(msg)
			raise GitError(msg) from e

	def cherry_pick(self, commit_hash: str) -> None:
		"""
		Cherry-pick ``commit_hash`` onto the current branch.

		On failure the in-progress cherry-pick is left for the operator.

		Raises:
		    GitError: If the cherry-pick does not apply cleanly

		"""
		self.git("cherry-pick", commit_hash)

	def push_branch(self, branch_name: str, remote: str = "origin") -> None:
		"""Push ``branch_name`` to ``remote`` and set its upstream."""
		try:
			self.git("push", "-u", remote, branch_name)
		except GitError as e:
			msg = f"Failed to push branch '{branch_name}' to '{remote}': {e}"
			raise GitError(msg) from e
		logger.info("Branch '%s' pushed to remote '%s'", branch_name, remote)

	def get_remote_url(self, remote: str = "origin") -> str | None:
		"""URL configured for ``remote``, or None if the remote is not configured."""
		try:
			return self.repo.remotes[remote].url
		except (KeyError, ValueError):
			logger.warning("Remote '%s' is not configured", remote)
			return None
