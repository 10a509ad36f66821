"""Errors and warnings raised while building a staging pull request."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Mapping, Sequence

	from pr_utils.git.staging_pr.schemas import CommitRecord


class StagingPRError(Exception):
	"""Base class for fatal staging pull request errors."""


class ConfigurationError(StagingPRError):
	"""Raised when the requested branches are inconsistent."""


class DirtyWorkingTreeError(StagingPRError):
	"""Raised when the working directory has uncommitted changes."""

	def __init__(self) -> None:
		"""Build the error with the standard operator hint."""
		super().__init__("Working directory is not clean. Please commit or stash your changes.")


class BranchNotFoundError(StagingPRError):
	"""Raised when a required branch exists neither locally nor on the remote."""

	def __init__(self, branch: str, role: str = "Feature") -> None:
		"""
		Initialize the error.

		Args:
		    branch: Name of the missing branch
		    role: Human readable role of the branch (Feature, Staging, Develop)

		"""
		self.branch = branch
		self.role = role
		super().__init__(f"{role} branch '{branch}' not found")


class AllBranchesFailedError(StagingPRError):
	"""Raised when no source branch could produce a commit log."""

	def __init__(self, failures: Mapping[str, Exception]) -> None:
		"""Keep the per-branch causes for reporting."""
		self.failures = dict(failures)
		details = "; ".join(f"{branch}: {error}" for branch, error in self.failures.items())
		super().__init__(f"Could not get commits from any source branch ({details})")


class EmptyChangesetError(StagingPRError):
	"""Raised when the source branches have no commits missing from staging."""

	def __init__(self, source_branches: Sequence[str], staging_branch: str) -> None:
		"""Name the source and staging branches in the message."""
		self.source_branches = tuple(source_branches)
		self.staging_branch = staging_branch
		super().__init__(f"No commits found in {', '.join(self.source_branches)} that are not in {staging_branch}")


class CherryPickConflictError(StagingPRError):
	"""Raised when a commit fails to cherry-pick; the working tree is left as is."""

	def __init__(self, commit: CommitRecord, branch_name: str, cause: Exception | None = None) -> None:
		"""
		Initialize the error.

		Args:
		    commit: The commit that failed to apply
		    branch_name: The staging PR branch being built
		    cause: Underlying git failure

		"""
		self.commit = commit
		self.branch_name = branch_name
		message = f"Failed to cherry-pick commit {commit.hash} ({commit.message}) onto '{branch_name}'"
		if cause is not None:
			message += f": {cause}"
		super().__init__(message)


class PullRequestCreationError(StagingPRError):
	"""Raised when the hosting API rejects the pull request."""


class CredentialMissingWarning(UserWarning):
	"""No hosting API credential is available; the PR must be created manually."""


class RemoteUrlUnparseableWarning(UserWarning):
	"""The remote URL does not name a GitHub owner and repository."""
