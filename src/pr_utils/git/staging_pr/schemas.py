"""Schemas for staging pull request generation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

SHORT_HASH_LENGTH = 7


class BranchOrigin(str, Enum):
	"""How a source branch was discovered."""

	EXPLICIT = "explicit"
	FEATURE_OPTION = "feature-option"
	CURRENT_CHECKOUT = "current-checkout"
	PATTERN_MATCH = "pattern-match"


@dataclass(frozen=True)
class BranchSpec:
	"""A resolved source branch."""

	name: str
	origin: BranchOrigin


@dataclass(frozen=True, eq=False)
class CommitRecord:
	"""A single commit to be cherry-picked, tagged with the branch it was found on."""

	hash: str
	message: str
	author_name: str
	authored_at: datetime
	branch: str
	refs: str = ""

	def __eq__(self, other: object) -> bool:
		"""Commits are identified by hash only."""
		if not isinstance(other, CommitRecord):
			return NotImplemented
		return self.hash == other.hash

	def __hash__(self) -> int:
		"""Hash on the commit id."""
		return hash(self.hash)

	@property
	def short_hash(self) -> str:
		"""Abbreviated commit hash."""
		return self.hash[:SHORT_HASH_LENGTH]


@dataclass(frozen=True)
class Changeset:
	"""
	Commits to apply, ordered oldest authored first.

	The order of ``commits`` is the order of application. Use
	:meth:`display_order` for the newest-first view shown to the operator.

	"""

	commits: tuple[CommitRecord, ...]
	primary_branch: str
	source_branches: tuple[str, ...]
	staging_branch: str

	def __len__(self) -> int:
		"""Return the number of commits."""
		return len(self.commits)

	def __iter__(self):  # noqa: ANN204
		"""Iterate commits in application order."""
		return iter(self.commits)

	def display_order(self) -> tuple[CommitRecord, ...]:
		"""Commits newest first."""
		return tuple(reversed(self.commits))

	def hashes(self) -> list[str]:
		"""Commit hashes in application order."""
		return [commit.hash for commit in self.commits]

	def branch_tag(self, commit: CommitRecord) -> str | None:
		"""Origin branch of ``commit`` when it differs from the primary branch."""
		if commit.branch and commit.branch != self.primary_branch:
			return commit.branch
		return None


@dataclass
class PullRequest:
	"""Represents a GitHub Pull Request."""

	head: str
	base: str
	title: str
	body: str
	url: str | None = None
	number: int | None = None


@dataclass(frozen=True)
class PublishResult:
	"""Outcome of publishing a changeset."""

	branch_name: str
	pull_request: PullRequest | None = None
	manual_instructions: str | None = None
	warnings: tuple[Warning, ...] = ()


@dataclass(frozen=True)
class StagingRunResult:
	"""Outcome of a full staging run."""

	branches: tuple[BranchSpec, ...]
	changeset: Changeset
	publish: PublishResult | None = None
	dry_run: bool = False
