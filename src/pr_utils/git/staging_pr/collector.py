"""Collect the commits of source branches that are missing from staging."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pr_utils.git.staging_pr.errors import AllBranchesFailedError, EmptyChangesetError
from pr_utils.git.staging_pr.events import EventEmitter, Stage
from pr_utils.git.staging_pr.schemas import Changeset, CommitRecord
from pr_utils.git.staging_pr.staging_git_utils import LOG_FIELD_SEPARATOR
from pr_utils.git.utils import GitError

if TYPE_CHECKING:
	from collections.abc import Sequence

	from pr_utils.git.staging_pr.staging_git_utils import StagingGitUtils

logger = logging.getLogger(__name__)

LOG_FIELD_COUNT = 5


def parse_authored_at(value: str) -> datetime:
	"""
	Parse a strict ISO 8601 author date.

	Naive values are taken as UTC. Unparseable values sort first.

	"""
	try:
		parsed = datetime.fromisoformat(value.strip())
	except ValueError:
		logger.warning("Unparseable author date %r, treating as epoch", value)
		return datetime.fromtimestamp(0, tz=UTC)
	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=UTC)
	return parsed


def parse_commit_log(output: str, branch: str) -> list[CommitRecord]:
	"""
	Parse ``git log`` output in the staging log format.

	Args:
	    output: Raw log output, one commit per line
	    branch: Source branch to tag each commit with

	Returns:
	    Commit records in log order

	"""
	commits: list[CommitRecord] = []
	for line in output.splitlines():
		if not line.strip():
			continue
		fields = line.split(LOG_FIELD_SEPARATOR)
		fields += [""] * (LOG_FIELD_COUNT - len(fields))
		commit_hash, message, author_name, authored_at, refs = fields[:LOG_FIELD_COUNT]
		commits.append(
			CommitRecord(
				hash=commit_hash.strip(),
				message=message,
				author_name=author_name,
				authored_at=parse_authored_at(authored_at),
				branch=branch,
				refs=refs.strip(),
			)
		)
	return commits


def merge_commits(batches: Sequence[Sequence[CommitRecord]]) -> list[CommitRecord]:
	"""
	Merge per-branch commits, dropping repeated hashes and sorting oldest first.

	The first batch that contains a hash keeps its branch tag. Commits with
	equal author dates keep their merge order.

	"""
	seen: set[str] = set()
	merged: list[CommitRecord] = []
	for batch in batches:
		for commit in batch:
			if commit.hash in seen:
				continue
			seen.add(commit.hash)
			merged.append(commit)
	merged.sort(key=lambda commit: commit.authored_at)
	return merged


class CommitCollector:
	"""Builds a :class:`Changeset` from the source branches, one branch at a time."""

	def __init__(
		self,
		git: StagingGitUtils,
		*,
		staging_branch: str = "staging",
		remote: str = "origin",
		include_merges: bool = False,
		first_parent: bool = False,
		emitter: EventEmitter | None = None,
	) -> None:
		"""Initialize the collector with the log filters to apply."""
		self.git = git
		self.staging_branch = staging_branch
		self.remote = remote
		self.include_merges = include_merges
		self.first_parent = first_parent
		self.emitter = emitter or EventEmitter()

	def revision_range(self, branch: str) -> str:
		"""Two-dot range of commits on ``branch`` but not on staging."""
		return f"{self.remote}/{self.staging_branch}..{self.remote}/{branch}"

	def collect_branch(self, branch: str) -> list[CommitRecord]:
		"""
		Commits reachable from ``branch`` but not from staging.

		Raises:
		    GitError: If the log for the branch cannot be produced

		"""
		output = self.git.get_commit_log(
			self.revision_range(branch),
			no_merges=not self.include_merges,
			first_parent=self.first_parent,
		)
		commits = parse_commit_log(output, branch)
		logger.debug("Found %d commits on '%s' not in '%s'", len(commits), branch, self.staging_branch)
		return commits

	def collect(self, branches: Sequence[str]) -> Changeset:
		"""
		Collect and freeze the changeset for ``branches``.

		The first branch is the primary feature branch.

		Raises:
		    AllBranchesFailedError: If no branch produced a log
		    EmptyChangesetError: If there are no commits to apply

		"""
		primary = branches[0]
		target = f"{len(branches)} branches" if len(branches) > 1 else primary
		self.emitter.started(Stage.COLLECT, f"Getting commits from {target} that are not in {self.staging_branch}...")

		batches: list[list[CommitRecord]] = []
		failures: dict[str, Exception] = {}
		for branch in branches:
			try:
				batches.append(self.collect_branch(branch))
			except GitError as e:
				failures[branch] = e
				self.emitter.warning(Stage.COLLECT, f"Could not get commits from branch {branch}: {e}")

		if failures and not batches:
			self.emitter.failed(Stage.COLLECT, "Could not get commits from any branch")
			raise AllBranchesFailedError(failures)

		changeset = Changeset(
			commits=tuple(merge_commits(batches)),
			primary_branch=primary,
			source_branches=tuple(branches),
			staging_branch=self.staging_branch,
		)
		if not changeset:
			self.emitter.failed(
				Stage.COLLECT, f"No commits found in {', '.join(branches)} that are not in {self.staging_branch}"
			)
			raise EmptyChangesetError(branches, self.staging_branch)

		self.emitter.succeeded(Stage.COLLECT, f"Found {len(changeset)} commits to cherry-pick")
		return changeset
