"""Materialize a changeset as a pushed branch and a pull request."""

from __future__ import annotations

import logging
import re
import shlex
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from pr_utils.git.staging_pr.errors import (
	CherryPickConflictError,
	CredentialMissingWarning,
	PullRequestCreationError,
	RemoteUrlUnparseableWarning,
)
from pr_utils.git.staging_pr.events import EventEmitter, Stage
from pr_utils.git.staging_pr.github_client import DEFAULT_API_URL, GitHubClient, parse_github_remote
from pr_utils.git.staging_pr.schemas import Changeset, CommitRecord, PublishResult
from pr_utils.git.utils import GitError

if TYPE_CHECKING:
	from pr_utils.git.staging_pr.staging_git_utils import StagingGitUtils

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_PREFIX = "staging-pr"
PR_FOOTER = "*Generated by pr-utils*"

# Characters git refuses in branch names (see git-check-ref-format)
_INVALID_REF_CHARS = re.compile(r"[/\s~^:?*\[\\]+|\.\.|@\{")

ClientFactory = Callable[[str], GitHubClient]


def sanitize_branch_component(name: str) -> str:
	"""Make ``name`` safe to embed in a single branch name component."""
	return _INVALID_REF_CHARS.sub("-", name).strip("-.")


def make_branch_name(feature_branch: str, prefix: str = DEFAULT_BRANCH_PREFIX, timestamp_ms: int | None = None) -> str:
	"""
	Build a unique staging PR branch name.

	Args:
	    feature_branch: Primary feature branch, ``/`` is replaced by ``-``
	    prefix: Leading name component
	    timestamp_ms: Creation time in milliseconds since the epoch, defaults to now

	Returns:
	    ``<prefix>-<feature>-<timestamp_ms>``

	"""
	if timestamp_ms is None:
		timestamp_ms = time.time_ns() // 1_000_000
	return f"{prefix}-{sanitize_branch_component(feature_branch)}-{timestamp_ms}"


def format_commit_line(changeset: Changeset, commit: CommitRecord, position: int) -> str:
	"""``N. <short hash> - <subject>`` with the origin branch tag when it is not the primary branch."""
	tag = changeset.branch_tag(commit)
	suffix = f" [{tag}]" if tag else ""
	return f"{position}. {commit.short_hash} - {commit.message}{suffix}"


def describe_sources(changeset: Changeset) -> str:
	"""Source branches joined for titles, or just the primary branch."""
	if len(changeset.source_branches) > 1:
		return ", ".join(changeset.source_branches)
	return changeset.primary_branch


def generate_pr_title(changeset: Changeset) -> str:
	"""Title for the staging pull request."""
	return f"Cherry-pick changes from {describe_sources(changeset)} to {changeset.staging_branch}"


def generate_pr_body(changeset: Changeset) -> str:
	"""Body listing every applied commit in application order."""
	lines = [
		f"Cherry-picked changes from {describe_sources(changeset)} to {changeset.staging_branch}",
		"",
		"## Commits included:",
	]
	lines.extend(format_commit_line(changeset, commit, position) for position, commit in enumerate(changeset, start=1))
	lines.extend(["", "---", PR_FOOTER])
	return "\n".join(lines)


def manual_pr_command(changeset: Changeset, branch_name: str) -> str:
	"""The ``gh`` command that creates the pull request by hand."""
	args = [
		"gh",
		"pr",
		"create",
		"--base",
		changeset.staging_branch,
		"--head",
		branch_name,
		"--title",
		generate_pr_title(changeset),
		"--body",
		f"Cherry-picked commits from {describe_sources(changeset)}",
	]
	return shlex.join(args)


class ChangesetPublisher:
	"""Creates the staging PR branch, applies the changeset, pushes and opens the PR."""

	def __init__(
		self,
		git: StagingGitUtils,
		*,
		remote: str = "origin",
		branch_prefix: str = DEFAULT_BRANCH_PREFIX,
		token: str | None = None,
		api_url: str = DEFAULT_API_URL,
		client_factory: ClientFactory | None = None,
		emitter: EventEmitter | None = None,
	) -> None:
		"""
		Initialize the publisher.

		Args:
		    git: Version-control collaborator
		    remote: Remote to branch from and push to
		    branch_prefix: Prefix of the generated branch name
		    token: GitHub token; without it PR creation degrades to manual instructions
		    api_url: GitHub REST API base URL
		    client_factory: Builds the hosting client from a token
		    emitter: Progress event emitter

		"""
		self.git = git
		self.remote = remote
		self.branch_prefix = branch_prefix
		self.token = token
		self.client_factory = client_factory or (lambda value: GitHubClient(value, api_url=api_url))
		self.emitter = emitter or EventEmitter()

	def create_branch(self, changeset: Changeset) -> str:
		"""Create and check out a uniquely named branch from the remote staging tip."""
		branch_name = make_branch_name(changeset.primary_branch, self.branch_prefix)
		start_point = f"{self.remote}/{changeset.staging_branch}"
		self.emitter.started(Stage.CREATE_BRANCH, f"Creating new branch '{branch_name}' from {changeset.staging_branch}...")
		self.git.create_branch(branch_name, start_point)
		self.emitter.succeeded(Stage.CREATE_BRANCH, f"Created branch '{branch_name}'")
		return branch_name

	def apply(self, changeset: Changeset, branch_name: str) -> None:
		"""
		Cherry-pick every commit oldest first, stopping at the first failure.

		Raises:
		    CherryPickConflictError: Naming the commit that did not apply

		"""
		self.emitter.started(
			Stage.CHERRY_PICK, f"Cherry-picking {len(changeset)} commits in chronological order..."
		)
		for commit in changeset:
			try:
				self.git.cherry_pick(commit.hash)
			except GitError as e:
				self.emitter.failed(Stage.CHERRY_PICK, f"Failed to cherry-pick commit {commit.hash}")
				raise CherryPickConflictError(commit, branch_name, e) from e
		self.emitter.succeeded(Stage.CHERRY_PICK, "All commits cherry-picked successfully")

	def push(self, branch_name: str) -> None:
		"""Push the staging PR branch."""
		self.emitter.started(Stage.PUSH, f"Pushing branch '{branch_name}' to {self.remote}...")
		self.git.push_branch(branch_name, self.remote)
		self.emitter.succeeded(Stage.PUSH, f"Pushed branch '{branch_name}' to {self.remote}")

	def open_pull_request(self, changeset: Changeset, branch_name: str) -> PublishResult:
		"""
		Open the pull request, or fall back to manual instructions.

		Raises:
		    PullRequestCreationError: If the hosting API rejects the request

		"""
		if not self.token:
			warning = CredentialMissingWarning("GitHub token not found. Please create PR manually:")
			instructions = manual_pr_command(changeset, branch_name)
			self.emitter.warning(Stage.PULL_REQUEST, str(warning))
			return PublishResult(branch_name=branch_name, manual_instructions=instructions, warnings=(warning,))

		owner_repo = parse_github_remote(self.git.get_remote_url(self.remote))
		if owner_repo is None:
			warning = RemoteUrlUnparseableWarning("Could not parse GitHub repository from remote URL")
			instructions = (
				f"Please create PR manually from branch '{branch_name}' to '{changeset.staging_branch}'"
			)
			self.emitter.warning(Stage.PULL_REQUEST, str(warning))
			return PublishResult(branch_name=branch_name, manual_instructions=instructions, warnings=(warning,))

		owner, repo = owner_repo
		self.emitter.started(Stage.PULL_REQUEST, "Creating GitHub PR...")
		try:
			pull_request = self.client_factory(self.token).create_pull_request(
				owner,
				repo,
				title=generate_pr_title(changeset),
				head=branch_name,
				base=changeset.staging_branch,
				body=generate_pr_body(changeset),
			)
		except PullRequestCreationError as e:
			self.emitter.failed(Stage.PULL_REQUEST, "Failed to create GitHub PR")
			msg = f"{e}\nThe branch was pushed; create the PR manually with:\n  {manual_pr_command(changeset, branch_name)}"
			raise PullRequestCreationError(msg) from e

		self.emitter.succeeded(Stage.PULL_REQUEST, f"Created PR #{pull_request.number}: {pull_request.url}")
		return PublishResult(branch_name=branch_name, pull_request=pull_request)

	def publish(self, changeset: Changeset) -> PublishResult:
		"""Run branch creation, cherry-picks, push and PR creation in order."""
		branch_name = self.create_branch(changeset)
		self.apply(changeset, branch_name)
		self.push(branch_name)
		return self.open_pull_request(changeset, branch_name)
