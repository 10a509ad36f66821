"""Build a staging pull request from one or more feature branches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pr_utils.git.staging_pr.collector import CommitCollector
from pr_utils.git.staging_pr.errors import DirtyWorkingTreeError
from pr_utils.git.staging_pr.events import EventCallback, EventEmitter, Stage
from pr_utils.git.staging_pr.github_client import DEFAULT_API_URL
from pr_utils.git.staging_pr.publisher import DEFAULT_BRANCH_PREFIX, ChangesetPublisher, ClientFactory
from pr_utils.git.staging_pr.resolver import BranchResolver, parse_branch_list
from pr_utils.git.staging_pr.schemas import BranchSpec, Changeset, PublishResult, StagingRunResult

if TYPE_CHECKING:
	from pr_utils.git.staging_pr.staging_git_utils import StagingGitUtils

logger = logging.getLogger(__name__)


@dataclass
class StagingPROptions:
	"""Options for building a staging pull request."""

	feature_branch: str | None = field(default=None)
	staging_branch: str = field(default="staging")
	develop_branch: str = field(default="develop")
	dry_run: bool = field(default=False)
	include_merges: bool = field(default=False)
	first_parent: bool = field(default=False)
	include_sub_branches: bool = field(default=False)
	sub_branch_pattern: str | None = field(default=None)
	branches: list[str] | None = field(default=None)
	remote: str = field(default="origin")
	branch_prefix: str = field(default=DEFAULT_BRANCH_PREFIX)
	token: str | None = field(default=None, repr=False)
	api_url: str = field(default=DEFAULT_API_URL)


class StagingChangesetBuilder:
	"""
	Resolves source branches, collects their commits and publishes the result.

	The builder never touches the console or exits the process: progress is
	reported through ``on_event`` and failures propagate as
	:class:`~pr_utils.git.staging_pr.errors.StagingPRError` subclasses or
	:class:`~pr_utils.git.utils.GitError`.
	"""

	def __init__(
		self,
		git: StagingGitUtils,
		options: StagingPROptions,
		on_event: EventCallback | None = None,
		client_factory: ClientFactory | None = None,
	) -> None:
		"""
		Initialize the builder.

		Args:
		    git: Version-control collaborator
		    options: Run options
		    on_event: Receives progress events
		    client_factory: Builds the GitHub client from a token

		"""
		self.git = git
		self.options = options
		self.emitter = EventEmitter(on_event)
		self.resolver = BranchResolver(
			git,
			staging_branch=options.staging_branch,
			develop_branch=options.develop_branch,
			remote=options.remote,
			emitter=self.emitter,
		)
		self.collector = CommitCollector(
			git,
			staging_branch=options.staging_branch,
			remote=options.remote,
			include_merges=options.include_merges,
			first_parent=options.first_parent,
			emitter=self.emitter,
		)
		self.publisher = ChangesetPublisher(
			git,
			remote=options.remote,
			branch_prefix=options.branch_prefix,
			token=options.token,
			api_url=options.api_url,
			client_factory=client_factory,
			emitter=self.emitter,
		)

	def ensure_clean(self) -> None:
		"""
		Require a clean working tree.

		Raises:
		    DirtyWorkingTreeError: If there are uncommitted or untracked changes

		"""
		self.emitter.started(Stage.STATUS, "Checking repository status...")
		if not self.git.is_clean():
			error = DirtyWorkingTreeError()
			self.emitter.failed(Stage.STATUS, str(error))
			raise error
		self.emitter.succeeded(Stage.STATUS, "Repository status is clean")

	def fetch(self) -> None:
		"""Fetch the remote so remote-tracking refs are current."""
		self.emitter.started(Stage.FETCH, "Fetching latest changes...")
		self.git.fetch(self.options.remote)
		self.emitter.succeeded(Stage.FETCH, "Fetched latest changes")

	def build(self) -> tuple[list[BranchSpec], Changeset]:
		"""
		Resolve branches and collect the changeset without modifying the repository.

		Returns:
		    The resolved branch specs and the frozen changeset

		"""
		explicit = parse_branch_list(self.options.branches)
		primary = self.resolver.resolve_primary(self.options.feature_branch, explicit)

		self.ensure_clean()
		self.fetch()
		self.resolver.check_branches_exist(primary)

		sources = self.resolver.resolve_sources(
			primary,
			explicit,
			include_sub_branches=self.options.include_sub_branches,
			sub_branch_pattern=self.options.sub_branch_pattern,
		)
		changeset = self.collector.collect([spec.name for spec in sources])
		return sources, changeset

	def publish(self, changeset: Changeset) -> PublishResult:
		"""Create the branch, cherry-pick, push and open the pull request for a built changeset."""
		return self.publisher.publish(changeset)

	def run(self) -> StagingRunResult:
		"""
		Run the full pipeline.

		In dry-run mode nothing is created, pushed or opened after the
		changeset is collected.

		"""
		sources, changeset = self.build()
		if self.options.dry_run:
			logger.info("Dry run: %d commits would be cherry-picked", len(changeset))
			return StagingRunResult(branches=tuple(sources), changeset=changeset, dry_run=True)

		published = self.publish(changeset)
		return StagingRunResult(branches=tuple(sources), changeset=changeset, publish=published)
