"""Resolve the set of source branches for a staging pull request."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pr_utils.git.staging_pr.errors import BranchNotFoundError, ConfigurationError
from pr_utils.git.staging_pr.events import EventEmitter, Stage
from pr_utils.git.staging_pr.schemas import BranchOrigin, BranchSpec
from pr_utils.git.utils import GitError

if TYPE_CHECKING:
	from collections.abc import Iterable

	from pr_utils.git.staging_pr.staging_git_utils import StagingGitUtils

logger = logging.getLogger(__name__)

WILDCARD = "*"


def parse_branch_list(value: str | Iterable[str] | None) -> list[str]:
	"""
	Split a comma-separated branch list.

	Entries are trimmed, empty entries dropped and duplicates removed
	keeping the first occurrence.

	"""
	if value is None:
		return []
	items = value.split(",") if isinstance(value, str) else list(value)
	branches: list[str] = []
	for item in items:
		name = item.strip()
		if name and name not in branches:
			branches.append(name)
	return branches


@dataclass(frozen=True)
class BranchPattern:
	"""
	Glob-like matcher for sub-branch names.

	A branch matches when it starts with the pattern stripped of its ``*``
	wildcards, or when the pattern with every ``*`` expanded to "any
	characters" occurs anywhere in the branch name. An empty literal never
	matches on its own.
	"""

	pattern: str

	@classmethod
	def for_feature(cls, feature_branch: str, pattern: str | None = None) -> BranchPattern:
		"""Pattern given explicitly, or ``<feature_branch>*``."""
		return cls(pattern or f"{feature_branch}{WILDCARD}")

	@property
	def prefix(self) -> str:
		"""The pattern with its wildcards removed."""
		return self.pattern.replace(WILDCARD, "")

	@property
	def regex(self) -> re.Pattern[str]:
		"""The wildcard-expanded pattern."""
		return re.compile(".*".join(re.escape(part) for part in self.pattern.split(WILDCARD)))

	def matches(self, branch_name: str) -> bool:
		"""Whether ``branch_name`` matches the prefix or the expanded pattern."""
		prefix = self.prefix
		if prefix and branch_name.startswith(prefix):
			return True
		return self.regex.search(branch_name) is not None


class BranchResolver:
	"""Determines the ordered source branches and validates the branch setup."""

	def __init__(
		self,
		git: StagingGitUtils,
		*,
		staging_branch: str = "staging",
		develop_branch: str = "develop",
		remote: str = "origin",
		emitter: EventEmitter | None = None,
	) -> None:
		"""
		Initialize the resolver.

		Args:
		    git: Version-control collaborator
		    staging_branch: Branch the pull request targets
		    develop_branch: Integration branch that must never be a source
		    remote: Remote holding the source and staging branches
		    emitter: Progress event emitter

		"""
		self.git = git
		self.staging_branch = staging_branch
		self.develop_branch = develop_branch
		self.remote = remote
		self.emitter = emitter or EventEmitter()

	def resolve_primary(self, feature_branch: str | None = None, branches: list[str] | None = None) -> BranchSpec:
		"""
		Pick the primary feature branch and check it against staging and develop.

		Runs before any fetch or branch creation.

		Raises:
		    ConfigurationError: If the primary branch is the staging or develop branch,
		        or cannot be determined

		"""
		if branches:
			primary = BranchSpec(branches[0], BranchOrigin.EXPLICIT)
			self.emitter.info(Stage.RESOLVE, f"Using manually specified branches: {', '.join(branches)}")
		elif feature_branch:
			primary = BranchSpec(feature_branch, BranchOrigin.FEATURE_OPTION)
		else:
			try:
				current = self.git.get_current_branch()
			except GitError as e:
				msg = f"Could not determine the current branch: {e}"
				raise ConfigurationError(msg) from e
			primary = BranchSpec(current, BranchOrigin.CURRENT_CHECKOUT)
			self.emitter.info(Stage.RESOLVE, f"Using current branch: {current}")

		if primary.name in {self.staging_branch, self.develop_branch}:
			msg = "Feature branch cannot be the same as staging or develop branch"
			raise ConfigurationError(msg)
		return primary

	def check_branches_exist(self, primary: BranchSpec) -> None:
		"""
		Ensure the feature, staging and develop branches exist.

		Raises:
		    BranchNotFoundError: Naming the first missing branch

		"""
		self.emitter.started(Stage.BRANCH_CHECK, "Checking if branches exist...")
		required = (
			("Feature", primary.name),
			("Staging", self.staging_branch),
			("Develop", self.develop_branch),
		)
		for role, name in required:
			if not self.git.branch_exists(name, self.remote):
				self.emitter.failed(Stage.BRANCH_CHECK, f"{role} branch '{name}' not found")
				raise BranchNotFoundError(name, role)
		self.emitter.succeeded(Stage.BRANCH_CHECK, "All required branches exist")

	def discover_sub_branches(self, primary: BranchSpec, pattern: str | None = None) -> list[BranchSpec]:
		"""Remote branches matching ``pattern`` in enumeration order, never the primary, staging or develop branch."""
		self.emitter.started(Stage.SUB_BRANCHES, "Finding sub-branches...")
		matcher = BranchPattern.for_feature(primary.name, pattern)
		remote_prefix = f"{self.remote}/"

		found: list[BranchSpec] = []
		seen = {primary.name, self.staging_branch, self.develop_branch}
		for remote_branch in self.git.list_remote_branches():
			if not remote_branch.startswith(remote_prefix):
				continue
			name = remote_branch.removeprefix(remote_prefix)
			if name in seen or not matcher.matches(name):
				continue
			seen.add(name)
			found.append(BranchSpec(name, BranchOrigin.PATTERN_MATCH))

		if found:
			names = ", ".join(spec.name for spec in found)
			self.emitter.succeeded(Stage.SUB_BRANCHES, f"Found {len(found)} sub-branches: {names}")
		else:
			self.emitter.succeeded(Stage.SUB_BRANCHES, "No sub-branches found")
		return found

	def resolve_sources(
		self,
		primary: BranchSpec,
		branches: list[str] | None = None,
		*,
		include_sub_branches: bool = False,
		sub_branch_pattern: str | None = None,
	) -> list[BranchSpec]:
		"""
		Build the ordered, duplicate-free list of branches to collect from.

		An explicit list is used verbatim. Otherwise the primary branch comes
		first, followed by discovered sub-branches when enabled.

		"""
		if branches:
			specs = [BranchSpec(name, BranchOrigin.EXPLICIT) for name in parse_branch_list(branches)]
			self.emitter.info(Stage.RESOLVE, f"Processing {len(specs)} manually specified branches")
			return specs

		specs = [primary]
		if include_sub_branches:
			specs.extend(self.discover_sub_branches(primary, sub_branch_pattern))
		return specs
