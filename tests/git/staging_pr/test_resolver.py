"""Tests for source branch resolution."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from pr_utils.git.staging_pr.errors import BranchNotFoundError, ConfigurationError
from pr_utils.git.staging_pr.events import EventEmitter
from pr_utils.git.staging_pr.resolver import BranchPattern, BranchResolver, parse_branch_list
from pr_utils.git.staging_pr.schemas import BranchOrigin, BranchSpec
from pr_utils.git.utils import GitError


@pytest.mark.unit
class TestParseBranchList:
	"""Tests for splitting the --branches value."""

	def test_trims_and_drops_empty_entries(self) -> None:
		"""Whitespace is trimmed and blank entries are ignored."""
		assert parse_branch_list(" featX , featY,, ") == ["featX", "featY"]

	def test_drops_duplicates_keeping_first(self) -> None:
		"""Repeated names keep their first position."""
		assert parse_branch_list("featY,featX,featY") == ["featY", "featX"]

	def test_none_and_lists(self) -> None:
		"""None gives an empty list and lists are normalized the same way."""
		assert parse_branch_list(None) == []
		assert parse_branch_list([" a", "b ", "a"]) == ["a", "b"]


@pytest.mark.unit
class TestBranchPattern:
	"""Tests for the sub-branch matcher."""

	def test_default_pattern_is_feature_prefix(self) -> None:
		"""Without an explicit pattern the feature name plus a wildcard is used."""
		pattern = BranchPattern.for_feature("feat/login")
		assert pattern.pattern == "feat/login*"
		assert pattern.prefix == "feat/login"
		assert pattern.matches("feat/login-ui")
		assert pattern.matches("feat/login/api")
		assert not pattern.matches("feat/logout")

	def test_wildcard_in_the_middle(self) -> None:
		"""A middle wildcard must be matched by the expanded pattern."""
		pattern = BranchPattern("feat/*-api")
		assert pattern.prefix == "feat/-api"
		assert pattern.matches("feat/login-api")
		assert not pattern.matches("feat/unrelated")
		assert not pattern.matches("bug/login-api-v2")

	def test_leading_wildcard(self) -> None:
		"""A leading wildcard only matches branches containing the rest of the pattern."""
		pattern = BranchPattern("*-api")
		assert pattern.matches("team/login-api")
		assert pattern.matches("-api-v2")
		for branch in ("staging", "develop", "main", "feat/login"):
			assert not pattern.matches(branch)

	def test_bare_wildcard_matches_everything(self) -> None:
		"""An empty literal is not used as a prefix, but ``*`` alone still means any branch."""
		pattern = BranchPattern("*")
		assert pattern.prefix == ""
		assert pattern.matches("anything")

	def test_expanded_pattern_matches_anywhere(self) -> None:
		"""The expanded pattern is searched, not anchored."""
		pattern = BranchPattern("login*")
		assert pattern.matches("team/login-form")

	def test_regex_characters_are_literal(self) -> None:
		"""Dots and other regex metacharacters in branch names are not wildcards."""
		pattern = BranchPattern("release.1*")
		assert pattern.matches("release.1-hotfix")
		assert not pattern.matches("releaseX1-hotfix")


@pytest.mark.unit
@pytest.mark.git
class TestBranchResolver:
	"""Tests for BranchResolver."""

	def test_explicit_list_first_entry_is_primary(self, mock_git: MagicMock) -> None:
		"""The first explicit branch is primary even when a feature branch is given."""
		resolver = BranchResolver(mock_git)
		primary = resolver.resolve_primary("feat/other", ["featX", "featY"])
		assert primary == BranchSpec("featX", BranchOrigin.EXPLICIT)
		mock_git.get_current_branch.assert_not_called()

	def test_feature_option_is_used(self, mock_git: MagicMock) -> None:
		"""A given feature branch is used without asking git."""
		primary = BranchResolver(mock_git).resolve_primary("feat/signup")
		assert primary == BranchSpec("feat/signup", BranchOrigin.FEATURE_OPTION)
		mock_git.get_current_branch.assert_not_called()

	def test_defaults_to_current_checkout(self, mock_git: MagicMock) -> None:
		"""With no inputs the checked out branch is primary."""
		events: list = []
		resolver = BranchResolver(mock_git, emitter=EventEmitter(events.append))
		primary = resolver.resolve_primary()
		assert primary == BranchSpec("feat/login", BranchOrigin.CURRENT_CHECKOUT)
		assert any("Using current branch: feat/login" in event.message for event in events)

	@pytest.mark.parametrize("feature", ["staging", "develop"])
	def test_rejects_staging_or_develop(self, mock_git: MagicMock, feature: str) -> None:
		"""The primary branch may not be the staging or develop branch."""
		resolver = BranchResolver(mock_git, staging_branch="staging", develop_branch="develop")
		with pytest.raises(ConfigurationError):
			resolver.resolve_primary(feature)
		mock_git.fetch.assert_not_called()
		mock_git.create_branch.assert_not_called()

	def test_rejects_explicit_list_starting_with_staging(self, mock_git: MagicMock) -> None:
		"""The guard applies to the first explicit branch too."""
		with pytest.raises(ConfigurationError):
			BranchResolver(mock_git).resolve_primary(None, ["staging", "featX"])

	def test_detached_head_is_a_configuration_error(self, mock_git: MagicMock) -> None:
		"""A detached HEAD cannot stand in for the feature branch."""
		mock_git.get_current_branch.side_effect = GitError("HEAD is detached")
		with pytest.raises(ConfigurationError, match="HEAD is detached"):
			BranchResolver(mock_git).resolve_primary()

	def test_check_branches_exist_passes(self, mock_git: MagicMock) -> None:
		"""All three branches are looked up against the configured remote."""
		resolver = BranchResolver(mock_git, remote="upstream")
		resolver.check_branches_exist(BranchSpec("feat/login", BranchOrigin.FEATURE_OPTION))
		assert [call.args for call in mock_git.branch_exists.call_args_list] == [
			("feat/login", "upstream"),
			("staging", "upstream"),
			("develop", "upstream"),
		]

	def test_missing_branch_is_named(self, mock_git: MagicMock) -> None:
		"""The error names the missing branch and its role."""
		mock_git.branch_exists.side_effect = lambda name, _remote: name != "staging"
		resolver = BranchResolver(mock_git)
		with pytest.raises(BranchNotFoundError) as exc_info:
			resolver.check_branches_exist(BranchSpec("feat/login", BranchOrigin.FEATURE_OPTION))
		assert exc_info.value.branch == "staging"
		assert "Staging branch 'staging' not found" in str(exc_info.value)

	def test_discover_sub_branches(self, mock_git: MagicMock) -> None:
		"""Matching remote branches follow enumeration order and exclude the primary branch."""
		mock_git.list_remote_branches.return_value = [
			"origin/develop",
			"origin/feat/login-ui",
			"origin/feat/login",
			"origin/feat/login/api",
			"origin/feat/logout",
			"upstream/feat/login-mirror",
		]
		resolver = BranchResolver(mock_git)
		primary = BranchSpec("feat/login", BranchOrigin.FEATURE_OPTION)

		found = resolver.discover_sub_branches(primary)

		assert [spec.name for spec in found] == ["feat/login-ui", "feat/login/api"]
		assert all(spec.origin is BranchOrigin.PATTERN_MATCH for spec in found)

	def test_discover_with_leading_wildcard(self, mock_git: MagicMock) -> None:
		"""Only branches containing the literal part are found."""
		mock_git.list_remote_branches.return_value = [
			"origin/staging",
			"origin/develop",
			"origin/main",
			"origin/feat/login",
			"origin/team/login-api",
		]
		resolver = BranchResolver(mock_git)
		primary = BranchSpec("feat/login", BranchOrigin.FEATURE_OPTION)

		found = resolver.discover_sub_branches(primary, "*-api")

		assert [spec.name for spec in found] == ["team/login-api"]

	def test_discover_never_includes_staging_or_develop(self, mock_git: MagicMock) -> None:
		"""The staging and develop branches are excluded even when the pattern matches them."""
		mock_git.list_remote_branches.return_value = [
			"origin/qa",
			"origin/dev",
			"origin/feat/login",
			"origin/feat/login-ui",
		]
		resolver = BranchResolver(mock_git, staging_branch="qa", develop_branch="dev")
		primary = BranchSpec("feat/login", BranchOrigin.FEATURE_OPTION)

		found = resolver.discover_sub_branches(primary, "*")

		assert [spec.name for spec in found] == ["feat/login-ui"]

	def test_resolve_sources_with_sub_branches(self, mock_git: MagicMock) -> None:
		"""The primary branch comes first, then sub-branches."""
		mock_git.list_remote_branches.return_value = ["origin/feat/login", "origin/feat/login-ui"]
		resolver = BranchResolver(mock_git)
		primary = BranchSpec("feat/login", BranchOrigin.FEATURE_OPTION)

		sources = resolver.resolve_sources(primary, include_sub_branches=True)

		assert [spec.name for spec in sources] == ["feat/login", "feat/login-ui"]

	def test_resolve_sources_without_sub_branches(self, mock_git: MagicMock) -> None:
		"""Discovery is skipped unless enabled."""
		primary = BranchSpec("feat/login", BranchOrigin.FEATURE_OPTION)
		sources = BranchResolver(mock_git).resolve_sources(primary)
		assert sources == [primary]
		mock_git.list_remote_branches.assert_not_called()

	def test_explicit_list_overrides_sub_branches(self, mock_git: MagicMock) -> None:
		"""An explicit list is used verbatim even with discovery enabled."""
		primary = BranchSpec("featX", BranchOrigin.EXPLICIT)
		sources = BranchResolver(mock_git).resolve_sources(
			primary, ["featX", "featY"], include_sub_branches=True, sub_branch_pattern="feat*"
		)
		assert [spec.name for spec in sources] == ["featX", "featY"]
		mock_git.list_remote_branches.assert_not_called()
