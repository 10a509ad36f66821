"""Tests for commit collection and changeset assembly."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from pr_utils.git.staging_pr.collector import CommitCollector, merge_commits, parse_authored_at, parse_commit_log
from pr_utils.git.staging_pr.errors import AllBranchesFailedError, EmptyChangesetError
from pr_utils.git.staging_pr.events import EventEmitter, StageEventKind
from pr_utils.git.utils import GitError
from tests.base import fake_hash, git_log, log_line, make_commit


def logs_by_branch(logs: dict[str, str | Exception]):  # noqa: ANN201
	"""side_effect for get_commit_log keyed by the head branch of the range."""

	def _get_commit_log(revision_range: str, **_kwargs: bool) -> str:
		branch = revision_range.split("..origin/", 1)[1]
		result = logs[branch]
		if isinstance(result, Exception):
			raise result
		return result

	return _get_commit_log


@pytest.mark.unit
class TestParsing:
	"""Tests for log parsing helpers."""

	def test_parse_commit_log(self) -> None:
		"""Every field is mapped and the branch tag is attached."""
		output = git_log(
			log_line("C", "feat: add form | with pipe", 20, author="Ana", refs="origin/feat/login"),
			log_line("B", "fix: typo", 10),
		)
		commits = parse_commit_log(output, "feat/login")

		assert [commit.hash for commit in commits] == [fake_hash("C"), fake_hash("B")]
		first = commits[0]
		assert first.message == "feat: add form | with pipe"
		assert first.author_name == "Ana"
		assert first.refs == "origin/feat/login"
		assert first.branch == "feat/login"
		assert first.authored_at == datetime(2024, 5, 1, 9, 20, tzinfo=UTC)

	def test_parse_empty_output(self) -> None:
		"""Blank output yields no commits."""
		assert parse_commit_log("\n\n", "feat/login") == []

	def test_parse_authored_at_keeps_offset(self) -> None:
		"""Offsets are preserved so ordering is by absolute time."""
		parsed = parse_authored_at("2024-05-01T11:00:00+02:00")
		assert parsed == datetime(2024, 5, 1, 9, 0, tzinfo=UTC)

	def test_parse_authored_at_invalid(self) -> None:
		"""Unparseable dates sort first."""
		assert parse_authored_at("yesterday") == datetime.fromtimestamp(0, tz=UTC)

	def test_merge_commits_dedupes_and_sorts(self) -> None:
		"""The first branch to yield a hash keeps it and the result is oldest first."""
		h1_x = make_commit("H1", "shared", 5, branch="featX")
		h1_y = make_commit("H1", "shared", 5, branch="featY")
		h2_y = make_commit("H2", "only Y", 10, branch="featY")

		merged = merge_commits([[h1_x], [h2_y, h1_y]])

		assert [commit.hash for commit in merged] == [fake_hash("H1"), fake_hash("H2")]
		assert merged[0].branch == "featX"

	def test_merge_commits_is_stable_for_equal_dates(self) -> None:
		"""Ties keep their merge order."""
		first = make_commit("P", "first", 0, branch="featX")
		second = make_commit("Q", "second", 0, branch="featY")
		assert merge_commits([[first], [second]]) == [first, second]
		assert merge_commits([[second], [first]]) == [second, first]


@pytest.mark.unit
@pytest.mark.git
class TestCommitCollector:
	"""Tests for CommitCollector."""

	def test_single_branch_example(self, mock_git: MagicMock) -> None:
		"""Staging has A, feature has A, B, C: apply B then C, display C then B."""
		mock_git.get_commit_log.return_value = git_log(log_line("C", "third", 20), log_line("B", "second", 10))
		collector = CommitCollector(mock_git)

		changeset = collector.collect(["feat/login"])

		assert changeset.hashes() == [fake_hash("B"), fake_hash("C")]
		assert [commit.hash for commit in changeset.display_order()] == [fake_hash("C"), fake_hash("B")]
		assert changeset.hashes() == [fake_hash("B"), fake_hash("C")]
		mock_git.get_commit_log.assert_called_once_with(
			"origin/staging..origin/feat/login", no_merges=True, first_parent=False
		)

	def test_display_order_is_reverse_of_application(self, mock_git: MagicMock) -> None:
		"""Display and application orders are inverses."""
		mock_git.get_commit_log.return_value = git_log(
			log_line("E", "5", 50), log_line("D", "4", 40), log_line("C", "3", 30)
		)
		changeset = CommitCollector(mock_git).collect(["feat/login"])
		assert list(reversed(changeset.display_order())) == list(changeset.commits)

	def test_two_branch_example(self, mock_git: MagicMock) -> None:
		"""featX has H1, featY has H1 and H2: H1 is kept once with the featX tag."""
		mock_git.get_commit_log.side_effect = logs_by_branch(
			{
				"featX": git_log(log_line("H1", "shared", 5)),
				"featY": git_log(log_line("H2", "only Y", 10), log_line("H1", "shared", 5)),
			}
		)
		changeset = CommitCollector(mock_git).collect(["featX", "featY"])

		assert changeset.hashes() == [fake_hash("H1"), fake_hash("H2")]
		assert [commit.branch for commit in changeset] == ["featX", "featY"]
		assert changeset.primary_branch == "featX"
		assert changeset.source_branches == ("featX", "featY")
		assert changeset.branch_tag(changeset.commits[0]) is None
		assert changeset.branch_tag(changeset.commits[1]) == "featY"

	def test_interleaves_branches_by_author_date(self, mock_git: MagicMock) -> None:
		"""Commits from different branches are ordered by author date."""
		mock_git.get_commit_log.side_effect = logs_by_branch(
			{
				"featX": git_log(log_line("X2", "x2", 30), log_line("X1", "x1", 10)),
				"featY": git_log(log_line("Y1", "y1", 20)),
			}
		)
		changeset = CommitCollector(mock_git).collect(["featX", "featY"])
		assert changeset.hashes() == [fake_hash("X1"), fake_hash("Y1"), fake_hash("X2")]

	def test_failed_branch_is_skipped_with_warning(self, mock_git: MagicMock) -> None:
		"""One unreadable branch among several produces a warning, not a failure."""
		mock_git.get_commit_log.side_effect = logs_by_branch(
			{
				"featX": git_log(log_line("H1", "x", 5)),
				"featGone": GitError("unknown revision origin/featGone"),
			}
		)
		events: list = []
		collector = CommitCollector(mock_git, emitter=EventEmitter(events.append))

		changeset = collector.collect(["featX", "featGone"])

		assert changeset.hashes() == [fake_hash("H1")]
		warnings = [event for event in events if event.kind is StageEventKind.WARNING]
		assert len(warnings) == 1
		assert "featGone" in warnings[0].message

	def test_all_branches_failed(self, mock_git: MagicMock) -> None:
		"""Every branch failing aborts with the per-branch causes."""
		mock_git.get_commit_log.side_effect = GitError("bad revision")
		with pytest.raises(AllBranchesFailedError) as exc_info:
			CommitCollector(mock_git).collect(["featX", "featY"])
		assert set(exc_info.value.failures) == {"featX", "featY"}

	def test_empty_changeset(self, mock_git: MagicMock) -> None:
		"""No divergent commits is terminal and names both branches."""
		mock_git.get_commit_log.return_value = ""
		with pytest.raises(EmptyChangesetError, match="No commits found in feat/login that are not in staging"):
			CommitCollector(mock_git).collect(["feat/login"])

	def test_empty_when_only_some_branches_fail(self, mock_git: MagicMock) -> None:
		"""A readable but empty branch plus a failed one is an empty changeset."""
		mock_git.get_commit_log.side_effect = logs_by_branch({"featX": "", "featY": GitError("gone")})
		with pytest.raises(EmptyChangesetError):
			CommitCollector(mock_git).collect(["featX", "featY"])

	def test_filter_flags_are_passed(self, mock_git: MagicMock) -> None:
		"""Merges and first-parent settings reach the log call."""
		mock_git.get_commit_log.return_value = git_log(log_line("M", "merge", 1))
		collector = CommitCollector(
			mock_git, staging_branch="release", remote="upstream", include_merges=True, first_parent=True
		)
		collector.collect(["feat/login"])
		mock_git.get_commit_log.assert_called_once_with(
			"upstream/release..upstream/feat/login", no_merges=False, first_parent=True
		)

	def test_changeset_is_immutable(self, mock_git: MagicMock) -> None:
		"""The collected changeset cannot be reassigned."""
		mock_git.get_commit_log.return_value = git_log(log_line("B", "b", 1))
		changeset = CommitCollector(mock_git).collect(["feat/login"])
		with pytest.raises(AttributeError):
			changeset.commits = ()  # type: ignore[misc]
		assert isinstance(changeset.commits, tuple)
