"""Global test fixtures and configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from pr_utils.config import ConfigLoader
from pr_utils.git.staging_pr.staging_git_utils import StagingGitUtils

if TYPE_CHECKING:
	from collections.abc import Iterator
	from pathlib import Path


@pytest.fixture(autouse=True)
def reset_singletons() -> Iterator[None]:
	"""Auto-use fixture so cached config and repository contexts never leak between tests."""
	ConfigLoader._instance = None
	StagingGitUtils._staging_git_utils_instance = None
	yield
	ConfigLoader._instance = None
	StagingGitUtils._staging_git_utils_instance = None


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
	"""Run from an empty directory with no user-level configuration or token."""
	monkeypatch.chdir(tmp_path)
	monkeypatch.setenv("HOME", str(tmp_path))
	monkeypatch.setattr("pr_utils.config.config_loader.xdg_config_home", str(tmp_path / "xdg"))
	monkeypatch.delenv("GITHUB_TOKEN", raising=False)
	return tmp_path


@pytest.fixture
def mock_git() -> MagicMock:
	"""A StagingGitUtils double with a clean tree and feature, staging and develop branches."""
	git = MagicMock(spec=StagingGitUtils)
	git.get_current_branch.return_value = "feat/login"
	git.is_clean.return_value = True
	git.branch_exists.return_value = True
	git.list_remote_branches.return_value = ["origin/staging", "origin/develop", "origin/feat/login"]
	git.get_commit_log.return_value = ""
	git.get_remote_url.return_value = "git@github.com:acme/webapp.git"
	git.workdir = None
	return git
