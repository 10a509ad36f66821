"""GitHub access for staging pull requests."""

from __future__ import annotations

import logging
import re

from github import Auth, Github
from github.GithubException import GithubException

from pr_utils.git.staging_pr.errors import PullRequestCreationError
from pr_utils.git.staging_pr.schemas import PullRequest

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

# Matches git@github.com:owner/repo.git, ssh://git@github.com/owner/repo and https://github.com/owner/repo(.git)
GITHUB_REMOTE_PATTERN = re.compile(r"github\.com[:/](?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$")


def parse_github_remote(remote_url: str | None) -> tuple[str, str] | None:
	"""
	Extract the owner and repository name from a GitHub remote URL.

	Args:
	    remote_url: URL of the git remote

	Returns:
	    ``(owner, repo)`` or None if the URL is not a GitHub repository URL

	"""
	if not remote_url:
		return None
	match = GITHUB_REMOTE_PATTERN.search(remote_url.strip())
	if not match:
		return None
	return match.group("owner"), match.group("repo")


class GitHubClient:
	"""Thin wrapper around PyGithub for creating pull requests."""

	def __init__(self, token: str, api_url: str = DEFAULT_API_URL) -> None:
		"""
		Initialize the client.

		Args:
		    token: Personal access token or app token
		    api_url: REST API base URL (GitHub Enterprise servers differ)

		"""
		self._github = Github(auth=Auth.Token(token), base_url=api_url)

	def create_pull_request(
		self,
		owner: str,
		repo: str,
		*,
		title: str,
		head: str,
		base: str,
		body: str,
	) -> PullRequest:
		"""
		Open a pull request from ``head`` into ``base``.

		Raises:
		    PullRequestCreationError: If the API call fails

		"""
		try:
			repository = self._github.get_repo(f"{owner}/{repo}")
			created = repository.create_pull(base=base, head=head, title=title, body=body)
		except GithubException as e:
			message = e.data.get("message") if isinstance(e.data, dict) else None
			msg = f"GitHub rejected the pull request for {owner}/{repo} (status {e.status}): {message or e}"
			logger.exception(msg)
			raise PullRequestCreationError(msg) from e

		logger.info("Created PR #%s: %s", created.number, created.html_url)
		return PullRequest(
			head=head,
			base=base,
			title=title,
			body=body,
			url=created.html_url,
			number=created.number,
		)
