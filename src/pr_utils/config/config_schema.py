"""Pydantic schemas for pr-utils configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GitHubSchema(BaseModel):
	"""GitHub access settings."""

	model_config = ConfigDict(extra="forbid")

	token_env_var: str = "GITHUB_TOKEN"
	api_url: str = "https://api.github.com"


class StagingPRSchema(BaseModel):
	"""Defaults for the ``create-staging-pr`` command."""

	model_config = ConfigDict(extra="forbid")

	feature_branch: str | None = None
	staging_branch: str = "staging"
	develop_branch: str = "develop"
	remote: str = "origin"
	branch_prefix: str = Field(default="staging-pr", min_length=1)
	include_merges: bool = False
	first_parent: bool = False
	include_sub_branches: bool = False
	sub_branch_pattern: str | None = None


class AppConfigSchema(BaseModel):
	"""Root configuration."""

	model_config = ConfigDict(extra="forbid")

	staging_pr: StagingPRSchema = Field(default_factory=StagingPRSchema)
	github: GitHubSchema = Field(default_factory=GitHubSchema)
