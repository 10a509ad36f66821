"""Command for creating a staging pull request from feature branches."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

import typer

if TYPE_CHECKING:
	from pathlib import Path

	from pr_utils.git.staging_pr import Changeset, StageEvent, StagingPROptions
	from pr_utils.utils.cli_utils import StepSpinner

logger = logging.getLogger(__name__)

# --- Command Option Annotations ---

FeatureBranchOpt = Annotated[
	str | None,
	typer.Option("--feature-branch", "-f", help="Feature branch name (e.g., feat/xxx). Defaults to the current branch."),
]

StagingBranchOpt = Annotated[
	str | None,
	typer.Option("--staging-branch", "-s", help="Staging branch name [default: staging]"),
]

DevelopBranchOpt = Annotated[
	str | None,
	typer.Option("--develop-branch", "-d", help="Develop branch name [default: develop]"),
]

DryRunFlag = Annotated[bool, typer.Option("--dry-run", help="Show what would be done without actually doing it")]

IncludeMergesFlag = Annotated[
	bool,
	typer.Option("--include-merges", help="Include merge commits (default: exclude merge commits)"),
]

FirstParentFlag = Annotated[
	bool,
	typer.Option("--first-parent", help="Only include commits on the first parent (direct commits only)"),
]

IncludeSubBranchesFlag = Annotated[
	bool,
	typer.Option(
		"--include-sub-branches",
		help="Include commits from sub-branches that originated from the feature branch",
	),
]

SubBranchPatternOpt = Annotated[
	str | None,
	typer.Option(
		"--sub-branch-pattern",
		help='Pattern to match sub-branches (default: feature-branch name + "*")',
	),
]

BranchesOpt = Annotated[
	str | None,
	typer.Option(
		"--branches",
		help="Comma-separated list of all branches to include (overrides feature-branch and sub-branch detection)",
	),
]

# --- Registration Function ---


def register_command(app: typer.Typer) -> None:
	"""Register the create-staging-pr command with the CLI app."""

	@app.command(name="create-staging-pr")
	def create_staging_pr_command(
		ctx: typer.Context,
		feature_branch: FeatureBranchOpt = None,
		staging_branch: StagingBranchOpt = None,
		develop_branch: DevelopBranchOpt = None,
		dry_run: DryRunFlag = False,
		include_merges: IncludeMergesFlag = False,
		first_parent: FirstParentFlag = False,
		include_sub_branches: IncludeSubBranchesFlag = False,
		sub_branch_pattern: SubBranchPatternOpt = None,
		branches: BranchesOpt = None,
	) -> None:
		"""Create a PR for staging by cherry-picking changes from a feature branch."""
		_create_staging_pr_command_impl(
			config_file=ctx.meta.get("config_file"),
			feature_branch=feature_branch,
			staging_branch=staging_branch,
			develop_branch=develop_branch,
			dry_run=dry_run,
			include_merges=include_merges,
			first_parent=first_parent,
			include_sub_branches=include_sub_branches,
			sub_branch_pattern=sub_branch_pattern,
			branches=branches,
		)


# --- Implementation Function (Heavy imports deferred here) ---


def build_options(
	config_file: Path | None,
	*,
	repo_root: Path | None = None,
	feature_branch: str | None,
	staging_branch: str | None,
	develop_branch: str | None,
	dry_run: bool,
	include_merges: bool,
	first_parent: bool,
	include_sub_branches: bool,
	sub_branch_pattern: str | None,
	branches: str | None,
) -> StagingPROptions:
	"""Merge command line values over the configuration file (CLI > config > default)."""
	from pr_utils.config import ConfigLoader
	from pr_utils.git.staging_pr import StagingPROptions
	from pr_utils.git.staging_pr.resolver import parse_branch_list

	config = ConfigLoader.get_instance(config_file=config_file, repo_root=repo_root)
	staging_config = config.get.staging_pr

	return StagingPROptions(
		feature_branch=feature_branch or staging_config.feature_branch,
		staging_branch=staging_branch or staging_config.staging_branch,
		develop_branch=develop_branch or staging_config.develop_branch,
		dry_run=dry_run,
		include_merges=include_merges or staging_config.include_merges,
		first_parent=first_parent or staging_config.first_parent,
		include_sub_branches=include_sub_branches or staging_config.include_sub_branches,
		sub_branch_pattern=sub_branch_pattern or staging_config.sub_branch_pattern,
		branches=parse_branch_list(branches) or None,
		remote=staging_config.remote,
		branch_prefix=staging_config.branch_prefix,
		token=config.get_github_token(),
		api_url=config.get.github.api_url,
	)


def render_event(spinner: StepSpinner, event: StageEvent) -> None:
	"""Render a pipeline event on the console."""
	from rich.markup import escape

	from pr_utils.git.staging_pr import StageEventKind

	if event.kind is StageEventKind.STARTED:
		spinner.start(event.message)
	elif event.kind is StageEventKind.SUCCEEDED:
		spinner.succeed(event.message)
	elif event.kind is StageEventKind.FAILED:
		spinner.fail(event.message)
	elif event.kind is StageEventKind.WARNING:
		spinner.warn(event.message)
	else:
		spinner.stop()
		spinner.console.print(f"[blue]{escape(event.message)}[/blue]", markup=True, highlight=False)


def render_changeset(spinner: StepSpinner, changeset: Changeset) -> None:
	"""Print the changeset newest first."""
	from rich.text import Text

	output = spinner.console
	output.print("[yellow]Commits to be cherry-picked (newest first):[/yellow]")
	for position, commit in enumerate(changeset.display_order(), start=1):
		line = Text(f"  {position}. {commit.short_hash} - {commit.message}", style="bright_black")
		tag = changeset.branch_tag(commit)
		if tag:
			line.append(f" [{tag}]", style="cyan")
		output.print(line)


def _create_staging_pr_command_impl(config_file: Path | None = None, **values: object) -> None:
	"""Actual implementation of the create-staging-pr command."""
	from rich.markup import escape

	from pr_utils.config import ConfigError
	from pr_utils.git.staging_pr import CherryPickConflictError, StagingChangesetBuilder, StagingPRError
	from pr_utils.git.staging_pr.staging_git_utils import StagingGitUtils
	from pr_utils.git.utils import GitError
	from pr_utils.utils.cli_utils import (
		StepSpinner,
		exit_with_error,
		handle_keyboard_interrupt,
		show_error,
		show_warning,
	)

	spinner = StepSpinner()
	try:
		git = StagingGitUtils.get_instance()
		options = build_options(config_file, repo_root=git.workdir, **values)  # type: ignore[arg-type]
		builder = StagingChangesetBuilder(git, options, on_event=lambda event: render_event(spinner, event))

		_, changeset = builder.build()
		render_changeset(spinner, changeset)

		if options.dry_run:
			spinner.console.print("\n[green]Dry run completed. No changes were made.[/green]")
			return

		result = builder.publish(changeset)
		if result.pull_request is not None:
			spinner.console.print("\n[green]✅ Successfully created staging PR![/green]")
			spinner.console.print(f"[blue]   PR URL: {result.pull_request.url}[/blue]")
		else:
			spinner.console.print(f"\n[green]Branch '{escape(result.branch_name)}' pushed.[/green] Create the PR manually.")
			show_warning(result.manual_instructions or "")
	except KeyboardInterrupt:
		spinner.stop()
		handle_keyboard_interrupt()
	except CherryPickConflictError as e:
		spinner.stop()
		show_error(str(e), e)
		spinner.console.print("[yellow]You may need to resolve conflicts manually and continue with:[/yellow]")
		spinner.console.print("  git cherry-pick --continue")
		spinner.console.print("[yellow]Or abort with:[/yellow]")
		spinner.console.print("  git cherry-pick --abort")
		raise typer.Exit(1) from e
	except (StagingPRError, GitError, ConfigError) as e:
		spinner.stop()
		exit_with_error(f"Error: {e}", exception=e)
