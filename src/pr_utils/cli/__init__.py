"""Command-line interface package for pr-utils."""

from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from pr_utils import __version__
from pr_utils.utils.log_setup import setup_logging

from .staging_pr_cmd import register_command as register_staging_pr_command

logger = logging.getLogger(__name__)

# Try to load from .env.local first, then fall back to .env
for env_file in (Path(".env.local"), Path(".env")):
	if env_file.exists():
		load_dotenv(dotenv_path=env_file)
		logger.debug("Loaded environment variables from %s", env_file)
		break

app = typer.Typer(
	name="pr-utils",
	help=f"CLI tools for PR-related operations\n\nVersion: {__version__}",
	no_args_is_help=True,
	context_settings={"help_option_names": ["-h", "--help"]},
)

# --- Global Options Callback ---


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"pr-utils version: {__version__}")
		raise typer.Exit


@app.callback()
def global_options(
	ctx: typer.Context,
	is_verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
	is_output_log: Annotated[
		bool,
		typer.Option(
			"--save-log",
			help="Enable logging to a file. Logs to logs/pr_utils_{datetime}.log.",
		),
	] = False,
	config_file: Annotated[
		Path | None,
		typer.Option("--config", "-c", help="Path to a pr-utils YAML config file."),
	] = None,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup."""
	ctx.meta["is_verbose"] = is_verbose
	ctx.meta["config_file"] = config_file

	log_file_path: Path | None = None
	if is_output_log:
		current_time = datetime.datetime.now(tz=datetime.UTC).strftime("%Y-%m-%d_%H-%M-%S")
		log_file_path = Path("logs") / f"pr_utils_{current_time}.log"

	setup_logging(is_verbose=is_verbose, log_file_path=log_file_path)


# --- Register commands ---

register_staging_pr_command(app)


# --- Main Entry Point ---
def main() -> None:
	"""Run the CLI application; exits the process with the command's status."""
	app()


if __name__ == "__main__":
	main()
