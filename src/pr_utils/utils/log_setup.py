"""
Logging setup for pr-utils.

Console logging goes to stderr through rich so it never mixes with the
command output on stdout. ``--save-log`` adds a debug-level file handler.

"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.text import Text

console = Console()

# PyGithub and its HTTP stack log every request at DEBUG
QUIET_LOGGERS = ("github", "urllib3", "requests")
FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"


def setup_logging(is_verbose: bool = False, log_file_path: Path | str | None = None) -> None:
	"""
	Configure the root logger for a CLI run.

	Args:
	    is_verbose: Show DEBUG records on the console instead of WARNING and above
	    log_file_path: Also write every record to this file

	"""
	console_level = logging.DEBUG if is_verbose else logging.WARNING

	root_logger = logging.getLogger()
	root_logger.setLevel(logging.DEBUG if log_file_path else console_level)
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	root_logger.addHandler(
		RichHandler(
			level=console_level,
			console=Console(stderr=True),
			rich_tracebacks=True,
			show_path=is_verbose,
		)
	)

	quiet_level = logging.DEBUG if is_verbose else logging.WARNING
	for name in QUIET_LOGGERS:
		logging.getLogger(name).setLevel(quiet_level)

	if log_file_path:
		path = Path(log_file_path)
		try:
			path.parent.mkdir(parents=True, exist_ok=True)
			file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
		except OSError:
			root_logger.exception("Could not open log file %s; logging to the console only", path)
			return
		file_handler.setLevel(logging.DEBUG)
		file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
		root_logger.addHandler(file_handler)
		root_logger.debug("Logging to file: %s", path)


def _display_summary(title: str, style: str, message: str) -> None:
	console.print()
	console.print(Rule(Text(title, style=f"bold {style}"), style=style))
	# Branch names and commit subjects may contain square brackets
	console.print(f"\n{message}\n", markup=False)
	console.print(Rule(style=style))
	console.print()


def display_error_summary(error_message: str) -> None:
	"""Display an error message between red rules."""
	_display_summary("Error Summary", "red", error_message)


def display_warning_summary(warning_message: str) -> None:
	"""Display a warning message between yellow rules."""
	_display_summary("Warning Summary", "yellow", warning_message)
