"""Utility functions for CLI operations in pr-utils."""

from __future__ import annotations

import logging
import os

import typer
from rich.console import Console
from rich.markup import escape
from rich.status import Status

from pr_utils.utils.log_setup import display_error_summary, display_warning_summary

console = Console()
logger = logging.getLogger(__name__)


def is_interactive_console() -> bool:
	"""Spinners are suppressed under pytest and in CI."""
	return not (os.environ.get("PYTEST_CURRENT_TEST") or os.environ.get("CI"))


class StepSpinner:
	"""
	A single reusable spinner for sequential steps.

	Mirrors the start/succeed/fail rhythm of a terminal spinner: ``start``
	shows a message with an animation, ``succeed`` and ``fail`` stop it and
	print a final status line.

	"""

	def __init__(self, output: Console | None = None) -> None:
		"""Initialize the spinner on ``output`` (defaults to the shared console)."""
		self.console = output or console
		self._status: Status | None = None

	def start(self, message: str) -> None:
		"""Show ``message`` with a spinner, replacing any active one."""
		self.stop()
		if is_interactive_console():
			self._status = self.console.status(escape(message))
			self._status.start()
		else:
			self.console.print(f"[dim]{escape(message)}[/dim]")

	def stop(self) -> None:
		"""Remove the spinner without printing anything."""
		if self._status is not None:
			self._status.stop()
			self._status = None

	def succeed(self, message: str) -> None:
		"""Stop the spinner and print a success line."""
		self.stop()
		self.console.print(f"[green]✔[/green] {escape(message)}")

	def fail(self, message: str) -> None:
		"""Stop the spinner and print a failure line."""
		self.stop()
		self.console.print(f"[red]✖[/red] {escape(message)}")

	def warn(self, message: str) -> None:
		"""Stop the spinner and print a warning line."""
		self.stop()
		self.console.print(f"[yellow]⚠ {escape(message)}[/yellow]")


def show_error(message: str, exception: Exception | None = None) -> None:
	"""
	Display an error summary with standardized formatting.

	Args:
	        message: The error message to display
	        exception: Optional exception that caused the error

	"""
	if exception:
		logger.debug("Error occurred", exc_info=exception)
	display_error_summary(message)


def exit_with_error(message: str, exit_code: int = 1, exception: Exception | None = None) -> None:
	"""
	Display an error message and exit.

	Args:
	        message: Error message to display
	        exit_code: Exit code to use
	        exception: Optional exception that caused the error

	"""
	show_error(message, exception)
	raise typer.Exit(exit_code) from exception


def show_warning(message: str) -> None:
	"""Display a warning summary with standardized formatting."""
	display_warning_summary(message)


def handle_keyboard_interrupt() -> None:
	"""Handles KeyboardInterrupt by printing a message and exiting cleanly."""
	console.print("\n[yellow]Operation cancelled by user.[/yellow]")
	raise typer.Exit(130)  # Standard exit code for SIGINT
