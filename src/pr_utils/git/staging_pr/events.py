"""Progress events emitted by the staging pull request pipeline."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class Stage(str, Enum):
	"""Pipeline stages, in execution order."""

	RESOLVE = "resolve"
	STATUS = "status"
	FETCH = "fetch"
	BRANCH_CHECK = "branch-check"
	SUB_BRANCHES = "sub-branches"
	COLLECT = "collect"
	CREATE_BRANCH = "create-branch"
	CHERRY_PICK = "cherry-pick"
	PUSH = "push"
	PULL_REQUEST = "pull-request"


class StageEventKind(str, Enum):
	"""What happened to a stage."""

	STARTED = "started"
	SUCCEEDED = "succeeded"
	FAILED = "failed"
	WARNING = "warning"
	INFO = "info"


@dataclass(frozen=True)
class StageEvent:
	"""A single progress notification."""

	stage: Stage
	kind: StageEventKind
	message: str


EventCallback = Callable[[StageEvent], None]


class EventEmitter:
	"""Forwards events to an optional callback and mirrors them to the log."""

	def __init__(self, callback: EventCallback | None = None) -> None:
		"""Initialize with the consumer callback, if any."""
		self.callback = callback

	def emit(self, stage: Stage, kind: StageEventKind, message: str) -> None:
		"""Emit an event."""
		level = logging.WARNING if kind in {StageEventKind.WARNING, StageEventKind.FAILED} else logging.DEBUG
		logger.log(level, "[%s] %s: %s", stage.value, kind.value, message)
		if self.callback is not None:
			self.callback(StageEvent(stage=stage, kind=kind, message=message))

	def started(self, stage: Stage, message: str) -> None:
		"""Emit a STARTED event."""
		self.emit(stage, StageEventKind.STARTED, message)

	def succeeded(self, stage: Stage, message: str) -> None:
		"""Emit a SUCCEEDED event."""
		self.emit(stage, StageEventKind.SUCCEEDED, message)

	def failed(self, stage: Stage, message: str) -> None:
		"""Emit a FAILED event."""
		self.emit(stage, StageEventKind.FAILED, message)

	def warning(self, stage: Stage, message: str) -> None:
		"""Emit a WARNING event."""
		self.emit(stage, StageEventKind.WARNING, message)

	def info(self, stage: Stage, message: str) -> None:
		"""Emit an INFO event."""
		self.emit(stage, StageEventKind.INFO, message)
