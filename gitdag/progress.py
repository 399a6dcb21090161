"""
Progress reporting utilities for gitdag.

The pipeline never prints. It reports to a ProgressObserver handed in by
the caller:
- on_progress(update): dependency resolution advanced by a whole percent
- on_status(message): a phase started or finished
- on_diagnostic(message): something was skipped (unknown object, failed
  git call, unresolved tag)

ConsoleProgress is the observer the CLI uses; it writes to stderr so that
stdout stays clean for report data.
"""

import sys
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    """Compact duration, e.g. 850.00µs, 12.50ms, 3.20s."""
    if seconds < 0.001:
        return f"{seconds * 1_000_000:.2f}µs"
    if seconds < 1:
        return f"{seconds * 1000:.2f}ms"
    return f"{seconds:.2f}s"


@dataclass(frozen=True)
class ProgressUpdate:
    """Snapshot taken each time the completed percentage goes up."""
    percent: int
    completed: int
    total: int
    average_task_seconds: float
    seconds_since_last: float

    def format(self) -> str:
        return (
            f"Progress: {self.percent}% ({self.completed} of {self.total}), "
            f"Avg: {format_duration(self.average_task_seconds)}/task, "
            f"in {format_duration(self.seconds_since_last)}"
        )


class PercentTracker:
    """
    Turns a stream of completions into ProgressUpdates.

    Only one thread may feed a tracker. An update is produced only when
    floor(completed * 100 / total) rises above the last reported value,
    so reported percentages never go down.
    """

    def __init__(self, total: int, clock: Callable[[], float] = time.monotonic):
        self.total = total
        self.clock = clock
        self.completed = 0
        self.total_task_seconds = 0.0
        self.last_percent = 0
        self.last_percent_time = clock()

    def record(self, task_seconds: float) -> Optional[ProgressUpdate]:
        """Account for one finished task."""
        self.completed += 1
        self.total_task_seconds += task_seconds

        if self.total <= 0:
            return None

        percent = (self.completed * 100) // self.total
        if percent <= self.last_percent:
            return None

        now = self.clock()
        since_last = now - self.last_percent_time
        self.last_percent_time = now
        self.last_percent = percent

        return ProgressUpdate(
            percent=percent,
            completed=self.completed,
            total=self.total,
            average_task_seconds=self.total_task_seconds / max(self.completed, 1),
            seconds_since_last=since_last,
        )


class ProgressObserver:
    """
    Receives progress and diagnostics from the pipeline.

    The default implementation forwards everything to the logging module.
    """

    def on_progress(self, update: ProgressUpdate) -> None:
        logger.debug(update.format())

    def on_status(self, message: str) -> None:
        logger.info(message)

    def on_diagnostic(self, message: str) -> None:
        logger.warning(message)


ANSI = {
    'reset': '\033[0m',
    'red': '\033[31m',
    'green': '\033[32m',
    'cyan': '\033[36m',
}


class ConsoleProgress(ProgressObserver):
    """
    Observer for the command line: status and progress lines on stderr.

    Output is on by default only when stderr is a terminal, so piping report
    data from stdout stays clean. Colors follow the same rule and honor
    NO_COLOR. Diagnostics keep going through logging.
    """

    def __init__(self, enabled: Optional[bool] = None, use_colors: Optional[bool] = None,
                 stream=None):
        self.stream = stream if stream is not None else sys.stderr
        is_tty = hasattr(self.stream, 'isatty') and self.stream.isatty()

        self.enabled = is_tty if enabled is None else enabled
        if use_colors is None:
            use_colors = is_tty and 'NO_COLOR' not in os.environ
        self.use_colors = use_colors

    def _paint(self, text: str, color: Optional[str]) -> str:
        if not (self.use_colors and color):
            return text
        return f"{ANSI[color]}{text}{ANSI['reset']}"

    def _write(self, text: str) -> None:
        print(text, file=self.stream, flush=True)

    def _status_line(self, text: str, color: Optional[str] = None) -> None:
        if self.enabled:
            self._write(self._paint(text, color))

    def error(self, message: str):
        """Errors are printed even when progress output is off."""
        self._write(self._paint(f"ERROR: {message}", 'red'))

    def success(self, message: str):
        self._status_line(f"✓ {message}", 'green')

    def on_progress(self, update: ProgressUpdate) -> None:
        self._status_line(update.format(), 'cyan')

    def on_status(self, message: str) -> None:
        self._status_line(message)
