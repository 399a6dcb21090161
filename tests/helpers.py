"""
Test helpers shared by the gitdag test modules.
"""

import threading

from gitdag.progress import ProgressObserver


def sha(label: str) -> str:
    """A 40-character object id derived from a short label."""
    return label.encode().hex().ljust(40, "0")[:40]


class RecordingObserver(ProgressObserver):
    """Collects every callback instead of logging it."""

    def __init__(self):
        self._lock = threading.Lock()
        self.updates = []
        self.statuses = []
        self.diagnostics = []

    def on_progress(self, update):
        with self._lock:
            self.updates.append(update)

    def on_status(self, message):
        with self._lock:
            self.statuses.append(message)

    def on_diagnostic(self, message):
        with self._lock:
            self.diagnostics.append(message)
