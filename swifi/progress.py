"""
Progress sinks handed to the measurement engine.

The engine calls notify() once per transferred chunk, possibly from its own
worker threads, and the session calls complete() when a direction ends.
"""

import logging
import sys
import threading

from .settings import PROGRESS_MARKER

logger = logging.getLogger(__name__)


class ProgressSink:
    """Base sink: ignores every notification."""

    def notify(self):
        pass

    def complete(self):
        pass


NullProgress = ProgressSink


class StdoutProgress(ProgressSink):
    """Print one flushed marker per chunk and end the marker line when a direction finishes."""

    def __init__(self, stream=None, marker=PROGRESS_MARKER):
        self._stream = stream
        self.marker = marker
        self._lock = threading.Lock()
        # a marker has been written since the last newline
        self._open_line = False

    @property
    def stream(self):
        # resolved lazily so pytest's capsys replacement of sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def _emit(self, text):
        try:
            self.stream.write(text)
            self.stream.flush()
        except (OSError, ValueError) as e:
            logger.error("Failed to flush progress output: %s", e)

    def notify(self):
        with self._lock:
            self._emit(self.marker)
            self._open_line = True

    def complete(self):
        with self._lock:
            if self._open_line:
                self._emit("\n")
                self._open_line = False
