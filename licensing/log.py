# licensing/log.py
#
# Logger collaborator injected into every engine.
#
# Design decisions:
#   - Components receive a Logger in their constructor instead of reaching
#     for a module-level logger, so tests can pass a RecordingLogger and
#     assert on warnings.
#   - StdoutLogger writes the same elapsed-time line format as the seed job:
#     "[licensing mm:ss] LEVEL component: message".
#   - Thread-safe: sys.stdout.write of a single string is atomic in CPython,
#     and the batch resolver logs from worker threads.
from __future__ import annotations

import sys
import threading
import time
from dataclasses import dataclass, field
from typing import Protocol

_start = time.monotonic()


class Logger(Protocol):
    def debug(self, message: str) -> None: ...
    def info(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class StdoutLogger:
    """Timestamped log lines on stdout for one component."""

    def __init__(self, component: str, *, verbose: bool = False) -> None:
        self._component = component
        self._verbose = verbose

    def _write(self, level: str, message: str) -> None:
        elapsed = time.monotonic() - _start
        minutes, seconds = divmod(int(elapsed), 60)
        sys.stdout.write(f"[licensing {minutes:02d}:{seconds:02d}] {level} {self._component}: {message}\n")
        sys.stdout.flush()

    def debug(self, message: str) -> None:
        if self._verbose:
            self._write("DEBUG", message)

    def info(self, message: str) -> None:
        self._write("INFO", message)

    def warning(self, message: str) -> None:
        self._write("WARNING", message)

    def error(self, message: str) -> None:
        self._write("ERROR", message)


@dataclass
class RecordingLogger:
    """Keeps (level, message) pairs in memory. Used by tests."""
    records: list[tuple[str, str]] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _record(self, level: str, message: str) -> None:
        with self._lock:
            self.records.append((level, message))

    def debug(self, message: str) -> None:
        self._record("debug", message)

    def info(self, message: str) -> None:
        self._record("info", message)

    def warning(self, message: str) -> None:
        self._record("warning", message)

    def error(self, message: str) -> None:
        self._record("error", message)

    def messages(self, level: str) -> list[str]:
        return [m for lvl, m in self.records if lvl == level]
