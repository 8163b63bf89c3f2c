"""Append-only output buffer for terminal sessions."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

Observer = Callable[[str], object]


class OutputBuffer:
    """Thread-safe transcript of one process's info and error output.

    Holds two ordered tracks:

    * **info** — lines from standard output (and, after a clean exit,
      diagnostic standard error).
    * **error** — lines from standard error of a failed command.

    Units are stored exactly as received (line terminators included), so
    ``info_text`` is a plain concatenation.  Observers registered per
    track are called synchronously, in append order, while the buffer
    lock is held.  ``count`` only grows between ``clear()`` calls, which
    lets callers use it as a progress signal; ``wait_for_data()`` wakes
    up as soon as it changes instead of polling.
    """

    def __init__(self) -> None:
        self._info: list[str] = []
        self._error: list[str] = []
        self._info_observers: list[Observer] = []
        self._error_observers: list[Observer] = []
        # Re-entrant so an observer may read the buffer it is attached to
        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)

    def add_info_observer(self, *observers: Observer) -> None:
        with self._lock:
            self._info_observers.extend(observers)

    def add_error_observer(self, *observers: Observer) -> None:
        with self._lock:
            self._error_observers.extend(observers)

    def append_info(self, *units: str) -> None:
        """Append units to the info track and notify info observers."""
        self._append(self._info, self._info_observers, units)

    def append_error(self, *units: str) -> None:
        """Append units to the error track and notify error observers."""
        self._append(self._error, self._error_observers, units)

    def _append(
        self, track: list[str], observers: list[Observer], units: tuple[str, ...]
    ) -> None:
        if not units:
            return
        with self._lock:
            for unit in units:
                track.append(unit)
                for observer in observers:
                    try:
                        observer(unit)
                    except Exception:
                        logger.exception("Output observer %r failed", observer)
            self._changed.notify_all()

    def wait_for_data(self, since: int, timeout: float | None = None) -> bool:
        """Block until ``count`` differs from ``since`` (or timeout).

        Returns True if new data arrived, False on timeout.
        """
        with self._changed:
            return self._changed.wait_for(lambda: self.count != since, timeout)

    @property
    def info_text(self) -> str:
        with self._lock:
            return "".join(self._info)

    @property
    def error_text(self) -> str:
        with self._lock:
            return "".join(self._error)

    @property
    def info_lines(self) -> list[str]:
        with self._lock:
            return list(self._info)

    @property
    def error_lines(self) -> list[str]:
        with self._lock:
            return list(self._error)

    @property
    def count(self) -> int:
        """Number of units across both tracks."""
        with self._lock:
            return len(self._info) + len(self._error)

    def take(self) -> tuple[list[str], list[str]]:
        """Return ``(info, error)`` and empty the buffer in one step.

        Units appended concurrently end up either in the returned lists
        or in the buffer afterwards, never in neither.
        """
        with self._lock:
            info, error = list(self._info), list(self._error)
            self.clear()
        return info, error

    def clear(self) -> None:
        """Empty both tracks. Observers stay registered."""
        with self._lock:
            self._info.clear()
            self._error.clear()
            self._changed.notify_all()

    def __len__(self) -> int:
        return self.count
