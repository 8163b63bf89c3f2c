"""Stream reader — drains one child pipe on its own thread."""

from __future__ import annotations

import logging
import threading
from typing import IO, Callable, Sequence

logger = logging.getLogger(__name__)


class StreamReader(threading.Thread):
    """Daemon thread that reads a text stream line by line.

    Every line (terminator included) is passed to each observer in
    registration order.  Keeping both stdout and stderr drained on
    separate threads prevents the child from blocking on a full pipe.

    The stream ending, or being closed under us, is the normal way a
    reader finishes; it is logged at debug level and never raised.
    """

    def __init__(
        self,
        source: IO[str],
        observers: Sequence[Callable[[str], object]],
        name: str = "stream",
    ) -> None:
        super().__init__(name=f"clu-reader-{name}", daemon=True)
        self._source = source
        self._observers = list(observers)

    def run(self) -> None:
        self.drain()

    def drain(self) -> None:
        """Read until EOF, forwarding each line to the observers."""
        try:
            for line in self._source:
                for observer in self._observers:
                    observer(line)
        except (OSError, ValueError) as e:
            logger.debug("Reader %s ended: %s", self.name, e)
        finally:
            try:
                self._source.close()
            except OSError:
                pass
