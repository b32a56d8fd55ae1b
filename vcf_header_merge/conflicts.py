"""Deduplicated reporting of recoverable header conflicts."""

from __future__ import annotations

from typing import Callable, Optional, Set


class ConflictWarner:
    """Forward a warning to *sink* at most once per cause key.

    A warner belongs to a single merge call so that N sources repeating the
    same conflict produce one message. Without a sink every warning is a no-op.
    """

    def __init__(self, sink: Optional[Callable[[str], None]] = None) -> None:
        self.sink = sink
        self.issued: Set[str] = set()

    def warn(self, cause_key: str, message: str) -> bool:
        """Report *message* unless *cause_key* was already reported.

        Returns True when the message reached the sink.
        """
        if self.sink is None or cause_key in self.issued:
            return False
        self.issued.add(cause_key)
        self.sink(message)
        return True


__all__ = ["ConflictWarner"]
