"""Diagnostic events raised when a search falls back to plain matching.

Events are handed to an injected ``notify`` callable so callers decide
where they end up. :func:`log_trace_event` is the default sink.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List

logger = logging.getLogger("synrewrite.trace")


@dataclass(frozen=True)
class TraceEvent:
    source: str
    message: str
    is_error: bool = False


TraceSink = Callable[[TraceEvent], None]


def log_trace_event(event: TraceEvent) -> None:
    level = logging.WARNING if event.is_error else logging.INFO
    logger.log(level, "%s: %s", event.source, event.message)


@dataclass
class TraceCollector:
    """Sink that keeps events in memory and forwards them to *forward*."""

    forward: TraceSink | None = log_trace_event
    events: List[TraceEvent] = field(default_factory=list)

    def __call__(self, event: TraceEvent) -> None:
        self.events.append(event)
        if self.forward is not None:
            self.forward(event)

    @property
    def messages(self) -> List[str]:
        return [event.message for event in self.events]
