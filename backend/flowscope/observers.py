"""
Event hooks for the analysis core.

Analyzers never log on their own; they report noteworthy events to an
observer handed in by the caller. The HTTP layer plugs in a logging one.
"""

from typing import Any, List, Tuple


class AnalysisObserver:
    def notify(self, event: str, **fields: Any) -> None:
        raise NotImplementedError


class NullObserver(AnalysisObserver):
    def notify(self, event: str, **fields: Any) -> None:
        return None


class RecordingObserver(AnalysisObserver):
    """Keeps every event in memory, in arrival order."""

    def __init__(self):
        self.events: List[Tuple[str, dict]] = []

    def notify(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]
