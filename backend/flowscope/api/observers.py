import logging
from typing import Any, Optional

from flowscope.observers import AnalysisObserver


WARNING_EVENTS = {"traversal.truncated", "analysis.failed"}


class LoggingObserver(AnalysisObserver):
    """Forwards analysis events to the standard logging module."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("flowscope.analysis")

    def notify(self, event: str, **fields: Any) -> None:
        level = logging.WARNING if event in WARNING_EVENTS else logging.INFO
        details = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
        self.logger.log(level, "%s %s", event, details)
