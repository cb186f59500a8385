"""Progress, result, and error notifications for an observer."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from listing_analyzer.models import AnalysisResult

logger = logging.getLogger(__name__)


@dataclass
class ProgressEvent:
    """One notification sent to the observer."""

    action: Literal["progress", "complete", "error"]
    percentage: float = 0.0
    message: str = ""
    result: AnalysisResult | None = None
    context: dict[str, Any] = field(default_factory=dict)


ProgressCallback = Callable[[ProgressEvent], Awaitable[None] | None]


class ProgressReporter:
    """Sends events to an optional callback; delivery failures are logged only."""

    def __init__(self, callback: ProgressCallback | None = None):
        self.callback = callback

    async def emit(self, event: ProgressEvent) -> bool:
        """Deliver an event.

        Args:
            event: Event to deliver.

        Returns:
            True if delivered (or no callback is set), False on failure.
        """
        if self.callback is None:
            return True
        try:
            outcome = self.callback(event)
            if inspect.isawaitable(outcome):
                await outcome
            return True
        except Exception as e:
            logger.warning(f"Could not deliver {event.action} event: {e}")
            return False

    async def progress(self, percentage: float, message: str) -> bool:
        return await self.emit(ProgressEvent("progress", percentage=min(max(percentage, 0), 100), message=message))

    async def complete(self, result: AnalysisResult) -> bool:
        return await self.emit(ProgressEvent("complete", percentage=100, result=result))

    async def error(self, message: str, context: dict[str, Any] | None = None) -> bool:
        return await self.emit(ProgressEvent("error", message=message, context=context or {}))
