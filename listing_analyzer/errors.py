"""Exceptions raised by listing analysis runs."""

from listing_analyzer.models import PageContext


class AnalysisError(Exception):
    """Base class for analysis failures surfaced to the caller."""


class NoListingsFoundError(AnalysisError):
    """No locator strategy produced a validated candidate."""

    def __init__(self, context: PageContext):
        self.context = context
        super().__init__(
            f"No listings found on {context.url} "
            f"(page type: {context.page_type}, "
            f"elements: {context.element_counts.get('all', 0)})"
        )


class AnalysisTimeoutError(AnalysisError):
    """The run exceeded its wall-clock bound."""


class AnalysisInProgressError(AnalysisError):
    """A run was started while another was still in flight."""
