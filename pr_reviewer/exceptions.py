"""Exception hierarchy for the review pipeline."""


class ReviewError(Exception):
    """Base exception for review pipeline failures."""


class ModelCallError(ReviewError):
    """The model backend rejected a call or returned an unusable response."""


class SuggestionParseError(ReviewError):
    """Structured model output could not be turned into suggestions."""


class ReviewPipelineError(ReviewError):
    """Every review strategy failed; no review can be produced.

    Attributes:
        errors: ``(strategy_name, exception)`` pairs in the order they were tried.
    """

    def __init__(self, message: str, errors: list[tuple[str, Exception]] | None = None):
        super().__init__(message)
        self.errors = errors or []
