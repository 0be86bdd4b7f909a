"""Utility functions and helpers."""

from .filters import should_review_file
from .rate_limiter import with_exponential_backoff
from .tokens import TokenBudget, TokenEstimator

__all__ = [
    "should_review_file",
    "with_exponential_backoff",
    "TokenBudget",
    "TokenEstimator",
]
