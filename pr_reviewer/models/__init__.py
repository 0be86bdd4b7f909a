"""Data models for the PR reviewer."""

from .conversation import Conversation, Message
from .github_types import ChangedFile
from .outputs import InlineFix, ReviewResult, Suggestion

__all__ = [
    "ChangedFile",
    "Conversation",
    "Message",
    "Suggestion",
    "InlineFix",
    "ReviewResult",
]
