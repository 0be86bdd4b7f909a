"""Token accounting for review conversations.

Every batching decision is expressed through :meth:`TokenBudget.fits`; this is
the only module that knows how text is counted.
"""

from __future__ import annotations

import logging
import re
from functools import cached_property
from typing import TYPE_CHECKING

from pr_reviewer.models.conversation import Conversation

if TYPE_CHECKING:
    from pr_reviewer.config.settings import Settings

logger = logging.getLogger(__name__)

_TOKEN_SPLIT_RE = re.compile(r"[A-Za-z0-9_]+|[^\s]")

# Role/delimiter tokens chat models add around every message
MESSAGE_OVERHEAD_TOKENS = 4


class TokenEstimator:
    """Maps text to an estimated model-context cost.

    Uses a tiktoken encoding when ``precise`` is set, otherwise a word and
    punctuation split that needs no encoding download. The same estimator must
    be used for a whole review so that packing decisions stay consistent.
    """

    def __init__(self, encoding_name: str = "cl100k_base", precise: bool = True) -> None:
        self.encoding_name = encoding_name
        self.precise = precise

    @cached_property
    def _encoding(self):
        import tiktoken

        return tiktoken.get_encoding(self.encoding_name)

    def cost(self, text: str) -> int:
        """Estimated token count of ``text``."""
        if not text:
            return 0
        if self.precise:
            return len(self._encoding.encode(text, disallowed_special=()))
        return len(_TOKEN_SPLIT_RE.findall(text))

    def conversation_cost(self, conversation: Conversation) -> int:
        """Estimated token count of every message in ``conversation``."""
        return sum(
            self.cost(message.content) + MESSAGE_OVERHEAD_TOKENS
            for message in conversation.messages
        )


class TokenBudget:
    """Decides whether a conversation fits the model's usable context."""

    def __init__(
        self,
        estimator: TokenEstimator,
        context_tokens: int,
        output_reserve_tokens: int = 0,
    ) -> None:
        if context_tokens <= output_reserve_tokens:
            raise ValueError(
                f"context_tokens ({context_tokens}) must exceed "
                f"output_reserve_tokens ({output_reserve_tokens})"
            )
        self.estimator = estimator
        self.context_tokens = context_tokens
        self.output_reserve_tokens = output_reserve_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenBudget:
        """Build the budget described by application settings."""
        estimator = TokenEstimator(
            encoding_name=settings.tiktoken_encoding,
            precise=settings.token_estimator == "tiktoken",
        )
        return cls(
            estimator,
            context_tokens=settings.model_context_tokens,
            output_reserve_tokens=settings.output_reserve_tokens,
        )

    def cost(self, text: str) -> int:
        return self.estimator.cost(text)

    def fits(self, conversation: Conversation) -> bool:
        """True iff the conversation plus the output reserve fits the context window."""
        total = self.estimator.conversation_cost(conversation) + self.output_reserve_tokens
        return total <= self.context_tokens
