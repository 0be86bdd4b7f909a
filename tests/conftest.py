"""Pytest configuration and fixtures."""

from collections.abc import Callable
from typing import Any

import pytest

from pr_reviewer.models.conversation import Conversation
from pr_reviewer.models.github_types import ChangedFile
from pr_reviewer.services.model_client import ReviewModel
from pr_reviewer.utils.tokens import TokenBudget, TokenEstimator


class FakeReviewModel(ReviewModel):
    """Scripted review model recording every conversation it receives."""

    def __init__(
        self,
        respond: Callable[[Conversation], str] | None = None,
        function_args: Callable[[Conversation, dict], dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.respond = respond or (lambda conversation: "<review></review>")
        self.function_args = function_args
        self.conversations: list[Conversation] = []
        self.function_calls: list[tuple[Conversation, dict]] = []

    async def _complete(self, conversation: Conversation) -> str:
        self.conversations.append(conversation)
        return self.respond(conversation)

    async def _call_function(self, conversation: Conversation, function: dict) -> dict:
        self.function_calls.append((conversation, function))
        if self.function_args is None:
            raise RuntimeError("no function call scripted")
        return self.function_args(conversation, function)


@pytest.fixture
def estimator() -> TokenEstimator:
    """Word/punctuation estimator; needs no tokenizer download."""
    return TokenEstimator(precise=False)


@pytest.fixture
def budget(estimator: TokenEstimator) -> TokenBudget:
    """Budget roomy enough for a handful of small diffs plus the prompts."""
    return TokenBudget(estimator, context_tokens=4000, output_reserve_tokens=200)


@pytest.fixture
def fake_model() -> FakeReviewModel:
    return FakeReviewModel()


@pytest.fixture
def make_file() -> Callable[..., ChangedFile]:
    """Factory for changed files."""

    def _make(filename: str, patch: str = "+print('hi')", **kwargs: Any) -> ChangedFile:
        return ChangedFile(filename=filename, patch=patch, **kwargs)

    return _make


@pytest.fixture
def make_model() -> Callable[..., FakeReviewModel]:
    """Factory for scripted review models."""
    return FakeReviewModel
