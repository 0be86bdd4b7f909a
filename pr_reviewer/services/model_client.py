"""Model-call boundary for the review pipeline.

The pipeline only talks to :class:`ReviewModel`. Credentials and model choice
are injected through the constructor, so tests can back it with a pydantic-ai
``FunctionModel`` or a scripted fake instead of a live provider.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic_ai.direct import model_request
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    UserPromptPart,
)
from pydantic_ai.models import KnownModelName, Model, ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition

from pr_reviewer.exceptions import ModelCallError, ReviewError
from pr_reviewer.models.conversation import Conversation
from pr_reviewer.utils.rate_limiter import with_exponential_backoff

logger = logging.getLogger(__name__)


class ReviewModel(ABC):
    """Generative model used to review diffs and synthesize inline fixes.

    Every call is bounded by a shared semaphore and retried on transient
    errors. Failures surface as :class:`ModelCallError`.
    """

    def __init__(self, max_concurrency: int = 4, max_retries: int = 2) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got: {max_concurrency}")
        self.max_concurrency = max_concurrency
        self.max_retries = max_retries
        self._semaphore = asyncio.Semaphore(max_concurrency)

    @abstractmethod
    async def _complete(self, conversation: Conversation) -> str:
        """Return the free-text completion for ``conversation``."""

    @abstractmethod
    async def _call_function(
        self, conversation: Conversation, function: dict[str, Any]
    ) -> dict[str, Any]:
        """Force a call of ``function`` and return its parsed arguments."""

    async def complete(self, conversation: Conversation) -> str:
        return await self._bounded(self._complete, conversation)

    async def call_function(
        self, conversation: Conversation, function: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._bounded(self._call_function, conversation, function)

    async def _bounded(self, func, *args: Any) -> Any:
        async with self._semaphore:
            try:
                return await with_exponential_backoff(
                    func, *args, max_retries=self.max_retries + 1
                )
            except ReviewError:
                raise
            except Exception as e:
                raise ModelCallError(f"Model call failed: {type(e).__name__}: {e}") from e


def to_model_messages(conversation: Conversation) -> list[ModelMessage]:
    """Convert a conversation into pydantic-ai request/response messages.

    System and user turns are grouped into requests; assistant turns (few-shot
    answers) become responses.
    """
    messages: list[ModelMessage] = []
    pending: list[SystemPromptPart | UserPromptPart] = []

    for message in conversation.messages:
        if message.role == "assistant":
            if pending:
                messages.append(ModelRequest(parts=pending))
                pending = []
            messages.append(ModelResponse(parts=[TextPart(content=message.content)]))
        elif message.role == "system":
            pending.append(SystemPromptPart(content=message.content))
        else:
            pending.append(UserPromptPart(content=message.content))

    if pending:
        messages.append(ModelRequest(parts=pending))
    if not messages or not isinstance(messages[-1], ModelRequest):
        raise ValueError("Conversation must end with a system or user message")
    return messages


class PydanticAIReviewModel(ReviewModel):
    """:class:`ReviewModel` backed by any pydantic-ai model."""

    def __init__(
        self,
        model: Model | KnownModelName | str,
        temperature: float = 0.0,
        max_concurrency: int = 4,
        max_retries: int = 2,
    ) -> None:
        super().__init__(max_concurrency=max_concurrency, max_retries=max_retries)
        self.model = model
        self.model_settings = ModelSettings(temperature=temperature)

    async def _complete(self, conversation: Conversation) -> str:
        response = await model_request(
            self.model,
            to_model_messages(conversation),
            model_settings=self.model_settings,
        )
        text = "".join(
            part.content for part in response.parts if isinstance(part, TextPart)
        )
        if not text:
            raise ModelCallError("Model returned no text content")
        return text

    async def _call_function(
        self, conversation: Conversation, function: dict[str, Any]
    ) -> dict[str, Any]:
        tool = ToolDefinition(
            name=function["name"],
            description=function.get("description"),
            parameters_json_schema=function["parameters"],
        )
        response = await model_request(
            self.model,
            to_model_messages(conversation),
            model_settings=self.model_settings,
            model_request_parameters=ModelRequestParameters(
                function_tools=[tool], allow_text_output=False
            ),
        )
        for part in response.parts:
            if isinstance(part, ToolCallPart) and part.tool_name == tool.name:
                return part.args_as_dict()
        raise ModelCallError(f"No call to function '{tool.name}' found in response")


def build_review_model(settings) -> PydanticAIReviewModel:
    """Create the configured review model with explicitly injected credentials.

    Args:
        settings: Application settings

    Returns:
        PydanticAIReviewModel for ``settings.review_model``
    """
    model: Model | str = settings.review_model
    provider_name, _, model_name = settings.review_model.partition(":")
    if provider_name == "openai" and model_name and settings.openai_api_key:
        from pydantic_ai.models.openai import OpenAIResponsesModel
        from pydantic_ai.providers.openai import OpenAIProvider

        model = OpenAIResponsesModel(
            model_name, provider=OpenAIProvider(api_key=settings.openai_api_key)
        )

    logger.info(f"Using review model {settings.review_model}")
    return PydanticAIReviewModel(
        model,
        temperature=settings.review_temperature,
        max_concurrency=settings.max_concurrent_model_calls,
        max_retries=settings.max_retries,
    )
