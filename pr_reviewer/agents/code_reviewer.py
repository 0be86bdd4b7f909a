"""Batch review of pull request diffs with layered response strategies.

A strategy pairs a conversation builder with a response parser. Strategies
are tried in order against the same files, and the first one whose every step
succeeds produces the review.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from pr_reviewer.exceptions import ReviewPipelineError
from pr_reviewer.models.conversation import Conversation
from pr_reviewer.models.github_types import ChangedFile
from pr_reviewer.models.outputs import ReviewResult
from pr_reviewer.prompts.code_reviewer_prompt import (
    REVIEW_SYSTEM_PROMPT,
    XML_FEW_SHOT_DIFF,
    XML_FEW_SHOT_RESPONSE,
    XML_REVIEW_SYSTEM_PROMPT,
    build_patch_prompt,
)
from pr_reviewer.services.batch_planner import BatchPlanner
from pr_reviewer.services.comment_formatter import (
    DEFAULT_CODE_HOST_URL,
    MAX_ISSUE_URL_LENGTH,
    convert_suggestions_to_comments,
    dedup_suggestions,
)
from pr_reviewer.services.model_client import ReviewModel
from pr_reviewer.services.suggestion_parser import parse_xml_suggestions
from pr_reviewer.utils.tokens import TokenBudget

logger = logging.getLogger(__name__)


def render_patches(files: Sequence[ChangedFile]) -> str:
    return "\n".join(build_patch_prompt(file) for file in files)


def get_xml_review_prompt(files: Sequence[ChangedFile]) -> Conversation:
    """Conversation asking for suggestions in the review markup dialect."""
    return Conversation.of(
        ("system", XML_REVIEW_SYSTEM_PROMPT),
        ("user", XML_FEW_SHOT_DIFF),
        ("assistant", XML_FEW_SHOT_RESPONSE),
        ("user", render_patches(files)),
    )


def get_review_prompt(files: Sequence[ChangedFile]) -> Conversation:
    """Conversation asking for free-form review feedback."""
    return Conversation.of(
        ("system", REVIEW_SYSTEM_PROMPT),
        ("user", render_patches(files)),
    )


class ReviewStrategy(ABC):
    """A paired conversation builder and response parser."""

    name: str = "review"

    @abstractmethod
    def build_conversation(self, files: Sequence[ChangedFile]) -> Conversation:
        """Build the model conversation for one batch."""

    @abstractmethod
    def parse_responses(self, feedbacks: list[str]) -> ReviewResult:
        """Turn every batch's raw model output into a review.

        Raises:
            SuggestionParseError: If any response cannot be parsed
        """


class XMLReviewStrategy(ReviewStrategy):
    """Structured suggestions, deduplicated and rendered with issue links."""

    name = "xml"

    def __init__(
        self,
        owner: str,
        repo_name: str,
        code_host_url: str = DEFAULT_CODE_HOST_URL,
        max_url_length: int = MAX_ISSUE_URL_LENGTH,
    ) -> None:
        self.owner = owner
        self.repo_name = repo_name
        self.code_host_url = code_host_url
        self.max_url_length = max_url_length

    def build_conversation(self, files: Sequence[ChangedFile]) -> Conversation:
        return get_xml_review_prompt(files)

    def parse_responses(self, feedbacks: list[str]) -> ReviewResult:
        suggestions = dedup_suggestions(parse_xml_suggestions(feedbacks))
        comments = convert_suggestions_to_comments(
            self.owner,
            self.repo_name,
            suggestions,
            code_host_url=self.code_host_url,
            max_url_length=self.max_url_length,
        )
        return ReviewResult(comment="\n".join(comments), suggestions=suggestions)


class PlainReviewStrategy(ReviewStrategy):
    """Prose feedback used verbatim; never fails to parse."""

    name = "plain"

    def build_conversation(self, files: Sequence[ChangedFile]) -> Conversation:
        return get_review_prompt(files)

    def parse_responses(self, feedbacks: list[str]) -> ReviewResult:
        return ReviewResult(comment="\n".join(feedbacks), suggestions=[])


async def review_files(
    files: Sequence[ChangedFile], strategy: ReviewStrategy, model: ReviewModel
) -> str:
    """Send one batch to the model and return its raw feedback."""
    return await model.complete(strategy.build_conversation(files))


async def review_changes(
    files: Sequence[ChangedFile],
    strategy: ReviewStrategy,
    model: ReviewModel,
    budget: TokenBudget,
) -> ReviewResult:
    """
    Plan batches, review them concurrently and parse the responses.

    Args:
        files: Filtered changed files
        strategy: Conversation/parse strategy to use
        model: Review model
        budget: Token budget every batch must fit

    Returns:
        ReviewResult for the reviewed files, listing any dropped files

    Raises:
        ModelCallError: If any batch's model call fails
        SuggestionParseError: If any batch's response cannot be parsed
    """
    planner = BatchPlanner(budget, strategy.build_conversation)
    plan = planner.plan(files)

    feedbacks = await asyncio.gather(
        *(review_files(batch, strategy, model) for batch in plan.batches)
    )
    result = strategy.parse_responses(list(feedbacks))
    result.dropped_files = [file.filename for file in plan.dropped]
    return result


async def review_changes_retry(
    files: Sequence[ChangedFile],
    strategies: Sequence[ReviewStrategy],
    model: ReviewModel,
    budget: TokenBudget,
) -> ReviewResult:
    """
    Try each strategy in order and return the first complete review.

    Args:
        files: Filtered changed files
        strategies: Strategies in fallback order
        model: Review model
        budget: Token budget every batch must fit

    Returns:
        ReviewResult of the first strategy that succeeded

    Raises:
        ReviewPipelineError: If every strategy failed
    """
    errors: list[tuple[str, Exception]] = []
    for strategy in strategies:
        logger.info(f"Reviewing {len(files)} files with strategy '{strategy.name}'")
        try:
            return await review_changes(files, strategy, model, budget)
        except Exception as e:
            logger.warning(
                f"Strategy '{strategy.name}' failed, trying next one. Error: {e}",
                exc_info=True,
            )
            errors.append((strategy.name, e))

    raise ReviewPipelineError(
        f"All review strategies failed: {', '.join(name for name, _ in errors)}",
        errors=errors,
    )
