"""Pull request review entry point.

Filters the changed files, enriches them with their base and head contents,
runs the review strategies in fallback order and, when requested, synthesizes
inline fixes for the structured suggestions.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pr_reviewer.agents.code_reviewer import (
    PlainReviewStrategy,
    ReviewStrategy,
    XMLReviewStrategy,
    review_changes_retry,
)
from pr_reviewer.agents.inline_fixer import generate_inline_fixes
from pr_reviewer.config.settings import Settings
from pr_reviewer.models.github_types import ChangedFile
from pr_reviewer.models.outputs import ReviewResult
from pr_reviewer.services.comment_formatter import (
    DEFAULT_CODE_HOST_URL,
    MAX_ISSUE_URL_LENGTH,
)
from pr_reviewer.services.model_client import ReviewModel, build_review_model
from pr_reviewer.utils.filters import should_review_file
from pr_reviewer.utils.tokens import TokenBudget

logger = logging.getLogger(__name__)


class FileSource(Protocol):
    """Code host access used to read file contents at a given ref."""

    async def get_file_contents(self, path: str, ref: str) -> str | None:
        """Return the file's contents at ``ref``, or None if it does not exist there."""
        ...


class PullRequestRef(BaseModel):
    """Identifies the pull request under review."""

    repo_full_name: str
    pr_number: int
    base_ref: str = "main"
    head_ref: str

    @field_validator("repo_full_name")
    @classmethod
    def validate_repo_full_name(cls, v: str) -> str:
        """Validate repo_full_name is in 'owner/repo' format."""
        if v.count("/") != 1:
            raise ValueError(f"repo_full_name must be in 'owner/repo' format, got: '{v}'")

        owner, repo = v.split("/")
        if not owner or not repo:
            raise ValueError(
                f"repo_full_name must have non-empty owner and repo parts, got: '{v}'"
            )
        return v

    @field_validator("pr_number")
    @classmethod
    def validate_pr_number(cls, v: int) -> int:
        """Validate pr_number is positive."""
        if v <= 0:
            raise ValueError(f"pr_number must be positive (> 0), got: {v}")
        return v

    @property
    def owner(self) -> str:
        return self.repo_full_name.split("/")[0]

    @property
    def repo_name(self) -> str:
        return self.repo_full_name.split("/")[1]


class ReviewConfig(BaseModel):
    """Explicitly injected collaborators and limits for one review."""

    model: ReviewModel
    budget: TokenBudget
    code_host_url: str = DEFAULT_CODE_HOST_URL
    issue_url_max_length: int = Field(default=MAX_ISSUE_URL_LENGTH, gt=0)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def from_settings(
        cls, settings: Settings, model: ReviewModel | None = None
    ) -> "ReviewConfig":
        """Build the review configuration described by application settings."""
        return cls(
            model=model or build_review_model(settings),
            budget=TokenBudget.from_settings(settings),
            code_host_url=settings.code_host_url,
            issue_url_max_length=settings.issue_url_max_length,
        )


async def preprocess_file(
    file: ChangedFile, pr: PullRequestRef, file_source: FileSource
) -> None:
    """Load a file's base and head contents in place.

    A missing base version means the file was created; a missing head version
    means it was deleted.
    """
    old_contents, current_contents = await asyncio.gather(
        file_source.get_file_contents(file.filename, pr.base_ref),
        file_source.get_file_contents(file.filename, pr.head_ref),
    )
    file.old_contents = old_contents
    file.current_contents = current_contents


def build_strategies(pr: PullRequestRef, config: ReviewConfig) -> list[ReviewStrategy]:
    """Structured review first, prose review as the fallback."""
    return [
        XMLReviewStrategy(
            pr.owner,
            pr.repo_name,
            code_host_url=config.code_host_url,
            max_url_length=config.issue_url_max_length,
        ),
        PlainReviewStrategy(),
    ]


async def process_pull_request(
    pr: PullRequestRef,
    files: Sequence[ChangedFile],
    config: ReviewConfig,
    file_source: FileSource | None = None,
    include_suggestions: bool = False,
) -> ReviewResult:
    """
    Review the changed files of a pull request.

    Args:
        pr: Pull request under review
        files: Every file changed by the pull request
        config: Model, token budget and rendering options
        file_source: Optional code host access for base/head contents
        include_suggestions: Whether to synthesize inline fixes

    Returns:
        ReviewResult; empty (no comment) when every file was filtered out

    Raises:
        ReviewPipelineError: If every review strategy failed
    """
    review_key = f"{pr.repo_full_name}#{pr.pr_number}"
    filtered_files = [file for file in files if should_review_file(file.filename)]
    logger.info(
        f"Starting review for {review_key}: {len(filtered_files)} of {len(files)} files to review"
    )

    if not filtered_files:
        logger.info(f"Nothing to review for {review_key}: all files were filtered out")
        return ReviewResult()

    if file_source is not None:
        await asyncio.gather(
            *(preprocess_file(file, pr, file_source) for file in filtered_files)
        )

    review = await review_changes_retry(
        filtered_files, build_strategies(pr, config), config.model, config.budget
    )

    if include_suggestions and review.suggestions:
        logger.info(f"Generating inline fixes for {len(review.suggestions)} suggestions")
        review.inline_fixes = await generate_inline_fixes(
            review.suggestions, filtered_files, config.model
        )

    logger.info(
        f"Review completed for {review_key}: "
        f"{len(review.suggestions)} suggestions, "
        f"{len(review.inline_fixes)} inline fixes, "
        f"{len(review.dropped_files)} files dropped"
    )
    return review
