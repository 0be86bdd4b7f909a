"""Services used by the review pipeline."""

from .batch_planner import BatchPlan, BatchPlanner, strip_removed_lines
from .comment_formatter import (
    convert_suggestions_to_comments,
    dedup_suggestions,
    generate_issue_url,
)
from .model_client import PydanticAIReviewModel, ReviewModel, build_review_model
from .suggestion_parser import parse_xml_suggestions

__all__ = [
    "BatchPlan",
    "BatchPlanner",
    "strip_removed_lines",
    "convert_suggestions_to_comments",
    "dedup_suggestions",
    "generate_issue_url",
    "ReviewModel",
    "PydanticAIReviewModel",
    "build_review_model",
    "parse_xml_suggestions",
]
