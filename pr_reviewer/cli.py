"""Command-line entrypoint: review a pull request described by a JSON file.

The input file holds the pull request coordinates and its changed files::

    {
        "repo_full_name": "octo/repo",
        "pr_number": 42,
        "head_ref": "feature",
        "files": [{"filename": "src/app.py", "patch": "@@ ... @@\\n+new line"}]
    }

The review is written to stdout as JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from pr_reviewer.config.settings import settings
from pr_reviewer.exceptions import ReviewError
from pr_reviewer.handlers.pr_review_handler import (
    PullRequestRef,
    ReviewConfig,
    process_pull_request,
)
from pr_reviewer.models.github_types import ChangedFile
from pr_reviewer.utils.logging import setup_observability

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pr-reviewer", description="Review the changed files of a pull request."
    )
    parser.add_argument("input", type=Path, help="JSON file describing the pull request")
    parser.add_argument(
        "--inline-fixes",
        action="store_true",
        help="Also synthesize inline fixes for structured suggestions",
    )
    return parser


def load_request(path: Path) -> tuple[PullRequestRef, list[ChangedFile]]:
    """Read the pull request and its changed files from ``path``."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    files = [ChangedFile.model_validate(file) for file in payload.pop("files", [])]
    return PullRequestRef.model_validate(payload), files


def main(argv: list[str] | None = None, config: ReviewConfig | None = None) -> int:
    """Run one review and print it; returns the process exit code."""
    args = build_parser().parse_args(argv)
    setup_observability()

    try:
        pr, files = load_request(args.input)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Invalid review request {args.input}: {e}")
        return 2

    config = config or ReviewConfig.from_settings(settings)
    try:
        review = asyncio.run(
            process_pull_request(pr, files, config, include_suggestions=args.inline_fixes)
        )
    except ReviewError:
        logger.exception(f"Review failed for {pr.repo_full_name}#{pr.pr_number}")
        return 1

    sys.stdout.write(review.model_dump_json(indent=2) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
