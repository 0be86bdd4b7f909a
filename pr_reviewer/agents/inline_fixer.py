"""Synthesis of inline code fixes from structured suggestions."""

import asyncio
import logging
import re
from collections.abc import Sequence

from pr_reviewer.models.github_types import ChangedFile
from pr_reviewer.models.outputs import InlineFix, Suggestion
from pr_reviewer.prompts.inline_fix_prompt import INLINE_FIX_FUNCTION, get_inline_fix_prompt
from pr_reviewer.services.model_client import ReviewModel

logger = logging.getLogger(__name__)

_LEADING_WHITESPACE_RE = re.compile(r"^(\s*)")


def indent_code_fix(contents: str, code: str, line_start: int) -> str:
    """Prefix every line of ``code`` with the indentation of ``line_start``.

    Args:
        contents: Current file contents
        code: Replacement code returned by the model
        line_start: 1-based first line of the replaced range

    Returns:
        Code indented to match the host file
    """
    first_line = contents.split("\n")[line_start - 1]
    indentation = _LEADING_WHITESPACE_RE.match(first_line).group(1)
    return "\n".join(indentation + line for line in code.split("\n"))


def is_code_suggestion_new(contents: str, fix: InlineFix) -> bool:
    """Check whether a fix changes the lines it replaces (ignoring outer whitespace)."""
    target_lines = "\n".join(contents.split("\n")[fix.line_start - 1 : fix.line_end])
    return target_lines.strip() != fix.correction.strip()


async def generate_inline_fix(
    suggestion: Suggestion, file: ChangedFile, model: ReviewModel
) -> InlineFix | None:
    """
    Ask the model for a minimal replacement implementing ``suggestion``.

    Any failure (no function call, malformed arguments, out-of-range lines)
    yields no fix for this suggestion only.

    Args:
        suggestion: Structured suggestion to apply
        file: Changed file the suggestion targets
        model: Review model

    Returns:
        InlineFix, or None if no usable fix was produced
    """
    contents = file.current_contents
    if contents is None:
        logger.debug(f"Skipping inline fix for {file.filename}: no current contents")
        return None

    try:
        args = await model.call_function(
            get_inline_fix_prompt(contents, suggestion), INLINE_FIX_FUNCTION
        )
        line_start = int(args["lineStart"])
        line_end = int(args["lineEnd"])
        line_count = len(contents.split("\n"))
        if not 1 <= line_start <= line_end <= line_count:
            raise ValueError(
                f"line range {line_start}-{line_end} outside file of {line_count} lines"
            )

        fix = InlineFix(
            filename=suggestion.filename,
            line_start=line_start,
            line_end=line_end,
            correction=indent_code_fix(contents, str(args["code"]), line_start),
            comment=str(args.get("comment", "")),
        )
    except Exception as e:
        logger.warning(f"Inline fix generation failed for {suggestion.filename}: {e}")
        return None

    if not is_code_suggestion_new(contents, fix):
        logger.debug(
            f"Discarding inline fix for {fix.filename}:{fix.line_start}-{fix.line_end}: "
            "identical to existing code"
        )
        return None
    return fix


async def generate_inline_fixes(
    suggestions: Sequence[Suggestion],
    files: Sequence[ChangedFile],
    model: ReviewModel,
) -> list[InlineFix]:
    """Synthesize fixes for all suggestions concurrently, keeping the usable ones."""
    files_by_name = {file.filename: file for file in files}

    async def _fix(suggestion: Suggestion) -> InlineFix | None:
        file = files_by_name.get(suggestion.filename)
        if file is None:
            logger.debug(f"No changed file matches suggestion for {suggestion.filename}")
            return None
        return await generate_inline_fix(suggestion, file, model)

    results = await asyncio.gather(*(_fix(suggestion) for suggestion in suggestions))
    return [fix for fix in results if fix is not None]
