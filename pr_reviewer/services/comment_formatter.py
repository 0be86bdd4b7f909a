"""Deduplication and markdown rendering of review suggestions."""

import logging
from urllib.parse import quote

from pr_reviewer.models.outputs import Suggestion
from pr_reviewer.prompts.code_reviewer_prompt import PR_SUGGESTION_TEMPLATE

logger = logging.getLogger(__name__)

DEFAULT_CODE_HOST_URL = "https://github.com"
MAX_ISSUE_URL_LENGTH = 2048

# Characters encodeURIComponent leaves untouched besides alphanumerics and "_.-~"
_URI_COMPONENT_SAFE = "!*'()"


def _encode(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def dedup_suggestions(suggestions: list[Suggestion]) -> list[Suggestion]:
    """Collapse suggestions sharing an identity; the last one wins."""
    by_identity: dict[tuple[str, str, str], Suggestion] = {}
    for suggestion in suggestions:
        by_identity[suggestion.identity] = suggestion
    deduped = list(by_identity.values())
    if len(deduped) < len(suggestions):
        logger.debug(f"Removed {len(suggestions) - len(deduped)} duplicate suggestions")
    return deduped


def _issue_url(base: str, title: str, body: str) -> str:
    return f"{base}?title={_encode(title)}&body={body}"


def generate_issue_url(
    owner: str,
    repo_name: str,
    title: str,
    body: str,
    codeblock: str | None = None,
    code_host_url: str = DEFAULT_CODE_HOST_URL,
    max_length: int = MAX_ISSUE_URL_LENGTH,
) -> str:
    """
    Build a markdown link that opens a pre-filled "new issue" form.

    The code block is appended to the issue body when the whole link stays
    within ``max_length``; otherwise it is left out, and the body itself is
    shortened if the link is still too long.

    Args:
        owner: Repository owner
        repo_name: Repository name
        title: Issue title
        body: Issue body
        codeblock: Optional code to embed below the body
        code_host_url: Base URL of the code host
        max_length: Maximum URL length

    Returns:
        Markdown link ``[Create Issue](url)``
    """
    base = f"{code_host_url.rstrip('/')}/{owner}/{repo_name}/issues/new"
    encoded_body = _encode(body)

    if codeblock:
        url = _issue_url(base, title, encoded_body + _encode(f"\n```\n{codeblock}\n```\n"))
        if len(url) <= max_length:
            return f"[Create Issue]({url})"

    url = _issue_url(base, title, encoded_body)
    while len(url) > max_length and body:
        overshoot = len(url) - max_length
        # A character encodes to at most 12 characters (4 UTF-8 bytes)
        body = body[: -max(1, overshoot // 12)]
        url = _issue_url(base, title, _encode(body))
    while len(url) > max_length and title:
        overshoot = len(url) - max_length
        title = title[: -max(1, overshoot // 12)]
        url = _issue_url(base, title, _encode(body))
    return f"[Create Issue]({url})"


def convert_suggestions_to_comments(
    owner: str,
    repo_name: str,
    suggestions: list[Suggestion],
    code_host_url: str = DEFAULT_CODE_HOST_URL,
    max_url_length: int = MAX_ISSUE_URL_LENGTH,
) -> list[str]:
    """
    Group suggestions by filename and render one markdown comment per file.

    Args:
        owner: Repository owner
        repo_name: Repository name
        suggestions: Deduplicated suggestions
        code_host_url: Base URL of the code host
        max_url_length: Maximum length of each issue link

    Returns:
        One rendered comment per file, in order of first appearance
    """
    by_filename: dict[str, list[Suggestion]] = {}
    for suggestion in suggestions:
        by_filename.setdefault(suggestion.filename, []).append(suggestion)

    comments = []
    for filename, file_suggestions in by_filename.items():
        blocks = [f"## {filename}\n"]
        for suggestion in file_suggestions:
            issue_link = generate_issue_url(
                owner,
                repo_name,
                suggestion.describe,
                suggestion.comment,
                suggestion.code,
                code_host_url=code_host_url,
                max_length=max_url_length,
            )
            blocks.append(
                PR_SUGGESTION_TEMPLATE.replace("{COMMENT}", suggestion.comment)
                .replace("{CODE}", suggestion.code)
                .replace("{ISSUE_LINK}", issue_link)
            )
        comments.append("\n".join(blocks))
    return comments
