"""Parsing of structured (XML) review responses into suggestions."""

import logging
import re
import xml.etree.ElementTree as ET

from pr_reviewer.exceptions import SuggestionParseError
from pr_reviewer.models.outputs import Suggestion

logger = logging.getLogger(__name__)

ROOT_TAG = "review"
SUGGESTION_TAG = "suggestion"
REQUIRED_TAGS = ("describe", "type", "comment", "code", "filename")

_SUGGESTION_END = f"</{SUGGESTION_TAG}>"
# Greedy: a payload may itself contain <code>...</code> elements
_CODE_BLOCK_RE = re.compile(r"<code>(.*)</code>", re.DOTALL)
_ROOT_START_RE = re.compile(rf"<{ROOT_TAG}[\s/>]")


def _wrap_code_in_cdata(match: re.Match[str]) -> str:
    # "]]>" cannot appear inside CDATA, so split the section around it
    payload = match.group(1).replace("]]>", "]]]]><![CDATA[>")
    return f"<code><![CDATA[{payload}]]></code>"


def escape_code_blocks(feedback: str) -> str:
    """Wrap every ``<code>`` payload in CDATA so it is never read as markup.

    Each suggestion holds one code element, running from its first ``<code>``
    to the last ``</code>`` before the suggestion closes.
    """
    segments = feedback.split(_SUGGESTION_END)
    return _SUGGESTION_END.join(
        _CODE_BLOCK_RE.sub(_wrap_code_in_cdata, segment, count=1) for segment in segments
    )


def review_root_candidates(feedback: str) -> list[str]:
    """Cut possible ``<review>`` elements out of surrounding prose or code fences.

    Every opener before the final closing tag starts one candidate, so a
    stray ``<review>`` mentioned in prose does not hide the real element.

    Raises:
        SuggestionParseError: If the response has no review root element
    """
    end_tag = f"</{ROOT_TAG}>"
    end = feedback.rfind(end_tag)

    candidates = []
    for start in _ROOT_START_RE.finditer(feedback):
        if start.start() < end:
            candidates.append(feedback[start.start() : end + len(end_tag)])
            continue
        # Self-closing root: <review/>
        self_closing = feedback.find("/>", start.start())
        if self_closing != -1:
            candidates.append(feedback[start.start() : self_closing + 2])

    if not candidates:
        raise SuggestionParseError(f"No complete <{ROOT_TAG}> element found in model response")
    return candidates


def trim_code(raw_code: str) -> str:
    """Trim the payload and the outer whitespace of its first and last lines.

    Interior lines keep their indentation.
    """
    lines = raw_code.strip().split("\n")
    lines[0] = lines[0].strip()
    lines[-1] = lines[-1].strip()
    return "\n".join(lines)


def _child_text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None:
        raise SuggestionParseError(f"<{SUGGESTION_TAG}> is missing required <{tag}> tag")
    return "".join(child.itertext())


def parse_xml_feedback(feedback: str) -> list[Suggestion]:
    """Parse one model response in the review markup dialect.

    Args:
        feedback: Raw model output for one batch

    Returns:
        Suggestions in document order

    Raises:
        SuggestionParseError: If the markup is malformed or a suggestion lacks
            one of the required tags
    """
    root = None
    parse_error = None
    for candidate in review_root_candidates(feedback):
        try:
            root = ET.fromstring(escape_code_blocks(candidate))
            break
        except ET.ParseError as e:
            parse_error = e
    if root is None:
        raise SuggestionParseError(f"Malformed review markup: {parse_error}") from parse_error

    suggestions = []
    for element in root.findall(SUGGESTION_TAG):
        fields = {tag: _child_text(element, tag) for tag in REQUIRED_TAGS}
        suggestions.append(
            Suggestion(
                describe=fields["describe"].strip(),
                type=fields["type"].strip(),
                comment=fields["comment"].strip(),
                code=trim_code(fields["code"]),
                filename=fields["filename"].strip(),
            )
        )
    return suggestions


def parse_xml_suggestions(feedbacks: list[str]) -> list[Suggestion]:
    """Parse every batch's response; any failure fails the whole review.

    Args:
        feedbacks: Raw model outputs, one per batch

    Returns:
        All suggestions, flattened in batch order
    """
    suggestions: list[Suggestion] = []
    for index, feedback in enumerate(feedbacks):
        try:
            suggestions.extend(parse_xml_feedback(feedback))
        except SuggestionParseError:
            logger.warning(f"Failed to parse structured response for batch {index}")
            raise
    logger.debug(f"Parsed {len(suggestions)} suggestions from {len(feedbacks)} responses")
    return suggestions
