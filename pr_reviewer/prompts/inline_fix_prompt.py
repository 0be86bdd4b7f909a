"""Prompt and function schema for inline code-fix generation."""

from pr_reviewer.models.conversation import Conversation
from pr_reviewer.models.outputs import Suggestion

INLINE_FIX_FUNCTION_NAME = "fix"

INLINE_FIX_FUNCTION = {
    "name": INLINE_FIX_FUNCTION_NAME,
    "description": "Replace a range of lines in the file with corrected code.",
    "parameters": {
        "type": "object",
        "properties": {
            "code": {
                "type": "string",
                "description": "The replacement code, without any indentation shared by the whole range.",
            },
            "lineStart": {
                "type": "integer",
                "description": "1-based number of the first line to replace.",
            },
            "lineEnd": {
                "type": "integer",
                "description": "1-based number of the last line to replace (inclusive).",
            },
            "comment": {
                "type": "string",
                "description": "Short explanation of the change, shown to the author.",
            },
        },
        "required": ["code", "lineStart", "lineEnd", "comment"],
    },
}

INLINE_FIX_SYSTEM_PROMPT = """You are a code quality expert applying a single review suggestion to a file.

Instructions:
1. Call the `fix` function exactly once
2. Replace the SMALLEST range of lines that implements the suggestion
3. Line numbers refer to the numbered file below and are inclusive
4. Return the code without the indentation of the first replaced line; it is re-applied for you
5. Do NOT include explanations, comments, or markdown in the code
"""


def _number_lines(contents: str) -> str:
    return "\n".join(
        f"{number}: {line}" for number, line in enumerate(contents.split("\n"), start=1)
    )


def get_inline_fix_prompt(contents: str, suggestion: Suggestion) -> Conversation:
    """
    Build the conversation asking for a minimal inline fix.

    Args:
        contents: Current (post-change) contents of the target file
        suggestion: The structured suggestion to apply

    Returns:
        Conversation with the fix instructions and the numbered file
    """
    user_prompt = f"""File: {suggestion.filename}
Issue: {suggestion.describe}
Category: {suggestion.type}
Suggestion: {suggestion.comment}

Proposed code:
```
{suggestion.code}
```

Current file contents (numbered):
```
{_number_lines(contents)}
```"""

    return Conversation.of(
        ("system", INLINE_FIX_SYSTEM_PROMPT),
        ("user", user_prompt),
    )
