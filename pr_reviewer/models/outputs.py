"""Output models produced by the review pipeline."""

from pydantic import BaseModel, Field


class Suggestion(BaseModel):
    """A structured review comment parsed from model output.

    Two suggestions are the same suggestion when they target the same file
    with the same description and code, regardless of which batch produced
    them.
    """

    describe: str
    type: str
    comment: str
    code: str
    filename: str

    @property
    def identity(self) -> tuple[str, str, str]:
        """Deduplication key for this suggestion."""
        return (self.filename, self.describe, self.code)


class InlineFix(BaseModel):
    """A concrete line-range replacement for the current contents of a file.

    Line numbers are 1-based and inclusive.
    """

    filename: str
    line_start: int = Field(ge=1)
    line_end: int = Field(ge=1)
    correction: str
    comment: str = ""


class ReviewResult(BaseModel):
    """Final artifact of a review, handed to the review sink."""

    comment: str | None = None
    suggestions: list[Suggestion] = Field(default_factory=list)
    inline_fixes: list[InlineFix] = Field(default_factory=list)
    dropped_files: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Check if the review has nothing to post.

        Returns:
            True if there is no comment and no inline fix
        """
        return not self.comment and not self.inline_fixes
