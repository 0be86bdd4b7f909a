"""Change-set file types shared by the review pipeline."""

from pydantic import BaseModel, Field


class ChangedFile(BaseModel):
    """A single file changed by a pull request.

    Constructed from the code host's file listing, then enriched in place with
    its pre/post contents and the token cost of its rendered diff before it is
    handed to the batch planner.
    """

    filename: str
    patch: str = ""
    old_contents: str | None = None
    current_contents: str | None = None
    patch_token_length: int | None = Field(default=None, ge=0)

    @property
    def extension(self) -> str:
        """Lower-cased final extension of the filename ("" when there is none)."""
        name = self.filename.rsplit("/", 1)[-1]
        if "." not in name:
            return ""
        return name.rsplit(".", 1)[-1].lower()

    @property
    def is_new_file(self) -> bool:
        """Check if the file did not exist before the change.

        Returns:
            True if there are no pre-image contents
        """
        return self.old_contents is None

    @property
    def is_deleted_file(self) -> bool:
        """Check if the change deletes the file.

        Returns:
            True if there are no post-image contents
        """
        return self.current_contents is None
