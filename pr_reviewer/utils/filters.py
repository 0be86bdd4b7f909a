"""File filtering utilities for determining which files to review."""

import logging

logger = logging.getLogger(__name__)

# Generated, lock and metadata files, matched on the lower-cased final path segment
IGNORED_FILENAMES: frozenset[str] = frozenset(
    {
        "package-lock.json",
        "yarn.lock",
        ".gitignore",
        "package.json",
        "tsconfig.json",
        "poetry.lock",
        "readme.md",
    }
)

# Binary, media, documentation and configuration extensions
IGNORED_EXTENSIONS: frozenset[str] = frozenset(
    {
        "pdf",
        "png",
        "jpg",
        "jpeg",
        "gif",
        "mp4",
        "mp3",
        "md",
        "json",
        "env",
        "toml",
        "svg",
    }
)


def should_review_file(file_path: str) -> bool:
    """Determine if a file should be included in code review.

    Rejects ignored filenames, files without an extension and files whose
    extension is ignored.

    Args:
        file_path: Path to the file, "/"-separated

    Returns:
        True if the file should be reviewed, False if it should be excluded
    """
    filename = file_path.lower().rsplit("/", 1)[-1]

    if filename in IGNORED_FILENAMES:
        logger.debug(f"Filtering out ignored file: {filename}")
        return False

    parts = filename.split(".")
    if len(parts) <= 1:
        logger.debug(f"Filtering out file with no extension: {filename}")
        return False

    extension = parts[-1]
    if extension in IGNORED_EXTENSIONS:
        logger.debug(
            f"Filtering out file with ignored extension: {filename} (.{extension})"
        )
        return False

    return True
