"""Unit tests for file filtering."""

import pytest

from pr_reviewer.utils.filters import should_review_file


class TestShouldReviewFile:
    """Tests for should_review_file."""

    @pytest.mark.parametrize(
        "path",
        ["src/main.py", "app/components/Button.tsx", "lib/server.go", "Dockerfile.dev"],
    )
    def test_reviews_source_files(self, path):
        assert should_review_file(path) is True

    @pytest.mark.parametrize(
        "path",
        [
            "package-lock.json",
            "frontend/yarn.lock",
            "README.md",
            "docs/Readme.MD",
            "poetry.lock",
            ".gitignore",
            "tsconfig.json",
        ],
    )
    def test_rejects_ignored_filenames(self, path):
        assert should_review_file(path) is False

    @pytest.mark.parametrize("path", ["Makefile", "bin/run", "LICENSE"])
    def test_rejects_files_without_extension(self, path):
        assert should_review_file(path) is False

    @pytest.mark.parametrize(
        "path",
        ["assets/logo.PNG", "docs/guide.md", "config/settings.toml", "data.json", ".env", "icon.svg"],
    )
    def test_rejects_ignored_extensions(self, path):
        assert should_review_file(path) is False

    def test_only_final_segment_is_considered(self):
        """Directory names never look like extensions."""
        assert should_review_file("my.project/Makefile") is False
        assert should_review_file("docs.md/script.py") is True
