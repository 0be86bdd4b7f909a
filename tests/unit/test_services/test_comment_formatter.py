"""Unit tests for suggestion deduplication and comment rendering."""

from urllib.parse import parse_qs, urlparse

from pr_reviewer.models.outputs import Suggestion
from pr_reviewer.services.comment_formatter import (
    convert_suggestions_to_comments,
    dedup_suggestions,
    generate_issue_url,
)


def make_suggestion(**overrides) -> Suggestion:
    fields = {
        "describe": "Missing null check",
        "type": "bug",
        "comment": "user may be None here.",
        "code": "if user is not None:\n    greet(user)",
        "filename": "src/app.py",
    }
    fields.update(overrides)
    return Suggestion(**fields)


def link_url(link: str) -> str:
    assert link.startswith("[Create Issue](") and link.endswith(")")
    return link[len("[Create Issue](") : -1]


class TestDedupSuggestions:
    def test_last_write_wins(self):
        first = make_suggestion(comment="first", type="bug")
        second = make_suggestion(comment="second", type="style")

        assert dedup_suggestions([first, second]) == [second]

    def test_distinct_identities_are_kept(self):
        a = make_suggestion()
        b = make_suggestion(filename="src/other.py")
        c = make_suggestion(code="pass")
        d = make_suggestion(describe="Something else")

        assert dedup_suggestions([a, b, c, d]) == [a, b, c, d]

    def test_is_idempotent(self):
        suggestions = [
            make_suggestion(comment="one"),
            make_suggestion(filename="b.py"),
            make_suggestion(comment="two"),
        ]

        once = dedup_suggestions(suggestions)

        assert dedup_suggestions(once) == once


class TestGenerateIssueUrl:
    def test_includes_encoded_title_body_and_code(self):
        link = generate_issue_url("octo", "repo", "Fix bug", "Body text", "x = 1")
        url = link_url(link)

        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert parsed.netloc == "github.com"
        assert parsed.path == "/octo/repo/issues/new"
        assert query["title"] == ["Fix bug"]
        assert query["body"] == ["Body text\n```\nx = 1\n```\n"]

    def test_omits_code_block_when_too_long(self):
        long_code = "value = compute(a, b)\n" * 200
        link = generate_issue_url("octo", "repo", "Refactor", "Please refactor.", long_code)
        url = link_url(link)

        assert len(url) <= 2048
        assert parse_qs(urlparse(url).query)["body"] == ["Please refactor."]

    def test_truncates_body_when_still_too_long(self):
        link = generate_issue_url("octo", "repo", "Title", "é " * 2000, "code")

        assert len(link_url(link)) <= 2048

    def test_respects_custom_host_and_limit(self):
        link = generate_issue_url(
            "octo", "repo", "T", "B", "c" * 100, code_host_url="https://git.example.com/", max_length=120
        )
        url = link_url(link)

        assert url.startswith("https://git.example.com/octo/repo/issues/new?")
        assert len(url) <= 120


class TestConvertSuggestionsToComments:
    def test_groups_by_filename_in_first_appearance_order(self):
        suggestions = [
            make_suggestion(filename="b.py", comment="first b"),
            make_suggestion(filename="a.py", comment="first a"),
            make_suggestion(filename="b.py", comment="second b", code="pass"),
        ]

        comments = convert_suggestions_to_comments("octo", "repo", suggestions)

        assert len(comments) == 2
        assert comments[0].startswith("## b.py\n")
        assert comments[0].index("first b") < comments[0].index("second b")
        assert comments[1].startswith("## a.py\n")

    def test_block_contains_comment_code_and_issue_link(self):
        suggestion = make_suggestion()

        [comment] = convert_suggestions_to_comments("octo", "repo", [suggestion])

        assert suggestion.comment in comment
        assert suggestion.code in comment
        assert "[Create Issue](https://github.com/octo/repo/issues/new?" in comment

    def test_no_suggestions_no_comments(self):
        assert convert_suggestions_to_comments("octo", "repo", []) == []
