"""Unit tests for the batch planner."""

import random

import pytest

from pr_reviewer.models.conversation import Conversation
from pr_reviewer.models.github_types import ChangedFile
from pr_reviewer.services.batch_planner import (
    BatchPlanner,
    group_files_by_extension,
    strip_removed_lines,
)
from pr_reviewer.utils.tokens import MESSAGE_OVERHEAD_TOKENS, TokenBudget

# A conversation fits iff its files hold at most this many words in total
WORD_LIMIT = 50


def words(count: int, marker: str = "w") -> str:
    return " ".join([marker] * count)


def diff_only_builder(files):
    return Conversation.of(("user", "\n".join(file.patch for file in files)))


@pytest.fixture
def planner(estimator) -> BatchPlanner:
    budget = TokenBudget(
        estimator,
        context_tokens=WORD_LIMIT + MESSAGE_OVERHEAD_TOKENS + 10,
        output_reserve_tokens=10,
    )
    return BatchPlanner(budget, diff_only_builder)


def batch_names(plan):
    return [[file.filename for file in batch] for batch in plan.batches]


class TestStripRemovedLines:
    def test_removes_deleted_lines_only(self):
        file = ChangedFile(filename="a.py", patch="@@ -1,2 +1,2 @@\n-old\n+new\n context")

        stripped = strip_removed_lines(file)

        assert stripped.patch == "@@ -1,2 +1,2 @@\n+new\n context"
        assert file.patch.startswith("@@")  # original untouched
        assert "-old" in file.patch

    def test_is_idempotent(self):
        file = ChangedFile(filename="a.py", patch="-a\n-b\n+c\n d\n-e")

        once = strip_removed_lines(file)
        twice = strip_removed_lines(once)

        assert twice.patch == once.patch


class TestGroupFilesByExtension:
    def test_groups_in_first_appearance_order(self):
        files = [
            ChangedFile(filename="a.py"),
            ChangedFile(filename="b.JS"),
            ChangedFile(filename="c.py"),
        ]

        grouped = group_files_by_extension(files)

        assert list(grouped) == ["py", "js"]
        assert [f.filename for f in grouped["py"]] == ["a.py", "c.py"]


class TestBatchPlanner:
    def test_empty_input_yields_no_batches(self, planner):
        plan = planner.plan([])

        assert plan.batches == []
        assert plan.dropped == []

    def test_everything_fits_in_one_batch(self, planner):
        files = [
            ChangedFile(filename="a.py", patch=words(10)),
            ChangedFile(filename="b.js", patch=words(10)),
        ]

        plan = planner.plan(files)

        assert batch_names(plan) == [["a.py", "b.js"]]

    def test_annotates_token_lengths(self, planner):
        files = [ChangedFile(filename="a.py", patch=words(10))]

        planner.plan(files)

        assert files[0].patch_token_length is not None
        assert files[0].patch_token_length > 0

    def test_groups_by_extension_when_all_do_not_fit(self, planner):
        files = [
            ChangedFile(filename="a.py", patch=words(20)),
            ChangedFile(filename="b.js", patch=words(20)),
            ChangedFile(filename="c.py", patch=words(20)),
        ]

        plan = planner.plan(files)

        assert batch_names(plan) == [["a.py", "c.py"], ["b.js"]]

    def test_packs_oversized_extension_group_smallest_first(self, planner):
        files = [
            ChangedFile(filename="d.py", patch=words(30)),
            ChangedFile(filename="a.py", patch=words(10)),
            ChangedFile(filename="b.py", patch=words(20)),
            ChangedFile(filename="c.py", patch=words(25)),
        ]

        plan = planner.plan(files)

        assert batch_names(plan) == [["a.py", "b.py"], ["c.py"], ["d.py"]]

    def test_strips_removed_lines_of_too_large_files(self, planner):
        patch = "\n".join(["-" + words(40), "+" + words(20)])
        files = [ChangedFile(filename="big.py", patch=patch)]

        plan = planner.plan(files)

        assert batch_names(plan) == [["big.py"]]
        assert plan.batches[0][0].patch == "+" + words(20)
        assert plan.dropped == []

    def test_drops_files_too_large_after_stripping(self, planner):
        files = [
            ChangedFile(filename="huge.py", patch="+" + words(60)),
            ChangedFile(filename="small.py", patch=words(5)),
        ]

        plan = planner.plan(files)

        assert batch_names(plan) == [["small.py"]]
        assert [file.filename for file in plan.dropped] == ["huge.py"]

    def test_stripped_files_that_fit_alone_are_regrouped(self, planner):
        files = [
            ChangedFile(filename="x.py", patch="-" + words(60) + "\n+" + words(30)),
            ChangedFile(filename="y.py", patch="-" + words(60) + "\n+" + words(30)),
            ChangedFile(filename="z.py", patch="+" + words(70)),
        ]

        plan = planner.plan(files)

        assert batch_names(plan) == [["x.py"], ["y.py"]]
        assert [file.filename for file in plan.dropped] == ["z.py"]

    def test_within_limit_batches_come_first(self, planner):
        files = [
            ChangedFile(filename="big.py", patch="-" + words(60) + "\n+" + words(5)),
            ChangedFile(filename="small.py", patch=words(5)),
        ]

        plan = planner.plan(files)

        assert batch_names(plan) == [["small.py"], ["big.py"]]

    def test_every_batch_fits_and_every_file_appears_once(self, planner):
        rng = random.Random(17)
        extensions = ["py", "js", "ts", "go"]
        files = [
            ChangedFile(
                filename=f"file{i}.{rng.choice(extensions)}",
                patch=words(rng.randint(1, WORD_LIMIT)),
            )
            for i in range(40)
        ]

        plan = planner.plan(files)

        for batch in plan.batches:
            assert batch
            assert planner.fits(batch)
        planned = [file.filename for batch in plan.batches for file in batch]
        assert sorted(planned) == sorted(file.filename for file in files)
        assert plan.dropped == []
