"""Packing of changed files into token-bounded review batches."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from pr_reviewer.models.conversation import Conversation
from pr_reviewer.models.github_types import ChangedFile
from pr_reviewer.prompts.code_reviewer_prompt import build_patch_prompt
from pr_reviewer.utils.tokens import TokenBudget

logger = logging.getLogger(__name__)

ConversationBuilder = Callable[[Sequence[ChangedFile]], Conversation]
PatchBuilder = Callable[[ChangedFile], str]

Batch = list[ChangedFile]


@dataclass
class BatchPlan:
    """Batches to review, plus files too large to fit any batch."""

    batches: list[Batch] = field(default_factory=list)
    dropped: list[ChangedFile] = field(default_factory=list)


def strip_removed_lines(file: ChangedFile) -> ChangedFile:
    """Return a copy of ``file`` whose patch keeps no removed ("-") lines."""
    stripped_patch = "\n".join(
        line for line in file.patch.split("\n") if not line.startswith("-")
    )
    return file.model_copy(update={"patch": stripped_patch, "patch_token_length": None})


def annotate_token_lengths(
    files: Sequence[ChangedFile],
    budget: TokenBudget,
    patch_builder: PatchBuilder = build_patch_prompt,
) -> None:
    """Record the token cost of each file's rendered diff on the file itself."""
    for file in files:
        if file.patch_token_length is None:
            file.patch_token_length = budget.cost(patch_builder(file))


def group_files_by_extension(files: Sequence[ChangedFile]) -> dict[str, Batch]:
    """Group files by lower-cased extension, keeping first-appearance order."""
    grouped: dict[str, Batch] = {}
    for file in files:
        grouped.setdefault(file.extension, []).append(file)
    return grouped


class BatchPlanner:
    """Greedy, deterministic packer of changed files into review batches.

    Every emitted batch satisfies ``budget.fits`` for the conversation the
    builder produces from it. Files that do not fit on their own, even after
    their removed lines are stripped, are dropped from the plan.
    """

    def __init__(
        self,
        budget: TokenBudget,
        convo_builder: ConversationBuilder,
        patch_builder: PatchBuilder = build_patch_prompt,
    ) -> None:
        self.budget = budget
        self.convo_builder = convo_builder
        self.patch_builder = patch_builder

    def fits(self, files: Sequence[ChangedFile]) -> bool:
        return self.budget.fits(self.convo_builder(files))

    def plan(self, files: Sequence[ChangedFile]) -> BatchPlan:
        """Split ``files`` into batches that each fit the model's context.

        Args:
            files: Filtered changed files

        Returns:
            BatchPlan with within-limit batches first, then batches built from
            stripped oversized files, and the files that had to be dropped
        """
        annotate_token_lengths(files, self.budget, self.patch_builder)

        within_limit: Batch = []
        outside_limit: Batch = []
        for file in files:
            if self.fits([file]):
                within_limit.append(file)
            else:
                outside_limit.append(file)

        logger.info(
            f"Batch planning: {len(within_limit)} files within limits, "
            f"{len(outside_limit)} files outside limits"
        )

        plan = BatchPlan(batches=self._plan_within_limit(within_limit))
        outside_batches, dropped = self._plan_outside_limit(outside_limit)
        plan.batches.extend(outside_batches)
        plan.dropped = dropped

        logger.info(
            f"Planned {len(plan.batches)} batches, dropped {len(plan.dropped)} files"
        )
        return plan

    def _plan_within_limit(self, files: Batch) -> list[Batch]:
        # Every file here fits in a conversation on its own
        if not files:
            return []
        if self.fits(files):
            return [list(files)]

        batches: list[Batch] = []
        for extension, group in group_files_by_extension(files).items():
            if self.fits(group):
                batches.append(group)
                continue

            logger.debug(
                f"Extension group '.{extension}' ({len(group)} files) exceeds model limit, packing greedily"
            )
            current: Batch = []
            for file in sorted(group, key=lambda f: f.patch_token_length or 0):
                if self.fits([*current, file]):
                    current.append(file)
                else:
                    if current:
                        batches.append(current)
                    current = [file]
            if current:
                batches.append(current)
        return batches

    def _plan_outside_limit(self, files: Batch) -> tuple[list[Batch], Batch]:
        if not files:
            return [], []

        stripped = [strip_removed_lines(file) for file in files]
        annotate_token_lengths(stripped, self.budget, self.patch_builder)
        if self.fits(stripped):
            return [stripped], []

        within_limit: Batch = []
        exceeding: Batch = []
        for file in stripped:
            if self.fits([file]):
                within_limit.append(file)
            else:
                exceeding.append(file)

        if exceeding:
            logger.warning(
                f"Dropping {len(exceeding)} files too large to review even without "
                f"removed lines: {', '.join(f.filename for f in exceeding)}"
            )
        return self._plan_within_limit(within_limit), exceeding
