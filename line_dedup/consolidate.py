import enum
from dataclasses import dataclass, field
from typing import Iterable, Optional

from line_dedup.files import TextFile, write_lines_atomic


class Policy(enum.Enum):
    """What to do with duplicates the authoritative file does not contain."""

    ADD_AND_REMOVE = 1
    LEAVE_UNCHANGED = 2
    REMOVE_FROM_ALL = 3


POLICY_DESCRIPTIONS = {
    Policy.ADD_AND_REMOVE: "Add them to master file and remove from others",
    Policy.LEAVE_UNCHANGED: "Leave them as is (no changes)",
    Policy.REMOVE_FROM_ALL: "Remove them from all files",
}


@dataclass
class ConsolidationPlan:
    authoritative_index: int
    policy: Optional[Policy]
    in_authoritative: list[str] = field(default_factory=list)
    not_in_authoritative: list[str] = field(default_factory=list)
    lines_to_delete: set[str] = field(default_factory=set)
    lines_to_add: list[str] = field(default_factory=list)

    def files_to_clean(self, membership: dict[str, set[int]]) -> list[int]:
        """Non-authoritative files holding at least one line to delete."""
        indices: set[int] = set()
        for line in self.lines_to_delete:
            indices.update(membership.get(line, ()))
        indices.discard(self.authoritative_index)
        return sorted(indices)

    def is_noop(self) -> bool:
        return not self.lines_to_delete and not self.lines_to_add


def split_by_authoritative(
    duplicates: Iterable[str], membership: dict[str, set[int]], authoritative_index: int
) -> tuple[list[str], list[str]]:
    in_authoritative, not_in_authoritative = [], []
    for line in duplicates:
        if authoritative_index in membership[line]:
            in_authoritative.append(line)
        else:
            not_in_authoritative.append(line)
    return in_authoritative, not_in_authoritative


def partition(
    duplicates: Iterable[str],
    membership: dict[str, set[int]],
    authoritative_index: int,
    policy: Optional[Policy] = None,
    num_files: Optional[int] = None,
) -> ConsolidationPlan:
    if authoritative_index < 0 or (num_files is not None and authoritative_index >= num_files):
        raise ValueError(f"Authoritative index out of range: {authoritative_index}")

    in_authoritative, not_in_authoritative = split_by_authoritative(duplicates, membership, authoritative_index)
    plan = ConsolidationPlan(
        authoritative_index=authoritative_index,
        policy=policy,
        in_authoritative=in_authoritative,
        not_in_authoritative=not_in_authoritative,
    )

    plan.lines_to_delete.update(plan.in_authoritative)
    if not plan.not_in_authoritative:
        return plan

    if policy is None:
        raise ValueError(
            f"A policy is required: {len(plan.not_in_authoritative)} duplicate line(s) are not in the authoritative file"
        )
    if policy == Policy.ADD_AND_REMOVE:
        plan.lines_to_add.extend(plan.not_in_authoritative)
        plan.lines_to_delete.update(plan.not_in_authoritative)
    elif policy == Policy.REMOVE_FROM_ALL:
        plan.lines_to_delete.update(plan.not_in_authoritative)
    return plan


def filter_lines(lines: list[str], lines_to_delete: set[str]) -> list[str]:
    return [line for line in lines if line not in lines_to_delete]


def apply_plan(files: list[TextFile], plan: ConsolidationPlan) -> list[int]:
    """Rewrite the files that the plan changes and return their indices.

    The authoritative file is only ever appended to; every other file is
    filtered line by line. Files whose content would not change are left
    alone so their bytes stay identical.
    """
    rewritten = []
    for file in files:
        if file.index == plan.authoritative_index:
            if not plan.lines_to_add:
                continue
            new_lines = file.lines + plan.lines_to_add
        else:
            new_lines = filter_lines(file.lines, plan.lines_to_delete)
            if len(new_lines) == len(file.lines):
                continue
        write_lines_atomic(file.path, new_lines)
        file.lines = new_lines
        rewritten.append(file.index)
    return rewritten
