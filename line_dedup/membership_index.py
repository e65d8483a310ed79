from typing import Iterable

from line_dedup.files import TextFile


def distinct_lines(lines: Iterable[str]) -> list[str]:
    """Distinct non-empty lines, in order of first occurrence."""
    return list(dict.fromkeys(line for line in lines if line))


def build_index(files: Iterable[TextFile]) -> dict[str, set[int]]:
    """Map every non-empty line to the indices of the files that contain it.

    A line repeated inside one file counts once for that file. Insertion order
    follows the first appearance of each line (file order, then line order).
    """
    index: dict[str, set[int]] = {}
    for file in files:
        for line in distinct_lines(file.lines):
            index.setdefault(line, set()).add(file.index)
    return index


def find_duplicates(index: dict[str, set[int]]) -> list[str]:
    return [line for line, members in index.items() if len(members) > 1]
