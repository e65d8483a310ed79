from line_dedup.files import TextFile
from line_dedup.membership_index import build_index, distinct_lines, find_duplicates

from .adapters import run_build_index, run_find_duplicates
from .common import write_files


def test_distinct_lines_drops_empty_and_repeats():
    assert distinct_lines(["b", "", "a", "b", "", "a"]) == ["b", "a"]


def test_build_index_counts_each_file_once(tmp_path):
    paths = write_files(tmp_path, [["a", "a", "b"], ["a", "c"]])
    index = run_build_index(paths)
    assert index == {"a": {0, 1}, "b": {0}, "c": {1}}


def test_empty_lines_are_never_indexed(tmp_path):
    paths = write_files(tmp_path, [["", "a", ""], ["", "", "b"]])
    index = run_build_index(paths)
    assert "" not in index
    assert run_find_duplicates(paths) == []


def test_whitespace_lines_are_not_empty():
    files = [TextFile(0, "x", [" ", "a"]), TextFile(1, "y", [" "])]
    assert find_duplicates(build_index(files)) == [" "]


def test_lines_match_exactly():
    files = [TextFile(0, "x", ["Hello", "hello ", "\tx"]), TextFile(1, "y", ["hello", "hello", "x"])]
    assert find_duplicates(build_index(files)) == []


def test_duplicates_follow_first_appearance():
    files = [
        TextFile(0, "x", ["c", "a"]),
        TextFile(1, "y", ["a", "b"]),
        TextFile(2, "z", ["b", "c"]),
    ]
    assert find_duplicates(build_index(files)) == ["c", "a", "b"]


def test_duplicates_invariant_under_reordering(tmp_path):
    contents = [["a", "b", "c"], ["b", "c", "d"], ["d", "e"], ["f"]]
    paths = write_files(tmp_path, contents)
    forward = run_build_index(paths)
    reverse = run_build_index(list(reversed(paths)))
    n = len(paths)
    relabeled = {line: {n - 1 - i for i in members} for line, members in reverse.items()}
    assert relabeled == forward
    assert set(run_find_duplicates(paths)) == set(run_find_duplicates(list(reversed(paths)))) == {"b", "c", "d"}
