import hashlib
import os
import shutil
import tempfile
from dataclasses import dataclass, field

ENCODING = "utf-8"


class UsageError(Exception):
    pass


class InputFileError(OSError):
    def __init__(self, path: os.PathLike | str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass
class TextFile:
    index: int
    path: str
    lines: list[str] = field(default_factory=list)


def split_lines(text: str) -> list[str]:
    """Split on "\\n" only; a trailing newline does not add an empty line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def join_lines(lines: list[str]) -> str:
    return "".join(line + "\n" for line in lines)


def read_lines(path: os.PathLike | str) -> list[str]:
    with open(path, "r", encoding=ENCODING, newline="") as f:
        return split_lines(f.read())


def check_input_path(path: os.PathLike | str):
    if not os.path.exists(path):
        raise InputFileError(path, "file does not exist")
    if not os.path.isfile(path):
        raise InputFileError(path, "not a regular file")
    if not os.access(path, os.R_OK):
        raise InputFileError(path, "file is not readable")


def load_files(paths: list[str]) -> list[TextFile]:
    """Validate every path and read all of them before anything is changed."""
    if len(paths) < 2:
        raise UsageError("Please provide at least two files as arguments")
    seen: dict[tuple[int, int], str] = {}
    for path in paths:
        check_input_path(path)
        st = os.stat(path)
        key = (st.st_dev, st.st_ino)
        if key in seen:
            raise UsageError(f"{path} and {seen[key]} are the same file given more than once")
        seen[key] = path
    files = []
    for i, path in enumerate(paths):
        try:
            lines = read_lines(path)
        except UnicodeDecodeError:
            raise InputFileError(path, f"file is not valid {ENCODING} text")
        except OSError as e:
            raise InputFileError(path, e.strerror or str(e))
        files.append(TextFile(index=i, path=path, lines=lines))
    return files


def write_lines_atomic(path: os.PathLike | str, lines: list[str]):
    # Scratch file lives next to the target so os.replace stays on one filesystem.
    dir_ = os.path.dirname(os.path.abspath(path)) or "."
    fd, tmp_path = tempfile.mkstemp(prefix=".line_dedup_", dir=dir_, text=True)
    try:
        with os.fdopen(fd, "w", encoding=ENCODING, newline="") as tmp:
            tmp.write(join_lines(lines))
        if os.path.exists(path):
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def sha256_file(path: os.PathLike | str, chunk_size: int = 1 << 16) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()
