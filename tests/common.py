import pathlib


def write_files(directory: pathlib.Path, contents: list[list[str]]) -> list[pathlib.Path]:
    paths = []
    for i, lines in enumerate(contents, start=1):
        path = directory / f"f{i}.txt"
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        paths.append(path)
    return paths


def read_lines(path: pathlib.Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()
