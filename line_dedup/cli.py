#!/usr/bin/env python3
"""Find lines shared across text files and consolidate them into one master file.

    line-dedup notes.txt todo.txt archive.txt

Every non-empty line that appears in more than one file is reported. After
choosing the master file, duplicates it already holds are deleted from the
other files; duplicates it lacks are added to it, left alone, or removed
everywhere depending on the chosen policy. Nothing is written until the
summary is confirmed.
"""
import argparse
import enum
import sys
from typing import Optional, TextIO

from rich.console import Console
from rich.markup import escape
from rich.progress import track
from rich.prompt import IntPrompt, Prompt

from line_dedup.consolidate import (
    POLICY_DESCRIPTIONS,
    ConsolidationPlan,
    Policy,
    apply_plan,
    partition,
    split_by_authoritative,
)
from line_dedup.files import InputFileError, TextFile, UsageError, load_files, sha256_file
from line_dedup.membership_index import build_index, find_duplicates

AFFIRMATIVE = ("yes", "y")
RULE = "=" * 40


class Stage(enum.Enum):
    DONE = "done"
    CANCELLED = "cancelled"


class StreamPromptMixin:
    """Raise EOFError when an injected input stream is exhausted, as input() does on stdin."""

    @classmethod
    def get_input(cls, console: Console, prompt, password: bool, stream: Optional[TextIO] = None) -> str:
        answer = console.input(prompt, password=password, stream=stream)
        if stream is not None and not answer:
            raise EOFError
        return answer


class MenuPrompt(StreamPromptMixin, IntPrompt):
    pass


class AnswerPrompt(StreamPromptMixin, Prompt):
    pass


def display_hashes(console: Console, files: list[TextFile]):
    for file in files:
        console.print(f"  [blue]{escape(file.path)}:[/blue] [green]{sha256_file(file.path)}[/green]")


def report_duplicates(console: Console, files: list[TextFile], membership: dict[str, set[int]], duplicates: list[str]):
    console.print(f"[green]Found {len(duplicates)} line(s) that appear in multiple files:[/green]\n")
    console.print(f"[blue]{RULE}[/blue]")
    for number, line in enumerate(duplicates, start=1):
        console.print(f"[cyan][{number}] Line:[/cyan] {escape(line)}")
        console.print("    [yellow]Found in:[/yellow]")
        for idx in sorted(membership[line]):
            console.print(f"      - {escape(files[idx].path)}")
        console.print()
    console.print(f"[blue]{RULE}[/blue]\n")


def choose_authoritative(console: Console, files: list[TextFile], stream: Optional[TextIO] = None) -> Optional[int]:
    console.print("[yellow]Which file do you want to use as the MASTER file?[/yellow]")
    console.print("[cyan](Duplicate lines will be removed from other files only if they exist in the master)[/cyan]\n")
    for file in files:
        console.print(f"{file.index + 1}) {escape(file.path)}")
    cancel = len(files) + 1
    console.print(f"{cancel}) Cancel (exit without changes)\n")
    choice = MenuPrompt.ask(
        f"Enter your choice (1-{cancel})",
        console=console,
        choices=[str(i) for i in range(1, cancel + 1)],
        show_choices=False,
        stream=stream,
    )
    if choice == cancel:
        return None
    return choice - 1


def report_analysis(
    console: Console,
    files: list[TextFile],
    membership: dict[str, set[int]],
    authoritative_index: int,
    in_authoritative: list[str],
    not_in_authoritative: list[str],
):
    master = files[authoritative_index]
    console.print("\n[yellow]=== Analysis ===[/yellow]")
    console.print(f"[green]Lines that exist in master ({escape(master.path)}):[/green] {len(in_authoritative)}")
    console.print(f"[magenta]Lines duplicated in other files but NOT in master:[/magenta] {len(not_in_authoritative)}\n")

    if in_authoritative:
        console.print("[cyan]The following lines will be REMOVED from other files (kept in master):[/cyan]")
        for line in in_authoritative:
            console.print(f"  - {escape(line)}")
            console.print("    [yellow]Will be deleted from:[/yellow]")
            for idx in sorted(membership[line] - {authoritative_index}):
                console.print(f"      • {escape(files[idx].path)}")
        console.print()

    if not_in_authoritative:
        console.print("[magenta]The following lines are duplicated across other files but NOT in master:[/magenta]")
        for line in not_in_authoritative:
            console.print(f"  - {escape(line)}")
            console.print("    [yellow]Found in:[/yellow]")
            for idx in sorted(membership[line]):
                console.print(f"      • {escape(files[idx].path)}")
        console.print()


def choose_policy(console: Console, stream: Optional[TextIO] = None) -> Policy:
    console.print("[yellow]What do you want to do with these lines?[/yellow]")
    for policy in Policy:
        console.print(f"{policy.value}) {POLICY_DESCRIPTIONS[policy]}")
    choice = MenuPrompt.ask(
        "Enter your choice (1-3)",
        console=console,
        choices=[str(p.value) for p in Policy],
        show_choices=False,
        stream=stream,
    )
    return Policy(choice)


def report_summary(console: Console, files: list[TextFile], plan: ConsolidationPlan, to_clean: list[int]):
    console.print("[yellow]=== Summary ===[/yellow]")
    console.print(f"[green]Master file:[/green] {escape(files[plan.authoritative_index].path)}")
    if plan.lines_to_add:
        console.print(f"[green]Lines to ADD to master:[/green] {len(plan.lines_to_add)}")
    if plan.lines_to_delete:
        console.print(f"[red]Lines to REMOVE from other files:[/red] {len(plan.lines_to_delete)}")
        for idx in to_clean:
            console.print(f"  - {escape(files[idx].path)}")
    console.print()


def confirm(console: Console, stream: Optional[TextIO] = None) -> bool:
    answer = AnswerPrompt.ask("Proceed with these changes? (yes/no)", console=console, stream=stream)
    return answer.strip().lower() in AFFIRMATIVE


def run(
    paths: list[str],
    console: Console,
    policy: Optional[Policy] = None,
    assume_yes: bool = False,
    stream: Optional[TextIO] = None,
) -> Stage:
    """Drive one consolidation run and return the terminal stage (DONE or CANCELLED)."""
    console.print("[yellow]=== Multi-File Consolidation Tool ===[/yellow]\n")
    console.print("[cyan]Validating files...[/cyan]")
    files = load_files(paths)
    for file in files:
        console.print(f"  [green]✓[/green] {escape(file.path)}")
    console.print()

    console.print("[yellow]Initial hashes:[/yellow]")
    display_hashes(console, files)
    console.print()

    console.print("[yellow]Analyzing files for matching lines...[/yellow]\n")
    membership = build_index(track(files, description="Indexing", console=console, transient=True))
    duplicates = find_duplicates(membership)
    if not duplicates:
        console.print("[green]No matching lines found across the files.[/green]")
        return Stage.DONE

    report_duplicates(console, files, membership, duplicates)

    authoritative_index = choose_authoritative(console, files, stream)
    if authoritative_index is None:
        console.print("[yellow]Operation cancelled. No changes made.[/yellow]")
        return Stage.CANCELLED

    in_authoritative, not_in_authoritative = split_by_authoritative(duplicates, membership, authoritative_index)
    report_analysis(console, files, membership, authoritative_index, in_authoritative, not_in_authoritative)
    if not_in_authoritative and policy is None:
        policy = choose_policy(console, stream)
        console.print()

    plan = partition(duplicates, membership, authoritative_index, policy, num_files=len(files))
    to_clean = plan.files_to_clean(membership)
    if plan.is_noop():
        console.print("[cyan]Nothing to change: no file needs cleaning.[/cyan]")
        return Stage.DONE

    report_summary(console, files, plan, to_clean)
    if not assume_yes and not confirm(console, stream):
        console.print("[yellow]Operation cancelled. No changes made.[/yellow]")
        return Stage.CANCELLED

    console.print("\n[yellow]Processing files...[/yellow]\n")
    rewritten = apply_plan(files, plan)
    for idx in rewritten:
        action = "Adding lines to master" if idx == plan.authoritative_index else "Cleaned"
        console.print(f"  [cyan]{action}:[/cyan] {escape(files[idx].path)} [green]✓ Done[/green]")
    console.print("\n[green]All files processed successfully![/green]\n")

    console.print("[yellow]Recalculated hashes:[/yellow]")
    display_hashes(console, files)
    console.print("\n[green]=== Operation completed successfully ===[/green]")
    return Stage.DONE


class ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="line-dedup",
        description="Find lines shared across files and consolidate them into a master file.",
    )
    parser.add_argument("files", nargs="*", help="Text files to compare (at least two)")
    parser.add_argument(
        "--policy",
        type=int,
        choices=[p.value for p in Policy],
        help="Preselect what to do with duplicates missing from the master: "
        + ", ".join(f"{p.value}={POLICY_DESCRIPTIONS[p].lower()}" for p in Policy),
    )
    parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation before writing")
    return parser


def main(argv: Optional[list[str]] = None, console: Optional[Console] = None, stream: Optional[TextIO] = None) -> int:
    console = console or Console()
    err_console = Console(stderr=True) if console.file is sys.stdout else console
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        if len(args.files) < 2:
            raise UsageError("Please provide at least two files as arguments")
        policy = Policy(args.policy) if args.policy is not None else None
        run(args.files, console, policy=policy, assume_yes=args.yes, stream=stream)
    except UsageError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        err_console.print(escape(parser.format_usage().strip()), highlight=False)
        return 1
    except InputFileError as e:
        err_console.print(f"[red]Error: File '{escape(str(e.path))}': {escape(e.reason)}[/red]")
        return 1
    except (EOFError, KeyboardInterrupt):
        console.print("\n[yellow]Operation cancelled.[/yellow]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
