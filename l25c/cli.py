"""Command-line entry point: compile an L25 file and optionally run it."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .compiler import Compiler

OUTPUT_FILES = {
    "table": "ftable.txt",
    "general": "foutput.txt",
    "code": "fcode.txt",
    "result": "fresult.txt",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="l25c", description="Compile and run an L25 program."
    )
    parser.add_argument("path", nargs="?", help="L25 source file (asked for if omitted)")
    parser.add_argument(
        "--list-code",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="list the generated instructions",
    )
    parser.add_argument(
        "--list-table",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="list the symbol table",
    )
    parser.add_argument(
        "--execute",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="run the program after a successful compilation",
    )
    parser.add_argument(
        "--output-dir",
        default=".",
        help="directory for the listing files (default: current directory)",
    )
    return parser


def _read_answer() -> str:
    return sys.stdin.readline().strip()


def _ask(question: str, preset: bool | None, show: bool = True) -> bool:
    if preset is not None:
        return preset
    print(question)
    answer = _read_answer() in ("y", "Y")
    if show:
        print(int(answer))
    return answer


def main(argv: list[str] | None = None) -> int:
    """Run the compiler; return the process exit status."""
    args = _build_parser().parse_args(argv)

    path = args.path
    if path is None:
        print("Input L25 file path:")
        path = _read_answer()
    try:
        source = Path(path).read_text(encoding="utf-8")
    except OSError:
        print(f"The input file cannot be opened: {path}", file=sys.stderr)
        return 1
    if not source:
        print("The input file is empty!")
        return 1

    list_code = _ask("List object codes?(Y/N)", args.list_code)
    list_table = _ask("List symbol table?(Y/N)", args.list_table)

    compiler = Compiler(source, list_code=list_code, list_table=list_table, echo=True)
    if compiler.compile():
        print("Compilation successful!")
        if _ask("Execute the program?(Y/N)", args.execute, show=False):
            print("\n=== Program Output ===")
            compiler.execute(sys.stdin)
    else:
        print("Compilation failed!")

    out_dir = Path(args.output_dir)
    try:
        for channel, filename in OUTPUT_FILES.items():
            (out_dir / filename).write_text(
                compiler.listing.text(channel), encoding="utf-8"
            )
    except OSError as exc:
        print(f"Cannot write output files: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())