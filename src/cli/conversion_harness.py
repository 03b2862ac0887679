# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI harness for Python to Swift conversion."""

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TextIO

import pathspec
from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from pyswift.analyzers import DEFAULT_INTERPRETER, InterpreterAstProvider, StructuralAnalyzer
from pyswift.conversion_manager import (
    ConversionManager,
    ExportError,
    OriginReadError,
    read_origin,
)
from pyswift.model import ConversionStatus, ScriptRecord
from pyswift.test_synthesizer import TestSynthesizer
from pyswift.transpiler import Transpiler

logger = logging.getLogger(__name__)

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "name": 2,
    "status": 1,
    "dependencies": 2,
    "functions": 2,
    "tests": 2,
    "warnings": 1,
    "error": 3,
}


@dataclass(frozen=True)
class LoadError:
    """Represent an origin file that could not be loaded."""

    path: str
    message: str


class IgnoreMatcher:
    """Match project paths against .gitignore patterns."""

    def __init__(self, spec: pathspec.GitIgnoreSpec) -> None:
        """Initialize matcher.

        Args:
            spec: Compiled gitignore matcher.
        """
        self._spec = spec

    @classmethod
    def from_project_root(cls, input_root: Path) -> "IgnoreMatcher":
        """Build matcher from root and nested .gitignore files.

        Args:
            input_root: Project root.

        Returns:
            Configured ignore matcher.

        Raises:
            OSError: If .gitignore files cannot be read.
            UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
        """
        patterns: list[str] = []
        for ignore_path in sorted(input_root.rglob(".gitignore")):
            base = ignore_path.parent.relative_to(input_root).as_posix()
            if base == ".":
                base = ""
            for line in ignore_path.read_text(encoding="utf-8").splitlines():
                patterns.append(_translate_gitignore_line(line=line, base=base))
        return cls(spec=pathspec.GitIgnoreSpec.from_lines(patterns))

    def matches(self, relative_path: str, is_dir: bool) -> bool:
        """Check whether a project-relative POSIX path should be ignored."""
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        if self._spec.match_file(normalized):
            return True
        return is_dir and self._spec.match_file(f"{normalized}/")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="pyswift")
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser("convert")
    convert_parser.add_argument(
        "--path", required=True, help="Python file or project root to convert."
    )
    convert_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    convert_parser.add_argument(
        "--output",
        required=False,
        help="Optional directory receiving .swift and XCTest files.",
    )
    convert_parser.add_argument(
        "--interpreter",
        default=DEFAULT_INTERPRETER,
        help="Python interpreter used to acquire ASTs.",
    )

    outline_parser = subparsers.add_parser("outline")
    outline_parser.add_argument("--path", required=True, help="Python file to outline.")
    outline_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    return parser


def build_manager(interpreter: str = DEFAULT_INTERPRETER) -> ConversionManager:
    """Construct the pipeline components and the manager that drives them.

    Args:
        interpreter: Python interpreter used for AST acquisition.

    Returns:
        Ready conversion manager.
    """
    return ConversionManager(
        analyzer=StructuralAnalyzer(InterpreterAstProvider(interpreter=interpreter)),
        transpiler=Transpiler(),
        test_synthesizer=TestSynthesizer(),
    )


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.command == "convert":
        return _run_convert(args=args, stdout=stdout, stderr=stderr)
    if args.command == "outline":
        return _run_outline(args=args, stdout=stdout, stderr=stderr)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_convert(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run convert command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code; 1 when any script failed to load or convert.
    """
    root_path = Path(args.path)
    if not root_path.exists():
        logger.warning(f"Path does not exist (path={root_path})")
        stderr.write(f"Path does not exist: {root_path}\n")
        return 2
    try:
        files = collect_python_files(root_path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read .gitignore files (error={exc})")
        stderr.write(f"Failed to read .gitignore files: {exc}\n")
        return 2
    if not files:
        stderr.write(f"No Python files found: {root_path}\n")
        return 2

    manager = build_manager(interpreter=args.interpreter)
    records, load_errors = asyncio.run(_convert_all(manager=manager, files=files))
    failed = [record for record in records if record.status is ConversionStatus.FAILED]
    logger.info(
        f"Conversion run completed (path={root_path} records={len(records)} "
        f"failed={len(failed)} load_errors={len(load_errors)})"
    )

    for error in load_errors:
        stderr.write(f"load_error: {error.path}: {error.message}\n")
    if args.output:
        try:
            for record in records:
                if record.status is ConversionStatus.SUCCESS:
                    manager.export_record(record, Path(args.output))
        except ExportError as exc:
            stderr.write(f"Failed to export output: {exc}\n")
            return 2

    if args.format == "json":
        _write_json(
            payload={
                "records": [record.to_dict() for record in records],
                "errors": [asdict(error) for error in load_errors],
            },
            stdout=stdout,
        )
    else:
        _write_table(records=records, stdout=stdout)
    return 1 if failed or load_errors else 0


def _run_outline(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run outline command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    path = Path(args.path)
    if not path.is_file():
        logger.warning(f"Path is not a file (path={path})")
        stderr.write(f"Path is not a file: {path}\n")
        return 2
    try:
        text = read_origin(path)
    except OriginReadError as exc:
        logger.warning(f"Origin read failed (path={path} error={exc})")
        stderr.write(f"{exc}\n")
        return 2

    analyzer = StructuralAnalyzer(InterpreterAstProvider())
    dependencies = analyzer.extract_dependencies(text)
    outline = analyzer.analyze_structure(text)
    if args.format == "json":
        _write_json(
            payload={"dependencies": dependencies, "outline": asdict(outline)},
            stdout=stdout,
        )
        return 0

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.rule(f"{path.resolve()}", style=Style(color="cyan"), characters="-")
    console.print(f"dependencies: {', '.join(dependencies) or '-'}", markup=False)
    table = Table(show_header=True, show_lines=True, expand=True)
    table.add_column("kind", ratio=1, overflow="fold")
    table.add_column("name", ratio=3, overflow="fold")
    table.add_column("line", ratio=1, justify="right", overflow="fold")
    for kind, items in (
        ("function", outline.functions),
        ("class", outline.classes),
        ("variable", outline.variables),
    ):
        for item in items:
            table.add_row(kind, item.name, str(item.line_number))
    console.print(table)
    return 0


def collect_python_files(root_path: Path) -> list[Path]:
    """Collect Python files to convert.

    Args:
        root_path: A single file, or a directory walked recursively with
            ``.gitignore`` rules applied and ``.git`` skipped.

    Returns:
        Sorted file paths.

    Raises:
        OSError: If .gitignore files cannot be read.
        UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
    """
    if root_path.is_file():
        return [root_path]
    matcher = IgnoreMatcher.from_project_root(input_root=root_path)
    files: list[Path] = []
    for file_path in sorted(root_path.rglob("*.py")):
        relative = file_path.relative_to(root_path)
        if ".git" in relative.parts:
            continue
        parents_ignored = any(
            matcher.matches(relative_path=parent.as_posix(), is_dir=True)
            for parent in relative.parents
            if parent != Path(".")
        )
        if parents_ignored or matcher.matches(
            relative_path=relative.as_posix(), is_dir=False
        ):
            continue
        files.append(file_path)
    return files


async def _convert_all(
    manager: ConversionManager, files: list[Path]
) -> tuple[list[ScriptRecord], list[LoadError]]:
    """Load all files concurrently through one manager."""

    async def load(path: Path) -> ScriptRecord | LoadError:
        record = await manager.load_script_from_origin(path)
        if record is None:
            return LoadError(path=str(path), message=manager.error_message or "")
        return record

    results = await asyncio.gather(*(load(path) for path in files))
    records = [result for result in results if isinstance(result, ScriptRecord)]
    errors = [result for result in results if isinstance(result, LoadError)]
    return records, errors


def _write_json(payload: dict[str, object], stdout: TextIO) -> None:
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(payload, indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_table(records: list[ScriptRecord], stdout: TextIO) -> None:
    """Write conversion records as a Rich table.

    Args:
        records: Converted records.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    table = Table(show_header=True, show_lines=True, expand=True)
    for column, ratio in TABLE_COLUMN_RATIOS.items():
        table.add_column(column, ratio=ratio, overflow="fold")
    for record in records:
        functions = record.outline.functions if record.outline else ()
        table.add_row(
            record.name,
            record.status.value,
            ", ".join(record.dependencies),
            ", ".join(item.name for item in functions),
            ", ".join(test.name for test in record.tests),
            str(len(record.translation_warnings)),
            record.error_message or "",
        )
    console.print(table)


def _translate_gitignore_line(line: str, base: str) -> str:
    """Translate one .gitignore line to a root-relative pattern.

    Args:
        line: Original .gitignore line.
        base: Parent directory relative to project root.

    Returns:
        Root-relative pattern line.
    """
    if not base or not line or line.lstrip().startswith("#"):
        return line
    if line.startswith(r"\!") or line.startswith(r"\#"):
        return line
    is_negation = line.startswith("!")
    pattern = line[1:] if is_negation else line
    anchored = pattern.startswith("/")
    normalized_pattern = pattern[1:] if anchored else pattern
    prefixed = f"{base}/{normalized_pattern}" if normalized_pattern else base
    if anchored:
        prefixed = f"/{prefixed}"
    return f"!{prefixed}" if is_negation else prefixed


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
