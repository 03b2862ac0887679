# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the conversion CLI harness."""

import io
import json
import re
import sys
from pathlib import Path

from cli.conversion_harness import _translate_gitignore_line, collect_python_files, run

GREET_SOURCE = 'import os\n\ndef greet(name: str) -> str:\n    return "Hello, " + name\n'


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _run(argv: list[str]) -> tuple[int, str, str]:
    stdout = io.StringIO()
    stderr = io.StringIO()
    exit_code = run(argv, stdout=stdout, stderr=stderr)
    return exit_code, _strip_ansi(stdout.getvalue()), stderr.getvalue()


def test_cli_001_requires_a_command() -> None:
    exit_code, _, _ = _run([])

    assert exit_code == 2


def test_cli_002_convert_fails_when_path_is_missing(tmp_path: Path) -> None:
    exit_code, _, stderr = _run(["convert", "--path", str(tmp_path / "missing")])

    assert exit_code == 2
    assert "Path does not exist" in stderr


def test_cli_003_convert_fails_when_no_python_files_exist(tmp_path: Path) -> None:
    _write_file(tmp_path / "notes.txt", "hello")

    exit_code, _, stderr = _run(["convert", "--path", str(tmp_path)])

    assert exit_code == 2
    assert "No Python files found" in stderr


def test_cli_004_convert_single_file_as_json(tmp_path: Path) -> None:
    source = tmp_path / "greeter.py"
    _write_file(source, GREET_SOURCE)

    exit_code, stdout, _ = _run(
        [
            "convert",
            "--path",
            str(source),
            "--format",
            "json",
            "--interpreter",
            sys.executable,
        ]
    )

    assert exit_code == 0
    payload = json.loads(stdout)
    assert payload["errors"] == []
    (record,) = payload["records"]
    assert record["name"] == "greeter.py"
    assert record["status"] == "success"
    assert record["dependencies"] == ["os"]
    assert "func greet(name: String) -> String {" in record["translated_text"]
    assert [test["name"] for test in record["tests"]] == ["testGreet"]


def test_cli_005_convert_directory_respects_gitignore(tmp_path: Path) -> None:
    _write_file(tmp_path / ".gitignore", "build/\n*_generated.py\n")
    _write_file(tmp_path / "app" / "main.py", GREET_SOURCE)
    _write_file(tmp_path / "app" / "schema_generated.py", "x = 1\n")
    _write_file(tmp_path / "build" / "copy.py", GREET_SOURCE)
    _write_file(tmp_path / ".git" / "hooks" / "hook.py", "x = 1\n")

    files = collect_python_files(tmp_path)

    assert files == [tmp_path / "app" / "main.py"]


def test_cli_006_nested_gitignore_patterns_are_rooted_at_their_directory() -> None:
    assert _translate_gitignore_line(line="*.tmp.py", base="pkg") == "pkg/*.tmp.py"
    assert _translate_gitignore_line(line="/local.py", base="pkg") == "/pkg/local.py"
    assert _translate_gitignore_line(line="!keep.py", base="pkg") == "!pkg/keep.py"
    assert _translate_gitignore_line(line="# comment", base="pkg") == "# comment"
    assert _translate_gitignore_line(line="*.tmp.py", base="") == "*.tmp.py"


def test_cli_007_convert_with_output_writes_swift_files(tmp_path: Path) -> None:
    project = tmp_path / "project"
    output = tmp_path / "swift"
    _write_file(project / "greeter.py", GREET_SOURCE)

    exit_code, _, _ = _run(
        [
            "convert",
            "--path",
            str(project),
            "--output",
            str(output),
            "--interpreter",
            sys.executable,
        ]
    )

    assert exit_code == 0
    assert (output / "greeter.swift").read_text(encoding="utf-8").startswith(
        "// Auto-generated Swift code from Python\n"
    )
    assert "func testGreet() {" in (output / "greeterTests.swift").read_text(
        encoding="utf-8"
    )


def test_cli_008_convert_reports_failure_with_exit_code_one(tmp_path: Path) -> None:
    _write_file(tmp_path / "good.py", GREET_SOURCE)
    _write_file(tmp_path / "bad.py", "def broken(:\n    pass\n")

    exit_code, stdout, _ = _run(
        [
            "convert",
            "--path",
            str(tmp_path),
            "--format",
            "json",
            "--interpreter",
            sys.executable,
        ]
    )

    assert exit_code == 1
    statuses = {record["name"]: record["status"] for record in json.loads(stdout)["records"]}
    assert statuses == {"bad.py": "failed", "good.py": "success"}


def test_cli_009_convert_reports_unreadable_files_as_load_errors(tmp_path: Path) -> None:
    (tmp_path / "binary.py").write_bytes(b"\xff\xfe\x00")

    exit_code, stdout, stderr = _run(
        ["convert", "--path", str(tmp_path), "--format", "json"]
    )

    assert exit_code == 1
    payload = json.loads(stdout)
    assert payload["records"] == []
    assert payload["errors"][0]["path"] == str(tmp_path / "binary.py")
    assert "load_error:" in stderr


def test_cli_010_outline_as_json(tmp_path: Path) -> None:
    source = tmp_path / "shapes.py"
    _write_file(
        source,
        "import math\n\nPI = 3.14\n\nclass Circle:\n    def area(self):\n        return PI\n",
    )

    exit_code, stdout, _ = _run(["outline", "--path", str(source), "--format", "json"])

    assert exit_code == 0
    payload = json.loads(stdout)
    assert payload["dependencies"] == ["math"]
    assert payload["outline"]["classes"] == [
        {"name": "Circle", "line_number": 5, "parameters": []}
    ]
    assert payload["outline"]["functions"][0]["name"] == "area"
    assert payload["outline"]["variables"][0]["name"] == "PI"
    assert payload["outline"]["total_lines"] == 7


def test_cli_011_outline_table_lists_symbols(tmp_path: Path) -> None:
    source = tmp_path / "greeter.py"
    _write_file(source, GREET_SOURCE)

    exit_code, stdout, _ = _run(["outline", "--path", str(source)])

    assert exit_code == 0
    assert "dependencies: os" in stdout
    assert "greet" in stdout


def test_cli_012_outline_fails_for_directories(tmp_path: Path) -> None:
    exit_code, _, stderr = _run(["outline", "--path", str(tmp_path)])

    assert exit_code == 2
    assert "Path is not a file" in stderr
