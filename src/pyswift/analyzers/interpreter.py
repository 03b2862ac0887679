# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""AST provider backed by an external Python interpreter process."""

import asyncio
import json
import logging
import sys

from pyswift.analyzer import ASTNode, InfrastructureParseError, StructuredParseError

logger = logging.getLogger(__name__)

DEFAULT_INTERPRETER = sys.executable or "/usr/bin/python3"

_BOILERPLATE = '''\
import ast
import json

SOURCE = {source}
DEFINITIONS = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)
TOP_LEVEL = DEFINITIONS + (ast.Import, ast.ImportFrom)


def leaf(node):
    payload = {{"type": type(node).__name__, "children": []}}
    if hasattr(node, "lineno"):
        payload["lineNumber"] = node.lineno
    return payload


def alias(node):
    payload = {{"type": "alias", "name": node.name, "children": []}}
    if node.asname:
        payload["attributes"] = {{"asname": node.asname}}
    return payload


def convert(node):
    if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        attributes = {{"args": ", ".join(arg.arg for arg in node.args.args)}}
        if node.returns is not None:
            attributes["returns"] = ast.unparse(node.returns)
        if isinstance(node, ast.AsyncFunctionDef):
            attributes["async"] = "true"
        return {{
            "type": "FunctionDef",
            "name": node.name,
            "lineNumber": node.lineno,
            "attributes": attributes,
            "children": [convert(child) for child in node.body],
        }}
    if isinstance(node, ast.ClassDef):
        attributes = {{}}
        if node.bases:
            attributes["bases"] = ", ".join(ast.unparse(base) for base in node.bases)
        return {{
            "type": "ClassDef",
            "name": node.name,
            "lineNumber": node.lineno,
            "attributes": attributes,
            "children": [convert(child) for child in node.body],
        }}
    if isinstance(node, ast.Import):
        return {{
            "type": "Import",
            "lineNumber": node.lineno,
            "children": [alias(name) for name in node.names],
        }}
    if isinstance(node, ast.ImportFrom):
        return {{
            "type": "ImportFrom",
            "name": node.module,
            "lineNumber": node.lineno,
            "attributes": {{"module": node.module or "", "level": str(node.level)}},
            "children": [alias(name) for name in node.names],
        }}
    return leaf(node)


try:
    tree = ast.parse(SOURCE)
except SyntaxError as exc:
    print(json.dumps({{"type": "Error", "error": str(exc), "lineNumber": exc.lineno}}))
except (ValueError, RecursionError) as exc:
    print(json.dumps({{"type": "Error", "error": str(exc)}}))
else:
    print(json.dumps({{
        "type": "Module",
        "children": [convert(node) for node in tree.body if isinstance(node, TOP_LEVEL)],
    }}))
'''


def build_parse_script(text: str) -> str:
    """Render the interpreter-side script that parses ``text``.

    Args:
        text: Python source to embed as an escaped literal.

    Returns:
        Script text to feed to the interpreter's standard input.
    """
    return _BOILERPLATE.format(source=repr(text))


class InterpreterAstProvider:
    """Acquire ASTs by asking an external interpreter to parse the source."""

    def __init__(self, interpreter: str = DEFAULT_INTERPRETER) -> None:
        """Initialize provider.

        Args:
            interpreter: Executable path of the Python interpreter to spawn.
        """
        self._interpreter = interpreter

    async def parse(self, text: str) -> ASTNode:
        """Parse source text in a child interpreter process.

        Args:
            text: Python source text.

        Returns:
            Root ``Module`` node restricted to import, function and class nodes.

        Raises:
            StructuredParseError: If the interpreter reports a syntax error.
            InfrastructureParseError: If the process cannot be spawned or its
                output is not the expected JSON.
        """
        script = build_parse_script(text).encode("utf-8")
        try:
            process = await asyncio.create_subprocess_exec(
                self._interpreter,
                "-",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate(script)
        except OSError as exc:
            logger.warning(
                f"Failed to spawn interpreter (interpreter={self._interpreter} error={exc})"
            )
            raise InfrastructureParseError(
                f"Could not run interpreter {self._interpreter}: {exc}"
            ) from exc

        output = stdout.decode("utf-8", errors="replace").strip()
        try:
            payload = json.loads(output)
        except json.JSONDecodeError as exc:
            detail = stderr.decode("utf-8", errors="replace").strip().splitlines()
            logger.warning(
                f"Interpreter output is not JSON (interpreter={self._interpreter} "
                f"returncode={process.returncode} stderr={detail[-1] if detail else ''})"
            )
            raise InfrastructureParseError(
                "Interpreter produced output that could not be decoded"
            ) from exc

        if not isinstance(payload, dict):
            raise InfrastructureParseError("Interpreter output is not a JSON object")
        if "error" in payload:
            message = str(payload["error"])
            line_number = payload.get("lineNumber")
            logger.warning(f"Interpreter rejected source (error={message})")
            raise StructuredParseError(
                message, line_number if isinstance(line_number, int) else None
            )
        return ASTNode.from_dict(payload)
