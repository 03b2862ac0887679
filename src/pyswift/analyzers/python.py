# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Python source structural analyzer implementation."""

import logging
import re

from pyswift.analyzer import ASTNode, AstProvider, OutlineItem, StructuralOutline

logger = logging.getLogger(__name__)

_IMPORT_PATTERN = re.compile(r"^[ \t]*import[ \t]+(?P<modules>[^#\n]+)", re.MULTILINE)
_FROM_IMPORT_PATTERN = re.compile(
    r"^[ \t]*from[ \t]+(?P<module>\w[\w.]*)[ \t]+import\b", re.MULTILINE
)
_FUNCTION_PATTERN = re.compile(r"^(?:async\s+)?def\s+(?P<name>\w+)\s*\((?P<params>[^)]*)")
_CLASS_PATTERN = re.compile(r"^class\s+(?P<name>\w+)")
_COMPARISON_SUFFIXES = ("=", "!", "<", ">")
_AUGMENTED_PREFIXES = ("+", "-", "*", "/", "%", "&", "|", "^", "@", ":")


class StructuralAnalyzer:
    """Extract dependencies, a structural outline and an AST from source text."""

    def __init__(self, ast_provider: AstProvider) -> None:
        """Initialize analyzer.

        Args:
            ast_provider: Provider consulted by ``parse_python_code``.
        """
        self._ast_provider = ast_provider

    def extract_dependencies(self, text: str) -> list[str]:
        """Collect imported module names.

        ``import a.b.c`` contributes ``a``; ``from a.b import c`` contributes
        ``a.b``. Relative ``from . import x`` forms are ignored.

        Args:
            text: Python source text.

        Returns:
            Sorted, deduplicated module names.
        """
        dependencies: set[str] = set()
        for match in _IMPORT_PATTERN.finditer(text):
            for part in match.group("modules").split(","):
                module = part.strip().split(" ")[0]
                if module:
                    dependencies.add(module.split(".")[0])
        for match in _FROM_IMPORT_PATTERN.finditer(text):
            dependencies.add(match.group("module"))
        return sorted(dependencies)

    def analyze_structure(self, text: str) -> StructuralOutline:
        """Build a heuristic outline in one forward scan.

        Args:
            text: Python source text.

        Returns:
            Functions, classes and variables with 1-based line numbers.
        """
        functions: list[OutlineItem] = []
        classes: list[OutlineItem] = []
        variables: list[OutlineItem] = []
        lines = text.splitlines()

        for line_number, line in enumerate(lines, start=1):
            trimmed = line.strip()
            if not trimmed or trimmed.startswith("#"):
                continue
            function_match = _FUNCTION_PATTERN.match(trimmed)
            if function_match:
                functions.append(
                    OutlineItem(
                        name=function_match.group("name"),
                        line_number=line_number,
                        parameters=_parameter_names(function_match.group("params")),
                    )
                )
                continue
            class_match = _CLASS_PATTERN.match(trimmed)
            if class_match:
                classes.append(
                    OutlineItem(name=class_match.group("name"), line_number=line_number)
                )
                continue
            target = _assignment_target(trimmed)
            if target:
                variables.append(OutlineItem(name=target, line_number=line_number))

        return StructuralOutline(
            functions=tuple(functions),
            classes=tuple(classes),
            variables=tuple(variables),
            total_lines=len(lines),
        )

    async def parse_python_code(self, text: str) -> ASTNode:
        """Acquire the AST for source text through the configured provider.

        Args:
            text: Python source text.

        Returns:
            Root ``Module`` node.

        Raises:
            StructuredParseError: If the interpreter rejects the source.
            InfrastructureParseError: If the provider fails.
        """
        node = await self._ast_provider.parse(text)
        logger.info(
            f"AST acquired (top_level_nodes={len(node.children)} total_nodes={sum(1 for _ in node.walk())})"
        )
        return node


def _parameter_names(params: str) -> tuple[str, ...]:
    names = []
    for param in params.split(","):
        name = param.split("=")[0].split(":")[0].strip()
        if name:
            names.append(name)
    return tuple(names)


def _assignment_target(line: str) -> str | None:
    """Return the left-hand side of the first unquoted plain ``=``."""
    quote: str | None = None
    for index, char in enumerate(line):
        if quote:
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
            continue
        if char == "#":
            return None
        if char != "=":
            continue
        previous = line[index - 1] if index > 0 else ""
        following = line[index + 1] if index + 1 < len(line) else ""
        if following == "=" or previous in _COMPARISON_SUFFIXES:
            return None
        if previous in _AUGMENTED_PREFIXES:
            return None
        target = line[:index].strip()
        if not target or "(" in target:
            return None
        return target
    return None
