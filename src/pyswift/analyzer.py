# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Analyzer interfaces and DTOs for source extraction."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol


class ParseError(RuntimeError):
    """Represent a failure to acquire an AST for a source text."""


class StructuredParseError(ParseError):
    """Represent an interpreter-reported syntax error.

    Attributes:
        message: Interpreter error message.
        line_number: Offending source line (1-based) when reported.
    """

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number


class InfrastructureParseError(ParseError):
    """Represent a spawn or output-decoding failure of the AST provider."""


@dataclass(frozen=True)
class OutlineItem:
    """Represent one heuristically detected symbol.

    Attributes:
        name: Symbol name; for variables the assignment target verbatim.
        line_number: Source line (1-based).
        parameters: Raw parameter names for functions, empty otherwise.
    """

    name: str
    line_number: int
    parameters: tuple[str, ...] = ()


@dataclass(frozen=True)
class StructuralOutline:
    """Shallow inventory of functions, classes and variables."""

    functions: tuple[OutlineItem, ...] = ()
    classes: tuple[OutlineItem, ...] = ()
    variables: tuple[OutlineItem, ...] = ()
    total_lines: int = 0


@dataclass(frozen=True)
class ASTNode:
    """Represent one node of the interpreter-reported syntax tree.

    Attributes:
        kind: Node tag such as ``Module``, ``FunctionDef`` or ``Import``.
        name: Symbol name where the node has one.
        line_number: Source line (1-based) where reported.
        children: Child nodes in document order.
        attributes: Kind-specific extra data.
    """

    kind: str
    name: str | None = None
    line_number: int | None = None
    children: tuple["ASTNode", ...] = ()
    attributes: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ASTNode":
        """Build a node tree from the interpreter JSON payload.

        Args:
            payload: Decoded JSON object with a ``type`` key.

        Returns:
            Root node of the decoded tree.

        Raises:
            InfrastructureParseError: If the payload does not have node shape.
        """
        kind = payload.get("type")
        if not isinstance(kind, str):
            raise InfrastructureParseError(
                f"AST payload has no node type: {payload!r:.200}"
            )
        name = payload.get("name")
        line_number = payload.get("lineNumber")
        raw_children = payload.get("children") or []
        raw_attributes = payload.get("attributes") or {}
        if not isinstance(raw_children, list) or not isinstance(raw_attributes, dict):
            raise InfrastructureParseError(f"Malformed AST node payload (type={kind})")
        children = []
        for child in raw_children:
            if not isinstance(child, dict):
                raise InfrastructureParseError(
                    f"Malformed AST child payload (parent={kind})"
                )
            children.append(cls.from_dict(child))
        return cls(
            kind=kind,
            name=name if isinstance(name, str) else None,
            line_number=line_number if isinstance(line_number, int) else None,
            children=tuple(children),
            attributes={str(key): str(value) for key, value in raw_attributes.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the node tree using the interpreter JSON shape."""
        payload: dict[str, Any] = {"type": self.kind}
        if self.name is not None:
            payload["name"] = self.name
        if self.line_number is not None:
            payload["lineNumber"] = self.line_number
        if self.attributes:
            payload["attributes"] = dict(self.attributes)
        payload["children"] = [child.to_dict() for child in self.children]
        return payload

    def walk(self) -> Iterator["ASTNode"]:
        """Yield this node and its descendants depth-first in document order."""
        yield self
        for child in self.children:
            yield from child.walk()


class AstProvider(Protocol):
    """Acquire an AST for Python source text."""

    async def parse(self, text: str) -> ASTNode:
        """Parse source text and return the module node.

        Args:
            text: Python source text.

        Returns:
            Root ``Module`` node.

        Raises:
            StructuredParseError: If the source is rejected as invalid.
            InfrastructureParseError: If the provider itself fails.
        """
