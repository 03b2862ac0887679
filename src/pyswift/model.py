# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for conversion artifacts."""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pyswift.analyzer import ASTNode, StructuralOutline


class ConversionStatus(str, Enum):
    """Pipeline status of one script record."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    CONVERTING = "converting"
    TESTING = "testing"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ConversionStatus.SUCCESS, ConversionStatus.FAILED)


PIPELINE_ORDER: tuple[ConversionStatus, ...] = (
    ConversionStatus.ANALYZING,
    ConversionStatus.CONVERTING,
    ConversionStatus.TESTING,
    ConversionStatus.SUCCESS,
)


class InvalidTransitionError(RuntimeError):
    """Represent an attempt to move a record backwards or out of a terminal state."""


def can_transition(current: ConversionStatus, target: ConversionStatus) -> bool:
    """Check whether ``current`` may move to ``target``.

    Args:
        current: Status the record currently holds.
        target: Requested next status.

    Returns:
        True for the next pipeline step, for ``failed`` from a non-terminal
        status, and for ``pending -> analyzing``.
    """
    if current.is_terminal:
        return False
    if target is ConversionStatus.FAILED:
        return current is not ConversionStatus.PENDING
    if current is ConversionStatus.PENDING:
        return target is ConversionStatus.ANALYZING
    position = PIPELINE_ORDER.index(current)
    return position + 1 < len(PIPELINE_ORDER) and PIPELINE_ORDER[position + 1] is target


class TestKind(str, Enum):
    """Kind of a synthesized test."""

    __test__ = False

    UNIT = "unit"
    INTEGRATION = "integration"


@dataclass(frozen=True)
class TestSpec:
    """Represent one synthesized XCTest function.

    Attributes:
        name: Test function name derived from the target symbol.
        body: Full Swift text of the test function.
        kind: Unit or integration test.
    """

    __test__ = False

    name: str
    body: str
    kind: TestKind


@dataclass(eq=False)
class ScriptRecord:
    """Represent one loaded script tracked through the pipeline.

    Records compare by identity. Pipeline stages only add fields; a failed
    stage flips ``status`` to ``failed`` and leaves earlier fields in place.

    Attributes:
        name: Display name.
        source: Original source text.
        origin: File the source was read from, if any.
        id: Stable unique identifier.
        created_at: Creation timestamp (UTC).
        status: Current pipeline status.
        status_history: Every status the record has published, in order.
        dependencies: Sorted, deduplicated imported module names.
        outline: Heuristic structural outline.
        ast: Interpreter-reported syntax tree.
        translated_text: Swift translation; empty until transpiled.
        translation_warnings: Indentation warnings reported by the transpiler.
        tests: Synthesized tests; empty until synthesis finished.
        error_message: Failure description when ``status`` is ``failed``.
    """

    name: str
    source: str
    origin: Path | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    status: ConversionStatus = ConversionStatus.PENDING
    status_history: list[ConversionStatus] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    outline: StructuralOutline | None = None
    ast: ASTNode | None = None
    translated_text: str = ""
    translation_warnings: list[str] = field(default_factory=list)
    tests: list[TestSpec] = field(default_factory=list)
    error_message: str | None = None

    def advance(self, target: ConversionStatus) -> None:
        """Move the record to ``target`` and append it to the history.

        Raises:
            InvalidTransitionError: If the move is not a legal transition.
        """
        if not can_transition(self.status, target):
            raise InvalidTransitionError(
                f"Illegal status transition {self.status.value} -> {target.value}"
            )
        self.status = target
        self.status_history.append(target)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the record to JSON-compatible primitives."""
        return {
            "id": str(self.id),
            "name": self.name,
            "origin": str(self.origin) if self.origin is not None else None,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "status_history": [status.value for status in self.status_history],
            "dependencies": list(self.dependencies),
            "outline": asdict(self.outline) if self.outline is not None else None,
            "ast": self.ast.to_dict() if self.ast is not None else None,
            "translated_text": self.translated_text,
            "translation_warnings": list(self.translation_warnings),
            "tests": [
                {"name": test.name, "kind": test.kind.value, "body": test.body}
                for test in self.tests
            ],
            "error_message": self.error_message,
        }
