# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Statement IR produced by the line parser and consumed by Swift codegen."""

from dataclasses import dataclass, field


@dataclass
class Statement:
    """Base class for IR statements.

    Attributes:
        line_number: Source line (1-based) the statement starts on.
        body: Nested statements for block-opening statements.
        comment: Trailing ``#`` comment text of the source line.
    """

    line_number: int
    body: list["Statement"] = field(default_factory=list, kw_only=True)
    comment: str | None = field(default=None, kw_only=True)

    opens_block = False


@dataclass
class Raw(Statement):
    """Blank line, comment, or unsupported block header kept as text."""

    text: str
    verbatim: bool = True

    @property
    def opens_block(self) -> bool:  # type: ignore[override]
        return not self.verbatim


@dataclass
class Import(Statement):
    """``import X`` or ``from X import Y``."""

    module: str
    names: str | None = None


@dataclass(frozen=True)
class Parameter:
    """One function parameter as written in source."""

    name: str
    annotation: str | None = None
    default: str | None = None


@dataclass
class FunctionDef(Statement):
    """Function or method definition header."""

    name: str
    parameters: list[Parameter]
    returns: str | None = None
    is_async: bool = False

    opens_block = True


@dataclass
class ClassDef(Statement):
    """Class definition header; bases are kept but never translated."""

    name: str
    bases: str | None = None

    opens_block = True


@dataclass
class Branch:
    """``elif``/``else`` arm of an ``If``; ``condition`` is None for ``else``."""

    line_number: int
    condition: str | None
    body: list[Statement] = field(default_factory=list)


@dataclass
class If(Statement):
    condition: str
    branches: list[Branch] = field(default_factory=list)

    opens_block = True


@dataclass
class For(Statement):
    target: str
    iterable: str

    opens_block = True


@dataclass
class While(Statement):
    condition: str

    opens_block = True


@dataclass
class Return(Statement):
    value: str | None = None


@dataclass
class Assign(Statement):
    """Assignment; ``operator`` is empty for plain ``=``."""

    target: str
    value: str
    annotation: str | None = None
    operator: str = ""


@dataclass
class Print(Statement):
    arguments: str


@dataclass
class Expression(Statement):
    """Any other line, translated by expression rewriting only."""

    text: str
