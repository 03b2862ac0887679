# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Best-effort Python to Swift translation.

Translation runs in two passes. ``parse_statements`` reads the source line by
line, classifies each line into an IR statement and nests statements by
indentation. ``Transpiler`` then walks the IR and writes Swift, opening a
brace on every block header and closing it when the block ends.

Only a fixed subset of Python is recognized; everything else is passed
through ``rewrite_expression``. Indentation is expected in multiples of
``INDENT_UNIT`` columns. Deviations are reported as warnings and never raise.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from pyswift.ir import (
    Assign,
    Branch,
    ClassDef,
    Expression,
    For,
    FunctionDef,
    If,
    Import,
    Parameter,
    Print,
    Raw,
    Return,
    Statement,
    While,
)
from pyswift.text import split_top_level

logger = logging.getLogger(__name__)

INDENT_UNIT = 4
PROVENANCE_TITLE = "// Auto-generated Swift code from Python"
STANDARD_PREAMBLE = "import Foundation"

_INDENT = " " * INDENT_UNIT

_TYPE_TABLE: dict[str, str] = {
    "int": "Int",
    "integer": "Int",
    "float": "Double",
    "str": "String",
    "string": "String",
    "bool": "Bool",
    "boolean": "Bool",
    "list": "[Any]",
    "dict": "[String: Any]",
    "tuple": "(Any, Any)",
}
ANY_TYPE = "Any"

_EXPRESSION_SUBSTITUTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bis\s+not\b"), "!="),
    (re.compile(r"\bis\b"), "=="),
    (re.compile(r"\bNone\b"), "nil"),
    (re.compile(r"\bTrue\b"), "true"),
    (re.compile(r"\bFalse\b"), "false"),
    (re.compile(r"\band\b"), "&&"),
    (re.compile(r"\bor\b"), "||"),
    (re.compile(r"\bnot\b\s*"), "!"),
)

_IMPORT_PATTERN = re.compile(r"^import\s+(?P<module>.+)$")
_FROM_IMPORT_PATTERN = re.compile(r"^from\s+(?P<module>\S+)\s+import\s+(?P<names>.+)$")
_FUNCTION_PATTERN = re.compile(
    r"^(?P<async>async\s+)?def\s+(?P<name>\w+)\s*\((?P<params>.*)\)"
    r"\s*(?:->\s*(?P<returns>.+?))?\s*:$"
)
_CLASS_PATTERN = re.compile(r"^class\s+(?P<name>\w+)\s*(?:\((?P<bases>.*)\))?\s*:$")
_IF_PATTERN = re.compile(r"^if\s+(?P<condition>.+?)\s*:$")
_ELIF_PATTERN = re.compile(r"^elif\s+(?P<condition>.+?)\s*:$")
_ELSE_PATTERN = re.compile(r"^else\s*:$")
_FOR_PATTERN = re.compile(r"^for\s+(?P<target>.+?)\s+in\s+(?P<iterable>.+?)\s*:$")
_WHILE_PATTERN = re.compile(r"^while\s+(?P<condition>.+?)\s*:$")
_RETURN_PATTERN = re.compile(r"^return(?:\s+(?P<value>.+))?$")
_PRINT_PATTERN = re.compile(r"^print\((?P<arguments>.*)\)$")
_RANGE_PATTERN = re.compile(r"^range\((?P<arguments>.*)\)$")
_GENERIC_PATTERN = re.compile(r"^(?:typing\.)?(?P<base>\w+)\[(?P<arguments>.*)\]$")
_AUGMENTED_OPERATORS = ("**", "//", ">>", "<<", "+", "-", "*", "/", "%", "&", "|", "^", "@")
_RECEIVER_NAMES = ("self", "cls")


@dataclass(frozen=True)
class ParseResult:
    """IR statements and indentation warnings for one source text."""

    statements: list[Statement]
    warnings: list[str]


@dataclass(frozen=True)
class TranslationResult:
    """Swift text and the indentation warnings raised while producing it."""

    text: str
    warnings: tuple[str, ...]


@dataclass
class _Frame:
    indent: int
    body: list[Statement]


def rewrite_expression(expression: str) -> str:
    """Rewrite Python literals and logical operators to Swift.

    This is plain text substitution: string literal contents are rewritten too.

    Args:
        expression: Python expression text.

    Returns:
        Expression text with Swift tokens.
    """
    result = expression
    for pattern, replacement in _EXPRESSION_SUBSTITUTIONS:
        result = pattern.sub(replacement, result)
    return result


def map_type(annotation: str) -> str:
    """Map a Python type annotation to a Swift type name.

    Args:
        annotation: Annotation text as written in source.

    Returns:
        Swift type; ``Any`` for anything not in the type table.
    """
    text = annotation.strip().strip("'\"")
    union = split_top_level(text, "|")
    if len(union) > 1:
        members = [member for member in union if member != "None"]
        if len(members) == 1 and len(members) < len(union):
            return f"{map_type(members[0])}?"
        return ANY_TYPE
    generic = _GENERIC_PATTERN.match(text)
    if generic:
        base = generic.group("base").lower()
        arguments = split_top_level(generic.group("arguments"), ",")
        if base == "list" and len(arguments) == 1:
            return f"[{map_type(arguments[0])}]"
        if base == "dict" and len(arguments) == 2:
            return f"[{map_type(arguments[0])}: {map_type(arguments[1])}]"
        if base == "optional" and len(arguments) == 1:
            return f"{map_type(arguments[0])}?"
        return ANY_TYPE
    return _TYPE_TABLE.get(text.lower(), ANY_TYPE)


def parse_parameters(params: str) -> list[Parameter]:
    """Split a parameter list into name, annotation and default parts."""
    parameters: list[Parameter] = []
    for raw in split_top_level(params, ","):
        name, _, default = raw.partition("=")
        name, _, annotation = name.partition(":")
        parameters.append(
            Parameter(
                name=name.strip(),
                annotation=annotation.strip() or None,
                default=default.strip() or None,
            )
        )
    return parameters


def parse_statements(text: str) -> ParseResult:
    """Parse source text into nested IR statements.

    Blank and comment lines are attached to the block of the next code line.
    A block opens when the line after a header is indented deeper than the
    header. A dedent that does not land on an enclosing block's column is
    attached to the nearest shallower block and reported.

    Args:
        text: Python source text.

    Returns:
        Top-level statements and indentation warnings.
    """
    statements: list[Statement] = []
    warnings: list[str] = []
    stack = [_Frame(indent=0, body=statements)]
    pending: list[Statement] | None = None
    buffered: list[Statement] = []

    for line_number, line in enumerate(text.splitlines(), start=1):
        stripped, comment = _split_comment(line.strip())
        if not stripped:
            buffered.append(Raw(line_number=line_number, text=line))
            continue

        expanded = line.expandtabs(INDENT_UNIT)
        width = len(expanded) - len(expanded.lstrip())
        if width % INDENT_UNIT:
            warnings.append(
                f"line {line_number}: indentation of {width} columns is not a multiple of {INDENT_UNIT}"
            )
        if pending is not None:
            if width > stack[-1].indent:
                stack.append(_Frame(indent=width, body=pending))
            pending = None
        elif width > stack[-1].indent:
            warnings.append(f"line {line_number}: unexpected indentation of {width} columns")
        dedented = False
        while width < stack[-1].indent:
            stack.pop()
            dedented = True
        if dedented and width != stack[-1].indent:
            warnings.append(
                f"line {line_number}: dedent to column {width} does not match any enclosing block"
            )
        frame = stack[-1]

        branch = _match_branch(stripped, line_number)
        if branch is not None:
            owner = _last_if(frame.body)
            if owner is not None:
                arm = owner.branches[-1].body if owner.branches else owner.body
                arm.extend(buffered)
                buffered.clear()
                owner.branches.append(branch)
                pending = branch.body
                continue

        frame.body.extend(buffered)
        buffered.clear()
        statement = _classify(stripped, line_number)
        statement.comment = comment
        frame.body.append(statement)
        if statement.opens_block:
            pending = statement.body

    stack[-1].body.extend(buffered)
    return ParseResult(statements=statements, warnings=warnings)


def _split_comment(line: str) -> tuple[str, str | None]:
    """Separate a trailing unquoted ``#`` comment from code."""
    quote: str | None = None
    for index, char in enumerate(line):
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "#":
            comment = line[index + 1 :].strip()
            return line[:index].rstrip(), comment or None
    return line, None


def _match_branch(line: str, line_number: int) -> Branch | None:
    elif_match = _ELIF_PATTERN.match(line)
    if elif_match:
        return Branch(line_number=line_number, condition=elif_match.group("condition"))
    if _ELSE_PATTERN.match(line):
        return Branch(line_number=line_number, condition=None)
    return None


def _last_if(body: list[Statement]) -> If | None:
    for statement in reversed(body):
        if isinstance(statement, Raw) and statement.verbatim:
            continue
        return statement if isinstance(statement, If) else None
    return None


def _classify(line: str, line_number: int) -> Statement:
    """Classify one trimmed code line; first matching form wins."""
    from_match = _FROM_IMPORT_PATTERN.match(line)
    if from_match:
        return Import(
            line_number=line_number,
            module=from_match.group("module"),
            names=from_match.group("names").strip(),
        )
    import_match = _IMPORT_PATTERN.match(line)
    if import_match:
        return Import(line_number=line_number, module=import_match.group("module").strip())

    function_match = _FUNCTION_PATTERN.match(line)
    if function_match:
        return FunctionDef(
            line_number=line_number,
            name=function_match.group("name"),
            parameters=parse_parameters(function_match.group("params")),
            returns=function_match.group("returns"),
            is_async=bool(function_match.group("async")),
        )
    class_match = _CLASS_PATTERN.match(line)
    if class_match:
        return ClassDef(
            line_number=line_number,
            name=class_match.group("name"),
            bases=class_match.group("bases") or None,
        )
    if_match = _IF_PATTERN.match(line)
    if if_match:
        return If(line_number=line_number, condition=if_match.group("condition"))
    for_match = _FOR_PATTERN.match(line)
    if for_match:
        return For(
            line_number=line_number,
            target=for_match.group("target"),
            iterable=for_match.group("iterable"),
        )
    while_match = _WHILE_PATTERN.match(line)
    if while_match:
        return While(line_number=line_number, condition=while_match.group("condition"))
    return_match = _RETURN_PATTERN.match(line)
    if return_match:
        return Return(line_number=line_number, value=return_match.group("value"))

    assignment = _split_assignment(line)
    if assignment is not None:
        target, operator, value = assignment
        name, _, annotation = target.partition(":")
        return Assign(
            line_number=line_number,
            target=name.strip(),
            value=value,
            annotation=annotation.strip() or None,
            operator=operator,
        )
    print_match = _PRINT_PATTERN.match(line)
    if print_match:
        return Print(line_number=line_number, arguments=print_match.group("arguments"))
    if line.endswith(":"):
        return Raw(line_number=line_number, text=line, verbatim=False)
    return Expression(line_number=line_number, text=line)


def _split_assignment(line: str) -> tuple[str, str, str] | None:
    """Split ``target [op]= value`` on the first unquoted assignment ``=``."""
    quote: str | None = None
    for index, char in enumerate(line):
        if quote:
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
            continue
        if char != "=":
            continue
        following = line[index + 1 : index + 2]
        previous = line[index - 1 : index]
        if following == "=" or previous in ("=", "!", ":"):
            return None
        if previous in ("<", ">") and line[index - 2 : index] not in ("<<", ">>"):
            return None
        head = line[:index]
        operator = next(
            (op for op in _AUGMENTED_OPERATORS if head.endswith(op)), ""
        )
        target = head[: len(head) - len(operator)].strip()
        if not target or "(" in target:
            return None
        return target, operator, line[index + 1 :].strip()
    return None


class Transpiler:
    """Translate Python source text to best-effort Swift source text."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        """Initialize transpiler.

        Args:
            clock: Returns the generation timestamp written to the header.
        """
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))

    def transpile(self, text: str) -> str:
        """Translate source text; never raises on unsupported constructs."""
        return self.translate(text).text

    def translate(self, text: str) -> TranslationResult:
        """Translate source text and report indentation warnings.

        Args:
            text: Python source text.

        Returns:
            Swift text starting with the provenance header, and warnings.
        """
        parsed = parse_statements(text)
        writer = _SwiftWriter()
        writer.write_block(parsed.statements, depth=0, in_class=False)
        output = provenance_header(self._clock()) + "".join(
            f"{line}\n" for line in writer.lines
        )
        if parsed.warnings:
            logger.warning(
                f"Translation produced indentation warnings (count={len(parsed.warnings)} first={parsed.warnings[0]})"
            )
        return TranslationResult(text=output, warnings=tuple(parsed.warnings))


def provenance_header(generated_at: datetime) -> str:
    """Render the fixed header every translation starts with."""
    return (
        f"{PROVENANCE_TITLE}\n"
        f"// Generated on {generated_at.isoformat()}\n"
        "\n"
        f"{STANDARD_PREAMBLE}\n"
        "\n"
    )


class _SwiftWriter:
    """Write IR statements as Swift lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def write_block(
        self, statements: list[Statement], depth: int, in_class: bool
    ) -> None:
        for statement in statements:
            self._write(statement, depth, in_class)

    def _emit(self, depth: int, text: str) -> None:
        self.lines.append(f"{_INDENT * depth}{text}")

    def _write_braced(
        self, header: str, body: list[Statement], depth: int, in_class: bool = False
    ) -> None:
        self._emit(depth, f"{header} {{")
        self.write_block(body, depth + 1, in_class)
        self._emit(depth, "}")

    def _write(self, statement: Statement, depth: int, in_class: bool) -> None:
        first_line = len(self.lines)
        self._write_statement(statement, depth, in_class)
        if statement.comment and first_line < len(self.lines):
            self.lines[first_line] += f" // {statement.comment}"

    def _write_statement(self, statement: Statement, depth: int, in_class: bool) -> None:
        if isinstance(statement, Raw):
            if statement.verbatim:
                self.lines.append(statement.text)
                return
            self._emit(depth, f"// {statement.text}")
            self.write_block(statement.body, depth + 1, in_class)
        elif isinstance(statement, Import):
            if statement.names is None:
                self._emit(
                    depth,
                    f"// import {statement.module} - requires manual Swift equivalent",
                )
            else:
                self._emit(
                    depth,
                    f"// from {statement.module} import {statement.names} - requires manual Swift equivalent",
                )
        elif isinstance(statement, FunctionDef):
            self._write_braced(_function_header(statement, in_class), statement.body, depth)
        elif isinstance(statement, ClassDef):
            self._write_braced(
                f"class {statement.name}", statement.body, depth, in_class=True
            )
        elif isinstance(statement, If):
            self._write_if(statement, depth, in_class)
        elif isinstance(statement, For):
            self._write_braced(
                f"for {_loop_target(statement.target)} in {_loop_iterable(statement.iterable)}",
                statement.body,
                depth,
            )
        elif isinstance(statement, While):
            self._write_braced(
                f"while {rewrite_expression(statement.condition)}", statement.body, depth
            )
        elif isinstance(statement, Return):
            if statement.value is None:
                self._emit(depth, "return")
            else:
                self._emit(depth, f"return {rewrite_expression(statement.value)}")
        elif isinstance(statement, Assign):
            self._emit(depth, _assignment(statement))
        elif isinstance(statement, Print):
            self._emit(depth, f"print({rewrite_expression(statement.arguments)})")
        elif isinstance(statement, Expression):
            if statement.text == "pass":
                self._emit(depth, "// pass")
            else:
                self._emit(depth, rewrite_expression(statement.text))

    def _write_if(self, statement: If, depth: int, in_class: bool) -> None:
        self._emit(depth, f"if {rewrite_expression(statement.condition)} {{")
        self.write_block(statement.body, depth + 1, in_class)
        for branch in statement.branches:
            if branch.condition is None:
                self._emit(depth, "} else {")
            else:
                self._emit(depth, f"}} else if {rewrite_expression(branch.condition)} {{")
            self.write_block(branch.body, depth + 1, in_class)
        self._emit(depth, "}")


def _function_header(statement: FunctionDef, in_class: bool) -> str:
    parameters = list(statement.parameters)
    if in_class and parameters and parameters[0].name in _RECEIVER_NAMES:
        parameters = parameters[1:]
    rendered = ", ".join(_parameter(parameter) for parameter in parameters)
    effects = " async" if statement.is_async else ""
    if in_class and statement.name == "__init__":
        return f"init({rendered}){effects}"
    returns = ""
    if statement.returns and statement.returns.strip() != "None":
        returns = f" -> {map_type(statement.returns)}"
    return f"func {statement.name}({rendered}){effects}{returns}"


def _parameter(parameter: Parameter) -> str:
    rendered = parameter.name
    if parameter.annotation:
        rendered = f"{rendered}: {map_type(parameter.annotation)}"
    if parameter.default:
        rendered = f"{rendered} = {rewrite_expression(parameter.default)}"
    return rendered


def _loop_target(target: str) -> str:
    names = split_top_level(target.strip("()"), ",")
    if len(names) > 1:
        return f"({', '.join(names)})"
    return target


def _loop_iterable(iterable: str) -> str:
    range_match = _RANGE_PATTERN.match(iterable.strip())
    if range_match:
        arguments = [
            rewrite_expression(argument)
            for argument in split_top_level(range_match.group("arguments"), ",")
        ]
        if len(arguments) == 1:
            return f"0..<{arguments[0]}"
        if len(arguments) == 2:
            return f"{arguments[0]}..<{arguments[1]}"
        if len(arguments) == 3:
            return f"stride(from: {arguments[0]}, to: {arguments[1]}, by: {arguments[2]})"
    return rewrite_expression(iterable)


def _assignment(statement: Assign) -> str:
    value = rewrite_expression(statement.value)
    if statement.operator:
        return f"{statement.target} {statement.operator}= {value}"
    # Attribute and subscript targets mutate existing storage.
    if "." in statement.target or "[" in statement.target:
        return f"{statement.target} = {value}"
    if statement.annotation:
        return f"let {statement.target}: {map_type(statement.annotation)} = {value}"
    return f"let {statement.target} = {value}"
