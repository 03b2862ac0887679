# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""XCTest skeleton synthesis from translated Swift source."""

import logging
import re
from dataclasses import dataclass

from pyswift.model import TestKind, TestSpec
from pyswift.text import split_top_level

logger = logging.getLogger(__name__)

_FUNCTION_PATTERN = re.compile(
    r"^func\s+(?P<name>\w+)\s*\((?P<params>.*?)\)\s*(?:async\s*)?(?:->\s*(?P<returns>[^{]+?))?\s*\{?\s*(?://.*)?$"
)
_CLASS_PATTERN = re.compile(r"^class\s+(?P<name>\w+)")

_DEFAULT_VALUES: dict[str, str] = {
    "int": "42",
    "double": "3.14",
    "float": "3.14",
    "string": '"test"',
    "bool": "true",
}
_NIL_LITERAL = "nil"
_BODY_INDENT = " " * 4


@dataclass(frozen=True)
class SwiftParameter:
    name: str
    type: str | None


@dataclass(frozen=True)
class SwiftFunction:
    """Function declaration discovered in translated Swift text."""

    name: str
    parameters: tuple[SwiftParameter, ...]
    return_type: str | None
    line_number: int


@dataclass(frozen=True)
class SwiftClass:
    name: str
    line_number: int


@dataclass(frozen=True)
class SwiftCodeStructure:
    functions: tuple[SwiftFunction, ...]
    classes: tuple[SwiftClass, ...]


class TestSynthesizer:
    """Derive XCTest skeletons from translated Swift source."""

    __test__ = False

    def generate_tests(self, swift_code: str) -> list[TestSpec]:
        """Synthesize one unit test per function plus an integration test.

        Args:
            swift_code: Translated Swift source.

        Returns:
            Unit tests in declaration order, followed by one integration test
            when at least two functions were found. Empty when none were found.
        """
        structure = analyze_swift_code(swift_code)
        tests = [self._unit_test(function) for function in structure.functions]
        if len(structure.functions) >= 2:
            tests.append(
                self._integration_test(structure.functions[0], structure.functions[1])
            )
        logger.info(
            f"Test synthesis completed (functions={len(structure.functions)} "
            f"classes={len(structure.classes)} tests={len(tests)})"
        )
        return tests

    def _unit_test(self, function: SwiftFunction) -> TestSpec:
        name = derive_test_name(function.name)
        lines = [f"func {name}() {{", f"{_BODY_INDENT}// Arrange"]
        lines.extend(f"{_BODY_INDENT}{line}" for line in _arrange(function))
        lines.append("")
        lines.append(f"{_BODY_INDENT}// Act")
        call = _call(function)
        if function.return_type:
            lines.append(f"{_BODY_INDENT}let result = {call}")
        else:
            lines.append(f"{_BODY_INDENT}{call}")
        lines.append("")
        lines.append(f"{_BODY_INDENT}// Assert")
        lines.extend(f"{_BODY_INDENT}{line}" for line in _assertions(function))
        lines.append("}")
        return TestSpec(name=name, body="\n".join(lines), kind=TestKind.UNIT)

    def _integration_test(self, first: SwiftFunction, second: SwiftFunction) -> TestSpec:
        lines = [
            "func testIntegration() {",
            f"{_BODY_INDENT}// Test integration between {first.name} and {second.name}",
        ]
        for index, function in enumerate((first, second), start=1):
            arguments = ", ".join(
                f"{parameter.name}: {default_value(parameter.type)}"
                for parameter in function.parameters
            )
            lines.append(f"{_BODY_INDENT}let result{index} = {function.name}({arguments})")
        lines.extend(
            [
                "",
                f"{_BODY_INDENT}// Verify integration",
                f"{_BODY_INDENT}XCTAssertNotNil(result1)",
                f"{_BODY_INDENT}XCTAssertNotNil(result2)",
                "}",
            ]
        )
        return TestSpec(
            name="testIntegration", body="\n".join(lines), kind=TestKind.INTEGRATION
        )


def analyze_swift_code(swift_code: str) -> SwiftCodeStructure:
    """Scan Swift text for function and class declarations.

    Args:
        swift_code: Swift source text.

    Returns:
        Discovered functions and classes with 1-based line numbers.
    """
    functions: list[SwiftFunction] = []
    classes: list[SwiftClass] = []
    for line_number, line in enumerate(swift_code.splitlines(), start=1):
        trimmed = line.strip()
        function_match = _FUNCTION_PATTERN.match(trimmed)
        if function_match:
            returns = function_match.group("returns")
            functions.append(
                SwiftFunction(
                    name=function_match.group("name"),
                    parameters=_parameters(function_match.group("params")),
                    return_type=returns.strip() if returns else None,
                    line_number=line_number,
                )
            )
            continue
        class_match = _CLASS_PATTERN.match(trimmed)
        if class_match:
            classes.append(
                SwiftClass(name=class_match.group("name"), line_number=line_number)
            )
    return SwiftCodeStructure(functions=tuple(functions), classes=tuple(classes))


def derive_test_name(function_name: str) -> str:
    """Derive ``testName`` from a function name, upper-casing the first letter."""
    return f"test{function_name[:1].upper()}{function_name[1:]}"


def default_value(swift_type: str | None) -> str:
    """Return a sample literal for a declared Swift type.

    Args:
        swift_type: Declared type, or ``None`` when untyped.

    Returns:
        Literal source text; ``nil`` for anything not recognized.
    """
    if not swift_type:
        return _NIL_LITERAL
    text = swift_type.strip()
    if text.startswith("[") and text.endswith("]"):
        inner = text[1:-1]
        return "[:]" if split_top_level(inner, ":") != [inner.strip()] else "[]"
    return _DEFAULT_VALUES.get(text.lower(), _NIL_LITERAL)


def render_test_case(tests: list[TestSpec], case_name: str, module: str | None = None) -> str:
    """Render synthesized tests as a complete XCTest source file.

    Args:
        tests: Synthesized tests.
        case_name: Base name; the test case class is ``<case_name>Tests``.
        module: Module to ``@testable import``, if any.

    Returns:
        Swift source text.
    """
    lines = ["import XCTest"]
    if module:
        lines.append(f"@testable import {module}")
    lines.append("")
    lines.append(f"final class {_type_name(case_name)}Tests: XCTestCase {{")
    for index, test in enumerate(tests):
        if index:
            lines.append("")
        lines.extend(f"{_BODY_INDENT}{line}" if line else "" for line in test.body.splitlines())
    lines.append("}")
    return "\n".join(lines) + "\n"


def _type_name(name: str) -> str:
    parts = re.split(r"[^0-9A-Za-z]+", name)
    joined = "".join(part[:1].upper() + part[1:] for part in parts if part)
    if not joined or joined[0].isdigit():
        joined = f"Script{joined}"
    return joined


def _parameters(params: str) -> tuple[SwiftParameter, ...]:
    parameters = []
    for raw in split_top_level(params, ","):
        declaration = raw.split("=")[0].strip()
        name, separator, declared_type = declaration.partition(":")
        parameters.append(
            SwiftParameter(
                name=name.strip(),
                type=declared_type.strip() if separator else None,
            )
        )
    return tuple(parameters)


def _arrange(function: SwiftFunction) -> list[str]:
    if not function.parameters:
        return ["// No parameters"]
    return [
        f"let {parameter.name} = {default_value(parameter.type)}"
        for parameter in function.parameters
    ]


def _call(function: SwiftFunction) -> str:
    arguments = ", ".join(
        f"{parameter.name}: {parameter.name}" for parameter in function.parameters
    )
    return f"{function.name}({arguments})"


def _assertions(function: SwiftFunction) -> list[str]:
    if not function.return_type:
        return ["// No return value to assert"]
    assertions = ["XCTAssertNotNil(result)"]
    if function.return_type == "String":
        assertions.append("XCTAssertFalse(result.isEmpty)")
    return assertions
