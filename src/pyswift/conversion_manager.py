# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Conversion orchestration for loaded Python scripts."""

import logging
from collections.abc import Callable
from pathlib import Path

from pyswift.analyzer import ParseError
from pyswift.analyzers.python import StructuralAnalyzer
from pyswift.model import ConversionStatus, ScriptRecord
from pyswift.test_synthesizer import TestSynthesizer, render_test_case
from pyswift.transpiler import Transpiler

logger = logging.getLogger(__name__)

StatusListener = Callable[[ScriptRecord, ConversionStatus], None]


class OriginReadError(RuntimeError):
    """Represent a failure to read an origin file as UTF-8 text."""


class ExportError(RuntimeError):
    """Represent a failure to export a record's translation."""


def read_origin(path: Path) -> str:
    """Read origin text.

    Args:
        path: Origin file path.

    Returns:
        Decoded file content.

    Raises:
        OriginReadError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise OriginReadError(f"Could not read {path}: {exc}") from exc


class ConversionManager:
    """Own the script collection and drive each script through the pipeline.

    Every load runs ``analyzing -> converting -> testing -> success`` on the
    record it created, or stops in ``failed``. All mutation happens in
    coroutines of this object on one event loop; observers only read.
    The ``current`` pointer is last-write-wins across concurrent loads.
    """

    def __init__(
        self,
        analyzer: StructuralAnalyzer,
        transpiler: Transpiler,
        test_synthesizer: TestSynthesizer,
    ) -> None:
        """Initialize manager.

        Args:
            analyzer: Dependency, outline and AST extraction stage.
            transpiler: Swift translation stage.
            test_synthesizer: XCTest synthesis stage.
        """
        self._analyzer = analyzer
        self._transpiler = transpiler
        self._test_synthesizer = test_synthesizer
        self._scripts: list[ScriptRecord] = []
        self._current: ScriptRecord | None = None
        self._listeners: list[StatusListener] = []
        self._in_flight = 0
        self._error_message: str | None = None

    @property
    def scripts(self) -> tuple[ScriptRecord, ...]:
        return tuple(self._scripts)

    @property
    def current(self) -> ScriptRecord | None:
        return self._current

    @property
    def is_processing(self) -> bool:
        return self._in_flight > 0

    @property
    def error_message(self) -> str | None:
        """Message of the most recent failure, cleared when a load starts."""
        return self._error_message

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a listener called on every published status transition.

        Args:
            listener: Callable receiving the record and its new status.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load_script(
        self, text: str, name: str = "Untitled.py", origin: Path | None = None
    ) -> ScriptRecord:
        """Create a record for ``text`` and run it through the pipeline.

        Failures never propagate: they leave the record in ``failed`` with
        ``error_message`` set.

        Args:
            text: Python source text.
            name: Display name.
            origin: File the text was read from, if any.

        Returns:
            The record, in ``success`` or ``failed``.
        """
        record = ScriptRecord(name=name, source=text, origin=origin)
        self._scripts.append(record)
        self._current = record
        self._in_flight += 1
        self._error_message = None
        try:
            self._publish(record, ConversionStatus.ANALYZING)
            await self._run_pipeline(record)
        except ParseError as exc:
            self._fail(record, str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"Unexpected pipeline failure (name={record.name})")
            self._fail(record, f"{type(exc).__name__}: {exc}")
        finally:
            self._in_flight -= 1
        return record

    async def load_script_from_origin(self, origin: Path | str) -> ScriptRecord | None:
        """Read ``origin`` as UTF-8 and load it.

        Args:
            origin: Path of the Python file.

        Returns:
            The loaded record, or ``None`` when the file could not be read; no
            record is created in that case and ``error_message`` is set.
        """
        path = Path(origin)
        try:
            text = read_origin(path)
        except OriginReadError as exc:
            logger.warning(f"Origin read failed (path={path} error={exc})")
            self._error_message = str(exc)
            return None
        return await self.load_script(text, name=path.name, origin=path)

    def remove_script(self, record: ScriptRecord) -> None:
        """Remove ``record`` from the collection by identity.

        When the removed record was current, ``current`` falls back to the
        first remaining record, or ``None``.
        """
        for index, candidate in enumerate(self._scripts):
            if candidate is record:
                del self._scripts[index]
                break
        else:
            logger.warning(f"Remove requested for unknown record (id={record.id})")
            return
        if self._current is record:
            self._current = self._scripts[0] if self._scripts else None

    def export_record(self, record: ScriptRecord, output_dir: Path) -> list[Path]:
        """Write a successful record's Swift source and XCTest file.

        Args:
            record: Record in ``success``.
            output_dir: Target directory, created when missing.

        Returns:
            Written file paths.

        Raises:
            ExportError: If the record did not succeed or writing fails.
        """
        if record.status is not ConversionStatus.SUCCESS:
            raise ExportError(
                f"Record {record.name} cannot be exported in status {record.status.value}"
            )
        stem = Path(record.name).stem or "Script"
        outputs = [(output_dir / f"{stem}.swift", record.translated_text)]
        if record.tests:
            outputs.append(
                (output_dir / f"{stem}Tests.swift", render_test_case(record.tests, stem))
            )
        written: list[Path] = []
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            for path, content in outputs:
                path.write_text(content, encoding="utf-8")
                written.append(path)
        except OSError as exc:
            logger.warning(f"Export failed (name={record.name} output_dir={output_dir} error={exc})")
            raise ExportError(str(exc)) from exc
        return written

    async def _run_pipeline(self, record: ScriptRecord) -> None:
        record.dependencies = self._analyzer.extract_dependencies(record.source)
        record.outline = self._analyzer.analyze_structure(record.source)
        record.ast = await self._analyzer.parse_python_code(record.source)
        self._publish(record, ConversionStatus.CONVERTING)

        translation = self._transpiler.translate(record.source)
        record.translated_text = translation.text
        record.translation_warnings = list(translation.warnings)
        self._publish(record, ConversionStatus.TESTING)

        record.tests = self._test_synthesizer.generate_tests(record.translated_text)
        self._publish(record, ConversionStatus.SUCCESS)
        self._current = record
        logger.info(
            f"Conversion completed (name={record.name} dependencies={len(record.dependencies)} "
            f"tests={len(record.tests)} warnings={len(record.translation_warnings)})"
        )

    def _fail(self, record: ScriptRecord, message: str) -> None:
        logger.warning(
            f"Conversion failed (name={record.name} status={record.status.value} error={message})"
        )
        record.error_message = message
        self._error_message = message
        if not record.status.is_terminal:
            self._publish(record, ConversionStatus.FAILED)

    def _publish(self, record: ScriptRecord, status: ConversionStatus) -> None:
        record.advance(status)
        for listener in list(self._listeners):
            try:
                listener(record, status)
            except Exception:  # noqa: BLE001
                logger.exception(
                    f"Status listener failed (name={record.name} status={status.value})"
                )
