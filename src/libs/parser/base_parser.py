"""Base Parser interface for saved places exports.

This module defines the abstract base class for all export parsers.
Each parser recognises one export format and turns it into canonical
records, collecting per-unit problems instead of failing the whole file.

Design Principles:
    - Abstract Interface: BaseParser defines the detect/parse contract
    - Dispatcher Compatible: Parsers are tried in order by ParserDispatcher
    - Best Effort: One bad input unit never rejects the whole file
"""

import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable

from core.types import (
    CanonicalRecord,
    ParseOutcome,
    ParseProblem,
    ParseStats,
    Severity,
    SourceFormat,
)
from observability.logger import get_logger

logger = get_logger(__name__)


class ParserError(Exception):
    """Base exception for parser operations."""

    pass


class StructuralParseError(ParserError):
    """The whole file is unreadable or has the wrong shape."""

    pass


class FieldExtractionError(ParserError):
    """One input unit could not be turned into a record."""

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class UnsupportedFormatError(ParserError):
    """No registered parser recognised the content."""

    def __init__(self, message: str, source_name: str) -> None:
        super().__init__(message)
        self.source_name = source_name


def new_record_id() -> str:
    """Return a fresh opaque record identifier."""
    return str(uuid.uuid4())


def clean_string(value: Any) -> str | None:
    """Return the stripped string, or None for non-strings and blanks."""
    if isinstance(value, str):
        value = value.strip()
        if value:
            return value
    return None


def parse_float(value: Any) -> float | None:
    """Parse a coordinate component; failures yield None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


class BaseParser(ABC):
    """Abstract base class for export parsers.

    Subclasses implement `can_parse`, `_split_units` and `_parse_unit`; the shared
    `parse` method times the run, converts structural failures into a
    fatal outcome and per-unit failures into warnings.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the parser name (e.g., 'GeoJsonParser')."""
        ...

    @property
    @abstractmethod
    def source_format(self) -> SourceFormat:
        """Return the format recorded on parsed records."""
        ...

    @abstractmethod
    def can_parse(self, content: str) -> bool:
        """Fast structural check. Must never raise."""
        ...

    @abstractmethod
    def _split_units(self, content: str) -> list[Any]:
        """Split content into raw input units.

        Raises:
            StructuralParseError: If the file cannot be read as this format.
        """
        ...

    @abstractmethod
    def _parse_unit(self, unit: Any, position: int) -> CanonicalRecord:
        """Turn one raw unit into a record.

        Args:
            unit: Raw input unit from _split_units.
            position: 1-based position of the unit, as reported in problems.

        Raises:
            FieldExtractionError: If the unit cannot produce a record.
        """
        ...

    def _unit_position(self, index: int) -> int:
        """Map a 0-based unit index to its reported 1-based position."""
        return index + 1

    def parse(self, content: str, source_name: str) -> ParseOutcome:
        """Parse export content into canonical records.

        Args:
            content: Full text of the export file.
            source_name: File name, used for logging.

        Returns:
            ParseOutcome with records, problems and stats.
        """
        started = time.perf_counter()

        try:
            units = self._split_units(content)
        except StructuralParseError as e:
            logger.warning(f"{self.name}: rejected {source_name}: {e}")
            return ParseOutcome.fatal(str(e), elapsed_millis=_elapsed_ms(started))

        records: list[CanonicalRecord] = []
        problems: list[ParseProblem] = []

        for index, unit in enumerate(units):
            position = self._unit_position(index)
            try:
                records.append(self._parse_unit(unit, position))
            except Exception as e:
                problems.append(ParseProblem(
                    message=str(e),
                    severity=Severity.WARNING,
                    unit_index=position,
                    field_name=getattr(e, "field_name", None),
                    original_data=unit,
                ))

        if problems:
            logger.warning(
                f"{self.name}: skipped {len(problems)}/{len(units)} units in {source_name}"
            )
        logger.info(
            f"{self.name}: parsed {len(records)} records from {source_name}"
        )

        return ParseOutcome(
            records=records,
            problems=problems,
            stats=ParseStats(
                total_input_units=len(units),
                success_count=len(records),
                failure_count=len(problems),
                elapsed_millis=_elapsed_ms(started),
            ),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(format={self.source_format.value})"


def first_match(
    candidates: Iterable[str],
    lookup: Callable[[str], Any],
    accept: Callable[[str], bool] | None = None,
) -> str | None:
    """Return the first non-empty string found under any candidate key.

    Args:
        candidates: Ordered candidate keys to probe.
        lookup: Function returning the raw value for a key (or None).
        accept: Optional extra predicate on the cleaned value.
    """
    for key in candidates:
        value = clean_string(lookup(key))
        if value is not None and (accept is None or accept(value)):
            return value
    return None


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0
