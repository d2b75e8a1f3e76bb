"""CSV parser for saved list exports.

Rows are decoded line by line with a quote-aware splitter. A quoted
field never spans lines; a row with too few cells is padded with
empty strings.
"""

import re
from typing import Any

from core.types import CanonicalRecord, RecordMetadata, SourceFormat
from libs.parser.base_parser import (
    BaseParser,
    FieldExtractionError,
    StructuralParseError,
    first_match,
    new_record_id,
    parse_float,
)

HEADER_KEYWORDS = ("title", "name", "location", "url", "note")

NAME_COLUMNS = ("title", "name", "location name")
LIST_COLUMNS = ("list", "list name", "category")
NOTE_COLUMNS = ("note", "notes", "comment", "description")
URL_COLUMNS = ("url", "link", "google maps url")
ADDRESS_COLUMNS = ("address", "location address", "formatted_address")
COORDINATE_COLUMNS = (
    "coordinates",
    "location geo coordinates",
    "geo coordinates",
    "lat,lng",
    "latlng",
)
LATITUDE_COLUMNS = ("latitude", "lat")
LONGITUDE_COLUMNS = ("longitude", "lng", "lon")

_COMBINED_COORDINATES = re.compile(r"([-\d.]+)\s*,\s*([-\d.]+)")


def split_delimited_line(line: str, delimiter: str = ",") -> list[str]:
    """Split one line into cells, honouring double-quoted fields.

    A quote toggles the quoted state, two consecutive quotes inside a
    quoted field are one literal quote, and the delimiter only separates
    cells outside quotes. An unterminated quote runs to end of line.

    Example:
        >>> split_delimited_line('"Cafe, The Best","a ""good"" one",x')
        ['Cafe, The Best', 'a "good" one', 'x']
    """
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            cells.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    cells.append("".join(current))
    return cells


def sniff_delimiter(header_line: str) -> str:
    """Tab for tab-separated headers without commas, else comma."""
    if "\t" in header_line and "," not in header_line:
        return "\t"
    return ","


def _content_lines(content: str) -> list[str]:
    return [line.rstrip("\r") for line in content.split("\n")]


class CsvParser(BaseParser):
    """Parser for delimited-text list exports."""

    @property
    def name(self) -> str:
        return "CsvParser"

    @property
    def source_format(self) -> SourceFormat:
        return SourceFormat.CSV

    def can_parse(self, content: str) -> bool:
        """Detect a header row with a known keyword and a delimiter."""
        try:
            trimmed = content.strip()
            if not trimmed:
                return False

            lines = trimmed.split("\n")
            if len(lines) < 2:
                return False

            header = lines[0].lower()
            has_keyword = any(keyword in header for keyword in HEADER_KEYWORDS)
            has_delimiter = "," in header or "\t" in header
            return has_keyword and has_delimiter
        except (AttributeError, TypeError):
            return False

    def _unit_position(self, index: int) -> int:
        # Line 1 is the header, so data row 0 is line 2.
        return index + 2

    def _split_units(self, content: str) -> list[Any]:
        lines = [line for line in _content_lines(content) if line.strip()]
        if len(lines) < 2:
            raise StructuralParseError(
                "CSV file must have at least a header row and one data row"
            )

        delimiter = sniff_delimiter(lines[0])
        headers = [h.lstrip("\ufeff").strip().lower() for h in split_delimited_line(lines[0], delimiter)]

        rows: list[dict[str, str]] = []
        for line in lines[1:]:
            cells = split_delimited_line(line, delimiter)
            rows.append({
                header: cells[index] if index < len(cells) else ""
                for index, header in enumerate(headers)
                if header
            })
        return rows

    def _parse_unit(self, unit: Any, position: int) -> CanonicalRecord:
        row: dict[str, str] = unit

        def lookup(key: str) -> Any:
            return row.get(key)

        name = first_match(NAME_COLUMNS, lookup)
        if name is None:
            raise FieldExtractionError(f"Missing name/title at line {position}", field_name="name")

        latitude, longitude = self._extract_coordinates(lookup)

        return CanonicalRecord(
            id=new_record_id(),
            name=name,
            list_name=first_match(LIST_COLUMNS, lookup),
            notes=first_match(NOTE_COLUMNS, lookup),
            source_url=first_match(URL_COLUMNS, lookup),
            latitude=latitude,
            longitude=longitude,
            address=first_match(ADDRESS_COLUMNS, lookup),
            metadata=RecordMetadata(
                source_format=self.source_format,
                original_fields=dict(row),
            ),
        )

    def _extract_coordinates(self, lookup) -> tuple[float | None, float | None]:
        """Combined "lat,lng" column first, then separate columns."""
        combined = first_match(COORDINATE_COLUMNS, lookup)
        if combined is not None:
            match = _COMBINED_COORDINATES.search(combined)
            if match:
                lat, lng = parse_float(match.group(1)), parse_float(match.group(2))
                if lat is not None and lng is not None:
                    return lat, lng

        lat_text = first_match(LATITUDE_COLUMNS, lookup)
        lng_text = first_match(LONGITUDE_COLUMNS, lookup)
        if lat_text is not None and lng_text is not None:
            lat, lng = parse_float(lat_text), parse_float(lng_text)
            if lat is not None and lng is not None:
                return lat, lng

        return None, None
