"""GeoJSON parser for "Saved Places" feature collection exports.

Each feature becomes one record. Property names vary between export
versions, so every logical field probes an ordered list of candidate
keys; dotted keys such as ``Location.Address`` are nested lookups.
"""

import json
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

NAME_FIELDS = ("name", "Name", "title", "Title", "Business Name", "Location.Business Name")
NOTE_FIELDS = ("Comment", "comment", "Note", "note", "Notes", "notes", "Description", "description")
ADDRESS_FIELDS = ("address", "Address", "Location.Address", "formatted_address")
LIST_FIELDS = ("list", "List", "listName", "List Name", "category", "Category")
URL_FIELDS = ("Google Maps URL", "url", "URL", "link", "Link")

MAPS_URL_MARKERS = ("google.com/maps", "maps.google.com")


def get_nested_value(obj: Any, path: str) -> Any:
    """Resolve a key that may be a dotted path into nested mappings.

    A literal key containing dots wins over the nested interpretation.
    """
    if isinstance(obj, dict) and path in obj:
        return obj[path]

    current = obj
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return None
    return current


def is_maps_url(url: str) -> bool:
    return any(marker in url for marker in MAPS_URL_MARKERS)


class GeoJsonParser(BaseParser):
    """Parser for GeoJSON FeatureCollection exports."""

    @property
    def name(self) -> str:
        return "GeoJsonParser"

    @property
    def source_format(self) -> SourceFormat:
        return SourceFormat.GEOJSON

    def can_parse(self, content: str) -> bool:
        """Detect a FeatureCollection with a features list."""
        try:
            trimmed = content.strip()
            if not trimmed.startswith("{"):
                return False
            data = json.loads(trimmed)
            return (
                isinstance(data, dict)
                and data.get("type") == "FeatureCollection"
                and isinstance(data.get("features"), list)
            )
        except (ValueError, TypeError, AttributeError, RecursionError):
            return False

    def _split_units(self, content: str) -> list[Any]:
        try:
            data = json.loads(content)
        except ValueError as e:
            raise StructuralParseError(f"Invalid JSON: {e}") from e

        features = data.get("features") if isinstance(data, dict) else None
        if not isinstance(features, list):
            raise StructuralParseError("Invalid GeoJSON: missing or invalid features array")
        return features

    def _parse_unit(self, unit: Any, position: int) -> CanonicalRecord:
        if not isinstance(unit, dict):
            raise FieldExtractionError(f"Feature {position} is not an object")

        props = unit.get("properties")
        if not isinstance(props, dict):
            props = {}

        def lookup(key: str) -> Any:
            return get_nested_value(props, key)

        name = first_match(NAME_FIELDS, lookup)
        if name is None:
            raise FieldExtractionError(f"Missing name at feature {position}", field_name="name")

        latitude, longitude = self._extract_coordinates(unit, props)

        return CanonicalRecord(
            id=new_record_id(),
            name=name,
            list_name=first_match(LIST_FIELDS, lookup),
            notes=first_match(NOTE_FIELDS, lookup),
            source_url=first_match(URL_FIELDS, lookup, accept=is_maps_url),
            latitude=latitude,
            longitude=longitude,
            address=first_match(ADDRESS_FIELDS, lookup),
            metadata=RecordMetadata(
                source_format=self.source_format,
                original_fields=props,
            ),
        )

    def _extract_coordinates(
        self,
        feature: dict[str, Any],
        props: dict[str, Any],
    ) -> tuple[float | None, float | None]:
        """Read [lng, lat] from a Point geometry, else Location.Geo Coordinates."""
        geometry = feature.get("geometry")
        if isinstance(geometry, dict) and geometry.get("type") == "Point":
            coords = geometry.get("coordinates")
            if isinstance(coords, list) and len(coords) >= 2:
                lat, lng = _coordinate(coords[1]), _coordinate(coords[0])
                if lat is not None and lng is not None:
                    return lat, lng

        geo = get_nested_value(props, "Location.Geo Coordinates")
        if isinstance(geo, dict):
            lat, lng = _coordinate(geo.get("Latitude")), _coordinate(geo.get("Longitude"))
            if lat is not None and lng is not None:
                return lat, lng

        return None, None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coordinate(value: Any) -> float | None:
    # NaN and Infinity literals load as floats but are not coordinates.
    return parse_float(value) if _is_number(value) else None
