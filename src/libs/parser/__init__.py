# Parser - Export format detection and parsing

from libs.parser.base_parser import (
    BaseParser,
    ParserError,
    StructuralParseError,
    FieldExtractionError,
    UnsupportedFormatError,
)
from libs.parser.geojson_parser import GeoJsonParser
from libs.parser.csv_parser import CsvParser, split_delimited_line
from libs.parser.parser_dispatcher import (
    ParserDispatcher,
    build_unsupported_format_message,
)

__all__ = [
    # Base
    "BaseParser",
    "ParserError",
    "StructuralParseError",
    "FieldExtractionError",
    "UnsupportedFormatError",
    # Implementations
    "GeoJsonParser",
    "CsvParser",
    "split_delimited_line",
    # Dispatch
    "ParserDispatcher",
    "build_unsupported_format_message",
]
