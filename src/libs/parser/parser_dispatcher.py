"""Parser Dispatcher - picks the parser for an export file.

Parsers are tried in registration order and the first whose detector
accepts the content parses it. When none accepts, the dispatcher returns
a fatal outcome whose message names the file, lists the expected formats
and previews the content.

Usage:
    dispatcher = ParserDispatcher()
    outcome = dispatcher.parse(content, "Saved Places.json")
"""

from core.types import ParseOutcome
from libs.parser.base_parser import BaseParser, UnsupportedFormatError
from libs.parser.csv_parser import CsvParser
from libs.parser.geojson_parser import GeoJsonParser
from observability.logger import get_logger

logger = get_logger(__name__)

PREVIEW_LENGTH = 200

EXPECTED_FORMATS = (
    '1. JSON/GeoJSON: {"type":"FeatureCollection","features":[...]}',
    "2. CSV: Title,Note,URL,Address,...",
)


def build_unsupported_format_message(content: str, source_name: str) -> str:
    """Build the user-facing message for content no parser accepts.

    Args:
        content: The rejected file content.
        source_name: File name shown to the user.

    Returns:
        Message with the file name, expected formats and a preview of
        the first 200 characters.
    """
    preview = content[:PREVIEW_LENGTH].strip()
    ellipsis = "..." if len(content) > PREVIEW_LENGTH else ""

    return (
        f"Unsupported file format: {source_name}\n\n"
        "Expected formats:\n"
        + "\n".join(EXPECTED_FORMATS)
        + "\n\n"
        f"File preview:\n{preview}{ellipsis}"
    )


class ParserDispatcher:
    """Ordered set of parsers with first-match detection.

    Attributes:
        parsers: Parsers in the order they are tried
    """

    def __init__(self, parsers: list[BaseParser] | None = None) -> None:
        """Initialize the dispatcher.

        Args:
            parsers: Parsers to try, in order. Defaults to GeoJSON then CSV.
        """
        self._parsers: list[BaseParser] = (
            list(parsers) if parsers is not None else [GeoJsonParser(), CsvParser()]
        )

    @property
    def parsers(self) -> list[BaseParser]:
        return list(self._parsers)

    def register(self, parser: BaseParser) -> None:
        """Append a parser; it is tried after the existing ones."""
        self._parsers.append(parser)
        logger.info(f"Registered parser: {parser.name}")

    def supported_parsers(self) -> list[str]:
        return [parser.name for parser in self._parsers]

    def detect_parser(self, content: str) -> BaseParser | None:
        """Return the first parser that accepts the content, or None."""
        for parser in self._parsers:
            if parser.can_parse(content):
                return parser
        return None

    def parse(self, content: str, source_name: str = "unknown") -> ParseOutcome:
        """Detect the format and parse.

        Args:
            content: Full text of the export file.
            source_name: File name used in messages.

        Returns:
            The chosen parser's outcome, or a fatal outcome carrying the
            unsupported format message.
        """
        parser = self.detect_parser(content)
        if parser is None:
            logger.warning(f"No parser accepted {source_name}")
            return ParseOutcome.fatal(build_unsupported_format_message(content, source_name))

        logger.info(f"Parsing {source_name} with {parser.name}")
        return parser.parse(content, source_name)

    def parse_or_raise(self, content: str, source_name: str = "unknown") -> ParseOutcome:
        """Like parse, but raise UnsupportedFormatError when no parser matches."""
        parser = self.detect_parser(content)
        if parser is None:
            raise UnsupportedFormatError(
                build_unsupported_format_message(content, source_name),
                source_name=source_name,
            )
        return parser.parse(content, source_name)

    def __repr__(self) -> str:
        return f"ParserDispatcher(parsers={self.supported_parsers()})"
