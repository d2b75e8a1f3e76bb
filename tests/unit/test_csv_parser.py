"""Unit tests for CsvParser and the delimited line splitter."""

from pathlib import Path

import pytest

from core.types import Severity, SourceFormat
from libs.parser.csv_parser import CsvParser, sniff_delimiter, split_delimited_line


@pytest.fixture
def parser() -> CsvParser:
    return CsvParser()


class TestSplitDelimitedLine:
    """Tests for the quote-aware splitter."""

    def test_plain_cells(self):
        assert split_delimited_line("a,b,c") == ["a", "b", "c"]

    def test_quoted_delimiter(self):
        assert split_delimited_line('"66 Mint St, SF",x') == ["66 Mint St, SF", "x"]

    def test_escaped_quotes(self):
        line = '"Coffee Shop, The Best","Great coffee with ""special"" beans",https://maps.google.com/?cid=111'

        assert split_delimited_line(line) == [
            "Coffee Shop, The Best",
            'Great coffee with "special" beans',
            "https://maps.google.com/?cid=111",
        ]

    def test_empty_cells(self):
        assert split_delimited_line("Dolores Park,,,") == ["Dolores Park", "", "", ""]

    def test_unterminated_quote_runs_to_end(self):
        assert split_delimited_line('a,"b,c') == ["a", "b,c"]

    def test_tab_delimiter(self):
        assert split_delimited_line("a\tb, c", "\t") == ["a", "b, c"]

    def test_sniff_delimiter(self):
        assert sniff_delimiter("Title\tNote") == "\t"
        assert sniff_delimiter("Title,Note") == ","
        assert sniff_delimiter("Title,\tNote") == ","


class TestCanParse:
    """Tests for format detection."""

    def test_accepts_list_export(self, parser, sample_exports_path: Path):
        content = (sample_exports_path / "list.csv").read_text(encoding="utf-8")

        assert parser.can_parse(content)

    def test_accepts_tab_separated(self, parser):
        assert parser.can_parse("Title\tNote\nCafe\tGood")

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "Title,Note",
            "This is just plain text\nNot JSON or CSV\nJust some random content",
            "foo,bar\n1,2",
            "Title Note\nCafe Good",
        ],
    )
    def test_rejects(self, parser, content):
        assert parser.can_parse(content) is False


class TestParse:
    """Tests for record extraction."""

    def test_parses_list_export(self, parser, sample_exports_path: Path):
        content = (sample_exports_path / "list.csv").read_text(encoding="utf-8")

        outcome = parser.parse(content, "list.csv")

        assert outcome.succeeded
        assert outcome.problems == []
        assert outcome.stats.total_input_units == 3
        first = outcome.records[0]
        assert first.name == "Blue Bottle Coffee"
        assert first.notes == "Best pour-over in the city!"
        assert first.source_url == "https://maps.google.com/?cid=123"
        assert first.address == "66 Mint St, San Francisco, CA"
        assert first.latitude == pytest.approx(37.7749)
        assert first.longitude == pytest.approx(-122.4194)
        assert first.metadata.source_format is SourceFormat.CSV

    def test_short_row_is_padded(self, parser, sample_exports_path: Path):
        content = (sample_exports_path / "list.csv").read_text(encoding="utf-8")

        park = parser.parse(content, "list.csv").records[2]

        assert park.name == "Dolores Park"
        assert park.notes is None
        assert park.source_url is None
        assert park.address == "Mission District, SF"
        assert park.has_coordinates is False

    def test_separate_coordinate_columns(self, parser, sample_exports_path: Path):
        content = (sample_exports_path / "travel_list.csv").read_text(encoding="utf-8")

        records = parser.parse(content, "travel_list.csv").records

        assert records[0].name == "Onsen Hot Spring"
        assert records[0].list_name == "Travel"
        assert records[0].latitude == pytest.approx(35.0116)
        assert records[1].longitude == pytest.approx(-122.0839)

    def test_quoted_fields(self, parser):
        content = (
            "Title,Note,URL\n"
            '"Coffee Shop, The Best","Great coffee with ""special"" beans",https://maps.google.com/?cid=111\n'
            "Simple Place,No quotes here,https://maps.google.com/?cid=222\n"
        )

        records = parser.parse(content, "quotes.csv").records

        assert records[0].name == "Coffee Shop, The Best"
        assert records[0].notes == 'Great coffee with "special" beans'
        assert records[1].name == "Simple Place"

    def test_headers_case_insensitive_and_crlf(self, parser):
        content = "TITLE,NOTE\r\nCafe,Good coffee\r\n"

        record = parser.parse(content, "x.csv").records[0]

        assert record.name == "Cafe"
        assert record.notes == "Good coffee"

    def test_bom_in_header(self, parser):
        content = "\ufeffTitle,Note\nCafe,Good"

        assert parser.parse(content, "x.csv").records[0].name == "Cafe"

    def test_missing_title_column(self, parser, sample_exports_path: Path):
        content = (sample_exports_path / "missing_title.csv").read_text(encoding="utf-8")

        outcome = parser.parse(content, "missing_title.csv")

        assert not outcome.succeeded
        assert len(outcome.problems) == 1
        problem = outcome.problems[0]
        assert problem.severity is Severity.WARNING
        assert problem.unit_index == 2
        assert problem.field_name == "name"
        assert "name" in problem.message and "line 2" in problem.message

    def test_blank_name_row_skipped_with_line_number(self, parser):
        content = "Title,Note\nCafe,Good\n,orphan note\nBakery,Bread\n"

        outcome = parser.parse(content, "x.csv")

        assert [r.name for r in outcome.records] == ["Cafe", "Bakery"]
        assert outcome.problems[0].unit_index == 3
        assert outcome.problems[0].original_data == {"title": "", "note": "orphan note"}
        assert outcome.stats.success_count + outcome.stats.failure_count == outcome.stats.total_input_units

    def test_header_only_is_fatal(self, parser):
        outcome = parser.parse("Title,Note\n\n", "x.csv")

        assert not outcome.succeeded
        assert outcome.stats.total_input_units == 0
        assert outcome.problems[0].severity is Severity.ERROR
        assert "header row" in outcome.problems[0].message

    def test_bad_coordinates_ignored(self, parser):
        content = "Title,Latitude,Longitude\nCafe,north,east\n"

        record = parser.parse(content, "x.csv").records[0]

        assert record.has_coordinates is False

    def test_original_fields_kept(self, parser):
        content = "Title,Tags\nCafe,wifi\n"

        record = parser.parse(content, "x.csv").records[0]

        assert record.metadata.original_fields == {"title": "Cafe", "tags": "wifi"}
