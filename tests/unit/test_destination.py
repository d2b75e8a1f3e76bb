"""Unit tests for destination URLs and opening them."""

from unittest.mock import MagicMock

from retrieval.destination import MAPS_SEARCH_URL, build_destination_url, open_destination


class TestBuildDestinationUrl:
    """Tests for URL priority."""

    def test_name_and_address(self, make_record):
        record = make_record(
            "Blue Bottle Coffee",
            address="66 Mint St, SF",
            source_url="https://maps.google.com/?cid=1",
            latitude=37.7749,
            longitude=-122.4194,
        )

        assert build_destination_url(record) == (
            MAPS_SEARCH_URL + "Blue%20Bottle%20Coffee%2C%2066%20Mint%20St%2C%20SF"
        )

    def test_source_url_upgraded_to_https(self, make_record):
        record = make_record("Tartine", source_url="http://maps.google.com/?cid=987", latitude=1.0, longitude=2.0)

        assert build_destination_url(record) == "https://maps.google.com/?cid=987"

    def test_coordinates(self, make_record):
        record = make_record("Pin", latitude=37.7749, longitude=-122.4194)

        assert build_destination_url(record) == MAPS_SEARCH_URL + "37.7749,-122.4194"

    def test_whole_number_coordinates(self, make_record):
        record = make_record("Pin", latitude=35.0, longitude=-120.0)

        assert build_destination_url(record) == MAPS_SEARCH_URL + "35,-120"

    def test_name_only(self, make_record):
        record = make_record("Tartine's (SF) & Co")

        assert build_destination_url(record) == MAPS_SEARCH_URL + "Tartine's%20(SF)%20%26%20Co"


class TestOpenDestination:
    """Tests for open_destination."""

    def test_success(self):
        opener = MagicMock(return_value=True)

        assert open_destination("https://example.com", opener=opener) is True
        opener.assert_called_once_with("https://example.com")

    def test_no_browser(self):
        assert open_destination("https://example.com", opener=lambda url: False) is False

    def test_opener_error_is_reported_not_raised(self):
        opener = MagicMock(side_effect=RuntimeError("no display"))

        assert open_destination("https://example.com", opener=opener) is False
