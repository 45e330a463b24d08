"""Tests for CSV import / export."""

from decimal import Decimal

import pytest

from license_calculator.models.item import Item
from license_calculator.services.transfer import (
    CSV_HEADER,
    CsvFormatError,
    MissingFieldError,
    TransferError,
    decode_csv,
    encode_csv,
)


class TestEncodeCsv:
    """Tests for export."""

    def test_header_only_for_empty_list(self):
        assert encode_csv([]) == "Name,Price,Source URL\n"

    def test_rows_in_order(self):
        text = encode_csv([
            Item(name="Slack Pro", price="8.75", source_url="https://slack.com"),
            Item(name="Zoom", price=15),
        ])
        assert text.splitlines() == [
            "Name,Price,Source URL",
            "Slack Pro,8.75,https://slack.com",
            "Zoom,15,",
        ]

    def test_quotes_fields_with_commas_and_quotes(self):
        text = encode_csv([Item(name='Adobe "CC", Pro', price=60)])
        assert text.splitlines()[1] == '"Adobe ""CC"", Pro",60,'

    def test_round_trip(self, sample_items):
        assert decode_csv(encode_csv(sample_items)) == sample_items


class TestDecodeCsv:
    """Tests for import."""

    def test_decodes_standard_header(self):
        items = decode_csv("Name,Price,Source URL\nSlack Pro,8.75,https://slack.com\n")
        assert items == [Item(name="Slack Pro", price=Decimal("8.75"), source_url="https://slack.com")]

    @pytest.mark.parametrize("header", [
        "name,price,sourceUrl",
        "NAME,PRICE,SOURCE URL",
        "Name,Price,source_url",
    ])
    def test_header_variants(self, header):
        items = decode_csv(f"{header}\nZoom,15,https://zoom.us\n")
        assert items == [Item(name="Zoom", price=15, source_url="https://zoom.us")]

    def test_columns_in_any_order(self):
        items = decode_csv("Price,Name\n15,Zoom\n")
        assert items == [Item(name="Zoom", price=15)]

    def test_bad_price_becomes_zero(self):
        assert decode_csv("Name,Price\nZoom,free\n")[0].price == Decimal("0")

    def test_blank_lines_are_skipped(self):
        items = decode_csv("Name,Price\n\nZoom,15\n,\nSlack,8\n")
        assert [item.name for item in items] == ["Zoom", "Slack"]

    def test_strips_byte_order_mark(self):
        assert decode_csv("\ufeffName,Price\nZoom,15\n")[0].name == "Zoom"

    def test_empty_text_imports_nothing(self):
        assert decode_csv("") == []

    def test_missing_name_reports_row_number(self):
        """Test that the 1-indexed data row number is reported."""
        with pytest.raises(MissingFieldError) as exc_info:
            decode_csv("Name,Price\nZoom,15\nSlack,8\n ,20\n")
        assert exc_info.value.row_number == 3
        assert str(exc_info.value) == "Row 3 is missing a name"

    def test_missing_name_column(self):
        with pytest.raises(CsvFormatError):
            decode_csv("Title,Price\nZoom,15\n")

    def test_errors_share_base_class(self):
        assert issubclass(MissingFieldError, TransferError)
        assert issubclass(CsvFormatError, TransferError)

    def test_header_constant(self):
        assert CSV_HEADER == ["Name", "Price", "Source URL"]
