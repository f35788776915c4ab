"""
Tests for listing validation and decoding.
"""

from datetime import datetime

import pytest

from pastescrape.errors import DecodeError
from pastescrape.schema import ListingEntry, validate_listing_entry, parse_listing

from conftest import listing_element


class TestValidateListingEntry:
    """Test per-element validation."""

    def test_valid_element(self):
        """A well-formed element has no errors."""
        assert validate_listing_entry(listing_element("abc1")) == []

    def test_missing_key(self):
        """Missing key should error."""
        data = listing_element("abc1")
        del data["key"]
        errors = validate_listing_entry(data)
        assert any("key" in err for err in errors)

    def test_empty_key(self):
        """Blank key should error."""
        errors = validate_listing_entry(listing_element("   "))
        assert len(errors) > 0

    def test_non_object(self):
        """Elements must be objects."""
        errors = validate_listing_entry(["abc1"])
        assert errors and "object" in errors[0]

    def test_non_numeric_size(self):
        """size must parse as an integer."""
        errors = validate_listing_entry(listing_element("abc1", size="big"))
        assert any("size" in err for err in errors)

    def test_numeric_fields_may_be_numbers(self):
        """Numbers are accepted as well as numeric strings."""
        data = listing_element("abc1", date=1700000000, size=10, expire=0)
        assert validate_listing_entry(data) == []

    def test_non_string_title(self):
        """Text fields must be strings if present."""
        errors = validate_listing_entry(listing_element("abc1", title=5))
        assert any("title" in err for err in errors)

    @pytest.mark.parametrize("field", ["date", "expire"])
    @pytest.mark.parametrize("value", ["99999999999999999", 10 ** 30])
    def test_epoch_out_of_range(self, field, value):
        """Epochs that no datetime can hold are validation errors."""
        errors = validate_listing_entry(listing_element("abc1", **{field: value}))
        assert any(field in err for err in errors)

    @pytest.mark.parametrize("size", [2 ** 70, "-1"])
    def test_size_out_of_range(self, size):
        """size must be non-negative and fit a signed 64-bit column."""
        errors = validate_listing_entry(listing_element("abc1", size=size))
        assert any("size" in err for err in errors)

    def test_largest_size_accepted(self):
        """The column maximum itself is valid."""
        assert validate_listing_entry(listing_element("abc1", size=2 ** 63 - 1)) == []


class TestParseListing:
    """Test whole-payload decoding."""

    def test_decodes_fields(self):
        """Epochs become UTC datetimes and user maps to author."""
        payload = [listing_element("abc1", date="1700000000", size="1234", expire="1700003600", user="bob")]

        entries = parse_listing(payload)

        assert entries == [ListingEntry(
            key="abc1",
            scrape_url=payload[0]["scrape_url"],
            full_url=payload[0]["full_url"],
            publish_time=datetime(2023, 11, 14, 22, 13, 20),
            size=1234,
            expire_time=datetime(2023, 11, 14, 23, 13, 20),
            title="paste abc1",
            syntax="text",
            author="bob",
        )]

    @pytest.mark.parametrize("expire", ["0", 0, "", None])
    def test_no_expiry_values(self, expire):
        """0, empty and null all mean the paste never expires."""
        entries = parse_listing([listing_element("abc1", expire=expire)])
        assert entries[0].expire_time is None

    def test_absent_expire(self):
        """A missing expire field means no expiry."""
        data = listing_element("abc1")
        del data["expire"]
        assert parse_listing([data])[0].expire_time is None

    def test_preserves_order(self):
        """Entries keep the service's most-recent-first order."""
        entries = parse_listing([listing_element(k) for k in ("c", "a", "b")])
        assert [e.key for e in entries] == ["c", "a", "b"]

    def test_empty_array(self):
        """An empty listing is valid."""
        assert parse_listing([]) == []

    def test_not_an_array(self):
        """An object instead of an array fails the whole listing."""
        with pytest.raises(DecodeError):
            parse_listing({"key": "abc1"})

    def test_one_bad_element_fails_all(self):
        """A single invalid element rejects the listing."""
        with pytest.raises(DecodeError, match="index 1"):
            parse_listing([listing_element("abc1"), {"title": "no key"}])

    def test_out_of_range_expire_fails_all(self):
        """An unrepresentable expiry is a decode error, not a crash."""
        with pytest.raises(DecodeError, match="expire"):
            parse_listing([listing_element("abc1", expire="99999999999999999")])
