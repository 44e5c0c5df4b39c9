# tests/test_phone.py
"""Phone canonicalization and stored-variant matching."""

import pytest

from src.shared.utilities.phone import extract_core, normalize_phone, phone_variants
from src.shared.utilities.result import ErrorKind


class TestNormalizePhone:
    @pytest.mark.parametrize("raw", ["51270700", "97451270700", "+97451270700", "0097451270700",
                                     "+974 5127-0700", " 51270700 "])
    def test_common_formats_share_one_canonical_form(self, raw):
        result = normalize_phone(raw)

        assert result.ok
        assert result.value.core == "51270700"
        assert result.value.prefixed == "97451270700"
        assert result.value.e164 == "+97451270700"

    @pytest.mark.parametrize("raw", ["", "1234", "5127070", "512707001", "abc", "9745127070"])
    def test_rejects_numbers_without_eight_digit_core(self, raw):
        result = normalize_phone(raw)

        assert not result.ok
        assert result.error is ErrorKind.INVALID_PHONE_FORMAT

    def test_local_number_starting_with_country_digits_is_kept(self):
        # Eight digits are never treated as prefixed, even when they start with 974
        assert extract_core("97412345") == "97412345"


class TestPhoneVariants:
    def test_valid_phone_yields_all_forms(self):
        variants = phone_variants("+97451270700")

        assert "+97451270700" in variants
        assert "97451270700" in variants
        assert "51270700" in variants
        assert len(variants) == len(set(variants))

    def test_empty_input_has_no_variants(self):
        assert phone_variants("") == []
        assert phone_variants("   ") == []

    def test_malformed_phone_still_matches_itself(self):
        variants = phone_variants("12345")

        assert "12345" in variants
