"""
Unit tests for ISIN helpers (depot_import.transforms.isin).
"""

from __future__ import annotations

import pytest

from depot_import.exceptions import DepotImportError, InvalidIsinError
from depot_import.transforms.isin import is_isin, normalize_isin, normalize_isins

VALID = ["DE0005152623", "IE00B4L5Y983", "LU0274208692", "US0378331005"]


class TestIsIsin:

    @pytest.mark.parametrize("value", VALID)
    def test_valid(self, value):
        assert is_isin(value)

    @pytest.mark.parametrize(
        "value",
        [
            "",
            None,
            "de0005152623",      # lowercase
            "DE000515262",       # 11 chars
            "DE00051526234",     # 13 chars
            "DE000515262X",      # letter check digit
            "1E0005152623",      # digit in country code
            " DE0005152623",     # surrounding whitespace
            "INVALID",
        ],
    )
    def test_invalid(self, value):
        assert not is_isin(value)


class TestNormalizeIsin:

    def test_uppercases_and_trims(self):
        assert normalize_isin("  de0005152623 \n") == "DE0005152623"

    @pytest.mark.parametrize("value", VALID + [" ie00b4l5y983 "])
    def test_idempotent(self, value):
        once = normalize_isin(value)
        assert normalize_isin(once) == once
        assert once == once.strip().upper()

    @pytest.mark.parametrize("value", ["", None, "INVALID", "DE000515262X"])
    def test_invalid_raises(self, value):
        with pytest.raises(InvalidIsinError):
            normalize_isin(value)

    def test_error_is_value_error_and_library_error(self):
        with pytest.raises(ValueError):
            normalize_isin("nope")
        with pytest.raises(DepotImportError):
            normalize_isin("nope")

    def test_check_digit_is_not_verified(self):
        """Structural shape only: a wrong check digit still passes."""
        assert normalize_isin("DE0005152620") == "DE0005152620"


class TestNormalizeIsins:

    def test_dedupes_keeping_order(self):
        result = normalize_isins(["us0378331005", "DE0005152623", "US0378331005 "])
        assert result == ["US0378331005", "DE0005152623"]

    def test_first_invalid_raises(self):
        with pytest.raises(InvalidIsinError, match="bad"):
            normalize_isins(["DE0005152623", "bad"])

    def test_empty(self):
        assert normalize_isins([]) == []
