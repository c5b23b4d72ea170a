"""Tests for page/limit normalization."""

import pytest

from vidshare.services.pagination import MAX_LIMIT, normalize_pagination, page_offset


class TestNormalizePagination:
    def test_defaults_when_missing(self):
        assert normalize_pagination(None, None) == (1, 10)

    def test_numeric_strings_accepted(self):
        assert normalize_pagination("3", "25") == (3, 25)

    @pytest.mark.parametrize("raw", ["abc", "0", "-2", "", "1.5"])
    def test_invalid_values_fall_back(self, raw):
        assert normalize_pagination(raw, raw) == (1, 10)

    def test_limit_is_capped(self):
        assert normalize_pagination(1, 10_000) == (1, MAX_LIMIT)


class TestPageOffset:
    def test_first_page_starts_at_zero(self):
        assert page_offset(1, 10) == 0

    def test_later_page(self):
        assert page_offset(3, 20) == 40
