"""
Tests for cursor encoding
"""

from datetime import datetime

import pytest

from careerhub.exceptions import InvalidCursorError
from careerhub.services.pagination import check_page_size, decode_cursor, encode_cursor


def test_cursor_is_url_safe():
    cursor = encode_cursor(datetime(2026, 1, 15, 12, 30, 5, 123456), "a/b+c")
    assert all(ch.isalnum() or ch in "-_" for ch in cursor)
    assert decode_cursor(cursor) == (datetime(2026, 1, 15, 12, 30, 5, 123456), "a/b+c")


@pytest.mark.parametrize("cursor", ["", "###", "bm90LWpzb24", "e30"])
def test_malformed_cursor_raises(cursor):
    with pytest.raises(InvalidCursorError):
        decode_cursor(cursor)


@pytest.mark.parametrize("page_size", [0, -1])
def test_page_size_must_be_positive(page_size):
    with pytest.raises(ValueError):
        check_page_size(page_size)
