"""
Cursor pagination helpers.

A cursor is an opaque token naming the last record of a page: its sort
timestamp plus its id. The next query starts strictly after that record in
(timestamp desc, id desc) order, so ties on the timestamp never repeat or
skip rows of a static dataset.
"""

import base64
import binascii
import json
from datetime import datetime
from typing import Tuple

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from careerhub.exceptions import InvalidCursorError


def encode_cursor(sort_value: datetime, record_id: str) -> str:
    payload = json.dumps({"t": sort_value.isoformat(), "id": record_id})
    return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode()))
        return datetime.fromisoformat(payload["t"]), str(payload["id"])
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
        raise InvalidCursorError(f"Invalid pagination cursor: {cursor!r}") from e


def start_after(sort_column, id_column, cursor: str) -> ColumnElement:
    """Keyset predicate for rows after ``cursor`` in descending order."""
    sort_value, record_id = decode_cursor(cursor)
    return or_(
        sort_column < sort_value,
        and_(sort_column == sort_value, id_column < record_id),
    )


def check_page_size(page_size: int) -> None:
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
