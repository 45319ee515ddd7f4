"""
Keyset (cursor) pagination over the images table.

A cursor is the string form of the sort column value of the last row on the
previous page. The next page is everything strictly past it in sort order.
Only a single column is compared, so rows sharing a sort value across a page
boundary can be skipped; callers should sort on unique columns when that
matters.

When the last row of a page has a null sort value, the cursor falls back to
that row's id, which is then compared against the sort column. Remaining
rows with a null sort value are skipped on the following pages.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import Select
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.schema import Column

from app.exceptions import StoreError, ValidationError
from app.models import Image
from app.services.query_params import SortDirection


class CursorOp(Enum):
    GREATER_THAN = "gt"
    LESS_THAN = "lt"


def cursor_op_for(direction: SortDirection) -> CursorOp:
    """Ascending pages move forward with >, descending with <."""
    return CursorOp.GREATER_THAN if direction is SortDirection.ASC else CursorOp.LESS_THAN


def sort_column(field: str) -> Column:
    column = Image.__table__.c.get(field)
    if column is None:
        raise StoreError(f"column images.{field} does not exist")
    return column


def decode_cursor(column: Column, raw: str) -> Any:
    """
    Coerce a cursor string to the sort column's type.

    Raises:
        ValidationError: If the cursor does not parse as the column's type
    """
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    try:
        if python_type is bool:
            return raw.lower() in ("true", "1")
        if python_type is int:
            return int(raw)
        if python_type is datetime:
            return datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid cursor for sort field {column.name}: {raw!r}")
    return raw


def encode_cursor(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def cursor_clause(column: Column, op: CursorOp, value: Any) -> ColumnElement:
    if op is CursorOp.GREATER_THAN:
        return column > value
    return column < value


def apply_keyset(stmt: Select, field: str, direction: SortDirection, cursor: Optional[str], limit: int) -> Select:
    """
    Add ordering, the cursor inequality and the page limit to a statement.
    Nulls sort first when ascending and last when descending.
    """
    column = sort_column(field)
    if direction is SortDirection.ASC:
        stmt = stmt.order_by(column.asc().nulls_first())
    else:
        stmt = stmt.order_by(column.desc().nulls_last())

    if cursor is not None:
        stmt = stmt.where(cursor_clause(column, cursor_op_for(direction), decode_cursor(column, cursor)))

    return stmt.limit(limit)


def next_cursor(rows: list, field: str, limit: int) -> Optional[str]:
    """
    Cursor for the page after `rows`, or None when the results are exhausted.
    A short page means there is nothing left to fetch.
    """
    if not rows or len(rows) != limit:
        return None
    last = rows[-1]
    value = getattr(last, field, None)
    if value is None:
        value = last.id
    return encode_cursor(value)
