"""Cursor-based pagination for ordered SQLAlchemy selects.

A cursor is ``base64(json({"values": {...}, "order": [...]}))`` where
``values`` holds the last row's value for every ordered column and
``order`` holds ``"<column>_<ASC|DESC>"`` tokens, primary sort key first.

Once a cursor is supplied, its embedded order wins over the caller's.

Known limitation: the boundary predicate is a single row-value comparison
``(c1, ..., cn) OP (v1, ..., vn)`` with ``OP`` = ``<`` when any column is
DESC and ``>`` otherwise. That is only correct when every column shares one
direction; mixed-direction orders can skip or repeat rows.
"""

import base64
import binascii
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, Protocol
from uuid import UUID

from sqlalchemy import Select, func, inspect, literal, select, tuple_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from moviecatalog.core.exceptions import (
    InvalidOrderColumnError,
    InvalidOrderDirectionError,
    MalformedCursorError,
)

logger = logging.getLogger(__name__)

Direction = Literal["ASC", "DESC"]


class PageRequest(Protocol):
    cursor: str | None
    order: list[str]
    take: int


@dataclass(frozen=True)
class OrderSpec:
    """One parsed ``<column>_<DIRECTION>`` token."""

    column: str
    direction: Direction

    @property
    def token(self) -> str:
        return f"{self.column}_{self.direction}"


@dataclass
class CursorPage:
    """A page of rows plus the cursor for the page after it."""

    items: list[Any]
    next_cursor: str | None
    count: int | None = None


def parse_order_token(token: str) -> OrderSpec:
    """Split ``token`` on its last underscore into column and direction."""
    column, _, direction = token.rpartition("_")
    if direction not in ("ASC", "DESC"):
        raise InvalidOrderDirectionError(
            f"Order direction must be ASC or DESC, got {token!r}"
        )
    if not column:
        raise InvalidOrderColumnError(f"Order token {token!r} has no column")
    return OrderSpec(column=column, direction=direction)  # type: ignore[arg-type]


def parse_order(order: Sequence[str]) -> list[OrderSpec]:
    return [parse_order_token(token) for token in order]


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, UUID | Decimal):
        return str(value)
    raise TypeError(f"Cannot encode {type(value).__name__} in a cursor")


def decode_cursor(cursor: str) -> tuple[dict[str, Any], list[str]]:
    """Decode a cursor into its ``(values, order)`` pair.

    Raises:
        MalformedCursorError: not base64, not JSON, or missing/mistyped keys.
    """
    try:
        raw = base64.b64decode(cursor.encode("ascii"), validate=True).decode("utf-8")
        payload = json.loads(raw)
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise MalformedCursorError("Cursor is not valid base64-encoded JSON") from e

    if not isinstance(payload, dict):
        raise MalformedCursorError("Cursor payload must be an object")
    values = payload.get("values")
    order = payload.get("order")
    if not isinstance(values, dict) or not values:
        raise MalformedCursorError("Cursor is missing 'values'")
    if not all(v is None or isinstance(v, str | int | float | bool) for v in values.values()):
        raise MalformedCursorError("Cursor values must be scalars")
    if not isinstance(order, list) or not order or not all(isinstance(o, str) for o in order):
        raise MalformedCursorError("Cursor is missing 'order'")
    return values, order


def _row_value(row: Any, column: str) -> Any:
    if isinstance(row, Mapping):
        return row[column]
    return getattr(row, column)


def encode_cursor(last_row: Any, order: Sequence[str]) -> str:
    """Encode the position of ``last_row`` under ``order``."""
    values = {spec.column: _row_value(last_row, spec.column) for spec in parse_order(order)}
    payload = json.dumps({"values": values, "order": list(order)}, default=_json_default)
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def generate_next_cursor(results: Sequence[Any], order: Sequence[str]) -> str | None:
    """Cursor for the page after ``results``; None when there are no results."""
    if not results:
        return None
    return encode_cursor(results[-1], order)


def _resolve_column(entity: type, name: str) -> InstrumentedAttribute:
    if name not in inspect(entity).column_attrs:
        raise InvalidOrderColumnError(f"Unknown order column {name!r}")
    return getattr(entity, name)


def _coerce(attr: InstrumentedAttribute, value: Any) -> Any:
    """Restore JSON-flattened values (ISO dates, UUIDs) to the column's type."""
    if not isinstance(value, str):
        return value
    try:
        python_type = attr.type.python_type
    except NotImplementedError:
        return value
    try:
        if python_type is datetime:
            return datetime.fromisoformat(value)
        if python_type is date:
            return date.fromisoformat(value)
        if python_type is UUID:
            return UUID(value)
        if python_type is Decimal:
            return Decimal(value)
    except ValueError as e:
        raise MalformedCursorError(f"Cursor value for {attr.key!r} is invalid") from e
    return value


def cursor_predicate(entity: type, values: Mapping[str, Any], order: Sequence[OrderSpec]):
    """Row-value boundary ``(c1..cn) OP (v1..vn)`` for the given cursor values."""
    operator = "<" if any(spec.direction == "DESC" for spec in order) else ">"
    columns = [_resolve_column(entity, name) for name in values]
    bound = [literal(_coerce(col, values[col.key]), type_=col.type) for col in columns]
    left, right = tuple_(*columns), tuple_(*bound)
    return left < right if operator == "<" else left > right


def apply_cursor_pagination(
    stmt: Select, entity: type, page_request: PageRequest
) -> tuple[Select, list[str]]:
    """Extend ``stmt`` with cursor boundary, row limit and ordering.

    Returns the new statement and the effective order tokens, which must be
    used to mint the next cursor.
    """
    order = list(page_request.order)

    if page_request.cursor:
        values, order = decode_cursor(page_request.cursor)
        stmt = stmt.where(cursor_predicate(entity, values, parse_order(order)))

    stmt = stmt.limit(page_request.take)

    for i, spec in enumerate(parse_order(order)):
        column = _resolve_column(entity, spec.column)
        clause = column.desc() if spec.direction == "DESC" else column.asc()
        # First clause replaces any existing ordering; later ones append
        stmt = stmt.order_by(None).order_by(clause) if i == 0 else stmt.order_by(clause)

    return stmt, order


def apply_page_pagination(stmt: Select, page: int, take: int) -> Select:
    """Plain offset pagination; ``page`` is 1-based."""
    return stmt.limit(take).offset((page - 1) * take)


async def paginate(
    session: AsyncSession,
    stmt: Select,
    entity: type,
    page_request: PageRequest,
    with_count: bool = False,
) -> CursorPage:
    """Execute a cursor-paginated select and build the page.

    ``with_count`` adds the total number of rows matching ``stmt`` before the
    cursor boundary is applied.
    """
    paged, order = apply_cursor_pagination(stmt, entity, page_request)

    count = None
    if with_count:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        count = (await session.execute(count_stmt)).scalar() or 0

    result = await session.execute(paged)
    items = list(result.scalars().unique().all())

    logger.debug(f"Paginated {entity.__name__}: {len(items)} rows, order={order}")
    return CursorPage(items=items, next_cursor=generate_next_cursor(items, order), count=count)
