"""Schema-driven conversion of raw query rows into Python values.

The service returns every row as ``{"f": [{"v": <value>}, ...]}`` with all
scalars encoded as strings. ``merge_schema_with_rows`` pairs each cell with its
schema field and decodes it.
"""

from __future__ import annotations

import base64
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Callable

from warehouse_jobs.models.enums import FieldMode


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() == "true"


def _to_bytes(value: Any) -> bytes:
    return base64.b64decode(value)


def _to_timestamp(value: Any) -> datetime:
    # Epoch seconds, possibly fractional or in exponent notation
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


def _to_datetime(value: Any) -> datetime:
    return datetime.fromisoformat(str(value).replace(" ", "T"))


_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "BOOLEAN": _to_bool,
    "BOOL": _to_bool,
    "BYTES": _to_bytes,
    "FLOAT": float,
    "FLOAT64": float,
    "INTEGER": int,
    "INT64": int,
    "NUMERIC": Decimal,
    "BIGNUMERIC": Decimal,
    "DATE": date.fromisoformat,
    "DATETIME": _to_datetime,
    "TIME": time.fromisoformat,
    "TIMESTAMP": _to_timestamp,
}

_RECORD_TYPES = frozenset({"RECORD", "STRUCT"})


def _convert(field: dict[str, Any], value: Any) -> Any:
    if value is None:
        return None
    field_type = str(field.get("type", "")).upper()
    if field_type in _RECORD_TYPES:
        return merge_schema_with_rows(field, [value])[0]
    converter = _CONVERTERS.get(field_type)
    if converter is None:
        return value
    return converter(value)


def _merge_row(schema: dict[str, Any], row: dict[str, Any]) -> dict[str, Any]:
    fields = schema.get("fields") or []
    merged: dict[str, Any] = {}
    for field, cell in zip(fields, row.get("f") or []):
        value = cell.get("v") if isinstance(cell, dict) else cell
        if field.get("mode") == FieldMode.REPEATED:
            value = [_convert(field, item.get("v") if isinstance(item, dict) else item) for item in value or []]
        else:
            value = _convert(field, value)
        merged[field["name"]] = value
    return merged


def merge_schema_with_rows(schema: dict[str, Any], rows: list[dict[str, Any]] | dict[str, Any] | None) -> list[dict[str, Any]]:
    """Decode raw rows against *schema*.

    Args:
        schema: A table schema (or RECORD field) with a ``fields`` list.
        rows: Raw rows as returned by the service. A single row is accepted.

    Returns:
        One dict per row, keyed by field name.
    """
    if rows is None:
        return []
    if isinstance(rows, dict):
        rows = [rows]
    return [_merge_row(schema, row) for row in rows]
