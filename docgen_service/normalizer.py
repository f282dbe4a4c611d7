"""Lenient input normalizer.

Ensures user-provided values conform to the estimate contract:
- Numbers parse leniently; absent or malformed input becomes the default
- Numeric fields are never negative
- Rows accept the column spellings older templates and clients used
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from opentelemetry import trace

from docgen_service.errors import InputParseError
from docgen_service.models import Row

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("docgen-service")

# First non-empty key wins.
_DESCRIPTION_KEYS = ("description", "Description", "item_description", "col1")
_QUANTITY_KEYS = ("quantity", "qty", "Qty", "col2")
_UNIT_PRICE_KEYS = ("unit_price", "price", "unitPrice", "col3")


def parse_number(raw: Any) -> float:
    """Parse *raw* as a finite float or raise :class:`InputParseError`."""
    if raw is None or isinstance(raw, bool):
        raise InputParseError(f"not a number: {raw!r}")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace(",", "")
        if not text:
            raise InputParseError("empty value")
        try:
            value = float(text)
        except ValueError as exc:
            raise InputParseError(f"not a number: {raw!r}") from exc
    if not math.isfinite(value):
        raise InputParseError(f"not a finite number: {raw!r}")
    return value


def coerce_number(raw: Any, default: float = 0.0) -> float:
    """Parse *raw*, falling back to *default*; negatives clamp to 0."""
    try:
        value = parse_number(raw)
    except InputParseError as exc:
        if raw not in (None, ""):
            logger.debug("Using default %s for unparseable input: %s", default, exc)
        return default
    return max(0.0, value)


def _first(item: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def normalize_row(item: dict) -> Row:
    """Build a :class:`Row` from a loosely shaped mapping."""
    description = _first(item, _DESCRIPTION_KEYS)
    quantity = coerce_number(_first(item, _QUANTITY_KEYS))
    unit_price = coerce_number(_first(item, _UNIT_PRICE_KEYS))
    return Row(
        description="" if description is None else str(description),
        quantity=quantity,
        unit_price=unit_price,
        sub_total=quantity * unit_price,
    )


def parse_table(raw: str | None) -> list[Row]:
    """Parse a JSON array of rows posted with the form.

    Returns an empty list when the field is absent, is not valid JSON, or
    is not a list; non-mapping entries are skipped.
    """
    if not raw or not raw.strip():
        return []
    with tracer.start_as_current_span("docgen.parse_table"):
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring malformed table field: %s", exc)
            return []
        if not isinstance(items, list):
            logger.warning("Ignoring table field of type %s", type(items).__name__)
            return []
        return [normalize_row(item) for item in items if isinstance(item, dict)]
