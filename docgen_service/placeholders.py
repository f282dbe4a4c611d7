"""Placeholder mapper.

Template authors spell the same field many ways (``salesPersonName``,
``SALES PERSON NAME``, ``Sales Person Name``...). Every logical field is
declared once in ``PLACEHOLDER_ALIASES`` and written under each of its
spellings when the bag is built.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

from docgen_service.models import EstimateDetails, Row, Totals

tracer = trace.get_tracer("docgen-service")

# canonical field -> words the case variants are derived from
_FIELD_WORDS: dict[str, tuple[str, ...]] = {
    "name": ("name",),
    "date": ("date",),
    "order_id": ("order", "id"),
    "sub_total": ("sub", "total"),
    "discount_percent": ("discount", "percent"),
    "discount_flat": ("discount", "flat"),
    "discounted": ("discounted",),
    "vat": ("vat",),
    "vat_rate": ("vat", "rate"),
    "total": ("total",),
    "footer": ("footer",),
    "sales_person_name": ("sales", "person", "name"),
    "sales_person_title": ("sales", "person", "title"),
    "sales_person_company": ("sales", "person", "company"),
    "decision_maker_name": ("decision", "maker", "name"),
    "decision_maker_title": ("decision", "maker", "title"),
    "decision_maker_company": ("decision", "maker", "company"),
    "opportunity_header": ("opportunity", "header"),
    "slp_code": ("slp", "code"),
    "created_at": ("created", "at"),
    "terms_condition": ("terms", "condition"),
}

# spellings that do not follow from the words
_LEGACY_ALIASES: dict[str, tuple[str, ...]] = {
    "sub_total": ("subtotal",),
    "discounted": ("discounted_total",),
    "vat": ("vat_amount",),
    "decision_maker_title": ("decision_maker_position",),
    "decision_maker_company": ("client_company_name",),
}


def key_variants(words: tuple[str, ...]) -> list[str]:
    """snake_case, camelCase, Title Case and UPPER CASE spellings, deduplicated."""
    lower = [w.lower() for w in words]
    snake = "_".join(lower)
    camel = lower[0] + "".join(w.capitalize() for w in lower[1:])
    title = " ".join(w.capitalize() for w in lower)
    upper = title.upper()
    return list(dict.fromkeys([snake, camel, title, upper]))


def _build_alias_table() -> dict[str, tuple[str, ...]]:
    table = {}
    for field, words in _FIELD_WORDS.items():
        aliases = key_variants(words) + list(_LEGACY_ALIASES.get(field, ()))
        table[field] = tuple(dict.fromkeys(aliases))
    return table


PLACEHOLDER_ALIASES: dict[str, tuple[str, ...]] = _build_alias_table()


def format_amount(value: float) -> str:
    return f"{value:.2f}"


def format_number(value: float) -> str:
    """Plain decimal form without exponent or float noise: ``0``, ``12.5``, ``0.12``.

    Precision is capped at six decimal places.
    """
    text = f"{float(value):.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def table_rows(rows: list[Row]) -> list[dict[str, Any]]:
    """Rows shaped for the template's ``table`` loop."""
    return [
        {
            "index": i,
            "Description": row.description,
            "description": row.description,
            "item_description": row.description,
            "qty": format_number(row.quantity),
            "unit_price": format_amount(row.unit_price),
            "sub_total": format_amount(row.sub_total),
        }
        for i, row in enumerate(rows, 1)
    ]


def canonical_values(details: EstimateDetails, totals: Totals) -> dict[str, Any]:
    return {
        "name": details.name,
        "date": details.date,
        "order_id": details.order_id,
        "sub_total": format_amount(totals.subtotal),
        "discount_percent": format_number(totals.discount_percent),
        "discount_flat": format_amount(totals.discount_flat),
        "discounted": format_amount(totals.discounted),
        "vat": format_amount(totals.vat_amount),
        "vat_rate": format_number(totals.vat_rate),
        "total": format_amount(totals.total),
        "footer": details.footer,
        "sales_person_name": details.sales_person.name,
        "sales_person_title": details.sales_person.title,
        "sales_person_company": details.sales_person.company,
        "decision_maker_name": details.decision_maker.name,
        "decision_maker_title": details.decision_maker.title,
        "decision_maker_company": details.decision_maker.company,
        "opportunity_header": details.opportunity_header,
        "slp_code": details.slp_code,
        "created_at": details.created_at,
        "terms_condition": details.terms_condition,
    }


def build_placeholder_bag(details: EstimateDetails, rows: list[Row], totals: Totals) -> dict[str, Any]:
    """Flat key/value mapping handed wholesale to the renderer."""
    with tracer.start_as_current_span("docgen.build_placeholders") as span:
        bag: dict[str, Any] = {}
        for field, value in canonical_values(details, totals).items():
            for alias in PLACEHOLDER_ALIASES[field]:
                bag[alias] = value

        loop_rows = table_rows(rows)
        bag["table"] = loop_rows
        for row in loop_rows:
            prefix = f"row{row['index']}_"
            bag[prefix + "description"] = row["description"]
            bag[prefix + "qty"] = row["qty"]
            bag[prefix + "unit_price"] = row["unit_price"]
            bag[prefix + "sub_total"] = row["sub_total"]

        span.set_attribute("placeholders.count", len(bag))
        return bag
