"""Cost-estimate data synthesizer.

Builds line-item rows, derives totals, and fills header and signature
details the template prints around the table.
"""

from __future__ import annotations

import datetime as dt

from opentelemetry import trace

from docgen_service.models import EstimateDetails, GenerateForm, Party, Row, Totals
from docgen_service.normalizer import coerce_number, parse_table
from docgen_service.providers import FakeDataProvider

tracer = trace.get_tracer("docgen-service")


def format_date(value: dt.date) -> str:
    """Month/day/year without zero padding, e.g. ``3/7/2025``."""
    return f"{value.month}/{value.day}/{value.year}"


def generate_rows(provider: FakeDataProvider, count: int = 5) -> list[Row]:
    rows = []
    for _ in range(count):
        quantity = float(provider.random_int(1, 10))
        unit_price = max(0.0, provider.price())
        rows.append(
            Row(
                description=provider.product_name(),
                quantity=quantity,
                unit_price=unit_price,
                sub_total=quantity * unit_price,
            )
        )
    return rows


def resolve_rows(form: GenerateForm, provider: FakeDataProvider, count: int = 5) -> list[Row]:
    """Use posted rows when the form carries any, otherwise generate *count*."""
    with tracer.start_as_current_span("docgen.resolve_rows") as span:
        rows = parse_table(form.table)
        span.set_attribute("rows.user_supplied", bool(rows))
        if not rows:
            rows = generate_rows(provider, count)
        span.set_attribute("rows.count", len(rows))
        return rows


def compute_totals(
    rows: list[Row],
    discount_percent: float = 0.0,
    discount_flat: float = 0.0,
    vat_rate: float = 0.12,
) -> Totals:
    subtotal = sum(row.sub_total for row in rows)
    discount_from_percent = subtotal * (discount_percent / 100)
    discounted = subtotal - discount_from_percent - discount_flat
    vat_amount = discounted * vat_rate
    return Totals(
        subtotal=subtotal,
        discount_percent=discount_percent,
        discount_flat=discount_flat,
        discount_from_percent=discount_from_percent,
        discounted=discounted,
        vat_rate=vat_rate,
        vat_amount=vat_amount,
        total=discounted + vat_amount,
    )


def totals_from_form(rows: list[Row], form: GenerateForm, default_vat_rate: float = 0.12) -> Totals:
    """Apply the posted discount and VAT overrides, absorbing bad input."""
    return compute_totals(
        rows,
        discount_percent=coerce_number(form.discount_percent),
        discount_flat=coerce_number(form.discount_flat),
        vat_rate=coerce_number(form.vat_rate, default=default_vat_rate),
    )


def compose_footer(sales_person: Party, decision_maker: Party) -> str:
    lines = [
        sales_person.name,
        sales_person.title,
        sales_person.company,
        "Conforme:" if decision_maker.name else "",
        decision_maker.name,
        decision_maker.title,
        decision_maker.company,
    ]
    return "\n".join(line for line in lines if line)


def _random_party(provider: FakeDataProvider) -> Party:
    return Party(
        name=provider.person_name(),
        title=provider.job_title(),
        company=provider.company_name(),
    )


def build_details(form: GenerateForm, provider: FakeDataProvider) -> EstimateDetails:
    """Header fields from the form, everything else generated."""
    sales_person = _random_party(provider)
    decision_maker = _random_party(provider)
    return EstimateDetails(
        name=form.name or provider.person_name(),
        date=form.date or format_date(provider.recent_date()),
        order_id=form.order_id or f"ORD-{provider.random_int(1000, 99999)}",
        sales_person=sales_person,
        decision_maker=decision_maker,
        opportunity_header=provider.company_name(),
        slp_code=f"SLP-{provider.random_int(10000, 99999)}",
        created_at=format_date(provider.recent_date()),
        terms_condition=provider.sentence(),
        footer=form.footer or compose_footer(sales_person, decision_maker),
    )
