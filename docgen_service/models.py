"""Pydantic models for the document generation service."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class TemplateSource(BaseModel):
    """Where this request's template bytes come from."""

    path: Path
    filename: str = ""
    transient: bool = False


class Row(BaseModel):
    description: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    sub_total: float = 0.0


class Totals(BaseModel):
    subtotal: float = 0.0
    discount_percent: float = 0.0
    discount_flat: float = 0.0
    discount_from_percent: float = 0.0
    discounted: float = 0.0
    vat_rate: float = 0.12
    vat_amount: float = 0.0
    total: float = 0.0


class Party(BaseModel):
    name: str = ""
    title: str = ""
    company: str = ""


class EstimateDetails(BaseModel):
    """Header and signature data printed around the cost-estimate table."""

    name: str
    date: str
    order_id: str
    sales_person: Party = Field(default_factory=Party)
    decision_maker: Party = Field(default_factory=Party)
    opportunity_header: str = ""
    slp_code: str = ""
    created_at: str = ""
    terms_condition: str = ""
    footer: str = ""


class GenerateForm(BaseModel):
    """Text fields posted alongside the optional template upload."""

    name: str | None = None
    date: str | None = None
    order_id: str | None = None
    discount_percent: str | None = None
    discount_flat: str | None = None
    vat_rate: str | None = None
    footer: str | None = None
    table: str | None = None


class ErrorResponse(BaseModel):
    error: str
    details: list = Field(default_factory=list)
