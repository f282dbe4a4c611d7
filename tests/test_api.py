"""
API tests for the docgen service routes.
"""

import dataclasses
import io
import json
import time

import docx
import pytest

from docgen_service import main
from docgen_service.config import config
from docgen_service.renderer import DOCX_MEDIA_TYPE


def _document(content: bytes):
    return docx.Document(io.BytesIO(content))


def _paragraphs(document) -> dict[str, str]:
    """'Label: value' paragraphs keyed by label."""
    lines = {}
    for p in document.paragraphs:
        label, sep, value = p.text.partition(": ")
        if sep:
            lines[label] = value
    return lines


class TestHealthEndpoint:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestDownloadTemplate:
    def test_returns_stored_asset(self, client, default_template_bytes):
        response = client.get("/download-template")

        assert response.status_code == 200
        assert response.content == default_template_bytes
        disposition = response.headers["content-disposition"]
        assert disposition.startswith("attachment")
        assert 'filename="template.docx"' in disposition

    def test_missing_asset(self, client, monkeypatch):
        monkeypatch.setattr(main, "config", dataclasses.replace(config, default_template="missing.docx"))
        response = client.get("/download-template")

        assert response.status_code == 404
        assert response.json()["error"] == "Template not found"


class TestGenerate:
    def test_default_template_scenario(self, client):
        response = client.post("/generate", data={"name": "Jane Doe", "orderId": "ORD-1"})

        assert response.status_code == 200
        assert response.headers["content-type"] == DOCX_MEDIA_TYPE
        assert response.headers["content-disposition"] == 'attachment; filename="generated.docx"'

        document = _document(response.content)
        table = document.tables[0]
        # header + five generated rows
        assert len(table.rows) == 6

        subtotal = 0.0
        for row in table.rows[1:]:
            index, description, qty, unit_price, sub_total = (c.text for c in row.cells)
            assert description
            assert abs(float(qty) * float(unit_price) - float(sub_total)) <= 0.005
            subtotal += float(sub_total)

        fields = _paragraphs(document)
        assert fields["Order"] == "ORD-1"
        assert fields["Prepared for"] == "Jane Doe"
        assert fields["Discount"] == "0% less 0.00"
        assert abs(float(fields["Sub Total"]) - subtotal) <= 0.01
        assert abs(float(fields["VAT"]) - subtotal * 0.12) <= 0.01
        assert abs(float(fields["Total"]) - subtotal * 1.12) <= 0.01

    def test_discounts_and_posted_rows(self, client):
        rows = [
            {"description": "Consulting", "qty": 2, "unit_price": 10},
            {"Description": "Support", "col2": "1", "price": "30"},
        ]
        response = client.post(
            "/generate",
            data={
                "name": "Jane Doe",
                "orderId": "ORD-2",
                "discount_percent": "10",
                "discount_flat": "5",
                "vat_rate": "0.2",
                "table": json.dumps(rows),
            },
        )

        assert response.status_code == 200
        document = _document(response.content)
        assert [row.cells[1].text for row in document.tables[0].rows[1:]] == ["Consulting", "Support"]
        fields = _paragraphs(document)
        assert fields["Sub Total"] == "50.00"
        assert fields["Discount"] == "10% less 5.00"
        assert fields["VAT"] == "8.00"
        assert fields["Total"] == "48.00"

    def test_malformed_numbers_become_zero(self, client):
        response = client.post(
            "/generate",
            data={"discount_percent": "abc", "discount_flat": "x1", "vat_rate": ""},
        )

        assert response.status_code == 200
        fields = _paragraphs(_document(response.content))
        assert fields["Discount"] == "0% less 0.00"
        assert abs(float(fields["VAT"]) - float(fields["Sub Total"]) * 0.12) <= 0.01

    def test_missing_fields_are_generated(self, client):
        response = client.post("/generate", data={})

        assert response.status_code == 200
        fields = _paragraphs(_document(response.content))
        assert fields["Prepared for"]
        assert fields["Order"].startswith("ORD-")
        assert fields["Date"].count("/") == 2

    def test_uploaded_template_is_used_and_removed(self, client, upload_dir, make_template):
        template = make_template(
            {"{{ footer }}": "{{ fields['SALES PERSON NAME'] }}|{{ salesPersonName }}|{{ sales_person_name }}"}
        )
        response = client.post(
            "/generate",
            data={"name": "Jane Doe"},
            files={"template": ("custom.docx", template, DOCX_MEDIA_TYPE)},
        )

        assert response.status_code == 200
        texts = [p.text for p in _document(response.content).paragraphs]
        names = [t for t in texts if t.count("|") == 2]
        assert len(names) == 1
        first, second, third = names[0].split("|")
        assert first and first == second == third
        assert list(upload_dir.iterdir()) == []

    def test_unparseable_upload_returns_details(self, client, upload_dir):
        response = client.post(
            "/generate",
            data={"name": "Jane Doe"},
            files={"template": ("broken.docx", b"definitely not a zip", DOCX_MEDIA_TYPE)},
        )

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Template compile error"
        assert body["details"]
        assert list(upload_dir.iterdir()) == []

    def test_placeholder_syntax_error_returns_details(self, client, upload_dir, make_template):
        template = make_template({"{{ total }}": "{% if total %}"})
        response = client.post(
            "/generate",
            files={"template": ("syntax.docx", template, DOCX_MEDIA_TYPE)},
        )

        assert response.status_code == 500
        details = response.json()["details"]
        assert details[0]["name"] == "TemplateSyntaxError"
        assert list(upload_dir.iterdir()) == []

    def test_render_failure_returns_plain_text(self, client, upload_dir, make_template):
        template = make_template({"{{ total }}": "{{ total.missing() }}"})
        response = client.post(
            "/generate",
            files={"template": ("render.docx", template, DOCX_MEDIA_TYPE)},
        )

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Template error. Check placeholders."
        assert list(upload_dir.iterdir()) == []

    def test_runtime_error_in_template_returns_plain_text(self, client, upload_dir, make_template):
        # string + int fails inside Jinja with a TypeError, not a TemplateError
        template = make_template({"{{ total }}": "{{ total + 1 }}"})
        response = client.post(
            "/generate",
            files={"template": ("typeerror.docx", template, DOCX_MEDIA_TYPE)},
        )

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Template error. Check placeholders."
        assert list(upload_dir.iterdir()) == []

    def test_render_timeout_returns_plain_text(self, client, upload_dir, monkeypatch, default_template_bytes):
        def slow_render(compiled, bag):
            time.sleep(0.5)
            return b""

        monkeypatch.setattr(main, "config", dataclasses.replace(config, render_timeout=0.01))
        monkeypatch.setattr(main, "render_template", slow_render)
        response = client.post(
            "/generate",
            files={"template": ("slow.docx", default_template_bytes, DOCX_MEDIA_TYPE)},
        )

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Template error. Check placeholders."
        assert list(upload_dir.iterdir()) == []

    def test_missing_default_template(self, client, monkeypatch):
        monkeypatch.setattr(main, "config", dataclasses.replace(config, default_template="missing.docx"))
        response = client.post("/generate", data={"name": "Jane Doe"})

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Template not found"
        assert body["details"][0].endswith("missing.docx")

    @pytest.mark.parametrize("filename", ["", None])
    def test_empty_file_part_falls_back_to_default(self, client, filename):
        files = {"template": (filename, b"", "application/octet-stream")} if filename is not None else None
        response = client.post("/generate", data={"name": "Jane Doe"}, files=files)

        assert response.status_code == 200
        assert len(_document(response.content).tables[0].rows) == 6
