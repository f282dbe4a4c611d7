"""docxtpl wrapper: compile a Word template, then render a placeholder bag into it.

Templates use Jinja2 syntax inside the document (``{{ total }}``,
``{%tr for row in table %}``). Keys that are not valid identifiers, such
as ``SALES PERSON NAME``, are reachable through the ``fields`` mapping:
``{{ fields['SALES PERSON NAME'] }}``.
"""

from __future__ import annotations

import io
import logging
import zipfile
from typing import Any

import jinja2
from docx.opc.exceptions import OpcError
from docxtpl import DocxTemplate
from opentelemetry import trace

from docgen_service.errors import RenderError, TemplateCompileError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("docgen-service")

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Raised by python-docx/lxml for bytes that are not a readable Word package.
_PACKAGE_ERRORS = (zipfile.BadZipFile, OpcError, KeyError, ValueError, SyntaxError)


def _syntax_detail(exc: jinja2.TemplateSyntaxError) -> dict[str, Any]:
    return {
        "name": type(exc).__name__,
        "message": exc.message or str(exc),
        "lineno": exc.lineno,
    }


def compile_template(template_bytes: bytes) -> DocxTemplate:
    """Load the Word package and parse every templated part.

    Raises :class:`TemplateCompileError` with one detail per problem found.
    """
    with tracer.start_as_current_span("docgen.compile_template") as span:
        span.set_attribute("template.size_bytes", len(template_bytes))
        try:
            template = DocxTemplate(io.BytesIO(template_bytes))
            variables = template.get_undeclared_template_variables()
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateCompileError("Template compile error", [_syntax_detail(exc)]) from exc
        except _PACKAGE_ERRORS as exc:
            detail = {"name": type(exc).__name__, "message": str(exc) or "Unreadable template package"}
            raise TemplateCompileError("Template compile error", [detail]) from exc

        span.set_attribute("template.variable_count", len(variables))
        logger.debug("Template declares %d variables", len(variables))
        return template


def render_template(template: DocxTemplate, bag: dict[str, Any]) -> bytes:
    """Render *bag* into a compiled template and return the .docx bytes."""
    with tracer.start_as_current_span("docgen.render_template"):
        context = dict(bag)
        context["fields"] = bag
        # Any failure while substituting data is a data/template mismatch.
        try:
            template.render(context, autoescape=True)
        except Exception as exc:
            raise RenderError(str(exc)) from exc

        buf = io.BytesIO()
        template.save(buf)
        content = buf.getvalue()
        logger.info("Rendered document: %d bytes", len(content))
        return content
