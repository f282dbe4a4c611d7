"""Document Generation Service - FastAPI application.

GET  /download-template - The bundled default template.
POST /generate          - Fill an uploaded (or the default) template with estimate data.
GET  /health            - Liveness check.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid

import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response
from opentelemetry.propagate import extract

from docgen_service.audit import (
    log_document_generated,
    log_generate_received,
    log_generation_failed,
    log_template_downloaded,
)
from docgen_service.config import config
from docgen_service.errors import (
    DocumentGenerationError,
    RenderError,
    TemplateCompileError,
    TemplateNotFoundError,
)
from docgen_service.models import ErrorResponse, GenerateForm
from docgen_service.placeholders import build_placeholder_bag
from docgen_service.providers import get_provider, init_provider
from docgen_service.renderer import DOCX_MEDIA_TYPE, compile_template, render_template
from docgen_service.synthesizer import build_details, resolve_rows, totals_from_form
from docgen_service.telemetry import flush_telemetry, get_tracer, init_telemetry, trace_id_of
from docgen_service.uploads import discard, read_template, resolve_template

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, config.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
)
logger = logging.getLogger("docgen_service")

GENERATED_FILENAME = "generated.docx"
DOWNLOAD_FILENAME = "template.docx"
RENDER_ERROR_MESSAGE = "Template error. Check placeholders."

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Cost Estimate Document Generator",
    version="0.1.0",
    description="Fills Word templates with generated cost-estimate data",
)


@app.on_event("startup")
async def _startup() -> None:
    init_telemetry()
    provider = init_provider()
    config.upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info(
        "Docgen service started - fake_data=%s, upload_dir=%s, otel=%s",
        provider.name,
        config.upload_dir,
        bool(config.otel_endpoint),
    )


@app.on_event("shutdown")
async def _shutdown() -> None:
    flush_telemetry()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {"status": "ok", "fake_data": get_provider().name}


@app.get("/download-template")
async def download_template():
    path = config.default_template_path
    if not path.is_file():
        raise TemplateNotFoundError(str(path))
    log_template_downloaded(path.name)
    return FileResponse(path, media_type=DOCX_MEDIA_TYPE, filename=DOWNLOAD_FILENAME)


@app.post("/generate")
async def generate_document(
    request: Request,
    template: UploadFile | None = File(default=None),
    name: str | None = Form(default=None),
    date: str | None = Form(default=None),
    orderId: str | None = Form(default=None),
    discount_percent: str | None = Form(default=None),
    discount_flat: str | None = Form(default=None),
    vat_rate: str | None = Form(default=None),
    footer: str | None = Form(default=None),
    table: str | None = Form(default=None),
):
    """Fill the template and stream it back as an attachment."""
    form = GenerateForm(
        name=name,
        date=date,
        order_id=orderId,
        discount_percent=discount_percent,
        discount_flat=discount_flat,
        vat_rate=vat_rate,
        footer=footer,
        table=table,
    )
    tracer = get_tracer()
    ctx = extract(carrier=dict(request.headers))

    with tracer.start_as_current_span("docgen.handle_generate", context=ctx) as span:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        trace_id = trace_id_of(span)
        span.set_attribute("request.id", request_id)

        source = await resolve_template(template, config.upload_dir, config.default_template_path)
        span.set_attribute("template.uploaded", source.transient)
        log_generate_received(request_id, trace_id, source.filename, source.transient)
        t0 = time.perf_counter()

        try:
            # 1. Template
            template_bytes = read_template(source)
            compiled = await run_in_threadpool(compile_template, template_bytes)

            # 2. Data
            provider = get_provider()
            rows = resolve_rows(form, provider, config.row_count)
            totals = totals_from_form(rows, form, config.default_vat_rate)
            details = build_details(form, provider)
            bag = build_placeholder_bag(details, rows, totals)

            # 3. Render, bounded by the configured timeout
            try:
                content = await asyncio.wait_for(
                    run_in_threadpool(render_template, compiled, bag),
                    timeout=config.render_timeout,
                )
            except asyncio.TimeoutError as exc:
                raise RenderError(f"Rendering exceeded {config.render_timeout:g}s") from exc
        except DocumentGenerationError as exc:
            log_generation_failed(request_id, trace_id, type(exc).__name__, str(exc))
            raise
        finally:
            discard(source)

        duration_ms = (time.perf_counter() - t0) * 1000.0
        log_document_generated(
            request_id=request_id,
            trace_id=trace_id,
            row_count=len(rows),
            placeholder_count=len(bag),
            size_bytes=len(content),
            duration_ms=duration_ms,
        )
        span.set_attribute("response.size_bytes", len(content))

    return Response(
        content=content,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{GENERATED_FILENAME}"'},
    )


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


@app.exception_handler(TemplateCompileError)
async def _compile_error_handler(request: Request, exc: TemplateCompileError):
    logger.error("Template compile error: %s", exc.details)
    body = ErrorResponse(error="Template compile error", details=exc.details)
    return JSONResponse(status_code=500, content=body.model_dump())


@app.exception_handler(RenderError)
async def _render_error_handler(request: Request, exc: RenderError):
    logger.error("Error rendering document: %s", exc)
    return PlainTextResponse(RENDER_ERROR_MESSAGE, status_code=500)


@app.exception_handler(TemplateNotFoundError)
async def _not_found_handler(request: Request, exc: TemplateNotFoundError):
    logger.error("%s", exc)
    body = ErrorResponse(error="Template not found", details=[exc.path])
    return JSONResponse(status_code=404, content=body.model_dump())


@app.exception_handler(Exception)
async def _global_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": str(exc)},
    )


def run() -> None:
    """Console entry point: serve on the configured port."""
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_level=config.log_level.lower())
