"""Structured audit logging for the document generation service.

Rules:
- Never log template content or generated documents
- Log metadata only
- Structured JSON format
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

logger = logging.getLogger("docgen.audit")


def _emit(event: str, **kwargs) -> None:
    """Emit a structured audit log entry."""
    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "docgen-service",
        "event": event,
        **kwargs,
    }
    logger.info(json.dumps(entry, default=str))


def log_generate_received(request_id: str, trace_id: str, template: str, uploaded: bool) -> None:
    _emit(
        "generate_received",
        request_id=request_id,
        trace_id=trace_id,
        template=template,
        uploaded=uploaded,
    )


def log_document_generated(
    request_id: str,
    trace_id: str,
    row_count: int,
    placeholder_count: int,
    size_bytes: int,
    duration_ms: float,
) -> None:
    _emit(
        "document_generated",
        request_id=request_id,
        trace_id=trace_id,
        row_count=row_count,
        placeholder_count=placeholder_count,
        size_bytes=size_bytes,
        duration_ms=round(duration_ms, 2),
    )


def log_generation_failed(request_id: str, trace_id: str, error_type: str, message: str) -> None:
    _emit(
        "generation_failed",
        request_id=request_id,
        trace_id=trace_id,
        error_type=error_type,
        message=message,
    )


def log_template_downloaded(template: str) -> None:
    _emit("template_downloaded", template=template)
