"""Template resolution: uploaded file or bundled default."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from fastapi import UploadFile
from opentelemetry import trace

from docgen_service.errors import TemplateNotFoundError
from docgen_service.models import TemplateSource

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("docgen-service")


async def resolve_template(
    upload: UploadFile | None,
    upload_dir: Path,
    default_path: Path,
) -> TemplateSource:
    """Persist an uploaded template under a unique name, or fall back to the default.

    Browsers post an empty file part when nothing was chosen; that counts
    as no upload.
    """
    if upload is None or not upload.filename:
        return TemplateSource(path=default_path, filename=default_path.name)

    with tracer.start_as_current_span("docgen.save_upload") as span:
        upload_dir.mkdir(parents=True, exist_ok=True)
        target = upload_dir / uuid.uuid4().hex
        content = await upload.read()
        target.write_bytes(content)
        span.set_attribute("upload.size_bytes", len(content))
        logger.info("Saved uploaded template %r (%d bytes) to %s", upload.filename, len(content), target)
        return TemplateSource(path=target, filename=upload.filename, transient=True)


def read_template(source: TemplateSource) -> bytes:
    try:
        return source.path.read_bytes()
    except OSError as exc:
        raise TemplateNotFoundError(str(source.path)) from exc


def discard(source: TemplateSource) -> None:
    """Delete a transient upload; the bundled default is never touched."""
    if not source.transient:
        return
    try:
        source.path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not delete uploaded template %s", source.path, exc_info=True)
