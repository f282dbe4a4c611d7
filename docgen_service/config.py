"""Document generation service configuration - all values from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


@dataclass(frozen=True)
class DocgenConfig:
    """Immutable configuration loaded once at startup."""

    port: int = field(default_factory=lambda: int(os.getenv("DOCGEN_PORT", "3000")))

    # Filesystem
    upload_dir: Path = field(default_factory=lambda: Path(os.getenv("DOCGEN_UPLOAD_DIR", "uploads")))
    templates_dir: Path = field(
        default_factory=lambda: Path(os.getenv("DOCGEN_TEMPLATES_DIR", str(PACKAGE_DIR / "templates")))
    )
    default_template: str = field(
        default_factory=lambda: os.getenv("DOCGEN_DEFAULT_TEMPLATE", "default-template.docx")
    )

    # Cost estimate
    row_count: int = field(default_factory=lambda: int(os.getenv("DOCGEN_ROW_COUNT", "5")))
    default_vat_rate: float = field(default_factory=lambda: float(os.getenv("DOCGEN_DEFAULT_VAT_RATE", "0.12")))
    render_timeout: float = field(default_factory=lambda: float(os.getenv("DOCGEN_RENDER_TIMEOUT", "30")))

    # Fake data
    fake_data: str = field(default_factory=lambda: os.getenv("DOCGEN_FAKE_DATA", "faker").lower())
    fake_seed: int | None = field(default_factory=lambda: _optional_int("DOCGEN_FAKE_SEED"))
    faker_locale: str = field(default_factory=lambda: os.getenv("DOCGEN_FAKER_LOCALE", "en_US"))

    # Observability
    otel_endpoint: str = field(default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", ""))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def default_template_path(self) -> Path:
        return self.templates_dir / self.default_template


config = DocgenConfig()
