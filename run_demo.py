#!/usr/bin/env python3
"""
run_demo.py - One-command demo entry point.

Usage:
  python run_demo.py                              # Default template, generated data
  python run_demo.py --template my.docx           # Upload a custom template
  python run_demo.py --discount-percent 10 --vat-rate 0.12

This script:
1. Starts the docgen service in the background
2. Posts a /generate request
3. Writes the returned document and prints a summary
4. Shuts down the service
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import httpx
from dotenv import load_dotenv

load_dotenv()

SERVICE_HOST = "127.0.0.1"
SERVICE_PORT = int(os.getenv("DOCGEN_PORT", "3000"))
SERVICE_URL = os.getenv("DOCGEN_URL", f"http://{SERVICE_HOST}:{SERVICE_PORT}")

SEP = "--------------------------------------------------"


# ============================================================
# Service lifecycle
# ============================================================


def start_service() -> subprocess.Popen:
    """Launch the docgen FastAPI service as a subprocess."""
    return subprocess.Popen(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "docgen_service.main:app",
            "--host",
            SERVICE_HOST,
            "--port",
            str(SERVICE_PORT),
            "--log-level",
            "warning",
        ],
        env=os.environ.copy(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )


def wait_for_service(timeout: float = 15.0) -> bool:
    """Block until /health responds or timeout."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            r = httpx.get(f"{SERVICE_URL}/health", timeout=2.0)
            if r.status_code == 200:
                return True
        except (httpx.ConnectError, httpx.ReadError):
            pass
        time.sleep(0.3)
    return False


def stop_process(proc: subprocess.Popen) -> None:
    """Gracefully stop a subprocess."""
    if proc.poll() is None:
        if sys.platform == "win32":
            proc.terminate()
        else:
            proc.send_signal(signal.SIGTERM)
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()


# ============================================================
# Generate call
# ============================================================


def call_generate(fields: dict[str, str], template: Path | None) -> httpx.Response:
    """Call POST /generate on the docgen service."""
    data = {k: v for k, v in fields.items() if v is not None}
    with httpx.Client(timeout=60.0) as client:
        if template is None:
            return client.post(f"{SERVICE_URL}/generate", data=data)
        with template.open("rb") as fh:
            files = {"template": (template.name, fh, "application/octet-stream")}
            return client.post(f"{SERVICE_URL}/generate", data=data, files=files)


def print_demo_output(fields: dict[str, str], template: Path | None, resp: httpx.Response, out: Path) -> None:
    print()
    print(SEP)
    print("\U0001f4c4 COST ESTIMATE GENERATION DEMO")
    print(SEP)
    print()
    print(f"Template: {template or 'bundled default'}")
    for key, value in fields.items():
        if value is not None:
            print(f"{key}: {value}")
    print()

    if resp.status_code == 200:
        print(SEP)
        print("✅ DOCUMENT GENERATED")
        print(SEP)
        print(f"Content-Type: {resp.headers.get('content-type')}")
        print(f"Content-Disposition: {resp.headers.get('content-disposition')}")
        print(f"Size: {len(resp.content)} bytes")
        print(f"Saved to: {out}")
    else:
        print(SEP)
        print(f"⚠️ GENERATION FAILED ({resp.status_code})")
        print(SEP)
        print(resp.text)
    print()
    print("Demo complete.")
    print(SEP)


# ============================================================
# Main
# ============================================================


def main() -> None:
    parser = argparse.ArgumentParser(description="Cost Estimate Document Generator Demo")
    parser.add_argument("--template", type=Path, default=None, help="Custom .docx template to upload")
    parser.add_argument("--name", default="Jane Doe")
    parser.add_argument("--order-id", default="ORD-1")
    parser.add_argument("--date", default=None)
    parser.add_argument("--discount-percent", default=None)
    parser.add_argument("--discount-flat", default=None)
    parser.add_argument("--vat-rate", default=None)
    parser.add_argument("--out", type=Path, default=Path("generated.docx"), help="Where to write the document")
    parser.add_argument(
        "--no-service",
        action="store_true",
        help="Skip starting the service (if already running)",
    )

    args = parser.parse_args()

    # Suppress noisy logs for clean demo output
    logging.basicConfig(level=logging.WARNING)

    fields = {
        "name": args.name,
        "orderId": args.order_id,
        "date": args.date,
        "discount_percent": args.discount_percent,
        "discount_flat": args.discount_flat,
        "vat_rate": args.vat_rate,
    }

    service_proc = None

    try:
        if not args.no_service:
            service_proc = start_service()
            if not wait_for_service():
                print("ERROR: Docgen service failed to start.", file=sys.stderr)
                stop_process(service_proc)
                sys.exit(1)

        resp = call_generate(fields, args.template)
        if resp.status_code == 200:
            args.out.write_bytes(resp.content)
        print_demo_output(fields, args.template, resp, args.out)
        if resp.status_code != 200:
            sys.exit(1)

    except KeyboardInterrupt:
        print("\nInterrupted.")
    except httpx.HTTPError as exc:
        print(f"\nERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        if service_proc:
            stop_process(service_proc)


if __name__ == "__main__":
    main()
