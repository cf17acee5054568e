"""Configuration constants and .env loading.

WHY: Output locations, webhook endpoints and log levels differ per
deployment. Keeping them in one module makes them easy to find and
override without touching the publishing code.

HOW: python-dotenv loads the .env file on import. Values are read from the
environment into module-level constants with sensible defaults.

RULES:
- All defaults can be overridden via environment variables
- An empty TRANSCRIPT_WEBHOOK_URL means "no webhook configured"
- load_webhook_url() raises ValueError when a webhook is required but unset
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the process is started from)
load_dotenv()

# ---------------------------------------------------------------------------
# Artifact delivery
# ---------------------------------------------------------------------------

TRANSCRIPT_OUTPUT_DIR = os.getenv("TRANSCRIPT_OUTPUT_DIR", "transcripts")
TRANSCRIPT_FILE_SUFFIX = os.getenv("TRANSCRIPT_FILE_SUFFIX", ".json")
TRANSCRIPT_WEBHOOK_URL = os.getenv("TRANSCRIPT_WEBHOOK_URL", "").strip()
TRANSCRIPT_WEBHOOK_TIMEOUT_S = float(os.getenv("TRANSCRIPT_WEBHOOK_TIMEOUT_S", "10"))

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def load_webhook_url() -> str:
    """Return the configured webhook URL.

    RULES:
    - Raises ValueError if TRANSCRIPT_WEBHOOK_URL is missing or empty
    - Never returns a default/placeholder value
    """
    url = os.getenv("TRANSCRIPT_WEBHOOK_URL", "").strip()
    if not url:
        raise ValueError(
            "Transcript webhook not configured. "
            "Add TRANSCRIPT_WEBHOOK_URL to the .env file."
        )
    return url
