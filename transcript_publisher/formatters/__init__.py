"""Transcript formatter registry.

WHY: The replay CLI looks formatters up by name (its --format option). A
central dict keeps adding an encoding to one import and one line here.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["json"]()``.

RULES:
- Keys are snake_case identifiers (used as --format choices)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from transcript_publisher.formatters.json_transcript import JSONTranscriptFormatter

if TYPE_CHECKING:
    from transcript_publisher.formatters.base import BaseFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "json": JSONTranscriptFormatter,
}
