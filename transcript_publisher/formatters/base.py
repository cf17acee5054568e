"""Abstract base formatter for transcript encodings.

WHY: The publish guard and the live broadcaster should not care which
encoding they ship, only that it turns events and transcripts into payloads
a sink or transport accepts. This base class fixes that interface.

HOW: BaseFormatter is an ABC with a ``name`` property and two encoding
methods, one per granularity: a single event (live path) and a whole frozen
transcript (final artifact).

RULES:
- Subclasses MUST implement ``name``, ``format_event()`` and
  ``format_transcript()``
- Formatting is pure: no I/O, no mutation of the inputs
- ``suffix`` is appended to generated artifact names, e.g. ``".json"``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from transcript_publisher.core.ir import Transcript, TranscriptEvent


class BaseFormatter(ABC):
    """Abstract base for all transcript formatters.

    To add a new encoding:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement name, format_event() and format_transcript()
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    suffix: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Transcript JSON'."""

    @abstractmethod
    def format_event(self, event: TranscriptEvent) -> Dict[str, Any]:
        """Encode one event for the live broadcast path."""

    @abstractmethod
    def format_transcript(self, transcript: Transcript) -> Dict[str, Any]:
        """Encode a frozen transcript into the final artifact payload."""
