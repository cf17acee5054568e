"""Live broadcast of transcript events into the conference.

WHY: Meeting clients render captions while people speak. Each speech
result (interim or final) and each presence change is pushed into the room
as soon as it happens, independent of the final artifact.

HOW: LiveBroadcaster encodes the event with the JSON encoder, wraps it in
the live message envelope and hands it to a ConferenceTransport. Delivery
is fire-and-forget: a failed send is logged and the session carries on.

RULES:
- No publish guard on this path; every call sends one message
- Transport failures are logged at WARNING and reported as False
- Contract violations (bad events) are not swallowed; they propagate
- publish_result() stamps speech results with the broadcaster's clock
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from transcript_publisher.core.clock import utc_now
from transcript_publisher.core.ir import Participant, TranscriptEvent, TranscriptionResult
from transcript_publisher.formatters.json_transcript import encode_live_event

logger = logging.getLogger(__name__)


class ConferenceTransport(ABC):
    """The conference's message channel (e.g. the room's chat/MUC)."""

    @abstractmethod
    def send_message(self, destination: str, message: Dict[str, Any]) -> None:
        """Send one JSON message to ``destination``. May raise on failure."""


class LiveBroadcaster:
    """Encode events one by one and push them to a conference room."""

    def __init__(
        self,
        transport: ConferenceTransport,
        destination: str,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._transport = transport
        self.destination = destination
        self._clock = clock

    def publish_event(self, event: TranscriptEvent) -> bool:
        """Send one event to the room. Returns True if the transport accepted it."""
        message = encode_live_event(event)
        try:
            self._transport.send_message(self.destination, message)
        except Exception:
            logger.warning(
                "Failed to send %s event to %s",
                event.event_type.value,
                self.destination,
                exc_info=True,
            )
            return False
        return True

    def publish_result(
        self,
        participant: Participant,
        result: TranscriptionResult,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        """Send a speech result as a SPEECH event stamped now (or at ``timestamp``)."""
        event = TranscriptEvent.speech(
            timestamp if timestamp is not None else self._clock(),
            participant,
            result,
        )
        return self.publish_event(event)
