"""One-shot publish guard for finished transcripts.

WHY: A transcript can be finished from several places at once: the room
closes, a participant sends a stop command, a timeout fires. Each of those
paths calls finalize(), and the expensive encode-and-deliver sequence must
still run only once, so the sink never receives duplicate artifacts.

HOW: PublishGuard holds a two-state PublishState behind a threading.Lock.
The first finalize() call that observes PENDING flips it to PUBLISHED
inside the lock and becomes the winner; every other call sees PUBLISHED and
returns immediately. The winner encodes and delivers outside the lock, so
losers never block on sink I/O. The artifact name is generated when the
guard is created, before anyone knows the transcript's content.

RULES:
- PENDING -> PUBLISHED happens exactly once and is never undone
- Losing finalize() calls are silent no-ops (they return False)
- A sink or encoding failure propagates to the winner; the guard stays
  PUBLISHED and never retries
- artifact_id is fixed for the lifetime of the guard
- When given a TranscriptRecorder, the winner freezes it after winning, so
  the snapshot is at least as complete as what any caller had seen
"""

from __future__ import annotations

import enum
import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, Optional, Union

from transcript_publisher.config import TRANSCRIPT_FILE_SUFFIX
from transcript_publisher.core.clock import utc_now
from transcript_publisher.core.ir import Transcript, TranscriptContractError
from transcript_publisher.core.recorder import TranscriptRecorder
from transcript_publisher.formatters.base import BaseFormatter
from transcript_publisher.formatters.json_transcript import JSONTranscriptFormatter
from transcript_publisher.sinks.base import Sink

logger = logging.getLogger(__name__)


class PublishState(str, enum.Enum):
    """States of a publish guard. PUBLISHED is terminal."""

    PENDING = "pending"
    PUBLISHED = "published"


def generate_artifact_name(
    suffix: str = TRANSCRIPT_FILE_SUFFIX,
    clock: Callable[[], datetime] = utc_now,
) -> str:
    """Generate a collision-resistant, hard-to-guess artifact file name.

    Format: ``<UTC date>_<UTC time>_<uuid4><suffix>``, e.g.
    ``2024-03-01_09-30-00_0f8fad5b-d9cb-469f-a165-70867728950e.json``.
    The time prefix keeps a directory of artifacts sortable; the random
    UUID makes names unguessable.
    """
    stamp = clock().strftime("%Y-%m-%d_%H-%M-%S")
    return "{}_{}{}".format(stamp, uuid.uuid4(), suffix)


class PublishGuard:
    """At-most-once encode-and-deliver latch for a single transcript.

    Usage::

        guard = PublishGuard(DirectorySink("transcripts"))
        logger.info("Transcript will be saved as %s", guard.artifact_id)
        ...
        guard.finalize(recorder)   # from any number of threads
    """

    def __init__(
        self,
        sink: Sink,
        formatter: Optional[BaseFormatter] = None,
        name_factory: Optional[Callable[[], str]] = None,
        suffix: Optional[str] = None,
    ) -> None:
        self._sink = sink
        self._formatter = formatter or JSONTranscriptFormatter()
        self._lock = threading.Lock()
        self._state = PublishState.PENDING
        if name_factory is not None:
            self._artifact_id = name_factory()
        else:
            # The JSON formatter's suffix is TRANSCRIPT_FILE_SUFFIX
            if suffix is None:
                suffix = self._formatter.suffix
            self._artifact_id = generate_artifact_name(suffix=suffix)

    @property
    def artifact_id(self) -> str:
        return self._artifact_id

    @property
    def state(self) -> PublishState:
        with self._lock:
            return self._state

    @property
    def published(self) -> bool:
        return self.state is PublishState.PUBLISHED

    def _try_claim(self) -> bool:
        """Atomically move PENDING -> PUBLISHED; True for the single winner."""
        with self._lock:
            if self._state is not PublishState.PENDING:
                return False
            self._state = PublishState.PUBLISHED
            return True

    def finalize(self, transcript: Union[Transcript, TranscriptRecorder]) -> bool:
        """Encode the transcript and hand it to the sink, once.

        Args:
            transcript: A frozen Transcript, or a TranscriptRecorder that the
                        winning caller freezes after claiming the latch.

        Returns:
            True if this call published the artifact, False if another call
            already had (no side effects in that case).

        Raises:
            TranscriptContractError: the transcript is structurally invalid.
            DeliveryError: the sink failed; the guard stays PUBLISHED.
        """
        if not isinstance(transcript, (Transcript, TranscriptRecorder)):
            raise TranscriptContractError(
                "finalize() needs a Transcript or TranscriptRecorder, got {!r}".format(transcript)
            )

        if not self._try_claim():
            logger.debug("Transcript %s already published; ignoring finalize()", self._artifact_id)
            return False

        logger.info("Publishing transcript %s", self._artifact_id)
        snapshot = transcript.freeze() if isinstance(transcript, TranscriptRecorder) else transcript
        if snapshot.is_empty:
            logger.warning("Transcript %s has no recorded data; publishing an empty artifact",
                           self._artifact_id)

        try:
            payload = self._formatter.format_transcript(snapshot)
            self._sink.persist(self._artifact_id, payload)
        except Exception:
            logger.exception("Failed to publish transcript %s; it will not be retried",
                             self._artifact_id)
            raise

        logger.info("Published transcript %s (%d events)", self._artifact_id, len(snapshot.events))
        return True
