"""Thread-safe, append-only recorder for a live conference session.

WHY: During a session, events arrive from several threads (speech results
from the recognition engine, presence changes from the conference layer)
while a finalize path may try to publish at any moment. The encoder must
never see a list that is being mutated under it, so the live aggregate and
the frozen Transcript are separate objects.

HOW: TranscriptRecorder keeps the mutable state behind a threading.Lock.
freeze() copies everything under the lock and returns an immutable
Transcript with events stably sorted by timestamp. Sorting happens here,
once, so the encoder can emit events in the order it is given.

RULES:
- Append-only: there is no way to remove or edit a recorded event
- started()/ended() record their instant once; later calls are ignored
- Initial participants are de-duplicated by id, first snapshot wins
- Event timestamps must be timezone-aware (checked on append)
- freeze() may be called any number of times; each call is a fresh snapshot
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from transcript_publisher.core.clock import utc_now
from transcript_publisher.core.ir import (
    Participant,
    Transcript,
    TranscriptContractError,
    TranscriptEvent,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)


class TranscriptRecorder:
    """Mutable session aggregate that freezes into a Transcript.

    Typical use by the conference layer::

        recorder = TranscriptRecorder(room_name="standup")
        recorder.started(initial_participants=members)
        recorder.notify_join(alice)
        recorder.notify_speech(alice, result)
        recorder.ended()
        guard.finalize(recorder)
    """

    def __init__(
        self,
        room_name: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._lock = threading.Lock()
        self._clock = clock
        self._room_name = room_name
        self._start_time: Optional[datetime] = None
        self._end_time: Optional[datetime] = None
        self._initial_participants: List[Participant] = []
        self._events: List[TranscriptEvent] = []

    # ------------------------------------------------------------------
    # Session bounds
    # ------------------------------------------------------------------

    def set_room_name(self, room_name: Optional[str]) -> None:
        with self._lock:
            self._room_name = room_name

    def started(
        self,
        at: Optional[datetime] = None,
        initial_participants: Optional[Iterable[Participant]] = None,
    ) -> None:
        """Mark the start of the session and record who was already present."""
        with self._lock:
            if self._start_time is None:
                self._start_time = _require_aware(at if at is not None else self._clock())
            else:
                logger.debug("Transcript already started at %s", self._start_time)
        if initial_participants is not None:
            self.add_initial_participants(initial_participants)

    def ended(self, at: Optional[datetime] = None) -> None:
        """Mark the end of the session. Only the first call counts."""
        with self._lock:
            if self._end_time is None:
                self._end_time = _require_aware(at if at is not None else self._clock())
            else:
                logger.debug("Transcript already ended at %s", self._end_time)

    def add_initial_participants(self, participants: Iterable[Participant]) -> None:
        with self._lock:
            known = {p.id for p in self._initial_participants}
            for participant in participants:
                if not isinstance(participant, Participant):
                    raise TranscriptContractError(
                        "initial participant must be a Participant, got {!r}".format(participant)
                    )
                if participant.id in known:
                    continue
                known.add(participant.id)
                self._initial_participants.append(participant)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def add_event(self, event: TranscriptEvent) -> TranscriptEvent:
        if not isinstance(event, TranscriptEvent):
            raise TranscriptContractError("expected a TranscriptEvent, got {!r}".format(event))
        _require_aware(event.timestamp)
        with self._lock:
            self._events.append(event)
        return event

    def notify_join(self, participant: Participant, at: Optional[datetime] = None) -> TranscriptEvent:
        return self.add_event(TranscriptEvent.join(self._stamp(at), participant))

    def notify_leave(self, participant: Participant, at: Optional[datetime] = None) -> TranscriptEvent:
        return self.add_event(TranscriptEvent.leave(self._stamp(at), participant))

    def notify_raised_hand(
        self, participant: Participant, at: Optional[datetime] = None
    ) -> TranscriptEvent:
        return self.add_event(TranscriptEvent.raise_hand(self._stamp(at), participant))

    def notify_speech(
        self,
        participant: Participant,
        result: TranscriptionResult,
        at: Optional[datetime] = None,
    ) -> TranscriptEvent:
        return self.add_event(TranscriptEvent.speech(self._stamp(at), participant, result))

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def freeze(self) -> Transcript:
        """Return an immutable snapshot of everything recorded so far.

        Events are stably sorted by timestamp, so events recorded out of
        order (e.g. a late speech result) land where they happened while
        ties keep their insertion order.
        """
        with self._lock:
            events = list(self._events)
            participants = tuple(self._initial_participants)
            room_name = self._room_name
            start_time = self._start_time
            end_time = self._end_time

        events.sort(key=lambda e: e.timestamp)
        return Transcript(
            room_name=room_name,
            start_time=start_time,
            end_time=end_time,
            initial_participants=participants,
            events=tuple(events),
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def _stamp(self, at: Optional[datetime]) -> datetime:
        return at if at is not None else self._clock()


def _require_aware(instant: datetime) -> datetime:
    if not isinstance(instant, datetime) or instant.tzinfo is None or instant.utcoffset() is None:
        raise TranscriptContractError(
            "recorded instants must be timezone-aware datetimes, got {!r}".format(instant)
        )
    return instant
