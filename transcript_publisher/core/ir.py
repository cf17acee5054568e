"""Intermediate representation dataclasses for conference transcripts.

WHY: The conference layer hands us participants, presence changes and
speech-to-text results as loose objects. The encoder, the publish guard and
the live broadcaster all need the same typed view of them, and the JSON
wire contract depends on exactly which fields exist.

HOW: Five frozen dataclasses and one enum:
  Participant              — snapshot of who acted (name, id, email, avatar)
  TranscriptionAlternative — one candidate text with its confidence
  TranscriptionResult      — ranked alternatives plus language/interim metadata
  EventType                — the closed set of event variants
  TranscriptEvent          — tagged union: one EventType tag, timestamp,
                             participant, and (SPEECH only) a result
  Transcript               — frozen session aggregate handed to the encoder

RULES:
- Everything here is immutable; the mutable side lives in recorder.py
- SPEECH events always carry a result; JOIN/LEAVE/RAISE_HAND never do
- Timestamps are timezone-aware datetimes
- Alternatives keep the order the speech engine produced (best first)
- Participant snapshots are never backfilled: an event keeps the values
  current when it happened
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple, Union


class TranscriptContractError(ValueError):
    """Raised when a caller hands us structurally invalid transcript data.

    WHY: A missing timestamp, a participant without an id or a SPEECH event
    without a result is a bug in the event-producing layer, not a runtime
    condition. It must surface loudly instead of producing a broken artifact.

    RULES:
    - Never raised for missing *optional* data (email, avatar, room name)
    - Propagated to the caller; nothing in this package catches it
    """


class EventType(str, enum.Enum):
    """Kinds of transcript events.

    Inherits from str so values serialize cleanly to JSON; the value is the
    uppercase name written to the ``event`` field.
    """

    JOIN = "JOIN"
    LEAVE = "LEAVE"
    RAISE_HAND = "RAISE_HAND"
    SPEECH = "SPEECH"


@dataclass(frozen=True)
class Participant:
    """Read-only projection of a conference participant.

    RULES:
    - id: stable identity of the participant (required by the encoder)
    - name: display name at the time of the snapshot
    - email / avatar_url: optional, omitted from JSON when None or empty
    """

    name: str
    id: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class TranscriptionAlternative:
    """One candidate interpretation of an utterance."""

    text: str
    confidence: float = 0.0


@dataclass(frozen=True)
class TranscriptionResult:
    """A speech-to-text result as produced by the recognition engine.

    WHY: Interim results are revised several times before the engine commits
    to a final one. Clients overwrite interim text in place, so every result
    carries a message_id that stays the same across revisions of one
    utterance.

    RULES:
    - alternatives: ordered best first, never re-sorted here
    - message_id: opaque; a UUID or a string, encoded by its str() form
    - stability: 0..1 likelihood that an interim result will not change
    """

    alternatives: Tuple[TranscriptionAlternative, ...] = ()
    language: str = ""
    is_interim: bool = False
    message_id: Union[uuid.UUID, str] = field(default_factory=uuid.uuid4)
    stability: float = 0.0

    def __post_init__(self) -> None:
        # Accept any iterable of alternatives but store an immutable tuple
        object.__setattr__(self, "alternatives", tuple(self.alternatives or ()))

    @property
    def best(self) -> Optional[TranscriptionAlternative]:
        """The highest-ranked alternative, or None when there is none."""
        return self.alternatives[0] if self.alternatives else None

    @property
    def text(self) -> str:
        best = self.best
        return best.text if best is not None else ""


@dataclass(frozen=True)
class TranscriptEvent:
    """A single timestamped occurrence within a transcript.

    WHY: The event variants share almost everything (time, participant) and
    differ only in whether a speech result is attached. A single tagged
    dataclass keeps the variant set closed: the encoder dispatches on
    ``event_type`` through a table that must cover every EventType member.

    HOW: Use the named constructors (join, leave, raise_hand, speech) rather
    than the raw initializer; all of them go through __post_init__, which
    enforces the tag/result invariant.

    RULES:
    - event_type must be an EventType member
    - timestamp must be a datetime (timezone-aware when encoded)
    - participant must be a Participant
    - result is required for SPEECH and forbidden for every other tag
    """

    event_type: EventType
    timestamp: datetime
    participant: Participant
    result: Optional[TranscriptionResult] = None

    def __post_init__(self) -> None:
        if not isinstance(self.event_type, EventType):
            raise TranscriptContractError(
                "event_type must be an EventType, got {!r}".format(self.event_type)
            )
        if not isinstance(self.timestamp, datetime):
            raise TranscriptContractError(
                "{} event requires a datetime timestamp, got {!r}".format(
                    self.event_type.value, self.timestamp
                )
            )
        if not isinstance(self.participant, Participant):
            raise TranscriptContractError(
                "{} event requires a Participant, got {!r}".format(
                    self.event_type.value, self.participant
                )
            )
        if self.event_type is EventType.SPEECH:
            if not isinstance(self.result, TranscriptionResult):
                raise TranscriptContractError("SPEECH event requires a TranscriptionResult")
        elif self.result is not None:
            raise TranscriptContractError(
                "{} event must not carry a transcription result".format(self.event_type.value)
            )

    @classmethod
    def join(cls, timestamp: datetime, participant: Participant) -> TranscriptEvent:
        return cls(EventType.JOIN, timestamp, participant)

    @classmethod
    def leave(cls, timestamp: datetime, participant: Participant) -> TranscriptEvent:
        return cls(EventType.LEAVE, timestamp, participant)

    @classmethod
    def raise_hand(cls, timestamp: datetime, participant: Participant) -> TranscriptEvent:
        return cls(EventType.RAISE_HAND, timestamp, participant)

    @classmethod
    def speech(
        cls,
        timestamp: datetime,
        participant: Participant,
        result: TranscriptionResult,
    ) -> TranscriptEvent:
        return cls(EventType.SPEECH, timestamp, participant, result)


@dataclass(frozen=True)
class Transcript:
    """The frozen record of one conference session.

    WHY: The encoder must never iterate a collection that another thread is
    still appending to. Transcript is the immutable snapshot produced by
    TranscriptRecorder.freeze(); it is what the publish guard encodes.

    RULES:
    - room_name / start_time / end_time may be None when the session ended
      abnormally before they were recorded
    - initial_participants and events are tuples (copied on construction)
    - events are in the order the encoder will emit them; the encoder never
      re-sorts
    """

    room_name: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    initial_participants: Tuple[Participant, ...] = ()
    events: Tuple[TranscriptEvent, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "initial_participants", tuple(self.initial_participants or ()))
        object.__setattr__(self, "events", tuple(self.events or ()))

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to encode at all."""
        return (
            not self.room_name
            and self.start_time is None
            and self.end_time is None
            and not self.initial_participants
            and not self.events
        )
