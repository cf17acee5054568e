"""Transcript JSON encoder.

WHY: Conference clients and archive consumers read transcripts as JSON.
The field names are a wire contract shared with the meeting front end, so
the mapping from the IR to JSON must be exact, deterministic and the same
for the live path and the final artifact.

HOW: Four object shapes are produced:
  1. "final transcript" — room name, start/end time, initial participants,
     all events
  2. "event" — event type, timestamp, participant; SPEECH events add the
     ranked alternatives, language, interim flag, message id, stability
  3. "alternative" — text and confidence
  4. "participant" — name and id, plus email/avatar_url when known

A live update wraps one "event" object in a two-key envelope whose topic
tells the meeting front end this is a transcription result.

RULES:
- Pure functions: no I/O, inputs are never mutated
- Optional fields go through put_if_present(); absent values are omitted,
  never written as null or ""
- SPEECH fields are always present, even when empty or zero
- Events are emitted in the order the Transcript holds them (no re-sort)
- Every EventType member has an entry in the dispatch table; the module
  refuses to import otherwise
- The final artifact is validated against schemas/transcript.schema.json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import jsonschema

from transcript_publisher.config import TRANSCRIPT_FILE_SUFFIX
from transcript_publisher.core.clock import format_instant
from transcript_publisher.core.ir import (
    EventType,
    Participant,
    Transcript,
    TranscriptContractError,
    TranscriptEvent,
    TranscriptionResult,
)
from transcript_publisher.formatters.base import BaseFormatter

# ---------------------------------------------------------------------------
# Wire contract keys
# ---------------------------------------------------------------------------

# "final transcript" object
KEY_ROOM_NAME = "room_name"
KEY_START_TIME = "start_time"
KEY_END_TIME = "end_time"
KEY_INITIAL_PARTICIPANTS = "initial_participants"
KEY_EVENTS = "events"

# "event" object
KEY_EVENT_TYPE = "event"
KEY_TIMESTAMP = "timestamp"
KEY_PARTICIPANT = "participant"
KEY_TRANSCRIPT = "transcript"
KEY_LANGUAGE = "language"
KEY_IS_INTERIM = "is_interim"
KEY_MESSAGE_ID = "message_id"
KEY_STABILITY = "stability"

# "alternative" object
KEY_TEXT = "text"
KEY_CONFIDENCE = "confidence"

# "participant" object
KEY_NAME = "name"
KEY_ID = "id"
KEY_EMAIL = "email"
KEY_AVATAR_URL = "avatar_url"

# Live message envelope
KEY_TOPIC = "jitsi-meet-muc-msg-topic"
VALUE_TOPIC = "transcription-result"
KEY_PAYLOAD = "payload"

_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "transcript.schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def _get_schema() -> Dict[str, Any]:
    """Load the final-transcript JSON schema, cached after the first call."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def put_if_present(target: Dict[str, Any], key: str, value: Any) -> Dict[str, Any]:
    """Set ``target[key] = value`` unless the value is absent.

    Absent means None, an empty string, or an empty collection. False and 0
    are real values and are kept.
    """
    if value is None:
        return target
    if isinstance(value, (str, list, tuple, dict)) and len(value) == 0:
        return target
    target[key] = value
    return target


def _require(value: Any, what: str) -> Any:
    if value is None or (isinstance(value, str) and not value):
        raise TranscriptContractError("{} is required".format(what))
    return value


def encode_participant(participant: Participant) -> Dict[str, Any]:
    """Encode a participant snapshot.

    The same shape is used inside events and in ``initial_participants``.
    A participant without an id is a contract violation; a missing name is
    written as an empty string so the key is always present.
    """
    if not isinstance(participant, Participant):
        raise TranscriptContractError("expected a Participant, got {!r}".format(participant))

    obj: Dict[str, Any] = {
        KEY_NAME: participant.name if participant.name is not None else "",
        KEY_ID: _require(participant.id, "participant id"),
    }
    put_if_present(obj, KEY_EMAIL, participant.email)
    put_if_present(obj, KEY_AVATAR_URL, participant.avatar_url)
    return obj


def encode_alternatives(result: TranscriptionResult) -> List[Dict[str, Any]]:
    """Encode the ranked alternatives in the order the engine produced them."""
    return [
        {KEY_TEXT: alternative.text, KEY_CONFIDENCE: alternative.confidence}
        for alternative in result.alternatives
    ]


# ---------------------------------------------------------------------------
# Event encoding
# ---------------------------------------------------------------------------


def _encode_description(event: TranscriptEvent) -> Dict[str, Any]:
    """Fields shared by every event variant."""
    return {
        KEY_EVENT_TYPE: _require(event.event_type, "event type").value,
        KEY_TIMESTAMP: format_instant(_require(event.timestamp, "event timestamp")),
        KEY_PARTICIPANT: encode_participant(_require(event.participant, "event participant")),
    }


def _encode_presence(event: TranscriptEvent) -> Dict[str, Any]:
    return _encode_description(event)


def _encode_speech(event: TranscriptEvent) -> Dict[str, Any]:
    result = event.result
    if result is None:
        raise TranscriptContractError("SPEECH event requires a TranscriptionResult")

    obj = _encode_description(event)
    obj[KEY_TRANSCRIPT] = encode_alternatives(result)
    obj[KEY_LANGUAGE] = result.language if result.language is not None else ""
    obj[KEY_IS_INTERIM] = bool(result.is_interim)
    obj[KEY_MESSAGE_ID] = str(_require(result.message_id, "speech message id"))
    obj[KEY_STABILITY] = result.stability
    return obj


_EVENT_ENCODERS: Dict[EventType, Callable[[TranscriptEvent], Dict[str, Any]]] = {
    EventType.JOIN: _encode_presence,
    EventType.LEAVE: _encode_presence,
    EventType.RAISE_HAND: _encode_presence,
    EventType.SPEECH: _encode_speech,
}

_MISSING_ENCODERS = set(EventType) - set(_EVENT_ENCODERS)
if _MISSING_ENCODERS:
    raise RuntimeError(
        "No JSON encoding rule for event types: {}".format(
            ", ".join(sorted(t.value for t in _MISSING_ENCODERS))
        )
    )


def encode_event(event: TranscriptEvent) -> Dict[str, Any]:
    """Encode a single transcript event as an "event" object.

    Example (JOIN, no email or avatar)::

        {"event": "JOIN",
         "timestamp": "2024-03-01T09:30:00Z",
         "participant": {"name": "Alice", "id": "p1"}}

    Raises:
        TranscriptContractError: if the event is structurally incomplete.
    """
    if not isinstance(event, TranscriptEvent):
        raise TranscriptContractError("expected a TranscriptEvent, got {!r}".format(event))
    encoder = _EVENT_ENCODERS[event.event_type]
    return encoder(event)


def wrap_as_live_message(event_json: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap an encoded event in the envelope used for live conference messages."""
    return {
        KEY_TOPIC: VALUE_TOPIC,
        KEY_PAYLOAD: event_json,
    }


def encode_live_event(event: TranscriptEvent) -> Dict[str, Any]:
    """Encode and wrap one event for the live broadcast path."""
    return wrap_as_live_message(encode_event(event))


# ---------------------------------------------------------------------------
# Transcript encoding
# ---------------------------------------------------------------------------


def encode_transcript(transcript: Transcript) -> Dict[str, Any]:
    """Encode a frozen transcript as the "final transcript" object.

    Every top-level key is optional. A transcript with nothing recorded
    encodes to ``{}``, which is a valid artifact.
    """
    if not isinstance(transcript, Transcript):
        raise TranscriptContractError("expected a Transcript, got {!r}".format(transcript))

    obj: Dict[str, Any] = {}
    put_if_present(obj, KEY_ROOM_NAME, transcript.room_name)
    if transcript.start_time is not None:
        obj[KEY_START_TIME] = format_instant(transcript.start_time)
    if transcript.end_time is not None:
        obj[KEY_END_TIME] = format_instant(transcript.end_time)
    put_if_present(
        obj,
        KEY_INITIAL_PARTICIPANTS,
        [encode_participant(p) for p in transcript.initial_participants],
    )
    put_if_present(obj, KEY_EVENTS, [encode_event(e) for e in transcript.events])
    return obj


def validate_transcript(payload: Dict[str, Any]) -> None:
    """Validate an encoded artifact against the transcript JSON schema.

    Raises:
        jsonschema.ValidationError: if the payload does not conform.
    """
    jsonschema.validate(instance=payload, schema=_get_schema())


def serialize(payload: Dict[str, Any]) -> str:
    """Render a payload as the JSON text written by sinks."""
    return json.dumps(payload, indent=2, ensure_ascii=False)


class JSONTranscriptFormatter(BaseFormatter):
    """Formatter producing the transcript JSON wire format.

    RULES:
    - format_event() returns the bare "event" object (wrap it for live use)
    - format_transcript() validates against the schema before returning
    - Artifact suffix is TRANSCRIPT_FILE_SUFFIX (".json" unless configured)
    """

    suffix = TRANSCRIPT_FILE_SUFFIX

    @property
    def name(self) -> str:
        return "Transcript JSON"

    def format_event(self, event: TranscriptEvent) -> Dict[str, Any]:
        return encode_event(event)

    def format_transcript(self, transcript: Transcript) -> Dict[str, Any]:
        payload = encode_transcript(transcript)
        validate_transcript(payload)
        return payload
