"""Decode transcript wire JSON back into the IR.

WHY: Recorded event logs (captured live messages, exported artifacts) are
stored in the same JSON shape the encoder produces. Replaying them through
the publisher, or checking that an artifact survives a round trip, needs
the inverse mapping.

HOW: One parse function per object shape, mirroring the encoder. Live
envelopes are unwrapped transparently by parse_event().

RULES:
- Malformed input raises TranscriptContractError with the offending key
- Optional keys may be absent; required keys may not
- Alternatives keep their order
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from transcript_publisher.core.clock import parse_instant
from transcript_publisher.core.ir import (
    EventType,
    Participant,
    Transcript,
    TranscriptContractError,
    TranscriptEvent,
    TranscriptionAlternative,
    TranscriptionResult,
)

_TOPIC_KEY = "jitsi-meet-muc-msg-topic"
_PAYLOAD_KEY = "payload"


def _field(data: Mapping[str, Any], key: str, what: str) -> Any:
    if not isinstance(data, Mapping):
        raise TranscriptContractError("{} must be a JSON object, got {!r}".format(what, data))
    if key not in data or data[key] is None:
        raise TranscriptContractError("{} is missing required key '{}'".format(what, key))
    return data[key]


def unwrap_live_message(data: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the event object inside a live envelope, or ``data`` unchanged."""
    if isinstance(data, Mapping) and _TOPIC_KEY in data:
        return _field(data, _PAYLOAD_KEY, "live message")
    return data


def parse_participant(data: Mapping[str, Any]) -> Participant:
    participant_id = str(_field(data, "id", "participant"))
    return Participant(
        name=data.get("name") or "",
        id=participant_id,
        email=data.get("email") or None,
        avatar_url=data.get("avatar_url") or None,
    )


def _number(value: Any, what: str) -> float:
    """Coerce a JSON number; an absent (null) value counts as 0.0."""
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TranscriptContractError("{} must be a number, got {!r}".format(what, value))
    return float(value)


def _array(value: Any, what: str) -> List[Any]:
    """Return a JSON array as a list; an absent (null) value is empty."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise TranscriptContractError("{} must be a JSON array, got {!r}".format(what, value))
    return value


def parse_result(data: Mapping[str, Any]) -> TranscriptionResult:
    alternatives: List[TranscriptionAlternative] = []
    for item in _array(_field(data, "transcript", "SPEECH event"), "transcript"):
        alternatives.append(
            TranscriptionAlternative(
                text=str(_field(item, "text", "alternative")),
                confidence=_number(item.get("confidence"), "alternative confidence"),
            )
        )
    return TranscriptionResult(
        alternatives=tuple(alternatives),
        language=str(data.get("language") or ""),
        is_interim=bool(data.get("is_interim", False)),
        message_id=str(_field(data, "message_id", "SPEECH event")),
        stability=_number(data.get("stability"), "stability"),
    )


def parse_event(data: Mapping[str, Any]) -> TranscriptEvent:
    """Decode an "event" object (bare or inside a live envelope)."""
    data = unwrap_live_message(data)
    raw_type = _field(data, "event", "event")
    try:
        event_type = EventType(raw_type)
    except (TypeError, ValueError) as exc:
        raise TranscriptContractError("unknown event type {!r}".format(raw_type)) from exc

    timestamp = parse_instant(_field(data, "timestamp", "event"))
    participant = parse_participant(_field(data, "participant", "event"))
    result = parse_result(data) if event_type is EventType.SPEECH else None
    return TranscriptEvent(event_type, timestamp, participant, result)


def parse_transcript(data: Dict[str, Any]) -> Transcript:
    """Decode a "final transcript" object."""
    if not isinstance(data, Mapping):
        raise TranscriptContractError("transcript must be a JSON object, got {!r}".format(data))

    start = data.get("start_time")
    end = data.get("end_time")
    participants = _array(data.get("initial_participants"), "initial_participants")
    events = _array(data.get("events"), "events")
    return Transcript(
        room_name=data.get("room_name") or None,
        start_time=parse_instant(start) if start else None,
        end_time=parse_instant(end) if end else None,
        initial_participants=tuple(parse_participant(p) for p in participants),
        events=tuple(parse_event(e) for e in events),
    )
