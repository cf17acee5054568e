"""Unit tests for decoding wire JSON back into the IR.

WHY: The CLI replays recorded logs through the loader. If decoding drifts
from encoding, a replayed transcript differs from the one the live
service would have published.

HOW: Literal JSON objects are decoded and compared field by field; one
test re-encodes a decoded artifact and compares it with the original
text form.
"""

from __future__ import annotations

import pytest

from conftest import T0
from transcript_publisher.core.ir import EventType, Participant, TranscriptContractError
from transcript_publisher.core.loader import (
    parse_event,
    parse_participant,
    parse_transcript,
    unwrap_live_message,
)
from transcript_publisher.formatters.json_transcript import encode_transcript, serialize


SPEECH_OBJ = {
    "event": "SPEECH",
    "timestamp": "2024-03-01T09:30:00Z",
    "participant": {"name": "Alice", "id": "p1"},
    "transcript": [
        {"text": "hello", "confidence": 0.9},
        {"text": "hallo", "confidence": 0.4},
    ],
    "language": "en",
    "is_interim": False,
    "message_id": "m1",
    "stability": 1.0,
}


class TestParseParticipant:

    def test_minimal(self):
        assert parse_participant({"name": "Alice", "id": "p1"}) == Participant("Alice", "p1")

    def test_full(self):
        p = parse_participant({"name": "Bob", "id": "p2", "email": "b@x", "avatar_url": "u"})
        assert p.email == "b@x"
        assert p.avatar_url == "u"

    def test_missing_id(self):
        with pytest.raises(TranscriptContractError):
            parse_participant({"name": "Alice"})


class TestParseEvent:

    def test_speech(self):
        event = parse_event(SPEECH_OBJ)
        assert event.event_type is EventType.SPEECH
        assert event.timestamp == T0
        assert [a.text for a in event.result.alternatives] == ["hello", "hallo"]
        assert event.result.message_id == "m1"
        assert event.result.is_interim is False

    def test_join(self):
        event = parse_event({
            "event": "JOIN",
            "timestamp": "2024-03-01T09:30:00Z",
            "participant": {"name": "Alice", "id": "p1"},
        })
        assert event.event_type is EventType.JOIN
        assert event.result is None

    def test_live_envelope_unwrapped(self):
        message = {"jitsi-meet-muc-msg-topic": "transcription-result", "payload": SPEECH_OBJ}
        assert unwrap_live_message(message) is SPEECH_OBJ
        assert parse_event(message) == parse_event(SPEECH_OBJ)

    def test_unknown_type(self):
        with pytest.raises(TranscriptContractError):
            parse_event(dict(SPEECH_OBJ, event="WAVE"))

    @pytest.mark.parametrize("key", ["event", "timestamp", "participant", "transcript", "message_id"])
    def test_missing_required_key(self, key):
        data = dict(SPEECH_OBJ)
        del data[key]
        with pytest.raises(TranscriptContractError):
            parse_event(data)

    def test_null_confidence_and_stability_default_to_zero(self):
        data = dict(SPEECH_OBJ, transcript=[{"text": "hello", "confidence": None}], stability=None)
        event = parse_event(data)
        assert event.result.best.confidence == 0.0
        assert event.result.stability == 0.0

    @pytest.mark.parametrize("value", ["high", [0.9], {"v": 1}, True])
    def test_non_numeric_confidence(self, value):
        data = dict(SPEECH_OBJ, transcript=[{"text": "hello", "confidence": value}])
        with pytest.raises(TranscriptContractError, match="confidence"):
            parse_event(data)

    def test_non_numeric_stability(self):
        with pytest.raises(TranscriptContractError, match="stability"):
            parse_event(dict(SPEECH_OBJ, stability="1.0"))

    @pytest.mark.parametrize("value", ["hello", {"text": "hello"}, 3])
    def test_transcript_not_an_array(self, value):
        with pytest.raises(TranscriptContractError, match="transcript"):
            parse_event(dict(SPEECH_OBJ, transcript=value))

    def test_alternative_not_an_object(self):
        with pytest.raises(TranscriptContractError):
            parse_event(dict(SPEECH_OBJ, transcript=["hello"]))


class TestParseTranscript:

    def test_null_arrays_are_empty(self):
        transcript = parse_transcript({"initial_participants": None, "events": None})
        assert transcript.initial_participants == ()
        assert transcript.events == ()

    @pytest.mark.parametrize("key", ["initial_participants", "events"])
    def test_array_of_wrong_type(self, key):
        with pytest.raises(TranscriptContractError, match=key):
            parse_transcript({key: {"name": "Alice", "id": "p1"}})

    def test_empty(self):
        assert parse_transcript({}).is_empty

    def test_text_form_is_stable(self, sample_transcript):
        text = serialize(encode_transcript(sample_transcript))
        decoded = parse_transcript(encode_transcript(sample_transcript))
        assert serialize(encode_transcript(decoded)) == text

    def test_not_an_object(self):
        with pytest.raises(TranscriptContractError):
            parse_transcript([])
