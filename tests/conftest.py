"""Shared test fixtures for the transcript_publisher test suite.

WHY: Encoder, guard, sink and CLI tests all need the same participants,
timestamps and a fully populated transcript. Centralizing them keeps the
expected JSON in one place.

HOW: Module-level constants hold the deterministic values; fixtures build
fresh IR objects from them for each test.

RULES:
- All timestamps are aware UTC datetimes on whole seconds unless a test
  is specifically about fractional rendering
- Message ids are fixed strings so expected JSON is exact
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from transcript_publisher.core.ir import (
    Participant,
    Transcript,
    TranscriptEvent,
    TranscriptionAlternative,
    TranscriptionResult,
)

T0 = datetime(2024, 3, 1, 9, 30, 0, tzinfo=timezone.utc)
T0_TEXT = "2024-03-01T09:30:00Z"


def at(seconds: float) -> datetime:
    """Instant ``seconds`` after T0."""
    return T0 + timedelta(seconds=seconds)


@pytest.fixture
def alice():
    return Participant(name="Alice", id="p1")


@pytest.fixture
def bob():
    return Participant(
        name="Bob",
        id="p2",
        email="bob@example.com",
        avatar_url="https://example.com/bob.png",
    )


@pytest.fixture
def final_result():
    """Final SPEECH result with two ranked alternatives."""
    return TranscriptionResult(
        alternatives=(
            TranscriptionAlternative(text="hello", confidence=0.9),
            TranscriptionAlternative(text="hallo", confidence=0.4),
        ),
        language="en",
        is_interim=False,
        message_id="m1",
        stability=1.0,
    )


@pytest.fixture
def sample_transcript(alice, bob, final_result):
    """Room "room1", one initial participant, three ordered events."""
    return Transcript(
        room_name="room1",
        start_time=T0,
        end_time=at(60),
        initial_participants=(alice,),
        events=(
            TranscriptEvent.join(at(1), bob),
            TranscriptEvent.speech(at(5), alice, final_result),
            TranscriptEvent.raise_hand(at(10), bob),
        ),
    )
