"""Transcript Publisher: JSON encoding and one-shot delivery of conference transcripts.

WHY: A transcribed conference produces a stream of presence events (join,
leave, raised hand) and speech-to-text results. Clients need those events
live, one at a time, and archivists need the whole session as one stable
JSON document delivered exactly once, even when the room closing and an
explicit stop command race to finish the transcript.

HOW: Three-stage pipeline: model (core IR and recorder), format (the JSON
encoder), deliver (publish guard and sinks). The live path skips the guard
and pushes each encoded event through the conference transport.

RULES:
- The IR is the stable contract between recording and encoding
- Encoding is pure; delivery happens only inside PublishGuard.finalize()
- Field names in the JSON output are part of the wire contract
"""

__version__ = "0.1.0"
