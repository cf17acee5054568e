"""UTC clock and canonical ISO-8601 rendering of instants.

WHY: Timestamps end up as strings in the JSON artifact, and downstream tools
diff those artifacts as text. The same instant must therefore always render
to the same string, regardless of the offset the datetime was created with.

HOW: Every instant is converted to UTC and written with a ``Z`` suffix.
Fractional seconds follow the shortest exact form: none when the instant is
on a whole second, three digits for whole milliseconds, six otherwise.

RULES:
- Naive datetimes are rejected (TranscriptContractError); there is no
  guessing which zone they were meant in
- format_instant(parse_instant(s)) == s for every string format_instant emits
"""

from __future__ import annotations

from datetime import datetime, timezone

from transcript_publisher.core.ir import TranscriptContractError


def utc_now() -> datetime:
    """Current wall-clock instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_instant(instant: datetime) -> str:
    """Render an aware datetime as canonical UTC ISO-8601 text.

    Examples:
        2024-03-01T09:30:00Z
        2024-03-01T09:30:00.250Z
        2024-03-01T09:30:00.250125Z
    """
    if not isinstance(instant, datetime):
        raise TranscriptContractError("expected a datetime, got {!r}".format(instant))
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise TranscriptContractError(
            "timestamp {} has no timezone; use an aware datetime".format(instant.isoformat())
        )

    utc = instant.astimezone(timezone.utc)
    # Explicit widths: strftime("%Y") does not zero-pad years before 1000
    text = "{:04d}-{:02d}-{:02d}T{:02d}:{:02d}:{:02d}".format(
        utc.year, utc.month, utc.day, utc.hour, utc.minute, utc.second
    )
    micros = utc.microsecond
    if micros:
        if micros % 1000 == 0:
            text += ".{:03d}".format(micros // 1000)
        else:
            text += ".{:06d}".format(micros)
    return text + "Z"


def parse_instant(text: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts the ``Z`` suffix as well as explicit offsets such as ``+02:00``.
    Text without any offset is a contract violation.
    """
    if not isinstance(text, str) or not text:
        raise TranscriptContractError("expected an ISO-8601 string, got {!r}".format(text))

    normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise TranscriptContractError("invalid timestamp {!r}: {}".format(text, exc)) from exc

    if parsed.tzinfo is None:
        raise TranscriptContractError("timestamp {!r} has no timezone offset".format(text))
    return parsed.astimezone(timezone.utc)
