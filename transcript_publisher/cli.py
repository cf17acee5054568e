"""Command-line interface: replay a recorded event log and publish it once.

WHY: Live messages captured from a conference (or events exported by
another tool) sometimes need to be turned into a final transcript after
the fact, e.g. when the original finalize path failed. The CLI runs the
same recorder → publish guard → sink pipeline the live service uses.

HOW: Reads events from a JSON Lines file (one event object or live
envelope per line) or a JSON array, replays them into a
TranscriptRecorder, marks start/end from the first/last event, and
finalizes through a PublishGuard into a DirectorySink (or a WebhookSink
with --webhook), encoding with the formatter named by --format.

RULES:
- Positional argument: path to the event log
- Status output goes to stderr; the artifact id is printed to stdout
- Blank lines in JSON Lines input are skipped
- Any contract or delivery error exits with status 1
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import jsonschema

from transcript_publisher.config import LOG_LEVEL, TRANSCRIPT_OUTPUT_DIR, load_webhook_url
from transcript_publisher.core.ir import TranscriptContractError, TranscriptEvent
from transcript_publisher.core.loader import parse_event, parse_participant
from transcript_publisher.core.recorder import TranscriptRecorder
from transcript_publisher.formatters import FORMATTERS
from transcript_publisher.publish.guard import PublishGuard
from transcript_publisher.sinks.base import DeliveryError, Sink
from transcript_publisher.sinks.directory import DirectorySink
from transcript_publisher.sinks.webhook import WebhookSink

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _read_json_objects(path: Path) -> List[Any]:
    """Read a JSON array file or a JSON Lines file into a list of objects."""
    text = path.read_text(encoding="utf-8")
    stripped = text.lstrip()
    if stripped.startswith("["):
        data = json.loads(stripped)
        return list(data)

    objects: List[Any] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            objects.append(json.loads(line))
        except json.JSONDecodeError as exc:
            raise TranscriptContractError("{}:{}: invalid JSON: {}".format(path, lineno, exc)) from exc
    return objects


def load_events(path: Path) -> List[TranscriptEvent]:
    return [parse_event(obj) for obj in _read_json_objects(path)]


def build_recorder(
    events: List[TranscriptEvent],
    room_name: Optional[str] = None,
    participants_path: Optional[Path] = None,
) -> TranscriptRecorder:
    """Replay decoded events into a recorder bounded by the first/last event."""
    recorder = TranscriptRecorder(room_name=room_name)
    initial = []
    if participants_path is not None:
        initial = [parse_participant(p) for p in _read_json_objects(participants_path)]

    if events:
        recorder.started(at=min(e.timestamp for e in events), initial_participants=initial)
    elif initial:
        recorder.add_initial_participants(initial)

    for event in events:
        recorder.add_event(event)

    if events:
        recorder.ended(at=max(e.timestamp for e in events))
    return recorder


def _build_sink(args: argparse.Namespace) -> Sink:
    if args.webhook:
        return WebhookSink(load_webhook_url())
    return DirectorySink(args.output_dir)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transcript_publisher",
        description="Replay a recorded transcript event log and publish the "
                    "final JSON transcript exactly once.",
    )
    parser.add_argument(
        "events_file",
        help="JSON Lines file (or JSON array) of event objects or live messages.",
    )
    parser.add_argument(
        "--room",
        default=None,
        help="Room name to record in the transcript.",
    )
    parser.add_argument(
        "--participants",
        default=None,
        help="JSON file listing the participants present when the session started.",
    )
    parser.add_argument(
        "--output-dir",
        default=TRANSCRIPT_OUTPUT_DIR,
        help="Directory to save the transcript into (default: %(default)s).",
    )
    parser.add_argument(
        "--webhook",
        action="store_true",
        help="POST the transcript to TRANSCRIPT_WEBHOOK_URL instead of saving it.",
    )
    parser.add_argument(
        "--format",
        choices=sorted(FORMATTERS),
        default="json",
        help="Artifact encoding (default: %(default)s).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m transcript_publisher``.

    argv=None means use sys.argv; an explicit list is for testing.
    """
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    args = build_parser().parse_args(argv)

    events_path = Path(args.events_file)
    if not events_path.is_file():
        print("Error: file not found: {}".format(events_path), file=sys.stderr)
        sys.exit(1)

    try:
        events = load_events(events_path)
        _status("Loaded {} events from {}".format(len(events), events_path.name))

        participants_path = Path(args.participants) if args.participants else None
        recorder = build_recorder(events, room_name=args.room, participants_path=participants_path)

        guard = PublishGuard(_build_sink(args), formatter=FORMATTERS[args.format]())
        _status("Publishing transcript {}...".format(guard.artifact_id))
        guard.finalize(recorder)
    except (DeliveryError, jsonschema.ValidationError, ValueError, OSError) as e:
        # ValueError covers TranscriptContractError, bad JSON and missing config
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    _status("Done!")
    print(guard.artifact_id)


if __name__ == "__main__":
    main()
