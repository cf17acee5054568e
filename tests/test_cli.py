"""End-to-end tests for the replay CLI.

WHY: The CLI is the manual recovery path when a live finalize failed. It
must read the formats operators actually have (JSON Lines of live
messages, plain JSON arrays) and publish exactly one artifact.

HOW: Event logs are written to tmp_path, main() is called with an
explicit argv, and the output directory is inspected. Webhook mode is
exercised with WebhookSink patched to a MemorySink.

RULES:
- Never touches the network
- The artifact id printed to stdout must name the file that was written
"""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from transcript_publisher.cli import build_parser, build_recorder, load_events, main
from transcript_publisher.formatters import FORMATTERS
from transcript_publisher.formatters.base import BaseFormatter
from transcript_publisher.sinks.memory import MemorySink

JOIN = {
    "event": "JOIN",
    "timestamp": "2024-03-01T09:30:01Z",
    "participant": {"name": "Bob", "id": "p2"},
}
SPEECH = {
    "event": "SPEECH",
    "timestamp": "2024-03-01T09:30:05Z",
    "participant": {"name": "Alice", "id": "p1"},
    "transcript": [{"text": "hello", "confidence": 0.9}],
    "language": "en",
    "is_interim": False,
    "message_id": "m1",
    "stability": 1.0,
}


class _CountingFormatter(BaseFormatter):
    """Minimal formatter that only counts events."""

    suffix = ".counts.json"

    @property
    def name(self):
        return "Event counts"

    def format_event(self, event):
        return {"event": event.event_type.value}

    def format_transcript(self, transcript):
        return {"events": len(transcript.events)}


def _write_jsonl(path, objects):
    path.write_text("\n".join(json.dumps(o) for o in objects) + "\n", encoding="utf-8")
    return path


class TestLoadEvents:

    def test_jsonl_with_envelopes_and_blank_lines(self, tmp_path):
        path = tmp_path / "events.jsonl"
        envelope = {"jitsi-meet-muc-msg-topic": "transcription-result", "payload": SPEECH}
        path.write_text(json.dumps(JOIN) + "\n\n" + json.dumps(envelope) + "\n", encoding="utf-8")
        events = load_events(path)
        assert [e.event_type.value for e in events] == ["JOIN", "SPEECH"]

    def test_json_array(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(json.dumps([JOIN, SPEECH]), encoding="utf-8")
        assert len(load_events(path)) == 2


class TestBuildRecorder:

    def test_bounds_from_first_and_last_event(self, tmp_path):
        events = load_events(_write_jsonl(tmp_path / "e.jsonl", [SPEECH, JOIN]))
        transcript = build_recorder(events, room_name="room1").freeze()
        assert transcript.room_name == "room1"
        assert transcript.start_time == events[1].timestamp
        assert transcript.end_time == events[0].timestamp
        assert [e.event_type.value for e in transcript.events] == ["JOIN", "SPEECH"]

    def test_initial_participants_file(self, tmp_path):
        participants = tmp_path / "participants.json"
        participants.write_text(json.dumps([{"name": "Alice", "id": "p1"}]), encoding="utf-8")
        transcript = build_recorder([], participants_path=participants).freeze()
        assert [p.id for p in transcript.initial_participants] == ["p1"]
        assert transcript.start_time is None


class TestMain:

    def test_publishes_one_artifact(self, tmp_path, capsys):
        events = _write_jsonl(tmp_path / "events.jsonl", [JOIN, SPEECH])
        out_dir = tmp_path / "out"
        main([str(events), "--room", "room1", "--output-dir", str(out_dir)])

        artifact_id = capsys.readouterr().out.strip()
        files = list(out_dir.iterdir())
        assert [f.name for f in files] == [artifact_id]

        payload = json.loads(files[0].read_text(encoding="utf-8"))
        assert payload["room_name"] == "room1"
        assert payload["start_time"] == "2024-03-01T09:30:01Z"
        assert payload["end_time"] == "2024-03-01T09:30:05Z"
        assert payload["events"] == [JOIN, SPEECH]

    def test_missing_file_exits_1(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.jsonl")])
        assert exc_info.value.code == 1

    def test_invalid_event_exits_1(self, tmp_path, capsys):
        events = _write_jsonl(tmp_path / "events.jsonl", [{"event": "JOIN"}])
        with pytest.raises(SystemExit) as exc_info:
            main([str(events), "--output-dir", str(tmp_path / "out")])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    @pytest.mark.parametrize("bad", [
        dict(SPEECH, transcript=[{"text": "hello", "confidence": None}], stability="x"),
        dict(SPEECH, transcript=[{"text": "hello", "confidence": "high"}]),
        dict(SPEECH, transcript="hello"),
    ])
    def test_wrong_typed_fields_exit_1(self, tmp_path, capsys, bad):
        events = _write_jsonl(tmp_path / "events.jsonl", [JOIN, bad])
        with pytest.raises(SystemExit) as exc_info:
            main([str(events), "--output-dir", str(tmp_path / "out")])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err
        assert not (tmp_path / "out").exists()

    def test_null_confidence_is_published_as_zero(self, tmp_path, capsys):
        speech = dict(SPEECH, transcript=[{"text": "hello", "confidence": None}])
        events = _write_jsonl(tmp_path / "events.jsonl", [speech])
        out_dir = tmp_path / "out"
        main([str(events), "--output-dir", str(out_dir)])
        artifact_id = capsys.readouterr().out.strip()
        payload = json.loads((out_dir / artifact_id).read_text(encoding="utf-8"))
        assert payload["events"][0]["transcript"] == [{"text": "hello", "confidence": 0.0}]

    def test_format_selects_registered_formatter(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setitem(FORMATTERS, "counts", _CountingFormatter)
        events = _write_jsonl(tmp_path / "events.jsonl", [JOIN, SPEECH])
        out_dir = tmp_path / "out"
        main([str(events), "--output-dir", str(out_dir), "--format", "counts"])
        artifact_id = capsys.readouterr().out.strip()
        assert artifact_id.endswith(".counts.json")
        payload = json.loads((out_dir / artifact_id).read_text(encoding="utf-8"))
        assert payload == {"events": 2}

    def test_webhook_mode(self, tmp_path, monkeypatch, capsys):
        sink = MemorySink()
        monkeypatch.setenv("TRANSCRIPT_WEBHOOK_URL", "https://archive.example.com/t")
        events = _write_jsonl(tmp_path / "events.jsonl", [JOIN])
        with patch("transcript_publisher.cli.WebhookSink", return_value=sink) as webhook_cls:
            main([str(events), "--webhook"])
        webhook_cls.assert_called_once_with("https://archive.example.com/t")
        artifact_id = capsys.readouterr().out.strip()
        assert sink.get(artifact_id)["events"] == [JOIN]

    def test_webhook_without_url_exits_1(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TRANSCRIPT_WEBHOOK_URL", raising=False)
        events = _write_jsonl(tmp_path / "events.jsonl", [JOIN])
        with pytest.raises(SystemExit) as exc_info:
            main([str(events), "--webhook"])
        assert exc_info.value.code == 1


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["events.jsonl"])
        assert args.room is None
        assert args.webhook is False
        assert args.participants is None
        assert args.format == "json"

    def test_unknown_format_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["events.jsonl", "--format", "srt"])
        assert exc_info.value.code == 2
