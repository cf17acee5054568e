"""Directory sink: one JSON file per finished transcript.

WHY: The simplest durable destination is a folder that an operator (or a
sync job) picks files up from. The artifact id is already a unique,
hard-to-guess filename, so it is used as-is.

HOW: The payload is serialized with the JSON formatter's serializer and
written as UTF-8 text to ``<directory>/<artifact_id>``. The file is opened
in exclusive-create mode so an existing artifact is never overwritten.

RULES:
- The directory is created on first delivery if missing
- Artifact ids containing path separators or ".." are rejected
- Any OSError becomes a DeliveryError carrying the artifact id
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Union

from transcript_publisher.formatters.json_transcript import serialize
from transcript_publisher.sinks.base import DeliveryError, Sink

logger = logging.getLogger(__name__)


class DirectorySink(Sink):
    """Write each artifact as a JSON file into a directory."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    def path_for(self, artifact_id: str) -> Path:
        """Resolve the file path for an artifact id, rejecting unsafe names."""
        if not artifact_id or Path(artifact_id).name != artifact_id or artifact_id in (".", ".."):
            raise DeliveryError(artifact_id, "artifact id is not a plain file name")
        return self.directory / artifact_id

    def persist(self, artifact_id: str, payload: Dict[str, Any]) -> None:
        path = self.path_for(artifact_id)
        content = serialize(payload)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DeliveryError(
                artifact_id, "could not create {}: {}".format(self.directory, exc)
            ) from exc

        try:
            with open(path, "x", encoding="utf-8") as f:
                f.write(content)
        except FileExistsError as exc:
            raise DeliveryError(artifact_id, "{} already exists".format(path)) from exc
        except OSError as exc:
            raise DeliveryError(artifact_id, "could not write {}: {}".format(path, exc)) from exc

        logger.info("Saved transcript %s (%d bytes)", path, len(content.encode("utf-8")))
