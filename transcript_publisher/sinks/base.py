"""Sink interface and delivery error.

RULES:
- persist() is called at most once per PublishGuard instance
- persist() blocks until the payload is delivered or delivery failed
- Implementations wrap their own I/O errors in DeliveryError
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class DeliveryError(Exception):
    """Raised when a sink fails to deliver a transcript artifact.

    WHY: The caller of finalize() needs to report a lost transcript with
    enough context (the artifact id) to recover it by hand.

    RULES:
    - Always carries artifact_id and a human-readable reason
    - The original exception, if any, is chained via ``raise ... from``
    """

    def __init__(self, artifact_id: str, reason: str) -> None:
        self.artifact_id = artifact_id
        self.reason = reason
        super().__init__("Failed to deliver transcript {}: {}".format(artifact_id, reason))


class Sink(ABC):
    """Anything that can accept a fully formed transcript payload."""

    @abstractmethod
    def persist(self, artifact_id: str, payload: Dict[str, Any]) -> None:
        """Deliver ``payload`` under the name ``artifact_id``.

        Raises:
            DeliveryError: if the payload could not be delivered.
        """
