"""In-memory sink that keeps every delivered artifact."""

from __future__ import annotations

import copy
import threading
from typing import Any, Dict, List, Tuple

from transcript_publisher.sinks.base import Sink


class MemorySink(Sink):
    """Thread-safe sink that records deliveries in a list.

    Useful for embedding (hand the artifact to code in the same process)
    and for tests. Payloads are deep-copied so later mutation by the caller
    does not change what was delivered, and readers get copies as well.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._deliveries: List[Tuple[str, Dict[str, Any]]] = []

    def persist(self, artifact_id: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            self._deliveries.append((artifact_id, copy.deepcopy(payload)))

    @property
    def deliveries(self) -> List[Tuple[str, Dict[str, Any]]]:
        with self._lock:
            return copy.deepcopy(self._deliveries)

    def get(self, artifact_id: str) -> Dict[str, Any]:
        """Return the payload delivered under ``artifact_id``.

        Raises KeyError if nothing was delivered under that name.
        """
        with self._lock:
            for delivered_id, payload in self._deliveries:
                if delivered_id == artifact_id:
                    return copy.deepcopy(payload)
        raise KeyError(artifact_id)
