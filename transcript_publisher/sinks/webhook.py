"""HTTP webhook sink for finished transcripts.

WHY: Deployments that archive transcripts in another service want the
artifact pushed to them rather than written to local disk.

HOW: One synchronous POST with httpx. The body is a JSON object holding the
artifact id and the encoded transcript. finalize() is a blocking call by
contract, so the synchronous client is used; callers may inject their own
httpx.Client (connection pooling, auth, test transports).

RULES:
- Exactly one request per persist() call; no retries here
- Transport errors, invalid URLs, unencodable payloads and HTTP status
  >= 400 raise DeliveryError
- An injected client is not closed by the sink; an owned one is closed
  after the request
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from transcript_publisher.config import TRANSCRIPT_WEBHOOK_TIMEOUT_S
from transcript_publisher.sinks.base import DeliveryError, Sink

logger = logging.getLogger(__name__)


class WebhookSink(Sink):
    """POST each artifact to a fixed URL."""

    def __init__(
        self,
        url: str,
        timeout_s: float = TRANSCRIPT_WEBHOOK_TIMEOUT_S,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if not url:
            raise ValueError("WebhookSink requires a URL")
        self.url = url
        self.timeout_s = timeout_s
        self._client = client

    def persist(self, artifact_id: str, payload: Dict[str, Any]) -> None:
        body = {"artifact_id": artifact_id, "transcript": payload}
        client = self._client or httpx.Client(timeout=self.timeout_s)
        try:
            resp = client.post(self.url, json=body)
        except (httpx.HTTPError, httpx.InvalidURL, TypeError, ValueError) as exc:
            # TypeError/ValueError: the payload could not be encoded as JSON
            raise DeliveryError(artifact_id, "request to {} failed: {}".format(self.url, exc)) from exc
        finally:
            if self._client is None:
                client.close()

        if resp.status_code >= 400:
            raise DeliveryError(
                artifact_id,
                "{} responded {}: {}".format(self.url, resp.status_code, resp.text[:200]),
            )
        logger.info("Delivered transcript %s to %s (%d)", artifact_id, self.url, resp.status_code)
