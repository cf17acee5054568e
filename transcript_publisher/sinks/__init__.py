"""Destinations for finished transcript artifacts.

WHY: Where a finished transcript goes (a directory, an HTTP endpoint, a
test double) is deployment policy. The publish guard only needs something
with ``persist(artifact_id, payload)``.

HOW: base.py defines the Sink interface and DeliveryError; the concrete
sinks live in their own modules and are re-exported here.

RULES:
- Sinks raise DeliveryError for any failure to deliver
- Retry policy, if any, belongs to the sink, never to the publish guard
"""

from transcript_publisher.sinks.base import DeliveryError, Sink
from transcript_publisher.sinks.directory import DirectorySink
from transcript_publisher.sinks.memory import MemorySink
from transcript_publisher.sinks.webhook import WebhookSink

__all__ = ["DeliveryError", "DirectorySink", "MemorySink", "Sink", "WebhookSink"]
