"""Live broadcast of individual transcript events to the conference."""

from transcript_publisher.live.broadcaster import ConferenceTransport, LiveBroadcaster

__all__ = ["ConferenceTransport", "LiveBroadcaster"]
