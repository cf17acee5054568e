"""One-shot publishing of finished transcripts."""

from transcript_publisher.publish.guard import PublishGuard, PublishState, generate_artifact_name

__all__ = ["PublishGuard", "PublishState", "generate_artifact_name"]
