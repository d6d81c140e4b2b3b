"""Adult-content moderation on top of Azure Media Services video analysis."""

__version__ = "0.1.0"
