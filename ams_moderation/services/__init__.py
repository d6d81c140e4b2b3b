"""Pipeline stages for media moderation."""

from .assets import AssetProvisioner
from .jobs import JobPoller, JobSubmitter
from .moderation import ModerationEvaluator
from .pipeline import ModerationPipeline
from .results import ResultFetcher
from .storage import ResultStore
from .transforms import TransformRegistry

__all__ = [
    "AssetProvisioner",
    "JobPoller",
    "JobSubmitter",
    "ModerationEvaluator",
    "ModerationPipeline",
    "ResultFetcher",
    "ResultStore",
    "TransformRegistry",
]
