"""Data models for the moderation service."""

from .insights import InsightsDocument, ModerationEntry
from .media import (
    TERMINAL_STATES,
    Asset,
    AssetRole,
    BlobPage,
    ContainerPermission,
    InsightsType,
    Job,
    JobOutcome,
    JobOutput,
    JobState,
    Priority,
    Transform,
    TransformOutput,
)
from .verdict import ModerationVerdict

__all__ = [
    "Asset",
    "AssetRole",
    "BlobPage",
    "ContainerPermission",
    "InsightsDocument",
    "InsightsType",
    "Job",
    "JobOutcome",
    "JobOutput",
    "JobState",
    "ModerationEntry",
    "ModerationVerdict",
    "Priority",
    "TERMINAL_STATES",
    "Transform",
    "TransformOutput",
]
