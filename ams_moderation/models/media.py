"""Media Services resource models: transforms, assets and jobs."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class InsightsType(str, Enum):
    """Which insights the video analyzer extracts."""
    AUDIO_INSIGHTS_ONLY = "AudioInsightsOnly"
    VIDEO_INSIGHTS_ONLY = "VideoInsightsOnly"
    ALL_INSIGHTS = "AllInsights"


class Priority(str, Enum):
    """Relative priority of a transform output."""
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"


class TransformOutput(BaseModel):
    """One output produced by a transform."""
    insights_type: InsightsType = InsightsType.VIDEO_INSIGHTS_ONLY
    relative_priority: Priority = Priority.HIGH


class Transform(BaseModel):
    """Named, reusable processing profile that jobs run under."""
    name: str
    outputs: List[TransformOutput]


class AssetRole(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class Asset(BaseModel):
    """Reference to a storage container registered with the account.

    ``name`` is the effective name and may differ from ``requested_name``
    when the requested one was already taken.
    """
    name: str
    role: AssetRole
    requested_name: Optional[str] = None
    container: Optional[str] = None


class ContainerPermission(str, Enum):
    """Permission level of a container SAS."""
    READ = "Read"
    READ_WRITE = "ReadWrite"
    READ_WRITE_DELETE = "ReadWriteDelete"


class JobState(str, Enum):
    """State of a job or of one of its outputs."""
    QUEUED = "Queued"
    SCHEDULED = "Scheduled"
    PROCESSING = "Processing"
    FINISHED = "Finished"
    ERROR = "Error"
    CANCELED = "Canceled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({JobState.FINISHED, JobState.ERROR, JobState.CANCELED})


class JobOutput(BaseModel):
    """Per-output state; ``progress`` only means something while processing."""
    asset_name: str
    state: JobState = JobState.QUEUED
    progress: int = Field(default=0, ge=0, le=100)


class Job(BaseModel):
    """A unit of asynchronous work on the remote service."""
    name: str
    transform_name: str
    input_asset: str
    outputs: List[JobOutput] = Field(min_length=1)
    state: JobState = JobState.QUEUED
    created: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "job-clip.mp4-20261019153000-3f9c2a1b",
                "transform_name": "VideoInsightsOnly",
                "input_asset": "clip-input",
                "outputs": [
                    {"asset_name": "clip-output", "state": "Processing", "progress": 40}
                ],
                "state": "Processing",
            }
        }


class JobOutcome(BaseModel):
    """Final observed state of a polled job."""
    name: str
    state: JobState
    outputs: List[JobOutput]


class BlobPage(BaseModel):
    """One page of a container listing.

    An empty ``continuation_token`` means no more pages.
    """
    names: List[str] = Field(default_factory=list)
    continuation_token: str = ""
