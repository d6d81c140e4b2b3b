"""Result of one moderation request."""

from typing import Optional

from pydantic import BaseModel

from .media import JobState


class ModerationVerdict(BaseModel):
    """What the pipeline decided and how it got there.

    ``evaluated`` is False when the job did not finish, in which case
    ``is_adult`` stays False without any score having been read.
    """
    is_adult: bool = False
    evaluated: bool = False
    job_name: str
    job_state: JobState
    input_asset: str
    output_asset: str
    result_dir: Optional[str] = None

    def as_body(self) -> str:
        """Plain-text response body, ``"true"`` or ``"false"``."""
        return "true" if self.is_adult else "false"

    class Config:
        json_schema_extra = {
            "example": {
                "is_adult": False,
                "evaluated": True,
                "job_name": "job-clip.mp4-20261019153000-3f9c2a1b",
                "job_state": "Finished",
                "input_asset": "clip-input",
                "output_asset": "clip-output",
                "result_dir": "Output/clip-output",
            }
        }
