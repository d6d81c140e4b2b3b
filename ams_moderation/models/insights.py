"""Schema of the video analyzer ``insights.json`` document."""

from typing import Any, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModerationEntry(BaseModel):
    """One visual content moderation segment."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[int] = None
    adult_score: Optional[float] = Field(default=None, alias="adultScore")
    racy_score: Optional[float] = Field(default=None, alias="racyScore")
    instances: List[dict] = Field(default_factory=list)

    @field_validator("adult_score", "racy_score", mode="before")
    @classmethod
    def _numeric_or_none(cls, value: Any) -> Optional[float]:
        # Anything that is not a plain number counts as "no score".
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    @field_validator("id", mode="before")
    @classmethod
    def _int_or_none(cls, value: Any) -> Optional[int]:
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    @field_validator("instances", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]


class InsightsDocument(BaseModel):
    """The parts of the insights document the evaluator reads."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    visual_content_moderation: Optional[List[Any]] = Field(
        default=None, alias="visualContentModeration"
    )

    @field_validator("visual_content_moderation", mode="before")
    @classmethod
    def _list_or_none(cls, value: Any) -> Optional[list]:
        if value is None or not isinstance(value, list):
            return None
        return value

    def iter_entries(self) -> Iterator[Optional[ModerationEntry]]:
        """Lazily parse moderation entries; non-object items yield ``None``."""
        for raw in self.visual_content_moderation or ():
            if isinstance(raw, dict):
                yield ModerationEntry.model_validate(raw)
            else:
                yield None

    def iter_scores(self) -> Iterator[Optional[float]]:
        """Adult score of each entry in document order, ``None`` when unusable."""
        for entry in self.iter_entries():
            yield entry.adult_score if entry is not None else None
