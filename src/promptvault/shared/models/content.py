"""Content record models.

These models describe the two content kinds served by the hosted backend:
flat prompts and timeline-structured prompts. They validate rows at the
remote service boundary and re-validate payloads read back from the cache.

Backend rows frequently carry NULL columns; the ``before`` validators
normalize them to the same defaults the web client always used.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from promptvault.shared.constants import ContentDefaults


class ContentRecord(BaseModel):
    """Fields shared by every content record.

    Every record carries at minimum an identifier, a category label and
    a creation timestamp.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    description: str = ""
    category: str = ""
    created_at: str
    updated_at: str = ""
    created_by: str = ""
    is_featured: bool = False
    is_public: bool = True
    likes_count: int = 0
    usage_count: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator(
        "title",
        "description",
        "category",
        "updated_at",
        "created_by",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_featured", mode="before")
    @classmethod
    def _featured_default(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("is_public", mode="before")
    @classmethod
    def _public_unless_false(cls, value: Any) -> Any:
        # Only an explicit false hides a record
        return value is not False

    @field_validator("likes_count", "usage_count", mode="before")
    @classmethod
    def _counter_default(cls, value: Any) -> Any:
        return 0 if value is None else value


class Prompt(ContentRecord):
    """A flat prompt from the ``prompts`` table."""

    style: str = ""
    camera: str = ""
    lighting: str = ""
    environment: str = ""
    elements: list[str] = Field(default_factory=list)
    motion: str = ""
    ending: str = ""
    text: str = ""
    keywords: list[str] = Field(default_factory=list)
    timeline: str | None = None

    @field_validator(
        "style",
        "camera",
        "lighting",
        "environment",
        "motion",
        "ending",
        "text",
        mode="before",
    )
    @classmethod
    def _prompt_text_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("elements", "keywords", mode="before")
    @classmethod
    def _list_default(cls, value: Any) -> Any:
        return [] if value is None else value


class TimelineSequence(BaseModel):
    """One step of a timeline prompt.

    Steps live in an untyped JSON column, so any field may be missing,
    NULL or a number where text is expected.
    """

    model_config = ConfigDict(extra="ignore")

    sequence: int = 0
    timestamp: str = ""
    action: str = ""
    audio: str = ""

    @field_validator("sequence", mode="before")
    @classmethod
    def _sequence_default(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("timestamp", "action", "audio", mode="before")
    @classmethod
    def _step_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        # bool is an int subclass and is not a timestamp
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class TimelinePrompt(ContentRecord):
    """A timeline-structured prompt from the ``timeline_prompts`` table."""

    base_style: str = ""
    aspect_ratio: str = ContentDefaults.ASPECT_RATIO
    scene_description: str = ""
    camera_setup: str = ""
    lighting: str = ""
    negative_prompts: list[str] = Field(default_factory=list)
    timeline: list[TimelineSequence] = Field(default_factory=list)

    @field_validator(
        "base_style",
        "scene_description",
        "camera_setup",
        "lighting",
        mode="before",
    )
    @classmethod
    def _timeline_text_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("aspect_ratio", mode="before")
    @classmethod
    def _aspect_ratio_default(cls, value: Any) -> Any:
        return value or ContentDefaults.ASPECT_RATIO

    @field_validator("negative_prompts", mode="before")
    @classmethod
    def _negative_prompts_default(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("timeline", mode="before")
    @classmethod
    def _timeline_must_be_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [step for step in value if isinstance(step, (dict, TimelineSequence))]


PromptList = TypeAdapter(list[Prompt])
TimelinePromptList = TypeAdapter(list[TimelinePrompt])
LabelList = TypeAdapter(list[str])
PromptRecord = TypeAdapter(Prompt)
TimelinePromptRecord = TypeAdapter(TimelinePrompt)


def dump_records(records: list[ContentRecord]) -> list[dict[str, Any]]:
    """Convert records to JSON-compatible dicts for caching."""
    return [record.model_dump(mode="json") for record in records]
