"""Shared model exports."""

from .content import (
    ContentRecord,
    LabelList,
    Prompt,
    PromptList,
    PromptRecord,
    TimelinePrompt,
    TimelinePromptList,
    TimelinePromptRecord,
    TimelineSequence,
    dump_records,
)

__all__ = [
    "ContentRecord",
    "LabelList",
    "Prompt",
    "PromptList",
    "PromptRecord",
    "TimelinePrompt",
    "TimelinePromptList",
    "TimelinePromptRecord",
    "TimelineSequence",
    "dump_records",
]
