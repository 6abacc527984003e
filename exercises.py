from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any, List, Union

from pydantic import BaseModel, ConfigDict, Field

from errors import ValidationError

Number = Union[int, float]

# Column width of group names in storage.
MAX_GROUP_NAME_LENGTH = 200


class Level(str, Enum):
    BASIC = "Basic"
    JUNIOR = "Junior"


def coerce_level(value: Any) -> Level:
    """Accept a Level or its string value; anything else is a ValidationError."""
    if isinstance(value, Level):
        return value
    try:
        return Level(value)
    except ValueError:
        raise ValidationError("Level must be Basic or Junior") from None


class Question(BaseModel):
    id: int = Field(ge=1)
    numbers: List[Union[int, float]] = Field(min_length=1)
    correct_answer: Union[int, float]


class ExerciseGroup(BaseModel):
    level: Level
    group: str
    questions: List[Question] = Field(default_factory=list)

    @property
    def total_questions(self) -> int:
        return len(self.questions)


class ProgressRecord(BaseModel):
    """One answered question; never changes once recorded."""

    model_config = ConfigDict(frozen=True)

    student_id: int
    level: Level
    exercise_group: str
    question_id: int
    response: str
    is_correct: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


def validate_exercise_group(group: ExerciseGroup) -> ExerciseGroup:
    if not group.group or not group.group.strip():
        raise ValidationError("Group name is required")
    if len(group.group) > MAX_GROUP_NAME_LENGTH:
        raise ValidationError(
            f"Group name must be at most {MAX_GROUP_NAME_LENGTH} characters (got {len(group.group)})"
        )
    if not group.questions:
        raise ValidationError(f"Exercise group {group.group!r} must have questions")
    return group


def validate_unique_groups(groups: List[ExerciseGroup]) -> None:
    seen = set()
    for g in groups:
        key = (g.level, g.group)
        if key in seen:
            raise ValidationError(f"Duplicate exercise group {g.group!r} for level {g.level.value}")
        seen.add(key)
