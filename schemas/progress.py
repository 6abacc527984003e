from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict

from exercises import Level


class ProgressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    student_id: int
    level: Level
    exercise_group: str
    question_id: int
    response: str
    is_correct: bool
    timestamp: datetime


class GroupProgress(BaseModel):
    level: Level
    exercise_group: str
    correct: int
    total: int
    percentage: int


class ProgressSummary(BaseModel):
    student_id: int
    groups: List[GroupProgress]
