# Practice (flash mode) request/response shapes
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field

from exercises import Level

LEN_LIMIT = 100


# ---------- Auth ----------


class LoginRequest(BaseModel):
    name: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    ok: bool
    token: str
    student_id: int
    name: str
    classroom: Level
    flash_speed: float


# ---------- Flash mode ----------


class StartRequest(BaseModel):
    group: str = Field(min_length=1)


class AnswerRequest(BaseModel):
    response: str = Field(max_length=LEN_LIMIT)


class PracticeState(BaseModel):
    phase: str
    level: Level
    group: str
    question_index: int
    question_id: Optional[int] = None
    question_count: int
    stimulus_index: Optional[int] = None
    stimulus_count: Optional[int] = None
    visible_number: Optional[Union[int, float]] = None
    last_outcome: Optional[bool] = None
    pending_records: int
    needs_decision: bool


class AnswerResponse(BaseModel):
    ok: bool
    is_correct: bool
    question_id: int
    state: PracticeState


class DecisionResponse(BaseModel):
    ok: bool
    needs_decision: bool = False
    saved: int = 0
    discarded: int = 0
    state: Optional[PracticeState] = None
