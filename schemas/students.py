from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config import (
    DEFAULT_FLASH_INTERVAL,
    DEFAULT_RESPONSE_TIME,
    FLASH_INTERVAL_MAX,
    FLASH_INTERVAL_MIN,
    RESPONSE_TIME_MAX,
    RESPONSE_TIME_MIN,
    STUDENT_AGE_MAX,
    STUDENT_AGE_MIN,
)
from exercises import Level


class StudentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    password: str = Field(min_length=1)
    age: int = Field(ge=STUDENT_AGE_MIN, le=STUDENT_AGE_MAX)
    classroom: Level = Level.BASIC
    flash_speed: float = Field(
        default=DEFAULT_FLASH_INTERVAL, ge=FLASH_INTERVAL_MIN, le=FLASH_INTERVAL_MAX
    )
    response_time: int = Field(
        default=DEFAULT_RESPONSE_TIME, ge=RESPONSE_TIME_MIN, le=RESPONSE_TIME_MAX
    )


class StudentUpdate(BaseModel):
    # every field optional; blank password keeps the current one
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    password: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=STUDENT_AGE_MIN, le=STUDENT_AGE_MAX)
    classroom: Optional[Level] = None
    flash_speed: Optional[float] = Field(
        default=None, ge=FLASH_INTERVAL_MIN, le=FLASH_INTERVAL_MAX
    )
    response_time: Optional[int] = Field(
        default=None, ge=RESPONSE_TIME_MIN, le=RESPONSE_TIME_MAX
    )


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    age: int
    classroom: Level
    flash_speed: float
    response_time: int
    created_at: datetime | None = None
