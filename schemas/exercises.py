from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from exercises import Level

# ---------- Upload ----------


class UploadRequest(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    content: str
    uploaded_by: str = Field(min_length=1, max_length=120)
    # Falls back to the file name: "junior" anywhere in it means Junior.
    level: Optional[Level] = None


class UploadResponse(BaseModel):
    ok: bool
    file_id: int
    level: Level
    groups: int
    questions: int
    chunks: int


# ---------- Listing ----------


class GroupSummary(BaseModel):
    level: Level
    group: str
    total_questions: int


class CsvFileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    file_name: str
    level: Level
    uploaded_by: str
    uploaded_at: datetime | None = None
    group_count: int
    question_count: int


class CsvFileList(BaseModel):
    ok: bool
    items: List[CsvFileOut]
    count: int
