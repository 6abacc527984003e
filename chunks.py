from __future__ import annotations

import math
from typing import Dict, Iterable, List, Tuple

from pydantic import BaseModel

from config import MAX_QUESTIONS_PER_CHUNK
from errors import ValidationError
from exercises import ExerciseGroup, Level, Question


class ExerciseChunk(BaseModel):
    """One stored fragment of an exercise group."""

    level: Level
    group: str
    chunk_number: int
    total_chunks: int
    total_questions: int
    questions: List[Question]


def split_into_chunks(
    exercise: ExerciseGroup, size: int = MAX_QUESTIONS_PER_CHUNK
) -> List[ExerciseChunk]:
    if size < 1:
        raise ValueError("chunk size must be positive")
    questions = exercise.questions
    if not questions:
        raise ValidationError("Exercise must have questions")

    total_chunks = math.ceil(len(questions) / size)
    return [
        ExerciseChunk(
            level=exercise.level,
            group=exercise.group,
            chunk_number=i // size + 1,
            total_chunks=total_chunks,
            total_questions=len(questions),
            questions=questions[i : i + size],
        )
        for i in range(0, len(questions), size)
    ]


def merge_chunks(chunks: Iterable[ExerciseChunk]) -> List[ExerciseGroup]:
    """Reassemble groups from chunks given in stored order.

    Questions are concatenated chunk by chunk, then sorted by id (stable).
    Groups come out in the order their first chunk was seen.
    """
    merged: Dict[Tuple[Level, str], ExerciseGroup] = {}
    for chunk in chunks:
        key = (chunk.level, chunk.group)
        ex = merged.get(key)
        if ex is None:
            ex = merged[key] = ExerciseGroup(level=chunk.level, group=chunk.group, questions=[])
        ex.questions.extend(chunk.questions)

    for ex in merged.values():
        ex.questions.sort(key=lambda q: q.id)
    return list(merged.values())
