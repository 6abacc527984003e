"""Convert uploaded CSV tables into exercise groups, and back.

Expected table layout (0-based columns):

    0       1          2..8              9
    Group   <name>                                  <- group header row
            <qid>      stimulus numbers  answer     <- question row

A row whose first cell contains "group" (any case) starts a new group.
Every other row is a question: numeric cells in columns 2..8 are the
numbers to flash, column 9 is the expected answer.
"""

from __future__ import annotations

import csv
import io
import logging
import math
import re
from typing import Any, Iterable, List, Optional

from errors import ParseError, ValidationError
from exercises import ExerciseGroup, Number, Question, coerce_level

logger = logging.getLogger("flashmath.importer")

STIMULUS_COLUMNS = range(2, 9)
ANSWER_COLUMN = 9
TOTAL_COLUMNS = 10
MAX_STIMULI = len(STIMULUS_COLUMNS)

DEFAULT_GROUP_LABEL = "Default Group"
HEADER_ROW = [
    "Group",
    "Question ID",
    *(f"Num{i}" for i in range(1, MAX_STIMULI + 1)),
    "Answer",
]

_INT_RE = re.compile(r"[+-]?[0-9]+")
# ASCII decimals only; float() alone also takes "1_000", non-Latin digits and "inf"
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


# --- Cell helpers -----------------------------------------------------------------


def _cell(row: List[str], idx: int) -> str:
    return row[idx].strip() if idx < len(row) else ""


def _parse_number(raw: str) -> Optional[Number]:
    s = raw.strip()
    if not s:
        return None
    if not _DECIMAL_RE.fullmatch(s):
        return None
    try:
        if _INT_RE.fullmatch(s):
            return int(s)
        val = float(s)
    except ValueError:
        # integer literal past the int-conversion digit limit
        return None
    if not math.isfinite(val):
        return None
    return int(val) if val.is_integer() else val


def _is_blank(row: List[str]) -> bool:
    return all(not c.strip() for c in row)


def _is_group_header(row: List[str]) -> bool:
    return "group" in _cell(row, 0).lower()


def _is_column_header(row: List[str]) -> bool:
    # e.g. "Group,Question ID,Num1,...,Answer"
    answer = _cell(row, ANSWER_COLUMN)
    return _is_group_header(row) and bool(answer) and _parse_number(answer) is None


def _parse_question_row(row: List[str], qid: int) -> Optional[Question]:
    numbers = [n for n in (_parse_number(_cell(row, i)) for i in STIMULUS_COLUMNS) if n is not None]
    answer = _parse_number(_cell(row, ANSWER_COLUMN))
    if not numbers or answer is None:
        return None
    return Question(id=qid, numbers=numbers, correct_answer=answer)


def _read_rows(text: str) -> List[List[str]]:
    try:
        return list(csv.reader(io.StringIO(text, newline=""), strict=True))
    except csv.Error as e:
        raise ParseError(f"CSV parsing errors: {e}") from e


# --- Import -----------------------------------------------------------------------


def parse_csv_to_exercises(text: str, level: Any) -> List[ExerciseGroup]:
    """Parse raw CSV text into exercise groups tagged with ``level``.

    Raises ParseError for malformed CSV and ValidationError for an unknown
    level. Rows that do not yield a question are dropped.
    """
    lvl = coerce_level(level)
    rows = _read_rows(text)

    exercises: List[ExerciseGroup] = []
    current_group: Optional[str] = None
    questions: List[Question] = []
    dropped = 0
    first = True

    def flush() -> None:
        if questions:
            exercises.append(
                ExerciseGroup(
                    level=lvl,
                    group=current_group or DEFAULT_GROUP_LABEL,
                    questions=list(questions),
                )
            )

    for row in rows:
        if _is_blank(row):
            continue
        if first:
            first = False
            if _is_column_header(row):
                continue

        if _is_group_header(row):
            flush()
            current_group = _cell(row, 1) or f"Group {len(exercises) + 1}"
            questions = []
            continue

        q = _parse_question_row(row, len(questions) + 1)
        if q is None:
            dropped += 1
            continue
        questions.append(q)

    flush()

    logger.info(
        "parsed %d group(s), %d question(s) for level %s (%d row(s) dropped)",
        len(exercises),
        sum(len(e.questions) for e in exercises),
        lvl.value,
        dropped,
    )
    return exercises


# --- Export -----------------------------------------------------------------------


def _format_number(n: Number) -> str:
    if isinstance(n, float) and n.is_integer():
        return str(int(n))
    return str(n)


def exercises_to_csv(exercises: Iterable[ExerciseGroup]) -> str:
    """Serialize groups in the layout parse_csv_to_exercises reads."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HEADER_ROW)

    blank_tail = [""] * (TOTAL_COLUMNS - 2)
    for ex in exercises:
        writer.writerow(["Group", ex.group, *blank_tail])
        for q in sorted(ex.questions, key=lambda qq: qq.id):
            if len(q.numbers) > MAX_STIMULI:
                raise ValidationError(
                    f"Question {q.id} in {ex.group!r} has {len(q.numbers)} numbers; "
                    f"at most {MAX_STIMULI} fit in a row."
                )
            nums = [_format_number(n) for n in q.numbers]
            nums += [""] * (MAX_STIMULI - len(nums))
            # First cell stays blank so a group name can never look like a header.
            writer.writerow(["", str(q.id), *nums, _format_number(q.correct_answer)])

    return buf.getvalue()
