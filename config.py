from __future__ import annotations

import os

# --- Flash timing ----------------------------------------------------------------
# Seconds between successive reveals; per-student, bounded to this range.
FLASH_INTERVAL_MIN = 0.5
FLASH_INTERVAL_MAX = 5.0
DEFAULT_FLASH_INTERVAL = 2.0

# Allowed answer time, stored on the student profile.
RESPONSE_TIME_MIN = 5
RESPONSE_TIME_MAX = 30
DEFAULT_RESPONSE_TIME = 10

STUDENT_AGE_MIN = 5
STUDENT_AGE_MAX = 18

STARTUP_DELAY_S = float(os.getenv("FLASHMATH_STARTUP_DELAY", "1.0"))
FEEDBACK_DELAY_S = float(os.getenv("FLASHMATH_FEEDBACK_DELAY", "2.0"))

# --- Storage ---------------------------------------------------------------------
# Oversized groups are stored as several chunks of at most this many questions.
MAX_QUESTIONS_PER_CHUNK = int(os.getenv("FLASHMATH_CHUNK_SIZE", "100"))

# --- HTTP ------------------------------------------------------------------------
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"
    ).split(",")
    if o.strip()
]
