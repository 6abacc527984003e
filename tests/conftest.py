import os
import tempfile

import pytest

# Must be set before db.py is imported anywhere.
_TMP = tempfile.mkdtemp(prefix="flashmath-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ.setdefault("TEACHER_TOKEN", "teacher-secret")

from db import Base, engine  # noqa: E402
import models  # noqa: E402,F401
from session_context import registry  # noqa: E402

TEACHER = {"x-admin-token": os.environ["TEACHER_TOKEN"]}


@pytest.fixture(scope="session", autouse=True)
def _schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def _clean_state():
    yield
    registry.clear()
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def teacher_headers():
    return dict(TEACHER)
