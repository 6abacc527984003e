import pytest

from errors import InvalidTransition, PersistenceError, ValidationError
from exercises import ExerciseGroup, Level, Question
from sequencer import Phase, RevealSequencer, is_correct_response


def _exercise(*questions):
    return ExerciseGroup(
        level=Level.BASIC,
        group="Addition",
        questions=[
            Question(id=i, numbers=nums, correct_answer=ans)
            for i, (nums, ans) in enumerate(questions, start=1)
        ],
    )


def _make(clock, *questions, interval=1.0):
    ex = _exercise(*(questions or [([4, 7, 2], 13)]))
    return RevealSequencer(ex, 7, interval, clock=clock, startup_delay=1.0, feedback_delay=2.0)


def _run_to_input(seq, clock, interval=1.0):
    clock.tick(1.0)
    seq.advance()
    while seq.phase != Phase.AWAITING_INPUT:
        clock.tick(interval)
        seq.advance()


def test_reveals_in_order_one_at_a_time(clock):
    seq = _make(clock)
    assert seq.phase == Phase.IDLE
    assert seq.advance() == []

    seen = []
    clock.tick(1.0)
    for _ in range(3):
        events = seq.advance()
        assert [e.kind for e in events] == ["reveal"]
        assert seq.phase == Phase.REVEALING
        assert seq.visible_number == events[0].value
        seen.append(events[0].value)
        clock.tick(1.0)

    assert seen == [4, 7, 2]
    events = seq.advance()
    assert [e.kind for e in events] == ["input_ready"]
    assert seq.phase == Phase.AWAITING_INPUT
    assert seq.visible_number is None


def test_late_poll_catches_up_without_skipping(clock):
    seq = _make(clock, interval=0.5)
    clock.tick(10)
    events = seq.advance()
    assert [e.kind for e in events] == ["reveal", "reveal", "reveal", "input_ready"]
    assert [e.value for e in events[:3]] == [4, 7, 2]
    assert [e.at for e in events] == [101.0, 101.5, 102.0, 102.5]


def test_reveal_interval_cannot_be_shortened(clock):
    seq = _make(clock, interval=2.0)
    clock.tick(1.0)
    seq.advance()
    clock.tick(1.9)
    assert seq.advance() == []
    assert seq.visible_number == 4
    with pytest.raises(InvalidTransition):
        seq.submit("13")
    assert seq.records == []


@pytest.mark.parametrize(
    "response,expected",
    [("13", True), (" 13 ", True), ("+13", True), ("12", False), ("13.5", False), ("abc", False), ("", False)],
)
def test_correctness_evaluation(response, expected):
    assert is_correct_response(response, 13) is expected


def test_float_answer_compares_as_number():
    assert is_correct_response("4", 4.0) is True
    assert is_correct_response("4", 4.5) is False


def test_submit_records_and_shows_feedback(clock):
    seq = _make(clock)
    _run_to_input(seq, clock)
    rec = seq.submit("abc")
    assert rec.is_correct is False
    assert rec.response == "abc"
    assert (rec.student_id, rec.level, rec.exercise_group, rec.question_id) == (7, Level.BASIC, "Addition", 1)
    assert seq.phase == Phase.FEEDBACK
    assert seq.snapshot()["last_outcome"] is False

    with pytest.raises(InvalidTransition):
        seq.submit("13")
    assert len(seq.records) == 1


def test_feedback_then_next_question_then_complete(clock):
    seq = _make(clock, ([1, 2], 3), ([5], 5))
    _run_to_input(seq, clock)
    seq.submit("3")

    clock.tick(2.0)
    assert [e.kind for e in seq.advance()] == ["question"]
    assert seq.phase == Phase.IDLE
    assert seq.question.id == 2

    _run_to_input(seq, clock)
    seq.submit("5")
    clock.tick(2.0)
    assert [e.kind for e in seq.advance()] == ["complete"]
    assert seq.phase == Phase.COMPLETE
    assert seq.needs_decision
    assert [r.is_correct for r in seq.records] == [True, True]


def test_exit_without_answers_closes(clock):
    seq = _make(clock)
    assert seq.exit() is False
    assert seq.phase == Phase.CLOSED
    assert not seq.timer_pending


def test_exit_mid_session_forces_decision_and_discard_clears(clock):
    seq = _make(clock, *[([i], i) for i in range(1, 6)])
    for _ in range(2):
        _run_to_input(seq, clock)
        seq.submit("1")
        clock.tick(2.0)
        seq.advance()

    assert seq.exit() is True
    assert seq.phase == Phase.COMPLETE
    assert not seq.timer_pending
    clock.tick(60)
    assert seq.advance() == []

    assert seq.discard() == 2
    assert seq.records == []
    assert seq.phase == Phase.CLOSED


def test_save_failure_keeps_records_for_retry(clock):
    seq = _make(clock, *[([i], i) for i in range(1, 6)])
    for _ in range(2):
        _run_to_input(seq, clock)
        seq.submit("2")
        clock.tick(2.0)
        seq.advance()
    seq.exit()

    def failing(batch):
        raise PersistenceError("save progress failed: OperationalError")

    with pytest.raises(PersistenceError):
        seq.save(failing)
    assert len(seq.records) == 2
    assert seq.needs_decision

    saved = []
    assert seq.save(saved.extend) == 2
    assert len(saved) == 2
    assert seq.records == []
    assert seq.phase == Phase.CLOSED


def test_save_requires_pending_decision(clock):
    seq = _make(clock)
    with pytest.raises(InvalidTransition):
        seq.save(lambda batch: None)


@pytest.mark.parametrize("interval", [0.4, 5.5])
def test_flash_interval_bounds(clock, interval):
    with pytest.raises(ValidationError):
        _make(clock, interval=interval)


def test_empty_exercise_rejected(clock):
    with pytest.raises(ValidationError):
        RevealSequencer(ExerciseGroup(level=Level.BASIC, group="G"), 1, 1.0, clock=clock)


@pytest.mark.parametrize("response", ["1" * 5000, "١٣", "1_3", "13\n5"])
def test_non_ascii_or_oversized_integers_are_incorrect(response):
    assert is_correct_response(response, 13) is False
