import pytest

from csv_importer import (
    DEFAULT_GROUP_LABEL,
    HEADER_ROW,
    TOTAL_COLUMNS,
    exercises_to_csv,
    parse_csv_to_exercises,
)
from errors import ParseError, ValidationError
from exercises import ExerciseGroup, Level, Question

SAMPLE = "\n".join(
    [
        "Group,Question ID,Num1,Num2,Num3,Num4,Num5,Num6,Num7,Answer",
        "Group,Addition",
        ",1,4,7,2,,,,,13",
        ",2,10,-3,,,,,,7",
        "Group,Mixed",
        ",1,1.5,2.5,,,,,,4",
    ]
)


def _shape(groups):
    return [(g.level, g.group, [q.model_dump() for q in g.questions]) for g in groups]


def test_parses_groups_and_questions():
    groups = parse_csv_to_exercises(SAMPLE, "Basic")
    assert [g.group for g in groups] == ["Addition", "Mixed"]
    assert all(g.level is Level.BASIC for g in groups)

    add = groups[0]
    assert [q.id for q in add.questions] == [1, 2]
    assert add.questions[0].numbers == [4, 7, 2]
    assert add.questions[0].correct_answer == 13
    assert add.questions[1].numbers == [10, -3]
    assert groups[1].questions[0].numbers == [1.5, 2.5]


def test_column_extraction_skips_blank_and_non_numeric_cells():
    text = "Group,G\nx,y,,5,abc,6,  ,7,zz,18\n"
    (g,) = parse_csv_to_exercises(text, Level.JUNIOR)
    assert g.questions[0].numbers == [5, 6, 7]
    assert g.questions[0].correct_answer == 18


def test_first_two_columns_are_never_stimuli():
    text = "Group,G\n9,9,1,,,,,,,1\n"
    (g,) = parse_csv_to_exercises(text, "Basic")
    assert g.questions[0].numbers == [1]


def test_rows_without_numbers_or_answer_are_dropped():
    text = "\n".join(
        [
            "Group,G",
            ",1,,,,,,,,5",  # no stimuli
            ",2,3,4,,,,,,",  # no answer
            ",3,3,4,,,,,,n/a",  # answer not numeric
            ",4,3,4,,,,,,7",
        ]
    )
    (g,) = parse_csv_to_exercises(text, "Basic")
    assert len(g.questions) == 1
    assert g.questions[0].id == 1
    assert g.questions[0].numbers == [3, 4]


def test_header_with_no_questions_produces_no_group():
    text = "\n".join(["Group,Empty", "Group,Full", ",1,1,2,,,,,,3", "Group,Trailing"])
    groups = parse_csv_to_exercises(text, "Basic")
    assert [g.group for g in groups] == ["Full"]


def test_each_header_flushes_exactly_the_previous_group():
    text = "\n".join(["Group,A", ",1,1,,,,,,,1", "group,B", ",1,2,,,,,,,2", ",2,3,,,,,,,3"])
    groups = parse_csv_to_exercises(text, "Basic")
    assert [(g.group, len(g.questions)) for g in groups] == [("A", 1), ("B", 2)]


def test_no_headers_gives_single_default_group():
    text = "\n".join([",1,1,2,,,,,,3", ",2,4,5,,,,,,9"])
    (g,) = parse_csv_to_exercises(text, "Junior")
    assert g.group == DEFAULT_GROUP_LABEL
    assert g.level is Level.JUNIOR
    assert [q.id for q in g.questions] == [1, 2]


def test_questions_before_first_header_are_kept_in_default_group():
    text = "\n".join([",1,1,2,,,,,,3", "Group,Named", ",1,4,5,,,,,,9"])
    groups = parse_csv_to_exercises(text, "Basic")
    assert [g.group for g in groups] == [DEFAULT_GROUP_LABEL, "Named"]


def test_blank_group_name_gets_generated_label():
    text = "\n".join(["Group,A", ",1,1,,,,,,,1", "Group 2,", ",1,2,,,,,,,2"])
    groups = parse_csv_to_exercises(text, "Basic")
    assert groups[1].group == "Group 2"


def test_first_row_group_header_is_not_mistaken_for_column_header():
    text = "\n".join(["Group,First", ",1,1,2,,,,,,3"])
    (g,) = parse_csv_to_exercises(text, "Basic")
    assert g.group == "First"


def test_empty_input_gives_no_groups():
    assert parse_csv_to_exercises("", "Basic") == []
    assert parse_csv_to_exercises("\n,,,\n", "Basic") == []


def test_malformed_csv_raises_parse_error():
    with pytest.raises(ParseError) as exc:
        parse_csv_to_exercises('Group,A\n,1,"2"x,3\n', "Basic")
    assert exc.value.message.startswith("CSV parsing errors")


def test_unknown_level_is_a_validation_error():
    with pytest.raises(ValidationError):
        parse_csv_to_exercises(SAMPLE, "Senior")


def test_serializer_layout():
    text = exercises_to_csv(parse_csv_to_exercises(SAMPLE, "Basic"))
    lines = text.splitlines()
    assert lines[0] == ",".join(HEADER_ROW)
    assert lines[1].split(",")[:2] == ["Group", "Addition"]
    assert all(len(line.split(",")) == TOTAL_COLUMNS for line in lines)
    assert lines[2].split(",") == ["", "1", "4", "7", "2", "", "", "", "", "13"]


def test_round_trip_preserves_groups():
    text = "\n".join(
        [
            "Group,Group One",  # name containing "group"
            ",1,4,7,2,,,,,13",
            ",2,1,2,3,4,5,6,7,28",
            'Group,"Tens, and units"',
            ",1,0.25,0.5,,,,,,0.75",
        ]
    )
    first = parse_csv_to_exercises(text, "Junior")
    again = parse_csv_to_exercises(exercises_to_csv(first), "Junior")
    assert _shape(again) == _shape(first)


def test_serializer_orders_questions_by_id():
    g = ExerciseGroup(
        level=Level.BASIC,
        group="G",
        questions=[
            Question(id=2, numbers=[2], correct_answer=2),
            Question(id=1, numbers=[1], correct_answer=1),
        ],
    )
    lines = exercises_to_csv([g]).splitlines()
    assert [line.split(",")[1] for line in lines[2:]] == ["1", "2"]


def test_serializer_rejects_too_many_numbers():
    g = ExerciseGroup(
        level=Level.BASIC,
        group="G",
        questions=[Question(id=1, numbers=list(range(8)), correct_answer=28)],
    )
    with pytest.raises(ValidationError):
        exercises_to_csv([g])


def test_number_cells_must_be_plain_ascii_decimals():
    long_int = "9" * 5000
    text = f"Group,G\n,1,1_000,١٢,5,1e2,inf,{long_int},.5,6\n"
    (g,) = parse_csv_to_exercises(text, "Basic")
    assert g.questions[0].numbers == [5, 100, 0.5]
    assert g.questions[0].correct_answer == 6
