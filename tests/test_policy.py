import pytest

from quiz_core.policy import (
    DEFAULT_POLICY,
    DIFFICULTIES,
    QUESTION_TYPES,
    Difficulty,
    QuestionType,
    QuizPolicy,
    maximum_seconds,
    suggested_minimum_seconds,
)


@pytest.mark.parametrize(
    "difficulty,question_type,per_question",
    [
        ("easy", "mcq", 30),
        ("easy", "true-false", 20),
        ("medium", "mcq", 45),
        ("medium", "true-false", 30),
        ("hard", "mcq", 60),
        ("hard", "true-false", 45),
    ],
)
def test_time_table(difficulty, question_type, per_question):
    assert suggested_minimum_seconds(difficulty, question_type, 1) == per_question
    assert suggested_minimum_seconds(difficulty, question_type, 7) == per_question * 7


def test_medium_mcq_ten_questions():
    assert suggested_minimum_seconds("medium", "mcq", 10) == 450


def test_unknown_difficulty_falls_back_to_45_seconds():
    assert suggested_minimum_seconds("impossible", "mcq", 4) == 180
    assert suggested_minimum_seconds(None, "true-false", 2) == 90


def test_unknown_question_type_uses_true_false_column():
    assert suggested_minimum_seconds("easy", "essay", 3) == 60


def test_accepts_enum_members():
    assert suggested_minimum_seconds(Difficulty.HARD, QuestionType.MCQ, 2) == 120


def test_monotonic_in_question_count():
    for difficulty in DIFFICULTIES:
        for question_type in QUESTION_TYPES:
            values = [suggested_minimum_seconds(difficulty, question_type, n) for n in range(1, 21)]
            assert values == sorted(values)


def test_maximum_is_thirty_minutes():
    assert maximum_seconds() == 1800
    assert maximum_seconds(DEFAULT_POLICY) == 1800


def test_alternate_policy_can_replace_the_table():
    policy = QuizPolicy(
        time_table={("easy", "mcq"): 5, ("easy", "true-false"): 3},
        fallback_seconds_per_question=7,
        max_total_seconds=60,
    )
    assert suggested_minimum_seconds("easy", "mcq", 4, policy) == 20
    assert suggested_minimum_seconds("easy", "true-false", 4, policy) == 12
    # known difficulty missing from the substitute table
    assert suggested_minimum_seconds("hard", "mcq", 2, policy) == 14
    assert maximum_seconds(policy) == 60
