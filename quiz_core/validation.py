"""Validation of quiz configurations and explanation requests.

The same checks run in the bot before a request is sent and in the API
server before the generation service is called. Checks run in a fixed order
and the first failure is raised, so both sides report the same message for
the same input.
"""

import math
import re
from enum import Enum
from typing import Any, Mapping, Optional, Union

from quiz_core.errors import (
    InvalidDifficultyError,
    InvalidQuestionTypeError,
    InvalidTotalTimeError,
    MissingFieldError,
    QuestionCountOutOfRangeError,
    TopicTooShortError,
    TotalTimeTooHighError,
    TotalTimeTooLowError,
)
from quiz_core.models import ExplanationRequest, QuizConfiguration
from quiz_core.policy import (
    DEFAULT_POLICY,
    DIFFICULTIES,
    QUESTION_TYPES,
    QuizPolicy,
    maximum_seconds,
    suggested_minimum_seconds,
)

TOPIC_REQUIRED_MESSAGE = "Please enter a topic for your quiz"
EXPLANATION_FIELDS = ("question", "correctAnswer", "userAnswer")
LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def coerce_int(value: Any) -> Optional[int]:
    """Read an integral value from an untyped source, or return None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def truncate_int(value: Any) -> Optional[int]:
    """Read the leading integer of a value the way parseInt does, or return None.

    Floats are truncated toward zero and strings are read up to the first
    non-digit, so ``"200s"`` and ``200.9`` both give 200.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def _as_mapping(raw: Union[Mapping[str, Any], QuizConfiguration]) -> Mapping[str, Any]:
    if isinstance(raw, QuizConfiguration):
        return raw.to_payload()
    return raw


def _trimmed(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def validate_configuration(
    raw: Union[Mapping[str, Any], QuizConfiguration],
    policy: QuizPolicy = DEFAULT_POLICY,
) -> QuizConfiguration:
    """Validate a wire-shaped configuration and return it normalised.

    Raises the ConfigurationError subclass of the first failing check.
    """
    data = _as_mapping(raw)

    topic = _trimmed(data.get("topic"))
    if not topic:
        raise MissingFieldError(["topic"], message=TOPIC_REQUIRED_MESSAGE)
    if len(topic) < policy.min_topic_length:
        raise TopicTooShortError(policy.min_topic_length)

    difficulty = _plain(data.get("difficulty"))
    if difficulty not in DIFFICULTIES:
        raise InvalidDifficultyError(DIFFICULTIES)

    question_type = _plain(data.get("questionType"))
    if question_type not in QUESTION_TYPES:
        raise InvalidQuestionTypeError(QUESTION_TYPES)

    count = coerce_int(data.get("numberOfQuestions"))
    if count is None or not policy.min_questions <= count <= policy.max_questions:
        raise QuestionCountOutOfRangeError(policy.min_questions, policy.max_questions)

    minimum = suggested_minimum_seconds(difficulty, question_type, count, policy)
    raw_total = data.get("totalTime")
    # 0, "" and null all mean "use the suggested time"
    if not raw_total:
        total = minimum
    else:
        total = truncate_int(raw_total)
        if total is None:
            raise InvalidTotalTimeError()

    if total < minimum:
        raise TotalTimeTooLowError(minimum)
    if total > maximum_seconds(policy):
        raise TotalTimeTooHighError(maximum_seconds(policy))

    return QuizConfiguration(
        topic=topic,
        difficulty=difficulty,
        question_type=question_type,
        number_of_questions=count,
        total_time_seconds=total,
    )


def validate_explanation_request(
    raw: Union[Mapping[str, Any], ExplanationRequest],
) -> ExplanationRequest:
    if isinstance(raw, ExplanationRequest):
        raw = raw.to_payload()
    values = {name: _trimmed(raw.get(name)) for name in EXPLANATION_FIELDS}
    if not all(values.values()):
        raise MissingFieldError(EXPLANATION_FIELDS)
    return ExplanationRequest(
        question=values["question"],
        correct_answer=values["correctAnswer"],
        user_answer=values["userAnswer"],
    )
