"""Timing policy, validation, and form logic shared by the API and the bot."""

from quiz_core.errors import (
    CollaboratorError,
    ConfigurationError,
    InvalidDifficultyError,
    InvalidQuestionTypeError,
    InvalidTotalTimeError,
    MissingFieldError,
    QuestionCountOutOfRangeError,
    QuizError,
    TopicTooShortError,
    TotalTimeTooHighError,
    TotalTimeTooLowError,
)
from quiz_core.models import ExplanationRequest, QuizConfiguration
from quiz_core.policy import (
    DEFAULT_POLICY,
    Difficulty,
    QuestionType,
    QuizPolicy,
    maximum_seconds,
    suggested_minimum_seconds,
)
from quiz_core.validation import validate_configuration, validate_explanation_request

__all__ = [
    "CollaboratorError",
    "ConfigurationError",
    "DEFAULT_POLICY",
    "Difficulty",
    "ExplanationRequest",
    "InvalidDifficultyError",
    "InvalidQuestionTypeError",
    "InvalidTotalTimeError",
    "MissingFieldError",
    "QuestionCountOutOfRangeError",
    "QuestionType",
    "QuizConfiguration",
    "QuizError",
    "QuizPolicy",
    "TopicTooShortError",
    "TotalTimeTooHighError",
    "TotalTimeTooLowError",
    "maximum_seconds",
    "suggested_minimum_seconds",
    "validate_configuration",
    "validate_explanation_request",
]
