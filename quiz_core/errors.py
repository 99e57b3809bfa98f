"""Error taxonomy shared by the API server and the bot."""

import math
from typing import Iterable, Optional


class QuizError(Exception):
    """Base class for every error raised by the quiz packages."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(QuizError, ValueError):
    """A quiz configuration or explanation request failed validation."""


class MissingFieldError(ConfigurationError):
    def __init__(self, fields: Iterable[str], message: Optional[str] = None):
        self.fields = tuple(fields)
        if message is None:
            message = f"Missing required fields: {', '.join(self.fields)}"
        super().__init__(message)


class TopicTooShortError(ConfigurationError):
    def __init__(self, min_length: int = 2):
        self.min_length = min_length
        super().__init__(f"Topic must be at least {min_length} characters long")


class InvalidDifficultyError(ConfigurationError):
    def __init__(self, allowed: Iterable[str]):
        self.allowed = tuple(allowed)
        super().__init__(f"Invalid difficulty. Must be one of: {', '.join(self.allowed)}")


class InvalidQuestionTypeError(ConfigurationError):
    def __init__(self, allowed: Iterable[str]):
        self.allowed = tuple(allowed)
        super().__init__(f"Invalid question type. Must be one of: {', '.join(self.allowed)}")


class QuestionCountOutOfRangeError(ConfigurationError):
    def __init__(self, minimum: int, maximum: int):
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"Number of questions must be between {minimum} and {maximum}")


class InvalidTotalTimeError(ConfigurationError):
    def __init__(self):
        super().__init__("Total time must be a number of seconds")


class TotalTimeTooLowError(ConfigurationError):
    def __init__(self, min_required: int):
        self.min_required = min_required
        minutes = math.ceil(min_required / 60)
        super().__init__(f"Total time must be at least {minutes} minutes for this configuration")


class TotalTimeTooHighError(ConfigurationError):
    def __init__(self, max_allowed: int):
        self.max_allowed = max_allowed
        minutes = max_allowed // 60
        super().__init__(f"Total time cannot exceed {minutes} minutes")


class CollaboratorError(QuizError):
    """The quiz generation or explanation service failed."""

    status_code = 502
