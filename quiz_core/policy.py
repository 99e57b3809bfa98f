from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def label(self) -> str:
        return {
            Difficulty.EASY: "Easy",
            Difficulty.MEDIUM: "Medium",
            Difficulty.HARD: "Hard",
        }[self]


class QuestionType(str, Enum):
    MCQ = "mcq"
    TRUE_FALSE = "true-false"

    @property
    def label(self) -> str:
        return {
            QuestionType.MCQ: "Multiple Choice",
            QuestionType.TRUE_FALSE: "True / False",
        }[self]


DIFFICULTIES: Tuple[str, ...] = tuple(d.value for d in Difficulty)
QUESTION_TYPES: Tuple[str, ...] = tuple(t.value for t in QuestionType)

# Seconds per question, keyed by (difficulty, question type)
DEFAULT_TIME_TABLE: Mapping[Tuple[str, str], int] = MappingProxyType({
    ("easy", "mcq"): 30,
    ("easy", "true-false"): 20,
    ("medium", "mcq"): 45,
    ("medium", "true-false"): 30,
    ("hard", "mcq"): 60,
    ("hard", "true-false"): 45,
})


@dataclass(frozen=True)
class QuizPolicy:
    """Bounds and timing constants shared by the server and the client form."""

    min_questions: int = 1
    max_questions: int = 20
    default_questions: int = 10
    max_total_seconds: int = 1800
    min_topic_length: int = 2
    fallback_seconds_per_question: int = 45
    time_table: Mapping[Tuple[str, str], int] = field(default_factory=lambda: DEFAULT_TIME_TABLE)

    def seconds_per_question(self, difficulty: str, question_type: str) -> int:
        if difficulty not in DIFFICULTIES:
            return self.fallback_seconds_per_question
        # Anything other than mcq prices like true-false
        column = "mcq" if question_type == "mcq" else "true-false"
        return self.time_table.get((difficulty, column), self.fallback_seconds_per_question)


DEFAULT_POLICY = QuizPolicy()


def _value(member) -> str:
    return member.value if isinstance(member, Enum) else member


def suggested_minimum_seconds(
    difficulty: str,
    question_type: str,
    number_of_questions: int,
    policy: QuizPolicy = DEFAULT_POLICY,
) -> int:
    """Minimum (and suggested) total quiz time for a configuration."""
    per_question = policy.seconds_per_question(_value(difficulty), _value(question_type))
    return per_question * int(number_of_questions)


def maximum_seconds(policy: QuizPolicy = DEFAULT_POLICY) -> int:
    return policy.max_total_seconds
