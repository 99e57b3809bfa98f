from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class QuizConfiguration:
    """A validated, normalised quiz configuration."""

    topic: str
    difficulty: str
    question_type: str
    number_of_questions: int
    total_time_seconds: int

    def to_payload(self) -> Dict[str, Any]:
        """Request body for ``POST /api/quiz/generate``."""
        return {
            "topic": self.topic,
            "difficulty": self.difficulty,
            "questionType": self.question_type,
            "numberOfQuestions": self.number_of_questions,
            "totalTime": self.total_time_seconds,
        }


@dataclass(frozen=True)
class ExplanationRequest:
    question: str
    correct_answer: str
    user_answer: str

    def to_payload(self) -> Dict[str, str]:
        return {
            "question": self.question,
            "correctAnswer": self.correct_answer,
            "userAnswer": self.user_answer,
        }
