"""Per-user state for taking a generated quiz."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from quiz_core import ExplanationRequest
from quiz_core.progress import Progress, progress_for


@dataclass
class AnswerRecord:
    question_index: int
    selected: str
    correct_answer: str
    is_correct: bool


@dataclass
class QuizSession:
    topic: str
    questions: List[Dict[str, Any]]
    total_time_seconds: int
    current_question: int = 0
    score: int = 0
    answers: List[AnswerRecord] = field(default_factory=list)
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def from_quiz(cls, quiz: Dict[str, Any], started_at: Optional[float] = None) -> "QuizSession":
        session = cls(
            topic=quiz["topic"],
            questions=list(quiz["questions"]),
            total_time_seconds=int(quiz["totalTime"]),
        )
        if started_at is not None:
            session.started_at = started_at
        return session

    @property
    def total(self) -> int:
        return len(self.questions)

    def remaining_seconds(self, now: Optional[float] = None) -> int:
        now = time.monotonic() if now is None else now
        return max(0, int(self.total_time_seconds - (now - self.started_at)))

    def expired(self, now: Optional[float] = None) -> bool:
        return self.remaining_seconds(now) <= 0

    def finished(self, now: Optional[float] = None) -> bool:
        return self.current_question >= self.total or self.expired(now)

    def current(self) -> Dict[str, Any]:
        return self.questions[self.current_question]

    def progress(self) -> Progress:
        return progress_for(self.current_question + 1, self.total)

    def percentage(self) -> float:
        return (self.score / self.total) * 100 if self.total else 0.0

    def record_answer(self, selected: str) -> AnswerRecord:
        if self.current_question >= self.total:
            raise RuntimeError("No active question to answer.")

        question = self.current()
        correct_answer = question["correctAnswer"]
        record = AnswerRecord(
            question_index=self.current_question,
            selected=selected,
            correct_answer=correct_answer,
            is_correct=selected == correct_answer,
        )
        if record.is_correct:
            self.score += 1
        self.answers.append(record)
        self.current_question += 1
        return record

    def explanation_request(self, record: AnswerRecord) -> ExplanationRequest:
        question = self.questions[record.question_index]
        options = question["options"]
        return ExplanationRequest(
            question=question["question"],
            correct_answer=f"{record.correct_answer}: {options.get(record.correct_answer, '')}",
            user_answer=f"{record.selected}: {options.get(record.selected, '')}",
        )
