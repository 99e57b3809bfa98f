import pytest
from fastapi.testclient import TestClient

from quiz_server.main import create_app
from quiz_server.models import QuizQuestion, QuizResponse


class FakeQuizService:
    """Stands in for the Groq-backed generator."""

    def __init__(self, error=None):
        self.error = error
        self.quiz_calls = []
        self.explanation_calls = []

    async def generate_quiz(self, topic, difficulty, question_type, number_of_questions, total_time):
        self.quiz_calls.append((topic, difficulty, question_type, number_of_questions, total_time))
        if self.error:
            raise self.error
        questions = [
            QuizQuestion(
                question=f"{topic} question {i}?",
                options={"A": "True", "B": "False"},
                correct_answer="A",
            )
            for i in range(1, number_of_questions + 1)
        ]
        return QuizResponse(
            topic=topic,
            difficulty=difficulty,
            question_type=question_type,
            number_of_questions=number_of_questions,
            total_time=total_time,
            questions=questions,
        )

    async def generate_explanation(self, question, correct_answer, user_answer):
        self.explanation_calls.append((question, correct_answer, user_answer))
        if self.error:
            raise self.error
        return f"{correct_answer} is right because of reasons."


@pytest.fixture
def quiz_service():
    return FakeQuizService()


@pytest.fixture
def client(quiz_service):
    return TestClient(create_app(quiz_service))
