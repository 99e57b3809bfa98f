import json
import logging
from typing import Protocol

from groq import AsyncGroq, GroqError
from pydantic import ValidationError

from quiz_core import CollaboratorError
from quiz_server.config import GROQ_API_KEY, GROQ_MAX_TOKENS, GROQ_MODEL, GROQ_TEMPERATURE
from quiz_server.models import QuizQuestion, QuizResponse

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a quiz generator. Always respond with valid JSON only."
EXPLAIN_SYSTEM_PROMPT = "You are a patient tutor who explains quiz answers clearly and briefly."

DIFFICULTY_HINTS = {
    "easy": "suitable for beginners, testing basic facts and definitions",
    "medium": "requiring solid understanding and some reasoning",
    "hard": "challenging, testing deep understanding, edge cases and analysis",
}


class QuizGenerator(Protocol):
    """The external service that writes quiz questions and explanations."""

    async def generate_quiz(
        self,
        topic: str,
        difficulty: str,
        question_type: str,
        number_of_questions: int,
        total_time: int,
    ) -> QuizResponse:
        ...

    async def generate_explanation(self, question: str, correct_answer: str, user_answer: str) -> str:
        ...


def strip_code_fence(text: str) -> str:
    """Remove a markdown code block wrapper if the model added one."""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()
    return text


def build_quiz_prompt(topic: str, difficulty: str, question_type: str, number_of_questions: int) -> str:
    level = DIFFICULTY_HINTS.get(difficulty, DIFFICULTY_HINTS["medium"])
    if question_type == "true-false":
        kind = "true/false"
        example_options = """{
        "A": "True",
        "B": "False"
      }"""
        rules = """- Each question must be a statement with exactly 2 options: A is "True", B is "False"
- correctAnswer must be A or B"""
    else:
        kind = "multiple choice"
        example_options = """{
        "A": "Option A text",
        "B": "Option B text",
        "C": "Option C text",
        "D": "Option D text"
      }"""
        rules = """- Each question must have exactly 4 options (A, B, C, D)
- correctAnswer must be one of: A, B, C, or D"""

    return f"""Generate {number_of_questions} {kind} questions about {topic}.
Difficulty: {difficulty} ({level}).

Return ONLY a valid JSON object with this exact structure:
{{
  "questions": [
    {{
      "question": "Question text here?",
      "options": {example_options},
      "correctAnswer": "A",
      "explanation": "One or two sentences on why the answer is correct"
    }}
  ]
}}

Rules:
{rules}
- Ensure only one correct answer per question
- Return ONLY the JSON, no additional text"""


def build_explanation_prompt(question: str, correct_answer: str, user_answer: str) -> str:
    return f"""A student answered a quiz question incorrectly.

Question: {question}
Correct answer: {correct_answer}
Student's answer: {user_answer}

In at most 4 sentences, explain why the correct answer is right and why the
student's answer is wrong. Reply with plain text only."""


class GroqService:
    def __init__(self, api_key=None, model: str = GROQ_MODEL, client=None):
        if client is None:
            api_key = api_key or GROQ_API_KEY
            if not api_key:
                raise CollaboratorError("GROQ_API_KEY is not configured on the server")
            client = AsyncGroq(api_key=api_key)
        self.client = client
        self.model = model

    async def _complete(self, system: str, prompt: str) -> str:
        chat_completion = await self.client.chat.completions.create(
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            model=self.model,
            temperature=GROQ_TEMPERATURE,
            max_tokens=GROQ_MAX_TOKENS,
        )
        return (chat_completion.choices[0].message.content or "").strip()

    async def generate_quiz(
        self,
        topic: str,
        difficulty: str,
        question_type: str,
        number_of_questions: int,
        total_time: int,
    ) -> QuizResponse:
        prompt = build_quiz_prompt(topic, difficulty, question_type, number_of_questions)

        try:
            response_text = strip_code_fence(await self._complete(SYSTEM_PROMPT, prompt))
            quiz_data = json.loads(response_text)
            questions = [QuizQuestion.model_validate(q) for q in quiz_data["questions"]]
        except GroqError as e:
            logger.error(f"Groq request failed: {e}")
            raise CollaboratorError(f"Error generating quiz: {str(e)}") from e
        except json.JSONDecodeError as e:
            raise CollaboratorError(f"Invalid JSON response from AI: {str(e)}") from e
        except (KeyError, TypeError, ValidationError) as e:
            raise CollaboratorError(f"Malformed quiz returned by AI: {str(e)}") from e

        if not questions:
            raise CollaboratorError("The AI did not return any questions. Please try again.")

        questions = questions[:number_of_questions]
        logger.info(f"Generated {len(questions)} {question_type} questions about {topic}")

        return QuizResponse(
            topic=topic,
            difficulty=difficulty,
            question_type=question_type,
            number_of_questions=len(questions),
            total_time=total_time,
            questions=questions,
        )

    async def generate_explanation(self, question: str, correct_answer: str, user_answer: str) -> str:
        prompt = build_explanation_prompt(question, correct_answer, user_answer)
        try:
            explanation = await self._complete(EXPLAIN_SYSTEM_PROMPT, prompt)
        except GroqError as e:
            logger.error(f"Groq request failed: {e}")
            raise CollaboratorError(f"Error generating explanation: {str(e)}") from e

        if not explanation:
            raise CollaboratorError("The AI returned an empty explanation. Please try again.")
        return explanation
