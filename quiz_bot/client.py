import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from quiz_core import ExplanationRequest, QuizConfiguration, QuizError
from quiz_bot.config import BACKEND_TIMEOUT, BACKEND_URL

logger = logging.getLogger(__name__)


class BackendError(QuizError):
    """The quiz API could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BackendClient:
    """Thin requests wrapper around the quiz API."""

    def __init__(self, base_url: str = BACKEND_URL, timeout: float = BACKEND_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        api_url = f"{self.base_url}{path}"
        logger.info(f"Calling API: {api_url}")

        try:
            response = self.session.post(api_url, json=payload, timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error: {e}")
            raise BackendError(f"Cannot connect to backend server at {self.base_url}") from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout error: {e}")
            raise BackendError("Request timeout! The backend took too long to respond.") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {e}")
            raise BackendError(f"Error connecting to backend: {str(e)[:200]}") from e

        logger.info(f"API Response Status: {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code != 200:
            logger.error(f"API Error: {response.text[:200]}")
            message = body.get("message") if isinstance(body, dict) else None
            raise BackendError(
                message or f"API returned status {response.status_code}",
                status_code=response.status_code,
            )
        if not isinstance(body, dict):
            raise BackendError("Backend returned an unreadable response", status_code=response.status_code)
        return body

    def generate_quiz(self, config: QuizConfiguration) -> Dict[str, Any]:
        quiz = self._post("/api/quiz/generate", config.to_payload())
        logger.info(f"Quiz generated successfully with {len(quiz.get('questions', []))} questions")
        return quiz

    def explain(self, request: ExplanationRequest) -> str:
        return self._post("/api/quiz/explain", request.to_payload())["explanation"]

    # requests blocks, so the bot's event loop calls these instead
    async def agenerate_quiz(self, config: QuizConfiguration) -> Dict[str, Any]:
        return await asyncio.to_thread(self.generate_quiz, config)

    async def aexplain(self, request: ExplanationRequest) -> str:
        return await asyncio.to_thread(self.explain, request)
