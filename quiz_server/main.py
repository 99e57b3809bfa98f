import logging
from typing import Callable, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quiz_core import CollaboratorError, ConfigurationError, validate_configuration, validate_explanation_request
from quiz_server.config import CORS_ALLOW_ORIGINS, HOST, LOG_LEVEL, PORT
from quiz_server.models import ErrorResponse, ExplanationPayload, ExplanationResponse, QuizRequest
from quiz_server.services import GroqService, QuizGenerator

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=LOG_LEVEL
)
logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": True, "message": message})


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid quiz settings or request body"},
    502: {"model": ErrorResponse, "description": "The generation service failed"},
    500: {"model": ErrorResponse, "description": "Unexpected server error"},
}


def _get_quiz_service_dependency(quiz_service: Optional[QuizGenerator]):
    # Handlers call the getter after validation, so a bad request is a 400
    # even when no Groq key is configured
    services = {"quiz": quiz_service}

    def get_quiz_service() -> QuizGenerator:
        if services["quiz"] is None:
            services["quiz"] = GroqService()
        return services["quiz"]

    def dependency() -> Callable[[], QuizGenerator]:
        return get_quiz_service

    return dependency


def create_app(quiz_service: Optional[QuizGenerator] = None) -> FastAPI:
    """Create the API app, optionally wired to a specific quiz generator."""
    app = FastAPI(
        title="AI Quiz Builder API",
        description="Validate quiz settings and generate AI-powered quizzes",
        version="1.0.0"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    quiz_service_dep = _get_quiz_service_dependency(quiz_service)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.info(f"Rejected {request.url.path}: {exc.message}")
        return _error(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
        logger.info(f"Unparseable body for {request.url.path}: {detail}")
        return _error(400, f"Invalid request body: {detail}")

    @app.exception_handler(CollaboratorError)
    async def collaborator_error_handler(request: Request, exc: CollaboratorError):
        logger.error(f"Generation service failed for {request.url.path}: {exc.message}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error in {request.url.path}: {exc}", exc_info=exc)
        return _error(500, "Internal server error")

    @app.get("/")
    async def root():
        return {
            "message": "AI Quiz Builder API",
            "status": "running",
            "endpoints": {
                "generate_quiz": "/api/quiz/generate",
                "explain_answer": "/api/quiz/explain"
            }
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.post("/api/quiz/generate", responses=ERROR_RESPONSES)
    async def generate_quiz(
        request: QuizRequest,
        get_quiz_service: Callable[[], QuizGenerator] = Depends(quiz_service_dep),
    ):
        """
        Validate a quiz configuration and generate the quiz

        - **topic**: Subject for the quiz (at least 2 characters)
        - **difficulty**: easy, medium or hard
        - **questionType**: mcq or true-false
        - **numberOfQuestions**: 1-20
        - **totalTime**: seconds, between the suggested minimum and 1800
        """
        payload = request.model_dump(by_alias=True)
        logger.info(f"Quiz generation request: {payload}")

        config = validate_configuration(payload)

        quiz = await get_quiz_service().generate_quiz(
            topic=config.topic,
            difficulty=config.difficulty,
            question_type=config.question_type,
            number_of_questions=config.number_of_questions,
            total_time=config.total_time_seconds
        )
        return {
            "success": True,
            "message": "Quiz generated successfully",
            **quiz.model_dump(by_alias=True)
        }

    @app.post("/api/quiz/explain", response_model=ExplanationResponse, responses=ERROR_RESPONSES)
    async def explain_answer(
        request: ExplanationPayload,
        get_quiz_service: Callable[[], QuizGenerator] = Depends(quiz_service_dep),
    ):
        """Explain why a user's answer to a question was wrong"""
        explanation_request = validate_explanation_request(request.model_dump(by_alias=True))
        logger.info(f"Explanation request: {explanation_request}")

        explanation = await get_quiz_service().generate_explanation(
            explanation_request.question,
            explanation_request.correct_answer,
            explanation_request.user_answer
        )
        return ExplanationResponse(explanation=explanation)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
