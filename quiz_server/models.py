from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Dict, List, Optional


class QuizRequest(BaseModel):
    """Body of POST /api/quiz/generate.

    Fields are deliberately loose: the shared quiz_core validator decides
    what is acceptable so the API and the bot reject the same inputs with
    the same messages.
    Numeric fields stay untyped so pydantic does not turn booleans into ints.
    """

    model_config = ConfigDict(populate_by_name=True)

    topic: Optional[str] = None
    difficulty: Optional[str] = None
    question_type: Optional[str] = Field(None, alias="questionType")
    number_of_questions: Any = Field(None, alias="numberOfQuestions")
    total_time: Any = Field(None, alias="totalTime")


class ExplanationPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: Optional[str] = None
    correct_answer: Optional[str] = Field(None, alias="correctAnswer")
    user_answer: Optional[str] = Field(None, alias="userAnswer")


class QuizQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    options: Dict[str, str]
    correct_answer: str = Field(..., alias="correctAnswer", pattern="^[A-D]$")
    explanation: str = ""

    @model_validator(mode="after")
    def check_answer_is_an_option(self):
        if self.correct_answer not in self.options:
            raise ValueError(f"correct answer {self.correct_answer} is not one of the options")
        return self


class QuizResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic: str
    difficulty: str
    question_type: str = Field(..., alias="questionType")
    number_of_questions: int = Field(..., alias="numberOfQuestions")
    total_time: int = Field(..., alias="totalTime")
    questions: List[QuizQuestion]


class ExplanationResponse(BaseModel):
    success: bool = True
    explanation: str


class ErrorResponse(BaseModel):
    error: bool = True
    message: str
