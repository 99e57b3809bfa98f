"""Quiz configuration form as a reducer over a draft configuration.

Every edit is an action passed to ``reduce``. Only the transitions that touch
a timing input (difficulty, question type, question count) consult the timing
policy, and they all go through ``_retime``.
"""

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple, TypeVar

from quiz_core.errors import CollaboratorError
from quiz_core.models import QuizConfiguration
from quiz_core.policy import (
    DEFAULT_POLICY,
    Difficulty,
    QuestionType,
    QuizPolicy,
    maximum_seconds,
    suggested_minimum_seconds,
)
from quiz_core.validation import validate_configuration

POPULAR_TOPICS: Tuple[str, ...] = (
    "JavaScript",
    "Python",
    "React",
    "Data Structures",
    "Algorithms",
    "Machine Learning",
    "World History",
    "Ancient Rome",
    "World War II",
    "Geography",
    "Astronomy",
    "Biology",
    "Chemistry",
    "Physics",
    "Mathematics",
    "Literature",
    "Music Theory",
    "Art History",
    "Economics",
    "Philosophy",
    "Computer Networks",
    "Databases",
    "Cloud Computing",
    "General Knowledge",
)

MAX_VISIBLE_SUGGESTIONS = 8
TOPIC_BLUR_DELAY_SECONDS = 0.15
DEFAULT_TOTAL_TIME_SECONDS = 600
TIME_STEP_SECONDS = 30
GENERIC_FAILURE_MESSAGE = "Failed to generate quiz. Please try again."

T = TypeVar("T")


class TimeClampPolicy(str, Enum):
    """What happens to the total time when a timing input changes.

    PRESERVE_RAISE_ONLY keeps a manual increase and only lifts the time up to
    the new minimum. ALWAYS_RESET snaps the time to the new suggestion.
    """

    PRESERVE_RAISE_ONLY = "preserve-raise-only"
    ALWAYS_RESET = "always-reset"


class FormStatus(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    CLOSED = "closed"


@dataclass(frozen=True)
class DraftConfiguration:
    topic: str = ""
    difficulty: str = Difficulty.MEDIUM.value
    question_type: str = QuestionType.MCQ.value
    number_of_questions: int = DEFAULT_POLICY.default_questions
    total_time_seconds: int = DEFAULT_TOTAL_TIME_SECONDS

    def to_payload(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "difficulty": self.difficulty,
            "questionType": self.question_type,
            "numberOfQuestions": self.number_of_questions,
            "totalTime": self.total_time_seconds,
        }


@dataclass(frozen=True)
class FormState:
    draft: DraftConfiguration = DraftConfiguration()
    suggestions_visible: bool = False
    filtered_topics: Tuple[str, ...] = POPULAR_TOPICS
    status: FormStatus = FormStatus.EDITING
    last_error: Optional[str] = None


# Actions

@dataclass(frozen=True)
class EditTopic:
    text: str


@dataclass(frozen=True)
class SelectSuggestedTopic:
    topic: str


@dataclass(frozen=True)
class BlurTopicInput:
    focus_in_suggestions: bool = False


@dataclass(frozen=True)
class SetDifficulty:
    difficulty: str


@dataclass(frozen=True)
class SetQuestionType:
    question_type: str


@dataclass(frozen=True)
class SetNumberOfQuestions:
    count: int


@dataclass(frozen=True)
class SetTotalTime:
    seconds: int


@dataclass(frozen=True)
class UseSuggestedTime:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class SubmitStarted:
    pass


@dataclass(frozen=True)
class SubmitFailed:
    message: str


@dataclass(frozen=True)
class SubmitSucceeded:
    pass


def suggested_time(draft: DraftConfiguration, policy: QuizPolicy = DEFAULT_POLICY) -> int:
    return suggested_minimum_seconds(
        draft.difficulty, draft.question_type, draft.number_of_questions, policy
    )


def filter_topics(text: str, topics: Sequence[str] = POPULAR_TOPICS) -> Tuple[str, ...]:
    needle = text.lower()
    return tuple(topic for topic in topics if needle in topic.lower())


def _retime(
    draft: DraftConfiguration,
    policy: QuizPolicy,
    clamp: TimeClampPolicy,
) -> DraftConfiguration:
    suggested = suggested_time(draft, policy)
    if clamp is TimeClampPolicy.ALWAYS_RESET:
        total = suggested
    else:
        total = max(suggested, draft.total_time_seconds)
    return replace(draft, total_time_seconds=total)


def initial_state(
    policy: QuizPolicy = DEFAULT_POLICY,
    clamp: TimeClampPolicy = TimeClampPolicy.PRESERVE_RAISE_ONLY,
    topics: Sequence[str] = POPULAR_TOPICS,
) -> FormState:
    draft = DraftConfiguration(number_of_questions=policy.default_questions)
    return FormState(draft=_retime(draft, policy, clamp), filtered_topics=tuple(topics))


def reduce(
    state: FormState,
    action,
    policy: QuizPolicy = DEFAULT_POLICY,
    clamp: TimeClampPolicy = TimeClampPolicy.PRESERVE_RAISE_ONLY,
    topics: Sequence[str] = POPULAR_TOPICS,
) -> FormState:
    """Return the form state that results from applying ``action``."""
    draft = state.draft

    if isinstance(action, EditTopic):
        draft = replace(draft, topic=action.text)
        if action.text:
            return replace(
                state,
                draft=draft,
                filtered_topics=filter_topics(action.text, topics),
                suggestions_visible=True,
            )
        return replace(state, draft=draft, filtered_topics=tuple(topics), suggestions_visible=False)

    if isinstance(action, SelectSuggestedTopic):
        return replace(state, draft=replace(draft, topic=action.topic), suggestions_visible=False)

    if isinstance(action, BlurTopicInput):
        if action.focus_in_suggestions:
            return state
        return replace(state, suggestions_visible=False)

    if isinstance(action, SetDifficulty):
        draft = replace(draft, difficulty=action.difficulty)
        return replace(state, draft=_retime(draft, policy, clamp))

    if isinstance(action, SetQuestionType):
        draft = replace(draft, question_type=action.question_type)
        return replace(state, draft=_retime(draft, policy, clamp))

    if isinstance(action, SetNumberOfQuestions):
        draft = replace(draft, number_of_questions=action.count)
        return replace(state, draft=_retime(draft, policy, clamp))

    if isinstance(action, SetTotalTime):
        return replace(state, draft=replace(draft, total_time_seconds=action.seconds))

    if isinstance(action, UseSuggestedTime):
        return replace(state, draft=replace(draft, total_time_seconds=suggested_time(draft, policy)))

    if isinstance(action, Reset):
        draft = DraftConfiguration(number_of_questions=policy.default_questions)
        return FormState(
            draft=replace(draft, total_time_seconds=suggested_time(draft, policy)),
            filtered_topics=tuple(topics),
        )

    if isinstance(action, SubmitStarted):
        return replace(state, status=FormStatus.SUBMITTING, last_error=None)

    if isinstance(action, SubmitFailed):
        return replace(state, status=FormStatus.EDITING, last_error=action.message)

    if isinstance(action, SubmitSucceeded):
        return replace(state, status=FormStatus.CLOSED, last_error=None, suggestions_visible=False)

    raise TypeError(f"Unknown form action: {action!r}")


def format_duration(seconds: int) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s" if secs > 0 else f"{minutes}m"


class ConfigForm:
    """Holds one user's form state and drives it through ``reduce``."""

    def __init__(
        self,
        policy: QuizPolicy = DEFAULT_POLICY,
        clamp: TimeClampPolicy = TimeClampPolicy.PRESERVE_RAISE_ONLY,
        topics: Sequence[str] = POPULAR_TOPICS,
        blur_delay: float = TOPIC_BLUR_DELAY_SECONDS,
    ):
        self.policy = policy
        self.clamp = clamp
        self.topics = tuple(topics)
        self.blur_delay = blur_delay
        self.state = initial_state(policy, clamp, self.topics)

    def dispatch(self, action) -> FormState:
        self.state = reduce(self.state, action, self.policy, self.clamp, self.topics)
        return self.state

    @property
    def draft(self) -> DraftConfiguration:
        return self.state.draft

    @property
    def loading(self) -> bool:
        return self.state.status is FormStatus.SUBMITTING

    @property
    def closed(self) -> bool:
        return self.state.status is FormStatus.CLOSED

    @property
    def suggested_time(self) -> int:
        return suggested_time(self.draft, self.policy)

    @property
    def min_time(self) -> int:
        return self.suggested_time

    @property
    def max_time(self) -> int:
        return maximum_seconds(self.policy)

    @property
    def visible_suggestions(self) -> Tuple[str, ...]:
        if not self.state.suggestions_visible:
            return ()
        return self.state.filtered_topics[:MAX_VISIBLE_SUGGESTIONS]

    def seconds_per_question(self) -> int:
        return round(self.draft.total_time_seconds / self.draft.number_of_questions)

    def edit_topic(self, text: str) -> FormState:
        return self.dispatch(EditTopic(text))

    def select_suggested_topic(self, topic: str) -> FormState:
        return self.dispatch(SelectSuggestedTopic(topic))

    async def blur_topic_input(self, focus_in_suggestions: bool = False) -> FormState:
        # Give a suggestion click the chance to land before hiding the list
        await asyncio.sleep(self.blur_delay)
        return self.dispatch(BlurTopicInput(focus_in_suggestions))

    def set_difficulty(self, difficulty: str) -> FormState:
        return self.dispatch(SetDifficulty(difficulty))

    def set_question_type(self, question_type: str) -> FormState:
        return self.dispatch(SetQuestionType(question_type))

    def set_number_of_questions(self, count: int) -> FormState:
        return self.dispatch(SetNumberOfQuestions(count))

    def set_total_time(self, seconds: int) -> FormState:
        return self.dispatch(SetTotalTime(seconds))

    def use_suggested_time(self) -> FormState:
        return self.dispatch(UseSuggestedTime())

    def reset(self) -> FormState:
        return self.dispatch(Reset())

    async def submit(self, generate: Callable[[QuizConfiguration], Awaitable[T]]) -> T:
        """Validate the draft and hand it to ``generate``.

        A ConfigurationError leaves the state untouched. A failure inside
        ``generate`` is recorded on the state and re-raised as
        CollaboratorError so the form stays open for a retry.
        """
        config = validate_configuration(self.draft.to_payload(), self.policy)
        self.dispatch(SubmitStarted())
        try:
            result = await generate(config)
        except Exception as exc:
            message = getattr(exc, "message", None) or str(exc) or GENERIC_FAILURE_MESSAGE
            self.dispatch(SubmitFailed(message))
            raise CollaboratorError(message) from exc
        self.dispatch(SubmitSucceeded())
        return result
