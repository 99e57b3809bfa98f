"""Message text and inline keyboards for the config form and quiz."""

from typing import List, Optional, Sequence, Tuple

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from quiz_core import Difficulty, QuestionCountOutOfRangeError, QuestionType
from quiz_core.form import TIME_STEP_SECONDS, ConfigForm, format_duration
from quiz_core.progress import render_progress_bar
from quiz_bot.session import AnswerRecord, QuizSession

COUNT_STEPS = (-5, -1, 1, 5)
DIFFICULTY_DOTS = {"easy": "🟢", "medium": "🟡", "hard": "🔴"}
QUESTION_TYPE_ICONS = {"mcq": "🔤", "true-false": "✅"}


def parse_quiz_args(args: Sequence[str]) -> Tuple[str, Optional[int]]:
    """Split ``/quiz`` arguments into a topic and an optional question count."""
    if not args:
        return "", None
    if len(args) > 1:
        try:
            return " ".join(args[:-1]), int(args[-1])
        except ValueError:
            pass
    return " ".join(args), None


def step_count(form: ConfigForm, delta: int) -> int:
    policy = form.policy
    return min(max(form.draft.number_of_questions + delta, policy.min_questions), policy.max_questions)


def step_time(form: ConfigForm, delta: int) -> int:
    return min(max(form.draft.total_time_seconds + delta, form.min_time), form.max_time)


def check_count(form: ConfigForm, count: int) -> None:
    policy = form.policy
    if not policy.min_questions <= count <= policy.max_questions:
        raise QuestionCountOutOfRangeError(policy.min_questions, policy.max_questions)


def render_form_text(form: ConfigForm) -> str:
    draft = form.draft
    topic = draft.topic.strip() or "(send me a message with your topic)"
    lines = [
        "🧩 Create Your Quiz",
        "",
        f"🎯 Topic: {topic}",
        f"⚡ Difficulty: {Difficulty(draft.difficulty).label} {DIFFICULTY_DOTS.get(draft.difficulty, '')}",
        f"📝 Format: {QuestionType(draft.question_type).label}",
        f"📊 Questions: {draft.number_of_questions}",
        f"⏱️ Total time: {format_duration(draft.total_time_seconds)}",
        f"   Suggested: {format_duration(form.suggested_time)} "
        f"(≈{form.seconds_per_question()}s per question)",
    ]
    if form.visible_suggestions:
        lines += ["", "Popular topics:"]
    if form.state.last_error:
        lines += ["", f"❌ {form.state.last_error}"]
    return "\n".join(lines)


def _mark(selected: bool, text: str) -> str:
    return f"✓ {text}" if selected else text


def build_form_keyboard(form: ConfigForm) -> InlineKeyboardMarkup:
    draft = form.draft
    keyboard: List[List[InlineKeyboardButton]] = []

    suggestions = form.visible_suggestions
    for start in range(0, len(suggestions), 2):
        keyboard.append([
            InlineKeyboardButton(topic, callback_data=f"cfg:topic:{start + offset}")
            for offset, topic in enumerate(suggestions[start:start + 2])
        ])

    keyboard.append([
        InlineKeyboardButton(_mark(draft.difficulty == d.value, d.label), callback_data=f"cfg:diff:{d.value}")
        for d in Difficulty
    ])
    keyboard.append([
        InlineKeyboardButton(
            _mark(draft.question_type == t.value, f"{QUESTION_TYPE_ICONS[t.value]} {t.label}"),
            callback_data=f"cfg:type:{t.value}",
        )
        for t in QuestionType
    ])
    keyboard.append([
        InlineKeyboardButton(f"{step:+d} Q", callback_data=f"cfg:count:{step}") for step in COUNT_STEPS
    ])
    keyboard.append([
        InlineKeyboardButton(f"-{TIME_STEP_SECONDS}s", callback_data=f"cfg:time:-{TIME_STEP_SECONDS}"),
        InlineKeyboardButton("Use Suggested", callback_data="cfg:time:suggested"),
        InlineKeyboardButton(f"+{TIME_STEP_SECONDS}s", callback_data=f"cfg:time:{TIME_STEP_SECONDS}"),
    ])
    keyboard.append([
        InlineKeyboardButton("Reset", callback_data="cfg:reset"),
        InlineKeyboardButton("Generate Quiz ➡️", callback_data="cfg:generate"),
    ])
    return InlineKeyboardMarkup(keyboard)


def format_clock(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


def format_question_text(session: QuizSession, remaining_seconds: int) -> str:
    question = session.current()
    progress = session.progress()
    return f"""
📝 {progress.label}
{render_progress_bar(progress)}
⏱ Time left: {format_clock(remaining_seconds)}
Topic: {session.topic}

{question['question']}
    """


def build_answer_keyboard(session: QuizSession, user_id: int) -> InlineKeyboardMarkup:
    options = session.current()["options"]
    index = session.current_question
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(f"{letter}: {text}", callback_data=f"answer_{letter}_{index}_{user_id}")]
        for letter, text in sorted(options.items())
    ])


def build_result_keyboard(
    options: dict, record: AnswerRecord, user_id: int
) -> InlineKeyboardMarkup:
    keyboard = []
    for option, text in sorted(options.items()):
        if option == record.correct_answer:
            button_text = f"✅ {option}: {text}"
        elif option == record.selected and not record.is_correct:
            button_text = f"❌ {option}: {text}"
        else:
            button_text = f"{option}: {text}"
        keyboard.append([InlineKeyboardButton(button_text, callback_data=f"disabled_{option}")])

    if not record.is_correct:
        keyboard.append([
            InlineKeyboardButton("💡 Explain", callback_data=f"explain_{record.question_index}_{user_id}")
        ])
    return InlineKeyboardMarkup(keyboard)


def format_results(session: QuizSession, timed_out: bool) -> str:
    score = session.score
    total = session.total
    percentage = session.percentage()
    header = "⏰ Time's up!" if timed_out else "🎉 Quiz Completed! 🎉"
    verdict = '🏆 Excellent!' if percentage >= 80 else '👍 Good job!' if percentage >= 60 else '📚 Keep learning!'
    return f"""
{header}

📊 Results:
✅ Correct: {score}/{total}
📈 Score: {percentage:.1f}%

{verdict}

Start a new quiz with /quiz
    """
