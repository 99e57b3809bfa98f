import asyncio
import logging
from typing import Dict

from telegram import Update
from telegram.error import BadRequest
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from quiz_core import CollaboratorError, ConfigurationError, ExplanationRequest
from quiz_core.form import ConfigForm
from quiz_core.validation import coerce_int
from quiz_bot.client import BackendClient, BackendError
from quiz_bot.config import BACKEND_URL, NEXT_QUESTION_DELAY_SECONDS, TELEGRAM_TOKEN
from quiz_bot.session import QuizSession
from quiz_bot.views import (
    build_answer_keyboard,
    build_form_keyboard,
    build_result_keyboard,
    check_count,
    format_question_text,
    format_results,
    parse_quiz_args,
    render_form_text,
    step_count,
    step_time,
)

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
logger = logging.getLogger(__name__)

backend = BackendClient()

# Per-user state
user_forms: Dict[int, ConfigForm] = {}
user_sessions: Dict[int, QuizSession] = {}
user_explanations: Dict[int, Dict[int, ExplanationRequest]] = {}


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Start command handler"""
    logger.info(f"Start command from user {update.effective_user.id}")
    welcome_message = """
🎓 Welcome to the AI Quiz Builder! 🤖

I can generate AI-powered quizzes on any topic, at the
difficulty, format and pace you choose.

Commands:
/quiz - Design a new quiz
/quiz <topic> <num> - Design a quiz with topic and size filled in
Example: /quiz React 5

/cancel - Close the quiz designer or stop a quiz
/help - Show help message
    """
    await update.message.reply_text(welcome_message)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Help command handler"""
    logger.info(f"Help command from user {update.effective_user.id}")
    help_text = """
📚 How to use the AI Quiz Builder:

1️⃣ Use /quiz to open the quiz designer
   Send any message to set the topic, or tap a suggestion.

2️⃣ Pick difficulty, format, number of questions and time.
   The time never goes below the suggested minimum.

3️⃣ Tap "Generate Quiz" and answer with the A/B/C/D buttons.
   Tap 💡 Explain on a wrong answer to learn why.

📝 Rules:
- Number of questions: 1-20
- Total time: suggested minimum up to 30 minutes
    """
    await update.message.reply_text(help_text)


async def quiz_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Open the quiz designer, optionally prefilled from the arguments"""
    user_id = update.effective_user.id
    logger.info(f"Quiz command from user {user_id} with args: {context.args}")

    form = ConfigForm()
    topic, count = parse_quiz_args(context.args or [])

    if count is not None:
        try:
            check_count(form, count)
        except ConfigurationError as e:
            logger.warning(f"Invalid number from user {user_id}: {count}")
            await update.message.reply_text(f"❌ {e.message}!")
            return
        form.set_number_of_questions(count)

    if topic:
        form.select_suggested_topic(topic)

    user_forms[user_id] = form
    user_sessions.pop(user_id, None)
    await update.message.reply_text(render_form_text(form), reply_markup=build_form_keyboard(form))


async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    user_id = update.effective_user.id
    closed_form = user_forms.pop(user_id, None)
    stopped_quiz = user_sessions.pop(user_id, None)
    had_state = closed_form is not None or stopped_quiz is not None
    logger.info(f"Cancel command from user {user_id}")
    await update.message.reply_text("👋 Cancelled." if had_state else "Nothing to cancel. Start with /quiz")


async def topic_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Treat plain text as the topic while the designer is open"""
    user_id = update.effective_user.id
    form = user_forms.get(user_id)
    if form is None or form.loading:
        return

    form.edit_topic(update.message.text)
    await update.message.reply_text(render_form_text(form), reply_markup=build_form_keyboard(form))


async def config_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle taps on the quiz designer keyboard"""
    query = update.callback_query
    user_id = update.effective_user.id
    form = user_forms.get(user_id)

    if form is None:
        await query.answer("❌ This quiz designer has expired. Start again with /quiz", show_alert=True)
        return
    if form.loading:
        await query.answer("⏳ Your quiz is being generated...")
        return

    _, action, *rest = query.data.split(":")
    value = rest[0] if rest else ""
    logger.info(f"Config action from user {user_id}: {action} {value}")

    number = coerce_int(value)
    if number is None and action in ("topic", "count", "time") and value != "suggested":
        # Malformed button data
        await query.answer()
        return

    if action == "topic":
        suggestions = form.visible_suggestions
        if 0 <= number < len(suggestions):
            form.select_suggested_topic(suggestions[number])
    else:
        # Any other control takes focus away from the topic suggestions
        if form.state.suggestions_visible:
            await form.blur_topic_input()

        if action == "diff":
            form.set_difficulty(value)
        elif action == "type":
            form.set_question_type(value)
        elif action == "count":
            form.set_number_of_questions(step_count(form, number))
        elif action == "time":
            if value == "suggested":
                form.use_suggested_time()
            else:
                form.set_total_time(step_time(form, number))
        elif action == "reset":
            form.reset()
        elif action == "generate":
            await generate_quiz(update, context, form)
            return

    await query.answer()
    await refresh_form(query, form)


async def refresh_form(query, form: ConfigForm):
    try:
        await query.edit_message_text(render_form_text(form), reply_markup=build_form_keyboard(form))
    except BadRequest as e:
        # Stepping past a bound leaves the form unchanged
        if "not modified" not in str(e).lower():
            raise


async def generate_quiz(update: Update, context: ContextTypes.DEFAULT_TYPE, form: ConfigForm):
    query = update.callback_query
    user_id = update.effective_user.id

    async def request_quiz(config):
        await query.answer()
        await query.edit_message_text(
            f"🔄 Generating {config.number_of_questions} questions about {config.topic}...\n"
            "Please wait..."
        )
        return await backend.agenerate_quiz(config)

    try:
        quiz_data = await form.submit(request_quiz)
    except ConfigurationError as e:
        logger.info(f"Invalid quiz settings from user {user_id}: {e.message}")
        await query.answer(f"❌ {e.message}", show_alert=True)
        return
    except CollaboratorError as e:
        logger.error(f"Quiz generation failed for user {user_id}: {e.message}")
        await refresh_form(query, form)
        return

    user_forms.pop(user_id, None)
    user_sessions[user_id] = QuizSession.from_quiz(quiz_data)
    user_explanations[user_id] = {}
    await query.edit_message_text(f"✅ Quiz generated successfully! Topic: {quiz_data['topic']}")
    await send_question(update, context, user_id)


async def send_question(update: Update, context: ContextTypes.DEFAULT_TYPE, user_id: int):
    """Send current question to user"""
    logger.info(f"Sending question to user {user_id}")

    session = user_sessions.get(user_id)
    if not session:
        logger.warning(f"No session found for user {user_id}")
        return

    message = update.callback_query.message if update.callback_query else update.message

    if session.finished():
        logger.info(f"Quiz finished for user {user_id}. Score: {session.score}/{session.total}")
        await message.reply_text(format_results(session, timed_out=session.expired()))
        del user_sessions[user_id]
        return

    logger.info(f"Question {session.current_question + 1}/{session.total} for user {user_id}")
    await message.reply_text(
        format_question_text(session, session.remaining_seconds()),
        reply_markup=build_answer_keyboard(session, user_id)
    )


async def answer_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle answer button clicks"""
    query = update.callback_query
    logger.info(f"Answer callback: {query.data}")

    parts = query.data.split("_")
    if len(parts) != 4:
        await query.answer()
        return
    _, selected_answer, index_str, user_id_str = parts
    question_index = coerce_int(index_str)
    user_id = coerce_int(user_id_str)
    if question_index is None or user_id is None:
        await query.answer()
        return

    if update.effective_user.id != user_id:
        await query.answer("❌ This is not your quiz!", show_alert=True)
        return

    session = user_sessions.get(user_id)
    if not session:
        logger.warning(f"No session for user {user_id}")
        await query.answer("❌ Quiz session expired. Start a new quiz with /quiz", show_alert=True)
        return

    if question_index != session.current_question:
        logger.info(f"Ignoring stale answer from user {user_id} for question {question_index + 1}")
        await query.answer("This question was already answered.")
        return
    await query.answer()

    if session.expired():
        await query.edit_message_text("⏰ Time's up! This answer was not counted.")
        await send_question(update, context, user_id)
        return

    question = session.current()
    progress = session.progress()
    record = session.record_answer(selected_answer)

    logger.info(f"Answer is {'correct' if record.is_correct else 'wrong'}. Correct: {record.correct_answer}")

    if record.is_correct:
        result_text = "✅ Correct!"
    else:
        result_text = f"❌ Wrong! Correct answer: {record.correct_answer}"
        user_explanations.setdefault(user_id, {})[record.question_index] = session.explanation_request(record)

    result_message = f"""
📝 {progress.label}
Topic: {session.topic}

{question['question']}

{result_text}
    """

    await query.edit_message_text(
        result_message,
        reply_markup=build_result_keyboard(question["options"], record, user_id)
    )

    await asyncio.sleep(NEXT_QUESTION_DELAY_SECONDS)
    await send_question(update, context, user_id)


async def explain_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Ask the backend why an answer was wrong"""
    query = update.callback_query
    parts = query.data.split("_")
    if len(parts) != 3:
        await query.answer()
        return
    question_index = coerce_int(parts[1])
    user_id = coerce_int(parts[2])
    if question_index is None or user_id is None:
        await query.answer()
        return

    if update.effective_user.id != user_id:
        await query.answer("❌ This is not your quiz!", show_alert=True)
        return

    request = user_explanations.get(user_id, {}).get(question_index)
    if request is None:
        await query.answer("❌ This explanation is no longer available.", show_alert=True)
        return

    await query.answer("💡 Thinking...")
    try:
        explanation = await backend.aexplain(request)
    except BackendError as e:
        logger.error(f"Explanation failed for user {user_id}: {e.message}")
        await query.message.reply_text(f"❌ Could not get an explanation:\n{e.message[:200]}")
        return

    await query.message.reply_text(f"💡 {explanation}")


def main():
    """Start the bot"""
    if not TELEGRAM_TOKEN:
        logger.error("TELEGRAM_BOT_TOKEN not found in environment variables!")
        return

    logger.info(f"Starting bot with token: {TELEGRAM_TOKEN[:20]}...")
    logger.info(f"Backend URL: {BACKEND_URL}")

    application = Application.builder().token(TELEGRAM_TOKEN).build()

    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("quiz", quiz_command))
    application.add_handler(CommandHandler("cancel", cancel_command))
    application.add_handler(CallbackQueryHandler(config_callback, pattern="^cfg:"))
    application.add_handler(CallbackQueryHandler(answer_callback, pattern="^answer_"))
    application.add_handler(CallbackQueryHandler(explain_callback, pattern="^explain_"))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, topic_message))

    logger.info("Bot started successfully!")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
