import pytest
import requests

from quiz_core import QuestionCountOutOfRangeError, QuizConfiguration
from quiz_core.form import ConfigForm, SubmitFailed
from quiz_bot.client import BackendClient, BackendError
from quiz_bot.session import QuizSession
from quiz_bot.views import (
    build_answer_keyboard,
    build_form_keyboard,
    build_result_keyboard,
    check_count,
    format_clock,
    format_question_text,
    format_results,
    parse_quiz_args,
    render_form_text,
    step_count,
    step_time,
)

QUIZ = {
    "success": True,
    "topic": "Space",
    "totalTime": 90,
    "questions": [
        {"question": "Pluto is a planet.", "options": {"A": "True", "B": "False"}, "correctAnswer": "B"},
        {"question": "The sun is a star.", "options": {"A": "True", "B": "False"}, "correctAnswer": "A"},
    ],
}


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json, timeout))
        if self.error:
            raise self.error
        return self.response


CONFIG = QuizConfiguration("Space", "easy", "true-false", 2, 90)


def test_client_posts_configuration():
    session = FakeSession(FakeResponse(200, QUIZ))
    client = BackendClient("http://api.test/", timeout=5, session=session)

    assert client.generate_quiz(CONFIG) == QUIZ
    url, payload, timeout = session.calls[0]
    assert url == "http://api.test/api/quiz/generate"
    assert payload == {
        "topic": "Space",
        "difficulty": "easy",
        "questionType": "true-false",
        "numberOfQuestions": 2,
        "totalTime": 90,
    }
    assert timeout == 5


def test_client_surfaces_server_message():
    body = {"error": True, "message": "Total time cannot exceed 30 minutes"}
    client = BackendClient("http://api.test", session=FakeSession(FakeResponse(400, body)))

    with pytest.raises(BackendError) as exc_info:
        client.generate_quiz(CONFIG)
    assert exc_info.value.message == "Total time cannot exceed 30 minutes"
    assert exc_info.value.status_code == 400


def test_client_handles_non_json_errors():
    client = BackendClient("http://api.test", session=FakeSession(FakeResponse(502, ValueError("no json"))))

    with pytest.raises(BackendError) as exc_info:
        client.generate_quiz(CONFIG)
    assert exc_info.value.message == "API returned status 502"


@pytest.mark.parametrize(
    "error,prefix",
    [
        (requests.exceptions.ConnectionError("refused"), "Cannot connect to backend server"),
        (requests.exceptions.Timeout("slow"), "Request timeout!"),
        (requests.exceptions.InvalidURL("bad"), "Error connecting to backend"),
    ],
)
def test_client_network_errors(error, prefix):
    client = BackendClient("http://api.test", session=FakeSession(error=error))

    with pytest.raises(BackendError) as exc_info:
        client.generate_quiz(CONFIG)
    assert exc_info.value.message.startswith(prefix)


def test_client_explain():
    session = FakeSession(FakeResponse(200, {"success": True, "explanation": "Because."}))
    client = BackendClient("http://api.test", session=session)
    quiz_session = QuizSession.from_quiz(QUIZ)
    record = quiz_session.record_answer("A")

    assert client.explain(quiz_session.explanation_request(record)) == "Because."
    assert session.calls[0][1] == {
        "question": "Pluto is a planet.",
        "correctAnswer": "B: False",
        "userAnswer": "A: True",
    }


def test_session_scoring_and_progress():
    session = QuizSession.from_quiz(QUIZ, started_at=0.0)

    assert session.progress().label == "Question 1 of 2"
    assert session.record_answer("B").is_correct is True
    assert session.progress().percentage == 100
    assert session.record_answer("B").is_correct is False
    assert session.score == 1
    assert session.percentage() == 50.0
    assert session.finished(now=10.0)
    with pytest.raises(RuntimeError):
        session.record_answer("A")


def test_session_countdown():
    session = QuizSession.from_quiz(QUIZ, started_at=100.0)

    assert session.remaining_seconds(now=130.0) == 60
    assert not session.expired(now=189.0)
    assert session.expired(now=190.0)
    assert session.finished(now=200.0)
    assert session.remaining_seconds(now=500.0) == 0


def test_parse_quiz_args():
    assert parse_quiz_args([]) == ("", None)
    assert parse_quiz_args(["React", "5"]) == ("React", 5)
    assert parse_quiz_args(["World", "War", "II"]) == ("World War II", None)
    assert parse_quiz_args(["Python"]) == ("Python", None)


def test_check_count():
    form = ConfigForm()
    check_count(form, 20)
    with pytest.raises(QuestionCountOutOfRangeError):
        check_count(form, 30)


def test_stepping_respects_slider_bounds():
    form = ConfigForm()
    assert step_count(form, 5) == 15
    form.set_number_of_questions(18)
    assert step_count(form, 5) == 20
    form.set_number_of_questions(2)
    assert step_count(form, -5) == 1

    form = ConfigForm()
    assert step_time(form, -30) == 570
    form.use_suggested_time()
    assert step_time(form, -30) == 450
    form.set_total_time(1790)
    assert step_time(form, 30) == 1800


def test_form_text_and_keyboard():
    form = ConfigForm()
    form.edit_topic("hist")
    text = render_form_text(form)

    assert "🎯 Topic: hist" in text
    assert "⚡ Difficulty: Medium" in text
    assert "⏱️ Total time: 10m" in text
    assert "Suggested: 7m 30s" in text

    data = [button.callback_data for row in build_form_keyboard(form).inline_keyboard for button in row]
    assert data[:2] == ["cfg:topic:0", "cfg:topic:1"]
    assert "cfg:diff:hard" in data
    assert "cfg:type:true-false" in data
    assert "cfg:time:suggested" in data
    assert data[-1] == "cfg:generate"


def test_form_text_shows_last_error():
    form = ConfigForm()
    form.dispatch(SubmitFailed("AI is down"))
    assert "❌ AI is down" in render_form_text(form)


def test_question_and_result_views():
    session = QuizSession.from_quiz(QUIZ)
    text = format_question_text(session, 75)

    assert "Question 1 of 2" in text
    assert "▰▰▰▰▰▱▱▱▱▱ 50% Complete" in text
    assert "Time left: 01:15" in text
    answer_data = [row[0].callback_data for row in build_answer_keyboard(session, 42).inline_keyboard]
    assert answer_data == ["answer_A_0_42", "answer_B_0_42"]

    options = session.current()["options"]
    record = session.record_answer("A")
    rows = build_result_keyboard(options, record, 42).inline_keyboard
    assert rows[0][0].text == "❌ A: True"
    assert rows[1][0].text == "✅ B: False"
    assert rows[-1][0].callback_data == "explain_0_42"

    assert "Correct: 0/2" in format_results(session, timed_out=False)
    assert "Time's up!" in format_results(session, timed_out=True)


def test_format_clock():
    assert format_clock(0) == "00:00"
    assert format_clock(605) == "10:05"
