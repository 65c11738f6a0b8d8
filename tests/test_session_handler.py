from models.question_models import RevealState
from services.answer_service import AnswerService
from services.storage_service import StorageService
from ui.handlers.speech_handler import SpeechHandler
from utils.exceptions import CapabilityUnavailable, QuestionLoadError, SubmissionError
from utils.loading_state import LoadingState

from conftest import (
    EVALUATION, DeferredRequestRunner, FakeAPIService, reveal_all, run_out_timer
)

CLEAN_QUESTIONS = (
    "Tell me about yourself and your background.",
    "What is a hash map and how is it used in practice?",
    "Describe a difficult bug you fixed recently.",
)


def _started_session(make_session, **kwargs):
    session = make_session(**kwargs)
    session.load_questions()
    reveal_all(session)
    return session


def test_load_questions_sanitizes_and_enters_first_question(make_session, api):
    session = make_session()
    loaded = []
    session.questions_loaded.connect(loaded.append)

    session.load_questions()

    assert api.fetched == ["resume-1"]
    assert session.questions == CLEAN_QUESTIONS
    assert loaded == [3]
    assert session.answer_record.answers == ["", "", ""]
    state = session.state
    assert state.current_index == 0
    assert state.reveal_state is RevealState.REVEALING
    assert state.time_remaining == 5
    assert not state.timer_active
    assert not state.has_started_input
    assert not state.listening


def test_load_questions_runs_only_once(make_session, api):
    session = make_session()
    session.load_questions()
    session.load_questions()
    assert api.fetched == ["resume-1"]


def test_input_and_advance_are_blocked_while_revealing(make_session):
    session = make_session()
    session.load_questions()

    assert not session.submit_answer("too early")
    assert not session.advance()
    assert session.state.answer_buffer == ""
    assert not session.state.has_started_input
    assert session.current_index == 0


def test_timer_starts_on_first_keystroke(make_session):
    session = _started_session(make_session)
    assert not session.state.timer_active

    session.submit_answer("H")

    assert session.state.timer_active
    assert session.state.has_started_input


def test_timer_expiry_advances_automatically(make_session):
    session = _started_session(make_session)
    session.submit_answer("A")

    run_out_timer(session)

    assert session.answer_record[0] == "A"
    state = session.state
    assert state.current_index == 1
    assert state.time_remaining == 5
    assert not state.timer_active
    assert not state.has_started_input
    assert state.answer_buffer == ""
    assert state.reveal_state is RevealState.REVEALING


def test_last_question_submits_all_answers(make_session, api):
    session = _started_session(make_session)
    submitted = []
    session.session_submitted.connect(submitted.append)

    session.submit_answer("first")
    assert session.advance()
    reveal_all(session)
    session.submit_answer("second")
    assert session.advance()
    reveal_all(session)
    assert session.is_last_question
    assert session.advance()

    assert api.submissions == [("resume-1", ["first", "second", ""])]
    assert submitted == [EVALUATION]
    assert session.answer_record[2] == ""


def test_speech_appends_to_typed_answer(make_session, speech_backend):
    session = _started_session(make_session)
    session.submit_answer("Typed. ")
    session.toggle_listening()

    speech_backend.emit_final("Spoken part")

    assert session.state.answer_buffer == "Typed. Spoken part "
    assert session.state.listening


def test_first_speech_chunk_starts_timer(make_session, speech_backend):
    session = _started_session(make_session)
    session.toggle_listening()
    assert not session.state.timer_active

    speech_backend.emit_final("hello")

    assert session.state.timer_active
    assert session.state.has_started_input


def test_listening_cannot_start_while_revealing(make_session, speech_backend):
    session = make_session()
    session.load_questions()

    assert session.toggle_listening() is False
    assert speech_backend.start_calls == 0


def test_question_change_stops_listening(make_session, speech_backend):
    session = _started_session(make_session)
    session.toggle_listening()
    assert session.state.listening

    session.advance()

    assert not session.state.listening
    assert speech_backend.stop_calls == 1


def test_unavailable_speech_is_reported(make_session):
    session = _started_session(make_session, speech=SpeechHandler(None))
    notices = []
    session.speech_failed.connect(notices.append)

    assert session.toggle_listening() is False

    assert len(notices) == 1
    assert isinstance(notices[0], CapabilityUnavailable)
    assert session.submit_answer("typing still works")


def test_load_failure_is_reported(make_session):
    session = make_session(api_service=FakeAPIService(question_error=QuestionLoadError("offline")))
    errors = []
    session.load_failed.connect(errors.append)

    session.load_questions()

    assert not session.is_loaded
    assert len(errors) == 1
    assert isinstance(errors[0], QuestionLoadError)
    assert not session.advance()


def test_unexpected_load_error_is_wrapped(make_session):
    session = make_session(api_service=FakeAPIService(question_error=RuntimeError("boom")))
    errors = []
    session.load_failed.connect(errors.append)

    session.load_questions()

    assert isinstance(errors[0], QuestionLoadError)


def test_no_usable_questions_is_a_load_error(make_session):
    session = make_session(api_service=FakeAPIService(questions=["x", "Introduction: Hi"]))
    errors = []
    session.load_failed.connect(errors.append)

    session.load_questions()

    assert isinstance(errors[0], QuestionLoadError)
    assert not session.is_loaded


def test_submission_failure_preserves_state_for_retry(make_session):
    api = FakeAPIService(questions=["What is your greatest strength?"],
                         submit_error=SubmissionError("server down"))
    session = _started_session(make_session, api_service=api)
    failures = []
    submitted = []
    session.submission_failed.connect(failures.append)
    session.session_submitted.connect(submitted.append)

    session.submit_answer("Persistence")
    session.advance()

    assert len(failures) == 1
    assert isinstance(failures[0], SubmissionError)
    assert not session.is_submitting
    assert session.current_index == 0
    assert session.state.answer_buffer == "Persistence"
    assert session.answer_record[0] == "Persistence"

    api.submit_error = None
    assert session.advance()
    assert submitted == [EVALUATION]
    assert api.submissions[-1] == ("resume-1", ["Persistence"])


def test_advance_is_ignored_while_submission_in_flight(make_session):
    loading = LoadingState()
    runner = DeferredRequestRunner(loading)
    api = FakeAPIService(questions=["What is your greatest strength?"])
    session = make_session(api_service=api, runner=runner)
    session.load_questions()
    runner.finish_next()
    reveal_all(session)

    assert session.advance()
    assert session.is_submitting
    assert loading.is_loading
    assert not session.advance()
    assert not session.submit_answer("changed my mind")

    runner.finish_next()
    assert not runner.queued
    assert len(api.submissions) == 1
    assert not loading.is_loading


def test_loading_state_is_released_after_failures(make_session, loading):
    session = make_session(api_service=FakeAPIService(question_error=QuestionLoadError("offline")))
    session.load_questions()
    assert not loading.is_loading


def test_late_response_after_abandon_is_ignored(make_session):
    runner = DeferredRequestRunner(LoadingState())
    session = make_session(runner=runner)
    session.load_questions()

    session.abandon()
    runner.finish_next()

    assert not session.is_loaded
    assert not session.advance()


def test_abandon_stops_tickers_and_capture(make_session, speech_backend):
    session = _started_session(make_session)
    session.toggle_listening()
    session.submit_answer("partial")

    session.abandon()

    assert not session.countdown.is_active
    assert not session.reveal.timer.isActive()
    assert not session.state.listening
    assert not session.advance()


def test_drafts_are_saved_and_removed_after_submission(make_session, tmp_path):
    answer_service = AnswerService(StorageService(str(tmp_path)))
    session = _started_session(make_session, answer_service=answer_service)

    session.submit_answer("first")
    session.advance()

    draft = answer_service.load_data("resume-1")
    assert draft is not None
    assert draft.answers == ["first", "", ""]
    assert draft.current_index == 1

    reveal_all(session)
    session.advance()
    reveal_all(session)
    session.advance()

    assert answer_service.load_data("resume-1") is None
