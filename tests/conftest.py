import os
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

# ヘッドレス環境でQtを実行できるようにする
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

from PyQt6.QtWidgets import QApplication

from ui.handlers.session_handler import SessionHandler
from ui.handlers.speech_handler import SpeechHandler
from utils.loading_state import LoadingState
from utils.request_worker import PendingRequest, RequestRunner
from utils.speech_backend import SpeechBackend

QUESTIONS = [
    "Introduction: Tell me about yourself and your background.",
    "What is a hash map and how is it used in practice?",
    "x",
    "Describe a difficult bug you fixed recently.",
    "Conclusion: thanks",
]

EVALUATION = {
    "overallScore": 78,
    "technicalScore": 82,
    "communicationScore": 75,
    "problemSolvingScore": 80,
    "culturalFitScore": 70,
    "leadershipScore": 65,
    "strengths": ["Clear structure"],
    "improvements": ["Give more concrete examples"],
    "detailedFeedback": {
        "technical": "Solid fundamentals.",
        "communication": "Concise.",
        "problemSolving": "Methodical.",
        "overall": "Good interview.",
    },
}


class ImmediateRequestRunner(RequestRunner):
    """リクエストをその場で同期的に実行するテスト用ランナー。"""

    def _launch(self, request: Callable[[], Any], pending: PendingRequest) -> None:
        try:
            result = request()
        except Exception as e:
            pending.handle_error(e)
            return
        pending.handle_result(result)


class DeferredRequestRunner(RequestRunner):
    """finish_next() が呼ばれるまでリクエストの完了を保留するテスト用ランナー。"""

    def __init__(self, loading: LoadingState) -> None:
        super().__init__(loading)
        self.queued: List[Tuple[Callable[[], Any], PendingRequest]] = []

    def _launch(self, request: Callable[[], Any], pending: PendingRequest) -> None:
        self.queued.append((request, pending))

    def finish_next(self) -> None:
        request, pending = self.queued.pop(0)
        try:
            result = request()
        except Exception as e:
            pending.handle_error(e)
            return
        pending.handle_result(result)


class FakeAPIService:
    """APIService の代わりに使用するテスト用のサービス。"""

    def __init__(
        self,
        questions: Optional[List[str]] = None,
        evaluation: Optional[Dict[str, Any]] = None,
        question_error: Optional[Exception] = None,
        submit_error: Optional[Exception] = None
    ) -> None:
        self.questions = list(QUESTIONS if questions is None else questions)
        self.evaluation = dict(EVALUATION if evaluation is None else evaluation)
        self.question_error = question_error
        self.submit_error = submit_error
        self.fetched: List[str] = []
        self.submissions: List[Tuple[str, List[str]]] = []

    def fetch_interview_questions(self, resume_id: str) -> List[str]:
        self.fetched.append(resume_id)
        if self.question_error is not None:
            raise self.question_error
        return list(self.questions)

    def submit_full_interview(self, resume_id: str, answers: List[str]) -> Dict[str, Any]:
        self.submissions.append((resume_id, list(answers)))
        if self.submit_error is not None:
            raise self.submit_error
        return self.evaluation


class FakeSpeechBackend(SpeechBackend):
    """音声認識バックエンドのテスト用実装。"""

    def __init__(self) -> None:
        super().__init__()
        self.start_calls = 0
        self.stop_calls = 0

    def start(self) -> None:
        self.start_calls += 1

    def stop(self) -> None:
        self.stop_calls += 1

    def emit_final(self, text: str) -> None:
        self.result_received.emit(text, True)

    def emit_interim(self, text: str) -> None:
        self.result_received.emit(text, False)

    def fail(self, message: str) -> None:
        self.error_occurred.emit(message)

    def end(self) -> None:
        self.ended.emit()


def reveal_all(session: SessionHandler) -> None:
    """質問文の表示を最後まで進める。"""
    while session.reveal.is_revealing:
        session.reveal.tick()


def run_out_timer(session: SessionHandler) -> None:
    """カウントダウンを0まで進める。"""
    for _ in range(session.countdown.time_limit):
        session.countdown.tick()


@pytest.fixture(scope='session')
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def loading(qapp):
    return LoadingState()


@pytest.fixture
def runner(loading):
    return ImmediateRequestRunner(loading)


@pytest.fixture
def api():
    return FakeAPIService()


@pytest.fixture
def speech_backend(qapp):
    return FakeSpeechBackend()


@pytest.fixture
def make_session(qapp, runner, api, speech_backend):
    """テスト用の SessionHandler を作成するファクトリ。"""
    created = []

    def _make(**kwargs) -> SessionHandler:
        options = {
            'api_service': api,
            'runner': runner,
            'speech': SpeechHandler(speech_backend),
            'time_limit': 5,
        }
        options.update(kwargs)
        session = SessionHandler('resume-1', **options)
        created.append(session)
        return session

    yield _make
    for session in created:
        session.abandon()
