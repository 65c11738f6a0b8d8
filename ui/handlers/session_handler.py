# ui/handlers/session_handler.py
"""
面接セッション全体の進行を管理するモジュール。

SessionHandler は質問リスト・回答記録・回答中の質問の状態を持ち、
質問文の表示（RevealHandler）、制限時間（CountdownHandler）、回答テキスト
（AnswerBufferHandler）、音声入力（SpeechHandler）を連携させて、
次の質問へ進むタイミングと最終的な回答の送信を決定します。

回答記録（AnswerRecord）はセッション全体で保持され、それ以外の状態は
質問が切り替わるたびに _enter_question() でまとめて初期化されます。
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from models.question_models import AnswerRecord, QuestionState, RevealState
from models.session_models import InterviewSessionData
from services.answer_service import AnswerService
from services.api_service import APIService
from services.question_service import QuestionService
from utils.constants import (
    DEFAULT_TIME_LIMIT, QUESTIONS_LOADING_MESSAGE, SUBMISSION_LOADING_MESSAGE
)
from utils.exceptions import (
    CapabilityUnavailable, QuestionLoadError, SubmissionError
)
from utils.request_worker import RequestRunner

from .answer_buffer_handler import AnswerBufferHandler
from .countdown_handler import CountdownHandler
from .reveal_handler import RevealHandler
from .speech_handler import SpeechHandler

logger = logging.getLogger(__name__)


class SessionHandler(QObject):
    """
    面接セッションの状態遷移を管理するクラス。

    Signals:
        questions_loaded (pyqtSignal): 質問の読み込みが完了したときに質問数を送信します。
        question_changed (pyqtSignal): 回答中の質問が変わったときに (番号, 質問数) を送信します。
        reveal_text_changed (pyqtSignal): 表示中の質問文が変化したときに送信します。
        reveal_finished (pyqtSignal): 質問文の表示が完了したときに送信します。
        answer_changed (pyqtSignal): 回答テキストが変化したときに送信します。
        timer_started (pyqtSignal): カウントダウンが作動したときに送信します。
        time_changed (pyqtSignal): 残り時間（秒）が変化したときに送信します。
        listening_changed (pyqtSignal): 音声入力のオン/オフが変化したときに送信します。
        submitting_changed (pyqtSignal): 回答の送信中かどうかが変化したときに送信します。
        session_submitted (pyqtSignal): 採点結果（APIレスポンスそのもの）を送信します。
        load_failed (pyqtSignal): 質問の読み込みに失敗したときに例外を送信します。
        submission_failed (pyqtSignal): 回答の送信に失敗したときに例外を送信します。
        speech_failed (pyqtSignal): 音声入力に関するエラー（継続可能）を送信します。
    """
    questions_loaded = pyqtSignal(int)
    question_changed = pyqtSignal(int, int)
    reveal_text_changed = pyqtSignal(str)
    reveal_finished = pyqtSignal()
    answer_changed = pyqtSignal(str)
    timer_started = pyqtSignal()
    time_changed = pyqtSignal(int)
    listening_changed = pyqtSignal(bool)
    submitting_changed = pyqtSignal(bool)
    session_submitted = pyqtSignal(object)
    load_failed = pyqtSignal(object)
    submission_failed = pyqtSignal(object)
    speech_failed = pyqtSignal(object)

    def __init__(
        self,
        resume_id: str,
        api_service: APIService,
        runner: RequestRunner,
        speech: Optional[SpeechHandler] = None,
        answer_service: Optional[AnswerService] = None,
        time_limit: int = DEFAULT_TIME_LIMIT,
        parent: Optional[QObject] = None
    ) -> None:
        """
        SessionHandlerのコンストラクタ。

        Args:
            resume_id (str): 履歴書（セッション）の一意なID。
            api_service (APIService): 質問の取得と回答の送信を行うAPIサービス。
            runner (RequestRunner): 通信処理を非同期に実行するランナー。
            speech (Optional[SpeechHandler]): 音声入力。省略時は音声入力なしで動作する。
            answer_service (Optional[AnswerService]): 下書きの保存先。省略時は保存しない。
            time_limit (int): 1問あたりの制限時間（秒）。
            parent (Optional[QObject]): 親オブジェクト。
        """
        super().__init__(parent)
        self.resume_id = resume_id
        self.api_service = api_service
        self.question_service = QuestionService(api_service)
        self.answer_service = answer_service
        self.runner = runner

        self.questions: Tuple[str, ...] = ()
        self.answer_record = AnswerRecord()
        self.current_index: int = 0
        self.session_data: Optional[InterviewSessionData] = None

        self._loading_questions = False
        self._submitting = False
        self._abandoned = False

        self.reveal = RevealHandler(parent=self)
        self.countdown = CountdownHandler(time_limit, parent=self)
        self.buffer = AnswerBufferHandler(self)
        self.speech = speech if speech is not None else SpeechHandler(None, self)

        self.reveal.text_changed.connect(self.reveal_text_changed)
        self.reveal.revealed.connect(self._on_revealed)
        self.countdown.started.connect(self.timer_started)
        self.countdown.time_changed.connect(self.time_changed)
        self.countdown.expired.connect(self._on_time_expired)
        self.buffer.text_changed.connect(self.answer_changed)
        self.buffer.input_started.connect(self.countdown.activate)
        self.speech.transcript_finalized.connect(self.append_transcript)
        self.speech.listening_changed.connect(self.listening_changed)
        self.speech.capture_failed.connect(self.speech_failed)

    # --- 状態の参照 ---

    @property
    def is_loaded(self) -> bool:
        return bool(self.questions)

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def is_abandoned(self) -> bool:
        return self._abandoned

    @property
    def is_last_question(self) -> bool:
        return self.is_loaded and self.current_index == len(self.questions) - 1

    @property
    def current_question(self) -> str:
        return self.questions[self.current_index] if self.is_loaded else ""

    @property
    def state(self) -> QuestionState:
        """回答中の質問の状態のスナップショットを返す。"""
        return QuestionState(
            current_index=self.current_index,
            answer_buffer=self.buffer.text,
            time_remaining=self.countdown.remaining_time,
            timer_active=self.countdown.is_active,
            has_started_input=self.buffer.has_started_input,
            reveal_state=self.reveal.state,
            listening=self.speech.listening,
        )

    def can_advance(self) -> bool:
        """次の質問へ進む（または送信する）操作を受け付けられるかどうかを返す。"""
        return (
            self.is_loaded
            and not self._abandoned
            and not self._submitting
            and self.reveal.state is RevealState.REVEALED
        )

    # --- 質問の読み込み ---

    def load_questions(self) -> None:
        """質問リストを非同期に取得する。セッション開始時に1度だけ呼び出す。"""
        if self.is_loaded or self._loading_questions or self._abandoned:
            return
        self._loading_questions = True
        logger.info("Loading interview questions for resume %s", self.resume_id)
        self.runner.submit(
            lambda: self.question_service.load_data(self.resume_id),
            self._on_questions_loaded,
            self._on_questions_failed,
            QUESTIONS_LOADING_MESSAGE,
        )

    def _on_questions_loaded(self, questions: Tuple[str, ...]) -> None:
        self._loading_questions = False
        if self._abandoned:
            return
        self.questions = tuple(questions)
        self.answer_record = AnswerRecord.sized(len(self.questions))
        self.session_data = InterviewSessionData(
            resume_id=self.resume_id,
            questions=list(self.questions),
            answers=self.answer_record.as_list(),
        )
        logger.info("Interview session started with %d questions", len(self.questions))
        self.questions_loaded.emit(len(self.questions))
        self._enter_question(0)

    def _on_questions_failed(self, error: Exception) -> None:
        self._loading_questions = False
        if self._abandoned:
            return
        if not isinstance(error, QuestionLoadError):
            error = QuestionLoadError(f"面接の質問を読み込めませんでした。\n{error}")
        logger.error("Failed to load questions: %s", error)
        self.load_failed.emit(error)

    # --- 回答の入力 ---

    def submit_answer(self, text: str) -> bool:
        """キーボード入力の内容で回答テキストを置き換える。

        Returns:
            bool: 受け付けた場合はTrue。質問文の表示中などで拒否した場合はFalse。
        """
        if self._abandoned or self._submitting:
            return False
        return self.buffer.set_typed(text)

    def append_transcript(self, chunk: str) -> bool:
        """音声認識で確定したテキストを回答に追記する。"""
        if self._abandoned or self._submitting:
            return False
        return self.buffer.append_speech(chunk)

    def toggle_listening(self) -> bool:
        """
        音声入力のオン/オフを切り替える。質問文の表示中は何もしない。

        音声認識が利用できない場合は speech_failed で通知し、テキスト入力のみで続行する。

        Returns:
            bool: 切り替え後に音声入力中であればTrue。
        """
        if not self.is_loaded or self._abandoned or self.reveal.is_revealing:
            return self.speech.listening
        try:
            return self.speech.toggle_listening()
        except CapabilityUnavailable as e:
            logger.warning("Speech input unavailable: %s", e)
            self.speech_failed.emit(e)
            return False

    # --- 質問の切り替え ---

    def advance(self) -> bool:
        """
        現在の回答を記録し、次の質問へ進む。最後の質問の場合は回答を送信する。

        ユーザー操作のほか、制限時間切れのときにも自動で呼び出されます。

        Returns:
            bool: 操作を受け付けた場合はTrue。
        """
        if not self.can_advance():
            return False
        self.answer_record.record(self.current_index, self.buffer.text)
        if self.is_last_question:
            self._save_draft()
            self.submit_session()
        else:
            self._enter_question(self.current_index + 1)
            self._save_draft()
        return True

    def _enter_question(self, index: int) -> None:
        """質問番号を切り替え、回答中の質問の状態を1回の遷移でまとめて初期化する。"""
        self.reveal.cancel()
        self.countdown.reset()
        self.speech.stop_listening()
        self.buffer.reset()
        self.current_index = index
        logger.debug("Entering question %d/%d", index + 1, len(self.questions))
        self.question_changed.emit(index, len(self.questions))
        self.reveal.start(self.questions[index])

    def _on_revealed(self) -> None:
        if self._abandoned:
            return
        self.buffer.open()
        self.reveal_finished.emit()

    def _on_time_expired(self) -> None:
        logger.info("Time expired on question %d", self.current_index + 1)
        self.advance()

    # --- 回答の送信 ---

    def submit_session(self) -> None:
        """すべての回答を採点サービスへ送信する。送信中の重複呼び出しは無視する。"""
        if self._submitting or self._abandoned or not self.is_loaded:
            return
        self.speech.stop_listening()
        self.countdown.stop()
        answers = self.answer_record.as_list()
        self._set_submitting(True)
        logger.info("Submitting %d answers for resume %s", len(answers), self.resume_id)
        self.runner.submit(
            lambda: self.api_service.submit_full_interview(self.resume_id, answers),
            self._on_submitted,
            self._on_submission_failed,
            SUBMISSION_LOADING_MESSAGE,
        )

    def _on_submitted(self, evaluation: Dict[str, Any]) -> None:
        self._set_submitting(False)
        if self._abandoned:
            return
        if self.answer_service is not None:
            self.answer_service.delete_draft(self.resume_id)
        logger.info("Interview submitted for resume %s", self.resume_id)
        self.session_submitted.emit(evaluation)

    def _on_submission_failed(self, error: Exception) -> None:
        self._set_submitting(False)
        if self._abandoned:
            return
        if not isinstance(error, SubmissionError):
            error = SubmissionError(f"回答の送信に失敗しました。\n{error}")
        logger.error("Submission failed: %s", error)
        self._save_draft()
        self.submission_failed.emit(error)

    def _set_submitting(self, submitting: bool) -> None:
        if submitting == self._submitting:
            return
        self._submitting = submitting
        self.submitting_changed.emit(submitting)

    # --- 終了処理 ---

    def abandon(self) -> None:
        """セッションを破棄する。タイマーと音声入力を止め、以降に届く通信結果は無視する。"""
        if self._abandoned:
            return
        self._abandoned = True
        self.reveal.cancel()
        self.countdown.stop()
        self.speech.stop_listening()
        logger.info("Interview session for resume %s abandoned", self.resume_id)

    def snapshot_session(self) -> Optional[InterviewSessionData]:
        """記録済みの回答を反映したセッションデータを返す。質問の読み込み前はNone。"""
        if self.session_data is None:
            return None
        self.session_data.answers = self.answer_record.as_list()
        self.session_data.current_index = self.current_index
        return self.session_data

    def _save_draft(self) -> None:
        if self.answer_service is None:
            return
        data = self.snapshot_session()
        if data is not None:
            self.answer_service.save_data(data)

