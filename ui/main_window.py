# ui/main_window.py
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

from PyQt6.QtWidgets import QMainWindow, QStackedWidget, QMessageBox, QFileDialog
from PyQt6.QtCore import QTimer
from PyQt6.QtGui import QCloseEvent

from models.evaluation_models import InterviewEvaluation
from services.answer_service import AnswerService
from services.api_service import APIService
from ui.components import LoadingOverlay
from ui.handlers.session_handler import SessionHandler
from ui.handlers.speech_handler import SpeechHandler
from ui.screens.dashboard_screen import DashboardScreen
from ui.screens.interview_screen import InterviewScreen
from utils.constants import DEFAULT_TIME_LIMIT, REQUEST_TIMEOUT
from utils.loading_state import LoadingState
from utils.request_worker import RequestRunner
from utils.speech_backend import SpeechBackend

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    面接練習アプリケーションのメインウィンドウ。

    回答画面と評価結果画面を切り替えて表示し、通信中のオーバーレイ表示や
    エラーメッセージの表示を担当します。セッションの進行は SessionHandler に委ねます。
    """

    def __init__(
        self,
        resume_id: str,
        api_service: APIService,
        answer_service: Optional[AnswerService] = None,
        speech_backend: Optional[SpeechBackend] = None,
        time_limit: int = DEFAULT_TIME_LIMIT,
        runner: Optional[RequestRunner] = None
    ) -> None:
        """
        MainWindowのコンストラクタ。

        Args:
            resume_id (str): 履歴書（セッション）の一意なID。
            api_service (APIService): 質問の取得と回答の送信を行うAPIサービス。
            answer_service (Optional[AnswerService]): 下書きの保存とエクスポートを行うサービス。
            speech_backend (Optional[SpeechBackend]): 音声認識バックエンド。利用できない場合はNone。
            time_limit (int): 1問あたりの制限時間（秒）。
            runner (Optional[RequestRunner]): 通信処理のランナー。省略時はワーカースレッドで実行する。
        """
        super().__init__()
        self.setWindowTitle("面接練習 (シミュレーター版)")
        self.setGeometry(100, 100, 900, 700)
        self.answer_service = answer_service
        self._closing_confirmed = False
        self._finished = False

        self.loading = runner.loading if runner is not None else LoadingState(self)
        self.runner = runner if runner is not None else RequestRunner(self.loading, self)
        self.speech = SpeechHandler(speech_backend, self)
        self.session = SessionHandler(
            resume_id,
            api_service,
            self.runner,
            speech=self.speech,
            answer_service=answer_service,
            time_limit=time_limit,
            parent=self,
        )

        self.interview_screen = InterviewScreen(self.session)
        self.dashboard_screen = DashboardScreen()
        self.stack = QStackedWidget()
        self.stack.addWidget(self.interview_screen)
        self.stack.addWidget(self.dashboard_screen)
        self.setCentralWidget(self.stack)

        self.loading_overlay = LoadingOverlay(self.stack)
        self.connect_signals()

    def connect_signals(self) -> None:
        self.loading.loading_changed.connect(self.loading_overlay.set_loading)
        self.session.load_failed.connect(self.show_load_error)
        self.session.submission_failed.connect(self.show_submission_error)
        self.session.speech_failed.connect(self.show_speech_notice)
        self.session.session_submitted.connect(self.show_dashboard)
        self.dashboard_screen.export_requested.connect(self.save_as_word)
        self.dashboard_screen.close_requested.connect(self.close)

    def start_session(self) -> None:
        """イベントループの開始後に質問の読み込みを開始する。"""
        QTimer.singleShot(0, self.session.load_questions)

    def show_load_error(self, error: Exception) -> None:
        QMessageBox.critical(
            self, "読み込みエラー",
            f"{error}\n\n面接を開始できません。時間をおいてから再度お試しください。"
        )

    def show_submission_error(self, error: Exception) -> None:
        QMessageBox.warning(
            self, "送信エラー",
            f"{error}\n\n回答は保持されています。「面接を完了」を押して再度送信してください。"
        )

    def show_speech_notice(self, error: Exception) -> None:
        QMessageBox.information(self, "音声入力", f"{error}\nキーボードで回答を入力してください。")

    def show_dashboard(self, payload: Dict[str, Any]) -> None:
        self._finished = True
        self.dashboard_screen.show_evaluation(InterviewEvaluation.from_dict(payload))
        self.stack.setCurrentWidget(self.dashboard_screen)

    def save_as_word(self) -> None:
        """
        質問・回答と評価結果をWord (.docx) 形式で保存する。
        ファイルダイアログを表示し、ユーザーに出力先を指定させます。
        """
        session_data = self.session.snapshot_session()
        if session_data is None or self.answer_service is None:
            return

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        default_name = f"interview_{timestamp}.docx"
        initial_path = os.path.join(os.path.expanduser("~"), default_name)

        file_path, _ = QFileDialog.getSaveFileName(
            self, "Word形式で保存", initial_path, "Word Documents (*.docx)"
        )
        if not file_path:
            return
        if not file_path.lower().endswith('.docx'):
            file_path += '.docx'

        try:
            self.answer_service.export_to_word(session_data, self.dashboard_screen.evaluation, file_path)
        except OSError as exc:
            logger.error("Word export failed: %s", exc)
            QMessageBox.critical(self, "保存エラー", f"Wordファイルの保存に失敗しました。\n{exc}")
            return
        QMessageBox.information(self, "保存完了", f"面接の記録をWord形式で保存しました。\n{file_path}")

    def prompt_exit(self) -> bool:
        reply = QMessageBox.question(
            self, "終了確認",
            "面接を中断しますか？\n（記録済みの回答は下書きとして保存されています）",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return reply == QMessageBox.StandardButton.Yes

    def closeEvent(self, event: QCloseEvent) -> None:
        if not self._closing_confirmed and self.session.is_loaded and not self._finished:
            if not self.prompt_exit():
                event.ignore()
                return
        self._closing_confirmed = True
        self.session.abandon()
        self.runner.wait_all(int(REQUEST_TIMEOUT * 1000))
        super().closeEvent(event)
