# utils/request_worker.py
"""ネットワークリクエストをバックグラウンドで実行するためのスレッド機能を提供します。"""
import logging
from typing import Any, Callable, Optional, Set

from PyQt6.QtCore import QThread, pyqtSignal, pyqtSlot, QObject

from utils.loading_state import LoadingState

logger = logging.getLogger(__name__)


class RequestThread(QThread):
    """任意のリクエスト処理をワーカースレッドで実行する。

    UIのフリーズを防ぐため、ネットワークリクエストをバックグラウンドで実行します。

    Signals:
        result_ready (pyqtSignal): 処理に成功した際に、戻り値を送信します。
        error_occurred (pyqtSignal): 処理中に例外が発生した際に、例外オブジェクトを送信します。
    """
    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(object)

    def __init__(self, request: Callable[[], Any], parent: Optional[QObject] = None) -> None:
        """RequestThreadのコンストラクタ。

        Args:
            request (Callable[[], Any]): スレッド内で呼び出す処理。
            parent (Optional[QObject]): 親オブジェクト。デフォルトはNone。
        """
        super().__init__(parent)
        self.request = request

    def run(self) -> None:
        """スレッドのメイン処理。結果または例外をシグナルで通知する。"""
        try:
            result = self.request()
        except Exception as e:
            self.error_occurred.emit(e)
            return
        self.result_ready.emit(result)


class PendingRequest(QObject):
    """1件のリクエストの完了コールバックを保持し、GUIスレッドで呼び出すオブジェクト。

    完了時には成功・失敗を問わず LoadingState を必ず解放します。
    """
    done = pyqtSignal()

    def __init__(
        self,
        loading: LoadingState,
        on_success: Callable[[Any], None],
        on_error: Callable[[Exception], None],
        parent: Optional[QObject] = None
    ) -> None:
        super().__init__(parent)
        self.loading = loading
        self.on_success = on_success
        self.on_error = on_error
        self._finished = False

    @pyqtSlot(object)
    def handle_result(self, result: Any) -> None:
        self._complete(self.on_success, result)

    @pyqtSlot(object)
    def handle_error(self, error: Exception) -> None:
        self._complete(self.on_error, error)

    def _complete(self, callback: Callable[[Any], None], value: Any) -> None:
        if self._finished:
            return
        self._finished = True
        try:
            callback(value)
        finally:
            self.loading.stop()
            self.done.emit()


class RequestRunner(QObject):
    """リクエストの実行と読み込み状態の管理をまとめて行うクラス。

    リクエスト開始前に LoadingState を取得し、完了コールバックの後で必ず解放します。
    コールバックはGUIスレッドで呼び出されます。
    """

    def __init__(self, loading: LoadingState, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.loading = loading
        self._threads: Set[RequestThread] = set()

    def submit(
        self,
        request: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_error: Callable[[Exception], None],
        message: Optional[str] = None
    ) -> None:
        """リクエストを非同期に実行する。

        Args:
            request (Callable[[], Any]): 実行する処理。
            on_success (Callable[[Any], None]): 成功時に戻り値を受け取るコールバック。
            on_error (Callable[[Exception], None]): 失敗時に例外を受け取るコールバック。
            message (Optional[str]): 実行中に表示するメッセージ。
        """
        self.loading.start(message)
        pending = PendingRequest(self.loading, on_success, on_error, self)
        pending.done.connect(pending.deleteLater)
        try:
            self._launch(request, pending)
        except Exception:
            pending.deleteLater()
            self.loading.stop()
            raise

    def _launch(self, request: Callable[[], Any], pending: PendingRequest) -> None:
        """リクエストをワーカースレッドで開始する。"""
        thread = RequestThread(request, self)
        thread.result_ready.connect(pending.handle_result)
        thread.error_occurred.connect(pending.handle_error)
        thread.finished.connect(lambda: self._release_thread(thread))
        self._threads.add(thread)
        thread.start()

    def _release_thread(self, thread: RequestThread) -> None:
        self._threads.discard(thread)
        thread.deleteLater()

    def wait_all(self, msecs: int = 3000) -> None:
        """実行中のスレッドの終了を待つ。アプリケーション終了時に使用する。"""
        for thread in list(self._threads):
            if not thread.wait(msecs):
                logger.warning("Request thread did not finish within %d ms", msecs)
