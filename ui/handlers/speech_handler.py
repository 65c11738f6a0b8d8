# ui/handlers/speech_handler.py
from __future__ import annotations
import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from utils.exceptions import CapabilityUnavailable, SpeechCaptureError
from utils.speech_backend import SpeechBackend

logger = logging.getLogger(__name__)


class SpeechHandler(QObject):
    """
    音声認識バックエンドをオン/オフの切り替え操作としてまとめるクラス。

    確定した認識結果だけを transcript_finalized で通知し、暫定的な結果は破棄します。
    取り込み中のエラーや取り込みの終了時は、セッションを止めずに listening を False に戻します。

    Signals:
        listening_changed (pyqtSignal): 音声入力のオン/オフが変化したときに送信します。
        transcript_finalized (pyqtSignal): 確定したテキストを送信します。
        capture_failed (pyqtSignal): 取り込み中のエラー（SpeechCaptureError）を送信します。
    """
    listening_changed = pyqtSignal(bool)
    transcript_finalized = pyqtSignal(str)
    capture_failed = pyqtSignal(object)

    def __init__(self, backend: Optional[SpeechBackend], parent: Optional[QObject] = None) -> None:
        """
        SpeechHandlerのコンストラクタ。

        Args:
            backend (Optional[SpeechBackend]): 音声認識バックエンド。利用できない環境ではNone。
            parent (Optional[QObject]): 親オブジェクト。
        """
        super().__init__(parent)
        self.backend = backend
        self.listening: bool = False
        if backend is not None:
            backend.result_received.connect(self._on_result)
            backend.error_occurred.connect(self._on_error)
            backend.ended.connect(self._on_ended)

    @property
    def is_available(self) -> bool:
        return self.backend is not None

    def toggle_listening(self) -> bool:
        """
        音声入力のオン/オフを切り替える。

        Returns:
            bool: 切り替え後の listening の値。

        Raises:
            CapabilityUnavailable: 音声認識が利用できない環境の場合。
        """
        if self.listening:
            self.stop_listening()
        else:
            self.start_listening()
        return self.listening

    def start_listening(self) -> None:
        """音声入力を開始する。すでに開始している場合は何もしない。

        Raises:
            CapabilityUnavailable: 音声認識が利用できない環境の場合。
        """
        if self.backend is None:
            raise CapabilityUnavailable()
        if self.listening:
            return
        self.backend.start()
        self._set_listening(True)

    def stop_listening(self) -> None:
        """音声入力を停止する。すでに停止している場合は何もしない。"""
        if not self.listening:
            return
        if self.backend is not None:
            self.backend.stop()
        self._set_listening(False)

    def _set_listening(self, listening: bool) -> None:
        if listening == self.listening:
            return
        self.listening = listening
        self.listening_changed.emit(listening)

    def _on_result(self, text: str, is_final: bool) -> None:
        # 停止後に届いた結果は次の質問に混ざらないよう破棄する
        if not is_final or not self.listening:
            return
        text = text.strip()
        if text:
            self.transcript_finalized.emit(text)

    def _on_error(self, message: str) -> None:
        logger.error("Speech recognition error: %s", message)
        self._set_listening(False)
        self.capture_failed.emit(SpeechCaptureError(message))

    def _on_ended(self) -> None:
        self._set_listening(False)
