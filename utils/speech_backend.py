# utils/speech_backend.py
"""音声認識機能（マイク入力 + 文字起こし）のバックエンドを提供します。

SpeechBackend は音声認識機能のインターフェースです。この環境で利用可能な実装は
detect_speech_backend() で取得します。利用できない場合は None が返り、
呼び出し側は音声入力を無効化してテキスト入力のみで動作します。

- WhisperSpeechBackend: sounddevice でマイク音声を取り込み、faster-whisper で
  一定時間ごとに文字起こしを行う実装。
"""
import importlib.util
import logging
import queue
from typing import Any, Dict, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from utils.constants import (
    SPEECH_LANGUAGE, SPEECH_MODEL, SPEECH_SAMPLE_RATE, SPEECH_WINDOW_SECONDS
)

logger = logging.getLogger(__name__)

_MODEL_CACHE: Dict[str, Any] = {}


class SpeechBackend(QObject):
    """音声認識機能のインターフェース。

    Signals:
        result_received (pyqtSignal): 認識結果 (text, is_final) を送信します。
            is_final が False の結果は暫定的なもので、後で変わる可能性があります。
        error_occurred (pyqtSignal): 取り込み・認識中のエラーメッセージを送信します。
        ended (pyqtSignal): 音声の取り込みが終了したときに送信します。
    """
    result_received = pyqtSignal(str, bool)
    error_occurred = pyqtSignal(str)
    ended = pyqtSignal()

    def start(self) -> None:
        """音声の取り込みを開始する。"""
        raise NotImplementedError

    def stop(self) -> None:
        """音声の取り込みを停止する。"""
        raise NotImplementedError


class _CaptureThread(QThread):
    """マイク入力を取り込み、一定時間ごとに文字起こしするワーカースレッド。

    停止要求後は取り込み済みの音声を破棄し、処理中の文字起こし結果も送信しません。
    """
    segment_ready = pyqtSignal(str, bool)
    capture_failed = pyqtSignal(str)

    def __init__(self, model_name: str, sample_rate: int, window_seconds: int,
                 parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.model_name = model_name
        self.sample_rate = sample_rate
        self.window_samples = sample_rate * window_seconds
        self._stop_requested = False

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def request_stop(self) -> None:
        self._stop_requested = True

    def run(self) -> None:
        try:
            self._capture()
        except Exception as e:
            logger.exception("Speech capture failed")
            if not self._stop_requested:
                self.capture_failed.emit(str(e))

    def _capture(self) -> None:
        import numpy as np
        import sounddevice as sd

        model = _load_model(self.model_name)
        chunks: "queue.Queue[Any]" = queue.Queue()

        def _callback(indata, frames, time_info, status):
            if status:
                logger.debug("InputStream status: %s", status)
            chunks.put(indata.copy())

        buffered = []
        buffered_samples = 0
        with sd.InputStream(samplerate=self.sample_rate, channels=1,
                            dtype="float32", callback=_callback):
            while not self._stop_requested:
                try:
                    chunk = chunks.get(timeout=0.1)
                except queue.Empty:
                    continue
                buffered.append(chunk.reshape(-1))
                buffered_samples += len(chunk)
                if buffered_samples >= self.window_samples:
                    self._transcribe(model, np.concatenate(buffered))
                    buffered, buffered_samples = [], 0
        if buffered_samples:
            logger.debug("Discarded %d untranscribed samples", buffered_samples)

    def _transcribe(self, model: Any, audio: Any) -> None:
        segments, _ = model.transcribe(
            audio,
            beam_size=1,
            temperature=0.0,
            vad_filter=True,
            language=SPEECH_LANGUAGE,
        )
        text = "".join(segment.text for segment in segments).strip()
        # 文字起こし中に停止された場合は結果を捨てる
        if text and not self._stop_requested:
            self.segment_ready.emit(text, True)


def _load_model(model_name: str) -> Any:
    if model_name not in _MODEL_CACHE:
        from faster_whisper import WhisperModel
        logger.info("Loading Whisper model '%s'", model_name)
        _MODEL_CACHE[model_name] = WhisperModel(model_name, compute_type="int8")
    return _MODEL_CACHE[model_name]


class WhisperSpeechBackend(SpeechBackend):
    """sounddevice と faster-whisper を用いた音声認識バックエンド。

    取り込みは連続モードで行い、SPEECH_WINDOW_SECONDS 秒ごとに確定した
    テキストを result_received で通知します。start() のたびに新しい取り込みスレッドを
    作成し、停止済みのスレッドから届く結果やエラーは破棄します。
    """

    def __init__(self, model_name: str = SPEECH_MODEL, sample_rate: int = SPEECH_SAMPLE_RATE,
                 window_seconds: int = SPEECH_WINDOW_SECONDS, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.model_name = model_name
        self.sample_rate = sample_rate
        self.window_seconds = window_seconds
        self._thread: Optional[_CaptureThread] = None

    @property
    def is_capturing(self) -> bool:
        return self._thread is not None and not self._thread.stop_requested

    def start(self) -> None:
        if self.is_capturing:
            return
        if self._thread is not None:
            logger.debug("Replacing a capture thread that is still stopping")
        thread = _CaptureThread(self.model_name, self.sample_rate, self.window_seconds, self)
        thread.segment_ready.connect(self._on_segment)
        thread.capture_failed.connect(self._on_capture_failed)
        thread.finished.connect(self._on_thread_finished)
        self._thread = thread
        thread.start()

    def stop(self) -> None:
        if self._thread is not None:
            self._thread.request_stop()

    def _is_current(self, thread: Optional[QObject]) -> bool:
        return thread is not None and thread is self._thread and not self._thread.stop_requested

    @pyqtSlot(str, bool)
    def _on_segment(self, text: str, is_final: bool) -> None:
        if self._is_current(self.sender()):
            self.result_received.emit(text, is_final)

    @pyqtSlot(str)
    def _on_capture_failed(self, message: str) -> None:
        if self._is_current(self.sender()):
            self.error_occurred.emit(message)

    @pyqtSlot()
    def _on_thread_finished(self) -> None:
        thread = self.sender()
        if thread is None:
            return
        thread.deleteLater()
        if thread is self._thread:
            self._thread = None
            self.ended.emit()


def detect_speech_backend(parent: Optional[QObject] = None) -> Optional[SpeechBackend]:
    """この環境で利用可能な音声認識バックエンドを返す。

    必要なライブラリ（sounddevice, faster-whisper）がインストールされていない場合や、
    入力デバイスが見つからない場合は None を返します。

    Args:
        parent (Optional[QObject]): バックエンドの親オブジェクト。

    Returns:
        Optional[SpeechBackend]: 利用可能なバックエンド。利用できない場合はNone。
    """
    for module_name in ("sounddevice", "faster_whisper", "numpy"):
        if importlib.util.find_spec(module_name) is None:
            logger.info("Speech input disabled: '%s' is not installed", module_name)
            return None
    try:
        import sounddevice as sd
    except OSError as e:
        # PortAudio ライブラリが見つからない
        logger.info("Speech input disabled: %s", e)
        return None
    try:
        sd.query_devices(kind="input")
    except (sd.PortAudioError, ValueError) as e:
        logger.info("Speech input disabled: no input device (%s)", e)
        return None
    return WhisperSpeechBackend(parent=parent)
