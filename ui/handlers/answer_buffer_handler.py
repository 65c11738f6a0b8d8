# ui/handlers/answer_buffer_handler.py
from __future__ import annotations
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from utils.constants import SPEECH_SEPARATOR


class AnswerBufferHandler(QObject):
    """
    入力中の回答テキストを保持するクラス。

    キーボード入力（set_typed）は内容を丸ごと置き換え、音声入力（append_speech）は
    末尾に追記します。質問文の表示中は入力を受け付けません。
    質問ごとに最初の入力があったときに input_started を1度だけ送信します。

    Signals:
        text_changed (pyqtSignal): 回答テキストが変化したときに送信します。
        input_started (pyqtSignal): この質問で最初の入力があったときに送信します。
    """
    text_changed = pyqtSignal(str)
    input_started = pyqtSignal()

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.text: str = ""
        self.has_started_input: bool = False
        self.accepting: bool = False

    def open(self) -> None:
        """入力の受け付けを開始する（質問文の表示完了時）。"""
        self.accepting = True

    def reset(self) -> None:
        """質問の切り替え時に、テキストと入力開始フラグを初期化し、入力を締め切る。"""
        self.accepting = False
        self.has_started_input = False
        if self.text:
            self.text = ""
            self.text_changed.emit(self.text)

    def set_typed(self, text: str) -> bool:
        """
        キーボード入力の内容で回答テキストを置き換える。

        Args:
            text (str): 入力欄の現在の内容。

        Returns:
            bool: 受け付けた場合はTrue。質問文の表示中などで拒否した場合はFalse。
        """
        if not self.accepting:
            return False
        self._mark_started()
        if text != self.text:
            self.text = text
            self.text_changed.emit(self.text)
        return True

    def append_speech(self, chunk: str) -> bool:
        """
        音声認識で確定したテキストを末尾に追記する。

        Args:
            chunk (str): 確定したテキスト。

        Returns:
            bool: 受け付けた場合はTrue。拒否した場合、または空のテキストの場合はFalse。
        """
        if not self.accepting or not chunk:
            return False
        self._mark_started()
        self.text = self.text + chunk + SPEECH_SEPARATOR
        self.text_changed.emit(self.text)
        return True

    def _mark_started(self) -> None:
        if self.has_started_input:
            return
        self.has_started_input = True
        self.input_started.emit()
