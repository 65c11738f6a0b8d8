# ui/handlers/reveal_handler.py
from __future__ import annotations
from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from models.question_models import RevealState
from utils.constants import REVEAL_INTERVAL_MS


class RevealHandler(QObject):
    """
    質問文をタイプライターのように1文字ずつ表示するクラス。

    start() で新しい質問の表示を最初からやり直し、REVEAL_INTERVAL_MS ごとに
    1文字ずつ表示中のテキストに追加します。全文を表示し終えると revealed を送信します。

    Signals:
        text_changed (pyqtSignal): 表示中のテキストが変化したときに送信します。
        revealed (pyqtSignal): 全文の表示が完了したときに送信します。
    """
    text_changed = pyqtSignal(str)
    revealed = pyqtSignal()

    def __init__(self, interval_ms: int = REVEAL_INTERVAL_MS, parent: Optional[QObject] = None) -> None:
        """
        RevealHandlerのコンストラクタ。

        Args:
            interval_ms (int): 1文字を追加する間隔（ミリ秒）。
            parent (Optional[QObject]): 親オブジェクト。
        """
        super().__init__(parent)
        self._question: str = ""
        self._visible: str = ""
        self._state: RevealState = RevealState.REVEALED
        self.timer = QTimer(self)
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self.tick)

    @property
    def state(self) -> RevealState:
        return self._state

    @property
    def visible_text(self) -> str:
        return self._visible

    @property
    def is_revealing(self) -> bool:
        return self._state is RevealState.REVEALING

    def start(self, question: str) -> None:
        """
        新しい質問の表示を最初から開始する。前の質問の表示途中であれば破棄する。

        Args:
            question (str): 表示する質問文。空文字列の場合は即座に表示完了となる。
        """
        self.timer.stop()
        self._question = question
        self._visible = ""
        self.text_changed.emit(self._visible)
        if not question:
            self._finish()
            return
        self._state = RevealState.REVEALING
        self.timer.start()

    def cancel(self) -> None:
        """表示途中のタイマーを破棄する。表示状態はそのまま残る。"""
        self.timer.stop()

    def tick(self) -> None:
        """1文字を追加する。全文を表示した時点で表示完了となる。"""
        if self._state is not RevealState.REVEALING:
            return
        self._visible = self._question[:len(self._visible) + 1]
        self.text_changed.emit(self._visible)
        if len(self._visible) == len(self._question):
            self._finish()

    def _finish(self) -> None:
        self.timer.stop()
        self._state = RevealState.REVEALED
        self.revealed.emit()
