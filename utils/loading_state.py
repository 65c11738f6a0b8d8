# utils/loading_state.py
"""アプリケーション全体で共有する「処理中」状態を提供します。"""
from contextlib import contextmanager
from typing import Iterator, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from utils.constants import DEFAULT_LOADING_MESSAGE


class LoadingState(QObject):
    """通信中などの「処理中」状態を一元管理するクラス。

    start()/stop() は入れ子にでき、すべての start() に対応する stop() が
    呼ばれた時点で処理中状態が解除されます。

    Signals:
        loading_changed (pyqtSignal): 処理中状態が変化したときに (is_loading, message) を送信します。
    """
    loading_changed = pyqtSignal(bool, str)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._depth: int = 0
        self._message: str = DEFAULT_LOADING_MESSAGE

    @property
    def is_loading(self) -> bool:
        return self._depth > 0

    @property
    def message(self) -> str:
        return self._message

    def start(self, message: Optional[str] = None) -> None:
        """処理中状態を開始する。

        Args:
            message (Optional[str]): 表示するメッセージ。省略時は既定のメッセージ。
        """
        self._depth += 1
        if message:
            self._message = message
        self.loading_changed.emit(True, self._message)

    def stop(self) -> None:
        """処理中状態を1段階解除する。最後の解除でメッセージも既定値に戻る。"""
        if self._depth == 0:
            return
        self._depth -= 1
        if self._depth == 0:
            self._message = DEFAULT_LOADING_MESSAGE
            self.loading_changed.emit(False, self._message)

    @contextmanager
    def hold(self, message: Optional[str] = None) -> Iterator["LoadingState"]:
        """with 文のブロックの間だけ処理中状態を保持する。例外発生時も必ず解除される。"""
        self.start(message)
        try:
            yield self
        finally:
            self.stop()
