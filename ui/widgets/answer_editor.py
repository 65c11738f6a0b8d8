from typing import Optional

from PyQt6.QtCore import pyqtSignal, QMimeData
from PyQt6.QtGui import QFont, QTextCursor
from PyQt6.QtWidgets import QPlainTextEdit, QWidget

class AnswerEditor(QPlainTextEdit):
    """
    面接の回答を入力するテキスト入力ウィジェット。

    ユーザーの入力によって内容が変わった場合にのみ `content_modified` シグナルを発行します。
    音声入力などプログラムからの更新（set_content）ではシグナルを発行しません。

    Attributes:
        content_modified (pyqtSignal): ユーザーが内容を変更したときに、新しい内容を送信するシグナル。
    """
    content_modified = pyqtSignal(str)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        """
        AnswerEditorのコンストラクタ。

        Args:
            parent (Optional[QWidget]): 親ウィジェット。
        """
        super().__init__(parent)
        self._internal_change: bool = False
        self.setFont(QFont(self.font().family(), 12))
        self.setPlaceholderText("ここに回答を入力してください...")
        self.textChanged.connect(self._on_text_changed)

    def _on_text_changed(self) -> None:
        """
        textChangedシグナルを処理する内部スロット。
        プログラムによる内部的な変更でない場合にのみ `content_modified` シグナルを発行する。
        """
        if self._internal_change:
            return
        self.content_modified.emit(self.toPlainText())

    def insertFromMimeData(self, source: QMimeData) -> None:
        """
        ペースト操作をオーバーライドし、プレーンテキストのみを挿入するようにする。
        """
        if source.hasText():
            self.insertPlainText(source.text())

    def get_content(self) -> str:
        """
        エディタの現在のテキスト内容を返す。

        Returns:
            str: プレーンテキストの内容。
        """
        return self.toPlainText()

    def set_content(self, text: str) -> None:
        """
        エディタのテキスト内容をプログラム的に設定する。
        内容が同じ場合は何もせず、カーソル位置を保つ。
        この操作では `content_modified` シグナルは発行されない。

        Args:
            text (str): 設定するテキスト。
        """
        if text == self.toPlainText():
            return
        self._internal_change = True
        try:
            self.setPlainText(text)
            self.moveCursor(QTextCursor.MoveOperation.End)
        finally:
            self._internal_change = False
