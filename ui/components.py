# ui/components.py
"""
アプリケーション全体で再利用されるカスタムUIコンポーネントを提供します。

- format_time: 秒数を "m:ss" 形式の文字列に変換する関数。
- CountdownLabel: 残り時間を表示し、残りが少なくなると色を変えるラベル。
- LoadingOverlay: 通信中に親ウィジェット全体を覆って表示するオーバーレイ。
"""
from __future__ import annotations
from typing import Optional

from PyQt6.QtWidgets import QLabel, QWidget, QVBoxLayout, QProgressBar
from PyQt6.QtCore import Qt, QEvent, QObject


def format_time(seconds: int) -> str:
    """
    秒数を "m:ss" 形式の文字列に変換する。

    Args:
        seconds (int): 秒数。負の値は0として扱う。

    Returns:
        str: 例えば 125 秒なら "2:05"。
    """
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02}"


class CountdownLabel(QLabel):
    """
    残り時間を表示するラベル。

    残り時間が制限時間の30%を下回ると赤色で表示します。
    """
    NORMAL_STYLE = "font-size: 16pt; color: #2ecc40; font-weight: bold;"
    WARNING_STYLE = "font-size: 16pt; color: #ff4136; font-weight: bold;"

    def __init__(self, time_limit: int, parent: Optional[QWidget] = None) -> None:
        """
        CountdownLabelのコンストラクタ。

        Args:
            time_limit (int): 制限時間（秒）。残り時間の割合の計算に使用する。
            parent (Optional[QWidget]): 親ウィジェット。
        """
        super().__init__(parent)
        self.time_limit: int = time_limit
        self.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        self.set_remaining(time_limit)

    def set_remaining(self, seconds: int) -> None:
        """残り時間の表示を更新する。"""
        self.setText(format_time(seconds))
        ratio = seconds / self.time_limit if self.time_limit else 0
        self.setStyleSheet(self.WARNING_STYLE if ratio < 0.3 else self.NORMAL_STYLE)


class LoadingOverlay(QWidget):
    """
    通信中に親ウィジェット全体を半透明で覆い、メッセージを表示するオーバーレイ。

    親ウィジェットのリサイズに追従します。
    """

    def __init__(self, parent: QWidget) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet("background-color: rgba(0, 0, 0, 140);")

        layout = QVBoxLayout(self)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.message_label = QLabel()
        self.message_label.setStyleSheet("color: white; font-size: 14pt; background: transparent;")
        self.message_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.progress = QProgressBar()
        self.progress.setRange(0, 0)  # 終了時間が不明なためビジーインジケーターとして表示
        self.progress.setFixedWidth(240)
        layout.addWidget(self.message_label)
        layout.addWidget(self.progress, alignment=Qt.AlignmentFlag.AlignCenter)

        parent.installEventFilter(self)
        self.hide()

    def set_loading(self, loading: bool, message: str) -> None:
        """
        オーバーレイの表示状態を切り替える。

        Args:
            loading (bool): 表示する場合はTrue。
            message (str): 表示するメッセージ。
        """
        self.message_label.setText(message)
        if loading:
            self.setGeometry(self.parentWidget().rect())
            self.raise_()
            self.show()
        else:
            self.hide()

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        """親ウィジェットのリサイズに合わせてオーバーレイの大きさを調整する。"""
        if obj is self.parentWidget() and event.type() == QEvent.Type.Resize:
            self.setGeometry(obj.rect())
        return False
