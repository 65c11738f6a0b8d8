# ui/screens/dashboard_screen.py
from __future__ import annotations
from typing import Optional

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel, QPushButton,
    QProgressBar, QListWidget, QTextBrowser, QGroupBox
)
from PyQt6.QtCore import pyqtSignal

from models.evaluation_models import InterviewEvaluation


class DashboardScreen(QWidget):
    """
    面接の評価結果画面
    - 項目別スコア
    - 強み / 改善点
    - 詳細なフィードバック
    - Word形式での保存

    Signals:
        export_requested (pyqtSignal): 「Word形式で保存」が押されたときに送信します。
        close_requested (pyqtSignal): 「終了」が押されたときに送信します。
    """
    export_requested = pyqtSignal()
    close_requested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.evaluation: Optional[InterviewEvaluation] = None
        self.score_bars = {}
        self.setup_ui()

    def setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        title = QLabel("面接の評価結果")
        title.setStyleSheet("font-size: 18pt; font-weight: bold;")
        layout.addWidget(title)

        score_box = QGroupBox("スコア")
        self.score_grid = QGridLayout(score_box)
        layout.addWidget(score_box)

        lists_layout = QHBoxLayout()
        strengths_box = QGroupBox("強み")
        self.strengths_list = QListWidget()
        QVBoxLayout(strengths_box).addWidget(self.strengths_list)
        improvements_box = QGroupBox("改善点")
        self.improvements_list = QListWidget()
        QVBoxLayout(improvements_box).addWidget(self.improvements_list)
        lists_layout.addWidget(strengths_box)
        lists_layout.addWidget(improvements_box)
        layout.addLayout(lists_layout)

        feedback_box = QGroupBox("詳細なフィードバック")
        self.feedback_browser = QTextBrowser()
        QVBoxLayout(feedback_box).addWidget(self.feedback_browser)
        layout.addWidget(feedback_box)

        button_layout = QHBoxLayout()
        button_layout.addStretch()
        self.export_button = QPushButton("Word形式で保存")
        self.close_button = QPushButton("終了")
        button_layout.addWidget(self.export_button)
        button_layout.addWidget(self.close_button)
        layout.addLayout(button_layout)

        self.export_button.clicked.connect(self.export_requested)
        self.close_button.clicked.connect(self.close_requested)

    def show_evaluation(self, evaluation: InterviewEvaluation) -> None:
        """評価結果を画面に反映する。"""
        self.evaluation = evaluation

        for row, (label, score) in enumerate(evaluation.score_items()):
            bar = self.score_bars.get(label)
            if bar is None:
                bar = QProgressBar()
                bar.setRange(0, 100)
                self.score_grid.addWidget(QLabel(label), row, 0)
                self.score_grid.addWidget(bar, row, 1)
                self.score_bars[label] = bar
            bar.setValue(int(round(min(max(score, 0), 100))))
            bar.setFormat(f"{score:g}")

        self.strengths_list.clear()
        self.strengths_list.addItems(evaluation.strengths)
        self.improvements_list.clear()
        self.improvements_list.addItems(evaluation.improvements)

        feedback = evaluation.detailed_feedback
        sections = [
            ("技術面", feedback.technical),
            ("コミュニケーション", feedback.communication),
            ("問題解決", feedback.problem_solving),
            ("総評", feedback.overall),
        ]
        self.feedback_browser.setPlainText(
            "\n\n".join(f"【{title}】\n{text}" for title, text in sections if text)
        )
