# ui/screens/interview_screen.py
from __future__ import annotations
from typing import Optional

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame
)
from PyQt6.QtCore import Qt

from ui.components import CountdownLabel
from ui.handlers.session_handler import SessionHandler
from ui.widgets import AnswerEditor


class InterviewScreen(QWidget):
    """
    面接の回答画面
    - 質問文のタイプライター表示
    - 回答入力（キーボード / 音声）
    - 残り時間の表示（入力開始後）
    - 次の質問へ / 面接を完了
    """

    def __init__(self, session: SessionHandler, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.session = session
        self._question_prefix = ""

        self.setup_ui()
        self.setup_connections()
        self._set_input_enabled(False)

    def setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        # ヘッダー
        header_layout = QHBoxLayout()
        title_layout = QVBoxLayout()
        self.title_label = QLabel("面接セッション")
        self.title_label.setStyleSheet("font-size: 18pt; font-weight: bold;")
        self.progress_label = QLabel("質問 -/-")
        title_layout.addWidget(self.title_label)
        title_layout.addWidget(self.progress_label)
        header_layout.addLayout(title_layout)
        header_layout.addStretch()
        self.countdown_label = CountdownLabel(self.session.countdown.time_limit)
        self.countdown_label.setVisible(False)
        header_layout.addWidget(self.countdown_label)
        layout.addLayout(header_layout)

        # 質問
        question_frame = QFrame()
        question_frame.setFrameShape(QFrame.Shape.StyledPanel)
        question_frame.setMinimumHeight(120)
        question_layout = QVBoxLayout(question_frame)
        self.question_label = QLabel()
        self.question_label.setWordWrap(True)
        self.question_label.setAlignment(Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignLeft)
        self.question_label.setStyleSheet("font-size: 13pt;")
        question_layout.addWidget(self.question_label)
        layout.addWidget(question_frame)

        # 回答
        answer_layout = QHBoxLayout()
        self.answer_editor = AnswerEditor()
        self.answer_editor.setMinimumHeight(200)
        answer_layout.addWidget(self.answer_editor)
        self.mic_button = QPushButton("🎤 音声入力")
        self.mic_button.setCheckable(True)
        answer_layout.addWidget(self.mic_button, alignment=Qt.AlignmentFlag.AlignTop)
        layout.addLayout(answer_layout)

        self.next_button = QPushButton("次の質問")
        self.next_button.setMinimumHeight(40)
        layout.addWidget(self.next_button)

        if not self.session.speech.is_available:
            self.mic_button.setToolTip("この環境では音声入力を利用できません。")

    def setup_connections(self) -> None:
        self.session.question_changed.connect(self._on_question_changed)
        self.session.reveal_text_changed.connect(self._on_reveal_text_changed)
        self.session.reveal_finished.connect(self._on_reveal_finished)
        self.session.answer_changed.connect(self.answer_editor.set_content)
        self.session.timer_started.connect(lambda: self.countdown_label.setVisible(True))
        self.session.time_changed.connect(self.countdown_label.set_remaining)
        self.session.listening_changed.connect(self._on_listening_changed)
        self.session.submitting_changed.connect(lambda _: self._refresh_buttons())

        self.answer_editor.content_modified.connect(self._on_answer_edited)
        self.mic_button.clicked.connect(self._on_mic_clicked)
        self.next_button.clicked.connect(self.session.advance)

    def _on_question_changed(self, index: int, total: int) -> None:
        self.progress_label.setText(f"質問 {index + 1}/{total}")
        self._question_prefix = f"Q{index + 1}. "
        self.next_button.setText("面接を完了" if index == total - 1 else "次の質問")
        self.countdown_label.setVisible(False)
        self.answer_editor.set_content("")
        self._set_input_enabled(False)

    def _on_reveal_text_changed(self, text: str) -> None:
        cursor = "" if not self.session.reveal.is_revealing else "|"
        self.question_label.setText(f"{self._question_prefix}{text}{cursor}")

    def _on_reveal_finished(self) -> None:
        self.question_label.setText(f"{self._question_prefix}{self.session.reveal.visible_text}")
        self._set_input_enabled(True)
        self.answer_editor.setFocus()

    def _on_answer_edited(self, text: str) -> None:
        if not self.session.submit_answer(text):
            # 受け付けられなかった入力は元に戻す
            self.answer_editor.set_content(self.session.buffer.text)

    def _on_mic_clicked(self) -> None:
        self.session.toggle_listening()
        self.mic_button.setChecked(self.session.speech.listening)

    def _on_listening_changed(self, listening: bool) -> None:
        self.mic_button.setChecked(listening)
        self.mic_button.setText("⏹ 停止" if listening else "🎤 音声入力")

    def _set_input_enabled(self, enabled: bool) -> None:
        self.answer_editor.setEnabled(enabled)
        self._refresh_buttons()

    def _refresh_buttons(self) -> None:
        ready = self.session.can_advance()
        self.next_button.setEnabled(ready)
        self.mic_button.setEnabled(ready and self.session.speech.is_available)
