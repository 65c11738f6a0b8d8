# models/question_models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class RevealState(Enum):
    """質問文の表示状態。"""
    REVEALING = "revealing"
    REVEALED = "revealed"


@dataclass(frozen=True)
class QuestionState:
    """回答中の1問分の状態を表現するデータモデル（読み取り専用のスナップショット）。

    質問が切り替わるたびに、current_index 以外のすべての値が初期状態に戻ります。

    Attributes:
        current_index (int): 現在の質問番号（0始まり）。
        answer_buffer (str): 入力中の回答テキスト。
        time_remaining (int): 残り時間（秒）。
        timer_active (bool): カウントダウンが作動中かどうか。
        has_started_input (bool): この質問で入力が始まったかどうか。
        reveal_state (RevealState): 質問文の表示状態。
        listening (bool): 音声入力中かどうか。
    """
    current_index: int
    answer_buffer: str
    time_remaining: int
    timer_active: bool
    has_started_input: bool
    reveal_state: RevealState
    listening: bool


@dataclass
class AnswerRecord:
    """セッション全体の回答を保持するデータモデル。

    質問の読み込み時に質問数ぶんの空文字列で初期化され、
    質問を進めるときにのみ該当する位置が書き込まれます。

    Attributes:
        answers (List[str]): 質問番号順の回答リスト。
    """
    answers: List[str] = field(default_factory=list)

    @classmethod
    def sized(cls, count: int) -> "AnswerRecord":
        return cls(answers=[""] * count)

    def __len__(self) -> int:
        return len(self.answers)

    def __getitem__(self, index: int) -> str:
        return self.answers[index]

    def record(self, index: int, text: str) -> None:
        """指定された質問番号の回答を書き込む。

        Raises:
            IndexError: 質問番号が範囲外の場合。
        """
        if not 0 <= index < len(self.answers):
            raise IndexError(f"answer index out of range: {index}")
        self.answers[index] = text or ""

    def as_list(self) -> List[str]:
        """送信用に回答リストのコピーを返す。"""
        return list(self.answers)
