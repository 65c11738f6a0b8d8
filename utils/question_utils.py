# utils/question_utils.py
import re
from typing import Iterable, List, Tuple

from utils.constants import MIN_QUESTION_LENGTH, QUESTION_LABELS

_LABEL_PATTERN = re.compile(
    r"^(?:" + "|".join(re.escape(label) for label in QUESTION_LABELS) + r")",
    re.IGNORECASE,
)


class QuestionUtils:
    """面接の質問文に関する共通処理を提供するユーティリティクラス。"""

    @staticmethod
    def clean_question(raw: str) -> str:
        """質問文の前後の空白と、先頭の "Introduction:" / "Conclusion:" ラベルを取り除く。

        Args:
            raw (str): APIから取得した生の質問文。

        Returns:
            str: 整形後の質問文。
        """
        text = raw.strip()
        text = _LABEL_PATTERN.sub("", text, count=1)
        return text.strip()

    @staticmethod
    def sanitize_questions(raw_questions: Iterable[str]) -> Tuple[str, ...]:
        """生の質問リストを整形し、短すぎる項目を除外する。

        Args:
            raw_questions (Iterable[str]): APIから取得した質問文のリスト。

        Returns:
            Tuple[str, ...]: 整形済みで MIN_QUESTION_LENGTH 文字以上の質問文（元の順序を維持）。
        """
        cleaned: List[str] = []
        for raw in raw_questions:
            if not isinstance(raw, str):
                continue
            question = QuestionUtils.clean_question(raw)
            if len(question) >= MIN_QUESTION_LENGTH:
                cleaned.append(question)
        return tuple(cleaned)

    @staticmethod
    def format_transcript(questions: Iterable[str], answers: Iterable[str]) -> str:
        """質問と回答をプレーンテキストの記録形式に整形する。

        Args:
            questions (Iterable[str]): 質問文のリスト。
            answers (Iterable[str]): 各質問に対応する回答のリスト。

        Returns:
            str: 整形された文字列。
        """
        lines = []
        for number, (question, answer) in enumerate(zip(questions, answers), 1):
            lines.append(f"Q{number}: {question}")
            lines.append(f"A{number}: {answer or '（無回答）'}")
            lines.append("")
        return "\n".join(lines)
