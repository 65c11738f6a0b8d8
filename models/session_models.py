# models/session_models.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List


@dataclass
class InterviewSessionData:
    """面接セッションの下書き（途中経過）を表現するデータモデル。

    Attributes:
        resume_id (str): 履歴書（セッション）の一意なID。
        questions (List[str]): 整形済みの質問リスト。
        answers (List[str]): 質問番号順の回答リスト。
        current_index (int): 保存時点の質問番号。
        created_at (str): セッションの開始日時（ISO 8601形式）。
        modified_at (str): セッションの最終更新日時（ISO 8601形式）。
    """
    resume_id: str
    questions: List[str]
    answers: List[str]
    current_index: int = 0
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    modified_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterviewSessionData":
        return cls(
            resume_id=str(data["resume_id"]),
            questions=list(data.get("questions", [])),
            answers=list(data.get("answers", [])),
            current_index=int(data.get("current_index", 0)),
            created_at=data.get("created_at") or datetime.now().isoformat(),
            modified_at=data.get("modified_at") or datetime.now().isoformat(),
        )
