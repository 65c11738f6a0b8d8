# models/evaluation_models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class DetailedFeedback:
    """評価項目ごとの詳細なフィードバック。

    Attributes:
        technical (str): 技術面のフィードバック。
        communication (str): コミュニケーション面のフィードバック。
        problem_solving (str): 問題解決力のフィードバック。
        overall (str): 総評。
    """
    technical: str = ""
    communication: str = ""
    problem_solving: str = ""
    overall: str = ""


@dataclass
class InterviewEvaluation:
    """採点APIから返された面接評価を表現するデータモデル。

    Attributes:
        overall_score (float): 総合スコア。
        technical_score (float): 技術スコア。
        communication_score (float): コミュニケーションスコア。
        problem_solving_score (float): 問題解決スコア。
        cultural_fit_score (float): カルチャーフィットスコア。
        leadership_score (float): リーダーシップスコア。
        strengths (List[str]): 強み。
        improvements (List[str]): 改善点。
        detailed_feedback (DetailedFeedback): 詳細なフィードバック。
        raw (Dict[str, Any]): APIから受け取ったままのデータ。
    """
    overall_score: float = 0
    technical_score: float = 0
    communication_score: float = 0
    problem_solving_score: float = 0
    cultural_fit_score: float = 0
    leadership_score: float = 0
    strengths: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)
    detailed_feedback: DetailedFeedback = field(default_factory=DetailedFeedback)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterviewEvaluation":
        """APIレスポンスから評価データを生成する。欠けている項目は0や空の値で補う。"""
        feedback = data.get("detailedFeedback") or {}
        return cls(
            overall_score=_score(data.get("overallScore")),
            technical_score=_score(data.get("technicalScore")),
            communication_score=_score(data.get("communicationScore")),
            problem_solving_score=_score(data.get("problemSolvingScore")),
            cultural_fit_score=_score(data.get("culturalFitScore")),
            leadership_score=_score(data.get("leadershipScore")),
            strengths=[str(item) for item in data.get("strengths") or []],
            improvements=[str(item) for item in data.get("improvements") or []],
            detailed_feedback=DetailedFeedback(
                technical=str(feedback.get("technical") or ""),
                communication=str(feedback.get("communication") or ""),
                problem_solving=str(feedback.get("problemSolving") or ""),
                overall=str(feedback.get("overall") or ""),
            ),
            raw=dict(data),
        )

    def score_items(self) -> List[tuple]:
        """表示用に (項目名, スコア) のリストを返す。"""
        return [
            ("総合", self.overall_score),
            ("技術力", self.technical_score),
            ("コミュニケーション", self.communication_score),
            ("問題解決", self.problem_solving_score),
            ("カルチャーフィット", self.cultural_fit_score),
            ("リーダーシップ", self.leadership_score),
        ]


def _score(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0
