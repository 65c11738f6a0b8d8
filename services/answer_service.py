# services/answer_service.py
import logging
import re
from datetime import datetime
from typing import List, Optional

from docx import Document
from docx.shared import Pt

from .base_service import BaseService
from .storage_service import StorageService
from models.evaluation_models import InterviewEvaluation
from models.session_models import InterviewSessionData

logger = logging.getLogger(__name__)


class AnswerService(BaseService[InterviewSessionData]):
    """回答データの管理と操作を行うサービスクラス。

    回答途中のセッション（下書き）の保存・読み込み・削除と、
    外部ファイル形式（Word）へのエクスポート機能を提供します。
    """

    def __init__(self, storage_service: StorageService) -> None:
        """AnswerServiceのコンストラクタ。

        Args:
            storage_service (StorageService): 下書きの保存先。
        """
        self.storage_service = storage_service

    @staticmethod
    def draft_file_name(resume_id: str) -> str:
        """履歴書IDから下書きのファイル名を生成する。"""
        safe_id = re.sub(r"[^A-Za-z0-9_.-]", "_", resume_id)
        return f"draft_{safe_id}.json"

    def load_data(self, identifier: str) -> Optional[InterviewSessionData]:
        """指定された履歴書IDの下書きを読み込む。

        Args:
            identifier (str): 履歴書の一意なID。

        Returns:
            Optional[InterviewSessionData]: 読み込まれた下書き。見つからない場合はNone。
        """
        data = self.storage_service.load_json(self.draft_file_name(identifier))
        if not isinstance(data, dict):
            return None
        try:
            return InterviewSessionData.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding unreadable draft for %s: %s", identifier, e)
            return None

    def save_data(self, data: InterviewSessionData) -> None:
        """下書きを保存する。

        Args:
            data (InterviewSessionData): 保存するセッションデータ。
        """
        data.modified_at = datetime.now().isoformat()
        self.storage_service.save_json(self.draft_file_name(data.resume_id), data.to_dict())

    def delete_draft(self, resume_id: str) -> None:
        """送信が完了したセッションの下書きを削除する。"""
        self.storage_service.delete(self.draft_file_name(resume_id))

    def export_to_word(
        self,
        session: InterviewSessionData,
        evaluation: Optional[InterviewEvaluation],
        file_path: str
    ) -> None:
        """質問・回答と評価結果をMicrosoft Word形式（.docx）でエクスポートする。

        Args:
            session (InterviewSessionData): エクスポートするセッションデータ。
            evaluation (Optional[InterviewEvaluation]): 評価結果。未採点の場合はNone。
            file_path (str): 出力するWordファイルのパス。
        """
        doc = Document()
        style = doc.styles['Normal']
        style.font.size = Pt(11)

        doc.add_heading("面接練習の記録", 0)
        doc.add_paragraph(f"履歴書ID: {session.resume_id}")
        doc.add_paragraph(f"実施日時: {session.created_at}")

        if evaluation is not None:
            doc.add_heading("評価", 1)
            table = doc.add_table(rows=0, cols=2)
            table.style = 'Table Grid'
            for label, score in evaluation.score_items():
                cells = table.add_row().cells
                cells[0].text = label
                cells[1].text = f"{score:g}"
            self._add_list(doc, "強み", evaluation.strengths)
            self._add_list(doc, "改善点", evaluation.improvements)
            feedback = evaluation.detailed_feedback
            doc.add_heading("詳細なフィードバック", 1)
            for label, text in (
                ("技術面", feedback.technical),
                ("コミュニケーション", feedback.communication),
                ("問題解決", feedback.problem_solving),
                ("総評", feedback.overall),
            ):
                if text:
                    doc.add_heading(label, 2)
                    doc.add_paragraph(text)

        doc.add_heading("質問と回答", 1)
        for number, question in enumerate(session.questions, 1):
            answer = session.answers[number - 1] if number <= len(session.answers) else ""
            doc.add_heading(f"Q{number}. {question}", 2)
            doc.add_paragraph(answer or "（無回答）")

        doc.save(file_path)
        logger.info("Exported interview record to %s", file_path)

    @staticmethod
    def _add_list(doc, title: str, items: List[str]) -> None:
        if not items:
            return
        doc.add_heading(title, 1)
        for item in items:
            doc.add_paragraph(item, style='List Bullet')
