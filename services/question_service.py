# services/question_service.py
import logging
from typing import Tuple

from .base_service import BaseService
from .api_service import APIService
from utils.exceptions import QuestionLoadError
from utils.question_utils import QuestionUtils

logger = logging.getLogger(__name__)


class QuestionService(BaseService[Tuple[str, ...]]):
    """面接の質問リストの取得と整形を行うサービスクラス。"""

    def __init__(self, api_service: APIService) -> None:
        """QuestionServiceのコンストラクタ。

        Args:
            api_service (APIService): 質問を取得するAPIサービス。
        """
        self.api_service = api_service

    def load_data(self, identifier: str) -> Tuple[str, ...]:
        """履歴書IDに対応する質問を取得し、整形済みの質問リストを返す。

        Args:
            identifier (str): 履歴書の一意なID。

        Returns:
            Tuple[str, ...]: 整形済みの質問リスト。

        Raises:
            QuestionLoadError: 取得に失敗した場合、または有効な質問が1件もない場合。
        """
        raw_questions = self.api_service.fetch_interview_questions(identifier)
        questions = QuestionUtils.sanitize_questions(raw_questions)
        logger.info("Kept %d of %d questions after cleanup", len(questions), len(raw_questions))
        if not questions:
            raise QuestionLoadError("有効な面接の質問がありません。")
        return questions
