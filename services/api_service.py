# services/api_service.py
import logging
from typing import Dict, Any, List, Optional

import requests

from utils.api_utils import APIUtils
from utils.constants import API_BASE_URL, QUESTIONS_ENDPOINT, REQUEST_TIMEOUT, SUBMIT_ENDPOINT
from utils.exceptions import QuestionLoadError, SubmissionError

logger = logging.getLogger(__name__)


class APIService:
    """面接の質問生成・採点を行うリモートサービスとの連携を管理するクラス。

    通信エラーやレスポンスの解析エラーは、呼び出し元が扱いやすいように
    QuestionLoadError / SubmissionError に変換して送出します。
    """

    def __init__(self, api_base_url: str = API_BASE_URL, timeout: float = REQUEST_TIMEOUT) -> None:
        """APIServiceのコンストラクタ。

        Args:
            api_base_url (str): 接続先APIのベースURL。
            timeout (float): リクエストのタイムアウト秒数。
        """
        self.api_config: Dict[str, Any] = {"base_url": api_base_url, "timeout": timeout}

    def _url(self, path: str) -> str:
        return APIUtils.build_url(self.api_config["base_url"], path)

    def fetch_interview_questions(self, resume_id: str) -> List[str]:
        """履歴書IDに対応する面接の質問リスト（未整形）を取得する。

        Args:
            resume_id (str): 履歴書の一意なID。

        Returns:
            List[str]: APIが返した質問文のリスト。

        Raises:
            QuestionLoadError: 通信に失敗した場合、またはレスポンスの形式が不正な場合。
        """
        url = self._url(QUESTIONS_ENDPOINT.format(resume_id=resume_id))
        try:
            payload = APIUtils.handle_api_response(
                APIUtils.make_api_request(url, "GET", timeout=self.api_config["timeout"])
            )
        except (requests.RequestException, ValueError) as e:
            raise QuestionLoadError(f"面接の質問を取得できませんでした。\n{e}") from e

        questions = payload.get("questions")
        if not isinstance(questions, list):
            raise QuestionLoadError("面接の質問の形式が正しくありません。")
        logger.info("Fetched %d raw questions for resume %s", len(questions), resume_id)
        return [q for q in questions if isinstance(q, str)]

    def submit_full_interview(self, resume_id: str, answers: List[str]) -> Dict[str, Any]:
        """すべての回答を送信し、採点結果を取得する。

        Args:
            resume_id (str): 履歴書の一意なID。
            answers (List[str]): 質問番号順の回答リスト。

        Returns:
            Dict[str, Any]: 採点APIが返した評価データ（加工しない）。

        Raises:
            SubmissionError: 通信に失敗した場合、またはレスポンスを解析できない場合。
        """
        url = self._url(SUBMIT_ENDPOINT)
        body: Dict[str, Any] = {"resumeId": resume_id, "answers": list(answers)}
        try:
            evaluation = APIUtils.handle_api_response(
                APIUtils.make_api_request(url, "POST", data=body, timeout=self.api_config["timeout"])
            )
        except (requests.RequestException, ValueError) as e:
            raise SubmissionError(f"回答の送信に失敗しました。\n{e}") from e
        logger.info("Submitted %d answers for resume %s", len(answers), resume_id)
        return evaluation

    def describe(self) -> Optional[str]:
        """接続先の説明文を返す。ベースURLが未設定の場合はNone。"""
        base_url = self.api_config.get("base_url")
        return f"{base_url} (timeout={self.api_config['timeout']}s)" if base_url else None
