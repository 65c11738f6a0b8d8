# utils/api_utils.py
import logging
import requests
from typing import Dict, Any, Optional

from utils.constants import REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class APIUtils:
    """API連携に関する共通処理を提供するユーティリティクラス。"""

    @staticmethod
    def build_url(base_url: str, path: str) -> str:
        """ベースURLとエンドポイントのパスを結合する。

        Args:
            base_url (str): APIのベースURL（末尾のスラッシュは有無を問わない）。
            path (str): "/api/..." 形式のエンドポイントパス。

        Returns:
            str: 結合済みのURL。
        """
        return f"{base_url.rstrip('/')}/{path.lstrip('/')}"

    @staticmethod
    def make_api_request(
        url: str,
        method: str = "POST",
        data: Optional[Dict[str, Any]] = None,
        timeout: float = REQUEST_TIMEOUT
    ) -> Any:
        """指定されたURLにAPIリクエストを送信し、JSONレスポンスを返す。

        Args:
            url (str): リクエストを送信するAPIエンドポイントのURL。
            method (str): HTTPメソッド（例: "GET", "POST"）。
            data (Optional[Dict[str, Any]]): リクエストボディとして送信するデータ（JSON）。
            timeout (float): タイムアウト秒数。

        Returns:
            Any: APIからのJSONレスポンス。

        Raises:
            requests.exceptions.RequestException: ネットワークエラーやHTTPエラーステータスの場合。
            ValueError: レスポンスがJSONとして解釈できない場合。
        """
        try:
            response = requests.request(method, url, json=data, timeout=timeout)
            response.raise_for_status()  # 2xx以外のステータスコードで例外を発生させる
        except requests.exceptions.RequestException as e:
            logger.warning("API request to %s failed: %s", url, e)
            raise
        try:
            return response.json()
        except ValueError as e:
            logger.warning("API response from %s is not valid JSON: %s", url, e)
            raise

    @staticmethod
    def handle_api_response(response_json: Any) -> Dict[str, Any]:
        """APIレスポンスのJSONを検証し、オブジェクトとして返す。

        Args:
            response_json (Any): APIから返されたパース済みのJSONデータ。

        Returns:
            Dict[str, Any]: レスポンスのオブジェクト。

        Raises:
            ValueError: レスポンスがオブジェクトでない、またはエラーを含む場合。
        """
        if not isinstance(response_json, dict):
            raise ValueError(f"Unexpected API response: {type(response_json).__name__}")
        if response_json.get("error"):
            raise ValueError(f"API Error: {response_json['error']}")
        return response_json
