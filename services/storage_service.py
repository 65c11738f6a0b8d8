# services/storage_service.py
import json
import logging
import os
from typing import Dict, Any, Optional, Union, List

from utils.constants import DRAFT_DIR

logger = logging.getLogger(__name__)


class StorageService:
    """ローカルファイルシステムへのデータ永続化を管理するサービスクラス。

    JSON形式のデータの保存・読み込み・削除機能を提供します。
    """

    def __init__(self, base_path: str = DRAFT_DIR) -> None:
        """StorageServiceのコンストラクタ。

        Args:
            base_path (str): データを保存する基準ディレクトリのパス。
                             存在しない場合は自動的に作成されます。
        """
        self.base_path = base_path
        os.makedirs(self.base_path, exist_ok=True)

    def get_path(self, file_name: str) -> str:
        """ベースパスとファイル名を結合して完全なファイルパスを取得する。

        Args:
            file_name (str): ファイル名。

        Returns:
            str: 完全なファイルパス。
        """
        return os.path.join(self.base_path, file_name)

    def save_json(self, file_name: str, data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> bool:
        """データをJSONファイルとしてローカルに保存する。

        Args:
            file_name (str): 保存するファイル名。
            data (Union[Dict, List]): 保存するデータ（辞書または辞書のリスト）。

        Returns:
            bool: 保存に成功した場合はTrue。
        """
        file_path = self.get_path(file_name)
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=4)
        except OSError as e:
            logger.warning("Failed to save %s: %s", file_path, e)
            return False
        logger.debug("Saved %s", file_path)
        return True

    def load_json(self, file_name: str) -> Optional[Union[Dict[str, Any], List[Dict[str, Any]]]]:
        """ローカルのJSONファイルからデータを読み込む。

        Args:
            file_name (str): 読み込むファイル名。

        Returns:
            Optional[Union[Dict, List]]: 読み込まれたデータ。ファイルが存在しない場合はNone。
        """
        file_path = self.get_path(file_name)
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load %s: %s", file_path, e)
            return None

    def delete(self, file_name: str) -> None:
        """ローカルのファイルを削除する。存在しない場合は何もしない。"""
        file_path = self.get_path(file_name)
        try:
            os.remove(file_path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("Failed to delete %s: %s", file_path, e)
