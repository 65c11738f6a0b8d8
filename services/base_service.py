# services/base_service.py
from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Any, Optional

# データモデルを表すジェネリック型を定義
T = TypeVar('T')

class BaseService(Generic[T], ABC):
    """
    データを読み込むサービスクラスの基底となる抽象クラス（ABC）。

    質問リストや下書きなど、サービスごとに扱うデータモデルの読み込み口を揃えます。
    依存するAPIサービスやストレージサービスは、具象クラスがそれぞれ保持します。
    """

    @abstractmethod
    def load_data(self, identifier: Any) -> Optional[T]:
        """
        履歴書IDに対応するデータを読み込む。

        Args:
            identifier (Any): データを一意に識別するためのキー（例: 履歴書ID）。

        Returns:
            Optional[T]: 読み込まれたデータモデルオブジェクト。見つからない場合はNone。
        """

    def save_data(self, data: T) -> None:
        """
        データを永続化する。読み取り専用のサービスはオーバーライドしません。

        Raises:
            NotImplementedError: 保存に対応していないサービスの場合。
        """
        raise NotImplementedError(f"{type(self).__name__} does not support saving")
