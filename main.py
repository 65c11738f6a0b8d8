"""
アプリケーションのエントリーポイント。

このスクリプトは、PyQt6アプリケーションを初期化し、メインウィンドウである
MainWindowを生成・表示して、アプリケーションのイベントループを開始します。

使い方:
    python main.py <履歴書ID>

履歴書IDを省略した場合は環境変数 INTERVIEW_RESUME_ID を使用します。
APIの接続先は環境変数 INTERVIEW_API_BASE_URL で変更できます。
"""
import logging
import os
import sys
from typing import List, Optional

from PyQt6.QtWidgets import QApplication, QMessageBox

# このファイル(main.py)があるディレクトリを、Pythonがモジュールを探しに行く場所のリスト
# （sys.path）に追加し、uiフォルダやservicesフォルダなどを正しく見つけられるようにします。
current_dir: str = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from services.answer_service import AnswerService
from services.api_service import APIService
from services.storage_service import StorageService
from ui.main_window import MainWindow
from utils.constants import API_BASE_URL, time_limit_from_env
from utils.speech_backend import detect_speech_backend

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """環境変数 INTERVIEW_LOG_LEVEL（既定: INFO）に従ってログ出力を設定する。"""
    level_name = os.environ.get("INTERVIEW_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def resolve_resume_id(argv: List[str]) -> Optional[str]:
    """コマンドライン引数、または環境変数 INTERVIEW_RESUME_ID から履歴書IDを取得する。"""
    args = [arg for arg in argv[1:] if not arg.startswith("-")]
    if args:
        return args[0]
    return os.environ.get("INTERVIEW_RESUME_ID") or None


def main() -> int:
    configure_logging()

    # 1. PyQtアプリケーションインスタンスを作成します。
    app: QApplication = QApplication(sys.argv)

    resume_id = resolve_resume_id(sys.argv)
    if not resume_id:
        QMessageBox.critical(None, "起動エラー", "履歴書IDが指定されていません。\n使い方: python main.py <履歴書ID>")
        return 2

    # 2. サービスとメインウィンドウを作成します。
    api_service = APIService(API_BASE_URL)
    answer_service = AnswerService(StorageService())
    logger.info("Using interview API at %s", api_service.describe())
    window: MainWindow = MainWindow(
        resume_id,
        api_service,
        answer_service=answer_service,
        speech_backend=detect_speech_backend(),
        time_limit=time_limit_from_env(),
    )

    # 3. ウィンドウを表示し、質問の読み込みを開始します。
    window.show()
    window.start_session()

    # 4. アプリケーションのイベントループを開始します。
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
