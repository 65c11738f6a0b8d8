# utils/constants.py
"""アプリケーション全体で共有される設定値と定数を定義します。"""
import os

# 1問あたりの制限時間（秒）
DEFAULT_TIME_LIMIT = 120

# 質問文を1文字ずつ表示する間隔（ミリ秒）
REVEAL_INTERVAL_MS = 20

# カウントダウンの更新間隔（ミリ秒）
COUNTDOWN_INTERVAL_MS = 1000

# 質問として採用する最小文字数（ラベル除去・前後空白除去後）
MIN_QUESTION_LENGTH = 11

# 質問文の先頭から取り除くラベル
QUESTION_LABELS = ("Introduction:", "Conclusion:")

# 音声認識の確定テキストを追記する際の区切り文字
SPEECH_SEPARATOR = " "

REQUEST_TIMEOUT = 15

DEFAULT_LOADING_MESSAGE = "読み込み中..."
QUESTIONS_LOADING_MESSAGE = "面接の質問を準備しています..."
SUBMISSION_LOADING_MESSAGE = "回答を採点しています..."

API_BASE_URL = os.environ.get("INTERVIEW_API_BASE_URL", "http://localhost:5000")
QUESTIONS_ENDPOINT = "/api/resume/interview-questions/{resume_id}"
SUBMIT_ENDPOINT = "/api/resume/submit-full-interview"

DRAFT_DIR = os.path.join(os.path.expanduser("~"), ".interview_prep", "drafts")

# 音声入力（faster-whisper）の設定
SPEECH_SAMPLE_RATE = 16000
SPEECH_WINDOW_SECONDS = 4
SPEECH_MODEL = os.environ.get("INTERVIEW_WHISPER_MODEL", "base")
SPEECH_LANGUAGE = "en"


def time_limit_from_env() -> int:
    """環境変数 INTERVIEW_TIME_LIMIT から制限時間を読み込む。

    未設定または不正な値の場合は DEFAULT_TIME_LIMIT を返します。
    """
    raw = os.environ.get("INTERVIEW_TIME_LIMIT", "")
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_TIME_LIMIT
    return value if value > 0 else DEFAULT_TIME_LIMIT
