# utils/exceptions.py
"""面接セッションで発生するエラーの種類を定義します。

- QuestionLoadError: 質問の取得に失敗した（セッションを開始できない）。
- SubmissionError: 回答の送信・採点に失敗した（回答は保持され、再送信できる）。
- CapabilityUnavailable: この環境では音声入力が使えない（テキスト入力のみで継続）。
- SpeechCaptureError: 音声入力中にエラーが発生した（音声入力だけが停止する）。
"""


class InterviewError(Exception):
    """面接セッション関連のすべての例外の基底クラス。"""


class QuestionLoadError(InterviewError):
    """面接の質問リストを取得・解析できなかった場合に送出される。"""


class SubmissionError(InterviewError):
    """回答の送信、または採点結果の解析に失敗した場合に送出される。"""


class CapabilityUnavailable(InterviewError):
    """音声認識機能が利用できない環境で音声入力を開始しようとした場合に送出される。"""

    def __init__(self, message: str = "この環境では音声入力を利用できません。") -> None:
        super().__init__(message)


class SpeechCaptureError(InterviewError):
    """音声の取り込み・認識中にエラーが発生した場合に使用される。"""
