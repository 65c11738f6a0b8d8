from .answer_editor import AnswerEditor

__all__ = [
    "AnswerEditor",
]
