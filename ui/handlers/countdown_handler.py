# ui/handlers/countdown_handler.py
from __future__ import annotations
from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from utils.constants import COUNTDOWN_INTERVAL_MS, DEFAULT_TIME_LIMIT


class CountdownHandler(QObject):
    """
    1問ごとの制限時間を管理するカウントダウンタイマー。

    activate() が呼ばれるまでは停止した状態（Idle）で待機し、作動後は
    1秒ごとに残り時間を1ずつ減らします。0になると expired を1度だけ送信して停止します。
    質問が切り替わったときは reset() で状態にかかわらず初期状態に戻します。

    Signals:
        time_changed (pyqtSignal): 残り時間（秒）が変化したときに送信します。
        started (pyqtSignal): カウントダウンが作動したときに送信します。
        expired (pyqtSignal): 残り時間が0になったときに送信します。
    """
    time_changed = pyqtSignal(int)
    started = pyqtSignal()
    expired = pyqtSignal()

    def __init__(self, time_limit: int = DEFAULT_TIME_LIMIT, interval_ms: int = COUNTDOWN_INTERVAL_MS,
                 parent: Optional[QObject] = None) -> None:
        """
        CountdownHandlerのコンストラクタ。

        Args:
            time_limit (int): 制限時間（秒）。
            interval_ms (int): 残り時間を1秒減らす間隔（ミリ秒）。
            parent (Optional[QObject]): 親オブジェクト。
        """
        super().__init__(parent)
        if time_limit <= 0:
            raise ValueError("time_limit must be positive")
        self.time_limit: int = time_limit
        self.remaining_time: int = time_limit
        self._expired: bool = False
        self.timer = QTimer(self)
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self.tick)

    @property
    def is_active(self) -> bool:
        return self.timer.isActive()

    @property
    def is_expired(self) -> bool:
        return self._expired

    def activate(self) -> None:
        """カウントダウンを開始する。作動中または時間切れ後の呼び出しは何もしない。"""
        if self.timer.isActive() or self._expired:
            return
        self.timer.start()
        self.started.emit()

    def reset(self) -> None:
        """作動中のカウントダウンを破棄し、制限時間いっぱいの停止状態に戻す。"""
        self.timer.stop()
        self._expired = False
        self.remaining_time = self.time_limit
        self.time_changed.emit(self.remaining_time)

    def stop(self) -> None:
        """カウントダウンを一時的に止める（残り時間は保持される）。"""
        self.timer.stop()

    def tick(self) -> None:
        """残り時間を1秒減らす。0になったら停止して expired を送信する。"""
        if not self.timer.isActive() or self._expired:
            return
        self.remaining_time = max(0, self.remaining_time - 1)
        self.time_changed.emit(self.remaining_time)
        if self.remaining_time == 0:
            self.timer.stop()
            self._expired = True
            self.expired.emit()
