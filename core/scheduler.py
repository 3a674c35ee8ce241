"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/scheduler.py
Version:        1.0.0
Description:    Delayed single-shot requests on the GUI thread, cancellable
                as a group. Nothing here ever blocks or sleeps.
------------------------------------------------------------------------------
"""

from typing import Callable, List, Optional

from PyQt6.QtCore import QObject, QTimer


class UpdateAlarm(QObject):
    """
    Owns a set of pending single-shot timers. `cancel_all_requests()`
    drops every pending request; `dispose()` does the same and refuses
    new requests afterwards.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._timers: List[QTimer] = []
        self._disposed = False

    def add_request(self, callback: Callable[[], None], delay_ms: int) -> None:
        if self._disposed:
            return
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: self._fire(timer, callback))
        self._timers.append(timer)
        timer.start(max(0, int(delay_ms)))

    def _fire(self, timer: QTimer, callback: Callable[[], None]) -> None:
        if timer not in self._timers:
            return
        self._timers.remove(timer)
        timer.deleteLater()
        callback()

    def cancel_all_requests(self) -> None:
        for timer in self._timers:
            timer.stop()
            timer.deleteLater()
        self._timers.clear()

    def pending_count(self) -> int:
        return len(self._timers)

    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        self.cancel_all_requests()
        self._disposed = True
