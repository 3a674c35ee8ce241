"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/session.py
Version:        1.0.0
Description:    Debug session as seen by the frame hider: lifecycle signals,
                the current frame, and a helper turning live Python frames
                into StackFrame entries.
------------------------------------------------------------------------------
"""

import sys
from types import FrameType
from typing import List, Optional, Sequence

from PyQt6.QtCore import QObject, pyqtSignal

from core.logger import get_logger
from core.models.frames import DisplayableFrame, SourcePosition, StackFrame

logger = get_logger("session")


class DebugSession(QObject):
    """
    Host-owned debug session. The host drives it; the reconciliation
    engine only listens.
    """
    paused = pyqtSignal()
    resumed = pyqtSignal()
    stopped = pyqtSignal()
    stack_frame_changed = pyqtSignal()
    settings_changed = pyqtSignal()
    views_rebuild_requested = pyqtSignal()

    def __init__(self, name: str, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.name = name
        self.is_paused = False
        self.is_stopped = False
        self.frames: List[StackFrame] = []
        self.current_frame: Optional[DisplayableFrame] = None

    def pause(self, frames: Sequence[StackFrame], current_frame: Optional[StackFrame] = None) -> None:
        if self.is_stopped:
            return
        self.frames = list(frames)
        if current_frame is None and self.frames:
            current_frame = self.frames[0]
        self.current_frame = current_frame
        self.is_paused = True
        logger.debug("Session '%s' paused with %d frames", self.name, len(self.frames))
        self.paused.emit()

    def resume(self) -> None:
        if not self.is_paused:
            return
        self.is_paused = False
        self.frames = []
        self.current_frame = None
        self.resumed.emit()

    def stop(self) -> None:
        if self.is_stopped:
            return
        self.is_paused = False
        self.is_stopped = True
        self.frames = []
        self.current_frame = None
        self.stopped.emit()

    def set_current_frame(self, frame: Optional[DisplayableFrame]) -> None:
        """Selects the frame under inspection; emits only on an actual change."""
        if frame is self.current_frame:
            return
        self.current_frame = frame
        self.stack_frame_changed.emit()

    def notify_settings_changed(self) -> None:
        self.settings_changed.emit()

    def rebuild_views(self) -> None:
        """Asks the host to repopulate its views from the raw frame list."""
        if self.is_paused:
            self.views_rebuild_requested.emit()


def _position_for(frame: FrameType) -> Optional[SourcePosition]:
    filename = frame.f_code.co_filename
    # '<string>', '<stdin>', '<frozen importlib._bootstrap>' have no file behind them
    if not filename or (filename.startswith("<") and filename.endswith(">")):
        return None
    return SourcePosition(path=filename, line=frame.f_lineno or 0)


def capture_stack(start: Optional[FrameType] = None, limit: Optional[int] = None) -> List[StackFrame]:
    """
    Snapshot of a live Python call stack, innermost frame first.

    Args:
        start: Frame to start from; defaults to the caller of this function.
        limit: Maximum number of frames to capture.
    """
    frame = start if start is not None else sys._getframe(1)
    frames: List[StackFrame] = []
    while frame is not None:
        if limit is not None and len(frames) >= limit:
            break
        frames.append(StackFrame(frame.f_code.co_name, _position_for(frame)))
        frame = frame.f_back
    return frames
