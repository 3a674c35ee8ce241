from typing import Optional

from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QMessageBox

from core.frame_classifier import extract_library_dir_name
from core.logger import get_logger
from core.models.frames import HiddenFramesPlaceholder
from gui.utils import show_selectable_message_box

logger = get_logger("actions")

MESSAGE_TITLE = "StackSnack"


class ToggleHideLibraryFramesAction(QAction):
    """
    Checkable toolbar action flipping the hide setting.
    """

    def __init__(self, config, service, host, parent=None):
        super().__init__("Hide Library Stack Frames", parent)
        self.config = config
        self.service = service
        self.host = host
        self.setCheckable(True)
        self.setChecked(self.config.get_hide_library_frames())
        self.toggled.connect(self._on_toggled)
        self.update_description()

    def _on_toggled(self, state: bool) -> None:
        was_hiding = self.config.get_hide_library_frames()
        self.config.set_hide_library_frames(state)
        logger.info(f"Stack frame hiding toggled: {was_hiding} -> {state}")

        session = self.host.current_session()
        if session is None or not session.is_paused:
            logger.info("No paused debug session, setting applies to future sessions")
            self.update_description()
            return

        if state:
            self.service.force_refresh()
        else:
            # Filtering replaced the host's rows; let the host walk the stack again
            session.rebuild_views()
        self.update_description()

    def update_description(self) -> None:
        session = self.host.current_session()
        if session is not None and session.is_paused:
            self.setStatusTip("Toggle library frame visibility (active debug session)")
        else:
            self.setStatusTip("Toggle library frame visibility for future debug sessions")


class HideFrameFromLibraryAction(QAction):
    """
    Adds the library of the currently selected frame to the hide list.
    """

    def __init__(self, config, service, host, parent=None):
        super().__init__("Hide Frames from This Library", parent)
        self.config = config
        self.service = service
        self.host = host
        self.triggered.connect(self.hide_current_library)

    def _parent_widget(self):
        parent = self.parent()
        return parent if hasattr(parent, "isWindow") else None

    def _info(self, text: str) -> None:
        show_selectable_message_box(self._parent_widget(), MESSAGE_TITLE, text, QMessageBox.Icon.Information)

    def _warn(self, text: str) -> None:
        show_selectable_message_box(self._parent_widget(), MESSAGE_TITLE, text, QMessageBox.Icon.Warning)

    def hide_current_library(self) -> Optional[str]:
        """
        Returns:
            The pattern that was added, or None if nothing changed.
        """
        session = self.host.current_session()
        if session is None or session.current_frame is None:
            return None
        frame = session.current_frame

        if isinstance(frame, HiddenFramesPlaceholder):
            if frame.hidden_count == 1:
                self._info("This frame is already hidden")
            else:
                self._info("These frames are already hidden")
            return None

        position = frame.source_position
        if position is None:
            self._warn("Cannot extract library pattern from this frame")
            return None

        pattern = extract_library_dir_name(position.path)
        if not pattern:
            self._warn(f"Could not determine library pattern from: {position.path}")
            return None

        patterns = self.config.get_library_patterns()
        if any(pattern.lower() in existing.lower() for existing in patterns):
            self._info(f"Pattern '{pattern}' is already in the hide list")
            return None

        patterns.append(pattern)
        self.config.set_library_patterns(patterns)
        logger.info(f"Added library pattern: {pattern}")

        if self.config.get_hide_library_frames() and session.is_paused:
            self.service.force_refresh()
        return pattern

    def update_enabled(self) -> None:
        session = self.host.current_session()
        self.setEnabled(session is not None and session.is_paused and session.current_frame is not None)
