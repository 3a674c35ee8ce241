import os

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QMessageBox

from core.models.frames import DisplayableFrame, HiddenFramesPlaceholder


def show_selectable_message_box(parent, title, text, icon=None, buttons=None):
    """
    Shows a QMessageBox with text selection enabled.
    """
    msg = QMessageBox(parent)
    if title: msg.setWindowTitle(title)
    if text: msg.setText(text)

    if icon: msg.setIcon(icon)
    if buttons:
        msg.setStandardButtons(buttons)
    else:
        msg.setStandardButtons(QMessageBox.StandardButton.Ok)

    # Enable text selection, paths in these messages get copied a lot
    msg.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse | Qt.TextInteractionFlag.LinksAccessibleByMouse)

    return msg.exec()


def describe_entry(entry: DisplayableFrame) -> str:
    """
    One-line description of a call-stack entry for labels and status bars.
    """
    if entry is None:
        return ""
    if isinstance(entry, HiddenFramesPlaceholder):
        return entry.display_text()
    position = entry.source_position
    if position is None:
        return f"{entry.function}  (no source)"
    return f"{entry.function}  {os.path.basename(position.path)}:{position.line}"
