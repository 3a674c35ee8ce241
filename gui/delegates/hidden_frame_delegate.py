from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QFont, QPainter
from PyQt6.QtWidgets import QStyle, QStyledItemDelegate

from core.models.frames import HiddenFramesPlaceholder
from core.widget_tree import PlaceholderRenderer
from gui.frame_list_model import FRAME_ROLE


class HiddenFrameDelegate(QStyledItemDelegate, PlaceholderRenderer):
    """
    Draws collapsed-frame placeholders in a faded grey, slightly smaller
    font. Every other row goes to the delegate that was installed before.
    """
    TEXT_COLOR = QColor(120, 120, 120)
    TEXT_COLOR_SELECTED = QColor(140, 140, 140)
    FONT_SCALE = 0.92

    def __init__(self, original=None, parent=None):
        super().__init__(parent)
        self.original = original
        self.padding_x = 24

    def paint(self, painter: QPainter, option, index):
        entry = index.data(FRAME_ROLE)
        if not isinstance(entry, HiddenFramesPlaceholder):
            if self.original is not None:
                self.original.paint(painter, option, index)
            else:
                super().paint(painter, option, index)
            return

        selected = bool(option.state & QStyle.StateFlag.State_Selected)

        painter.save()
        if selected:
            painter.fillRect(option.rect, option.palette.highlight())

        font = QFont(option.font)
        if font.pointSizeF() > 0:
            font.setPointSizeF(font.pointSizeF() * self.FONT_SCALE)
        painter.setFont(font)
        painter.setPen(self.TEXT_COLOR_SELECTED if selected else self.TEXT_COLOR)

        rect = option.rect.adjusted(self.padding_x, 0, 0, 0)
        painter.drawText(rect, Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft, entry.display_text())
        painter.restore()

    def sizeHint(self, option, index):
        if self.original is not None and not isinstance(index.data(FRAME_ROLE), HiddenFramesPlaceholder):
            return self.original.sizeHint(option, index)
        return super().sizeHint(option, index)


def make_hidden_frame_delegate(original):
    """Renderer factory handed to the reconciliation controller."""
    parent = original.parent() if original is not None else None
    return HiddenFrameDelegate(original, parent)
