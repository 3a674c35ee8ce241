from PyQt6.QtCore import QRect
from PyQt6.QtGui import QImage, QPainter
from PyQt6.QtWidgets import QListView, QStyledItemDelegate, QStyleOptionViewItem

from core.models.frames import HiddenFramesPlaceholder
from core.widget_tree import PlaceholderRenderer
from gui.delegates.hidden_frame_delegate import HiddenFrameDelegate, make_hidden_frame_delegate
from gui.frame_list_model import FrameListModel


class RecordingDelegate(QStyledItemDelegate):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.painted = []

    def paint(self, painter, option, index):
        self.painted.append(index.row())


def _paint_rows(delegate, model):
    image = QImage(240, 20, QImage.Format.Format_ARGB32)
    image.fill(0)
    painter = QPainter(image)
    try:
        for row in range(model.rowCount()):
            option = QStyleOptionViewItem()
            option.rect = QRect(0, 0, 240, 20)
            delegate.paint(painter, option, model.index(row, 0))
    finally:
        painter.end()


def test_placeholders_are_drawn_by_the_delegate(qapp, frames):
    model = FrameListModel()
    model.replace_all([frames.project("a"), HiddenFramesPlaceholder(3), frames.project("b")])
    original = RecordingDelegate()
    delegate = HiddenFrameDelegate(original)

    _paint_rows(delegate, model)

    assert original.painted == [0, 2]


def test_size_hint_of_frames_comes_from_original(qapp, frames):
    model = FrameListModel()
    model.replace_all([frames.project("a")])
    original = RecordingDelegate()
    delegate = HiddenFrameDelegate(original)

    option = QStyleOptionViewItem()
    assert delegate.sizeHint(option, model.index(0, 0)) == original.sizeHint(option, model.index(0, 0))


def test_factory_keeps_original_and_parent(qtbot):
    view = QListView()
    qtbot.addWidget(view)
    original = view.itemDelegate()

    delegate = make_hidden_frame_delegate(original)

    assert isinstance(delegate, PlaceholderRenderer)
    assert delegate.original is original
    assert delegate.parent() is original.parent()


def test_display_text_of_placeholder_rows(qapp):
    model = FrameListModel()
    model.replace_all([HiddenFramesPlaceholder(1), HiddenFramesPlaceholder(7)])
    assert model.index(0, 0).data() == "1 hidden frame"
    assert model.index(1, 0).data() == "7 hidden frames"
