import pytest
from PyQt6.QtCore import Qt

from core.models.frames import HiddenFramesPlaceholder, StackFrame
from gui.frame_list_model import FRAME_ROLE, FrameListModel


def test_append_emits_row_insertion(qtbot, frames):
    model = FrameListModel()
    with qtbot.waitSignal(model.rowsInserted) as blocker:
        model.append_frames([frames.project("a"), frames.project("b")])
    assert blocker.args[1:] == [0, 1]
    assert model.rowCount() == 2


def test_appending_nothing_is_silent(qtbot):
    model = FrameListModel()
    with qtbot.assertNotEmitted(model.rowsInserted):
        model.append_frames([])


def test_roles(qapp, frames):
    a = frames.project("a", line=7)
    model = FrameListModel()
    model.replace_all([a, HiddenFramesPlaceholder(2), StackFrame("native")])

    assert model.index(0, 0).data(FRAME_ROLE) is a
    assert model.index(0, 0).data(Qt.ItemDataRole.ToolTipRole).endswith("a.py:7")
    assert model.index(1, 0).data(Qt.ItemDataRole.ToolTipRole) == "2 hidden frames"
    assert model.index(2, 0).data(Qt.ItemDataRole.ToolTipRole) is None


def test_row_of_uses_identity(qapp, frames):
    a, b = frames.project("a"), frames.project("a")
    model = FrameListModel()
    model.replace_all([a, b])
    assert model.row_of(b) == 1
    assert model.row_of(frames.project("c")) == -1
    assert model.entry_at(5) is None


def test_clear_resets(qtbot, frames):
    model = FrameListModel()
    model.append_frames([frames.project("a")])
    with qtbot.waitSignal(model.modelReset):
        model.clear()
    assert model.entries() == []


def test_invalid_entries_are_rejected(qapp, frames):
    model = FrameListModel()
    model.append_frames([frames.project("a")])
    with pytest.raises(TypeError):
        model.replace_all([frames.project("b"), None])
    assert model.rowCount() == 1
