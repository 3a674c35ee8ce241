from typing import List, Optional, Sequence

from PyQt6.QtCore import QAbstractListModel, QModelIndex, Qt

from core.models.frames import DisplayableFrame, HiddenFramesPlaceholder

# Role carrying the entry object itself
FRAME_ROLE = Qt.ItemDataRole.UserRole + 1


class FrameListModel(QAbstractListModel):
    """
    Backing list of a call-stack view. The host appends frames while it
    walks the stack; the frame hider swaps the whole content at once.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self._entries: List[DisplayableFrame] = []

    def rowCount(self, parent=QModelIndex()):
        if parent.isValid():
            return 0
        return len(self._entries)

    def data(self, index, role=Qt.ItemDataRole.DisplayRole):
        if not index.isValid() or not (0 <= index.row() < len(self._entries)):
            return None
        entry = self._entries[index.row()]

        if role == FRAME_ROLE:
            return entry
        if role == Qt.ItemDataRole.DisplayRole:
            return entry.display_text()
        if role == Qt.ItemDataRole.ToolTipRole:
            if isinstance(entry, HiddenFramesPlaceholder):
                return entry.display_text()
            if entry.source_position is not None:
                return str(entry.source_position)
        return None

    def entries(self) -> List[DisplayableFrame]:
        return list(self._entries)

    def entry_at(self, row: int) -> Optional[DisplayableFrame]:
        if 0 <= row < len(self._entries):
            return self._entries[row]
        return None

    def row_of(self, entry: DisplayableFrame) -> int:
        for row, candidate in enumerate(self._entries):
            if candidate is entry:
                return row
        return -1

    @staticmethod
    def _check_entries(entries: Sequence) -> List[DisplayableFrame]:
        checked = list(entries)
        for entry in checked:
            if not isinstance(entry, DisplayableFrame):
                raise TypeError(f"Frame list only accepts frame entries, got {type(entry).__name__}")
        return checked

    def replace_all(self, entries: Sequence[DisplayableFrame]) -> None:
        checked = self._check_entries(entries)
        self.beginResetModel()
        self._entries = checked
        self.endResetModel()

    def append_frames(self, frames: Sequence[DisplayableFrame]) -> None:
        checked = self._check_entries(frames)
        if not checked:
            return
        first = len(self._entries)
        self.beginInsertRows(QModelIndex(), first, first + len(checked) - 1)
        self._entries.extend(checked)
        self.endInsertRows()

    def clear(self) -> None:
        self.beginResetModel()
        self._entries = []
        self.endResetModel()
