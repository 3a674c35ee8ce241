from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QLineEdit, QPushButton, QHBoxLayout,
    QFileDialog, QMessageBox, QLabel, QCheckBox, QGroupBox, QListWidget,
    QListWidgetItem, QAbstractItemView, QDialogButtonBox
)
from typing import List, Optional
from PyQt6.QtCore import pyqtSignal, Qt
from PyQt6.QtGui import QKeySequence, QShortcut, QUndoCommand, QUndoStack

from core.config import AppConfig
from core.logger import get_logger
from gui.utils import show_selectable_message_box

logger = get_logger("settings")


class _InsertPatternCommand(QUndoCommand):
    """Inserts a pattern row. `applied` marks a row the user already typed in."""

    def __init__(self, dialog: "SettingsDialog", row: int, text: str, applied: bool = False):
        super().__init__(dialog.tr("Add pattern"))
        self._dialog = dialog
        self._row = row
        self._text = text
        self._skip_redo = applied

    def redo(self):
        if self._skip_redo:
            self._skip_redo = False
            return
        self._dialog._insert_row(self._row, self._text)

    def undo(self):
        self._dialog._take_row(self._row)


class _RemovePatternCommand(QUndoCommand):
    def __init__(self, dialog: "SettingsDialog", row: int, text: str):
        super().__init__(dialog.tr("Remove pattern"))
        self._dialog = dialog
        self._row = row
        self._text = text

    def redo(self):
        self._dialog._take_row(self._row)

    def undo(self):
        self._dialog._insert_row(self._row, self._text)


class _EditPatternCommand(QUndoCommand):
    def __init__(self, dialog: "SettingsDialog", row: int, old_text: str, new_text: str):
        super().__init__(dialog.tr("Edit pattern"))
        self._dialog = dialog
        self._row = row
        self._old_text = old_text
        self._new_text = new_text
        # The edit already happened in the list
        self._skip_redo = True

    def redo(self):
        if self._skip_redo:
            self._skip_redo = False
            return
        self._dialog._set_row_text(self._row, self._new_text)

    def undo(self):
        self._dialog._set_row_text(self._row, self._old_text)


class SettingsDialog(QDialog):
    """
    Dialog to configure the library frame hider.
    """
    settings_changed = pyqtSignal()

    def __init__(self, parent=None, config: Optional[AppConfig] = None):
        super().__init__(parent)
        if config is None:
            config = parent.app_config if parent is not None and hasattr(parent, "app_config") else AppConfig()
        self.config = config
        self.setWindowTitle(self.tr("StackSnack - Library Frame Hider"))
        self.resize(520, 480)

        self._setup_ui()
        self._load_settings()

    def _setup_ui(self):
        layout = QVBoxLayout(self)

        # --- General ---
        self.chk_hide = QCheckBox(self.tr("Hide library stack frames"))
        layout.addWidget(self.chk_hide)

        self.chk_in_project = QCheckBox(self.tr("Treat frames outside this project as library frames"))
        self.chk_in_project.setToolTip(self.tr(
            "When enabled, stack frames outside your project directory\n"
            "are treated as library frames and hidden."
        ))
        layout.addWidget(self.chk_in_project)

        form = QFormLayout()
        self.edit_root = QLineEdit()
        self.btn_root = QPushButton(self.tr("Browse..."))
        self.btn_root.clicked.connect(self._browse_root)
        h_root = QHBoxLayout()
        h_root.setContentsMargins(0, 0, 0, 0)
        h_root.addWidget(self.edit_root)
        h_root.addWidget(self.btn_root)
        form.addRow(QLabel(self.tr("Project root:")), h_root)
        layout.addLayout(form)

        # --- Patterns ---
        group = QGroupBox(self.tr("Library Patterns to Hide"))
        g_layout = QVBoxLayout(group)

        lbl_main = QLabel(self.tr("Add patterns to match library paths. Frames containing these patterns will be hidden."))
        lbl_main.setWordWrap(True)
        g_layout.addWidget(lbl_main)

        lbl_hint = QLabel(self.tr("<i>Double-click to edit and press Enter to save. Delete removes rows, Ctrl+Z undoes.</i>"))
        lbl_hint.setStyleSheet("color: gray;")
        g_layout.addWidget(lbl_hint)

        self.list_patterns = QListWidget()
        self.list_patterns.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self.list_patterns.itemChanged.connect(self._on_pattern_edited)
        g_layout.addWidget(self.list_patterns)

        self.undo_stack = QUndoStack(self)

        self._delete_shortcut = QShortcut(QKeySequence(QKeySequence.StandardKey.Delete), self.list_patterns)
        self._delete_shortcut.activated.connect(self.remove_selected)
        self._undo_shortcut = QShortcut(QKeySequence("Ctrl+Z"), self.list_patterns)
        self._undo_shortcut.setContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
        self._undo_shortcut.activated.connect(self.undo_stack.undo)
        self._redo_shortcut = QShortcut(QKeySequence("Ctrl+Shift+Z"), self.list_patterns)
        self._redo_shortcut.setContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
        self._redo_shortcut.activated.connect(self.undo_stack.redo)

        btn_row = QHBoxLayout()
        self.btn_undo = QPushButton(self.tr("Undo"))
        self.btn_undo.setEnabled(False)
        self.btn_undo.clicked.connect(self.undo_stack.undo)
        self.undo_stack.canUndoChanged.connect(self.btn_undo.setEnabled)
        btn_row.addWidget(self.btn_undo)
        self.btn_redo = QPushButton(self.tr("Redo"))
        self.btn_redo.setEnabled(False)
        self.btn_redo.clicked.connect(self.undo_stack.redo)
        self.undo_stack.canRedoChanged.connect(self.btn_redo.setEnabled)
        btn_row.addWidget(self.btn_redo)
        btn_row.addStretch()
        self.btn_add = QPushButton(self.tr("Add Pattern"))
        self.btn_add.clicked.connect(lambda: self.add_pattern(""))
        btn_row.addWidget(self.btn_add)
        self.btn_remove = QPushButton(self.tr("Remove Selected"))
        self.btn_remove.clicked.connect(self.remove_selected)
        btn_row.addWidget(self.btn_remove)
        g_layout.addLayout(btn_row)

        layout.addWidget(group)

        self.button_box = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        layout.addWidget(self.button_box)

    def _load_settings(self):
        self.chk_hide.setChecked(self.config.get_hide_library_frames())
        self.chk_in_project.setChecked(self.config.get_restrict_to_project_root())
        self.edit_root.setText(self.config.get_project_root())

        self.list_patterns.blockSignals(True)
        self.list_patterns.clear()
        for pattern in self.config.get_library_patterns():
            self.list_patterns.addItem(self._make_item(pattern))
        self.list_patterns.blockSignals(False)
        self.undo_stack.clear()

    def _make_item(self, text: str) -> QListWidgetItem:
        item = QListWidgetItem(text)
        item.setFlags(item.flags() | Qt.ItemFlag.ItemIsEditable)
        # Last committed value, used to revert rejected edits
        item.setData(Qt.ItemDataRole.UserRole, text)
        return item

    # --- Row primitives, used by the undo commands ---

    def _insert_row(self, row: int, text: str) -> QListWidgetItem:
        item = self._make_item(text)
        self.list_patterns.blockSignals(True)
        self.list_patterns.insertItem(row, item)
        self.list_patterns.blockSignals(False)
        self.list_patterns.setCurrentItem(item)
        return item

    def _take_row(self, row: int) -> None:
        self.list_patterns.blockSignals(True)
        self.list_patterns.takeItem(row)
        self.list_patterns.blockSignals(False)

    def _set_row_text(self, row: int, text: str) -> None:
        item = self.list_patterns.item(row)
        if item is None:
            return
        self.list_patterns.blockSignals(True)
        item.setText(text)
        item.setData(Qt.ItemDataRole.UserRole, text)
        self.list_patterns.blockSignals(False)
        self.list_patterns.setCurrentItem(item)

    def _browse_root(self):
        path = QFileDialog.getExistingDirectory(self, self.tr("Select Project Root"), self.edit_root.text())
        if path:
            self.edit_root.setText(path)

    def patterns(self) -> List[str]:
        """Current pattern rows, stripped, blanks dropped."""
        result = []
        for row in range(self.list_patterns.count()):
            text = self.list_patterns.item(row).text().strip()
            if text:
                result.append(text)
        return result

    def add_pattern(self, text: str = "") -> QListWidgetItem:
        """
        Appends a pattern row. A blank row opens the editor and only becomes
        an undoable step once the user commits a value.
        """
        row = self.list_patterns.count()
        if text:
            self.undo_stack.push(_InsertPatternCommand(self, row, text))
            return self.list_patterns.item(row)

        item = self._insert_row(row, "")
        self.list_patterns.editItem(item)
        return item

    def remove_selected(self):
        rows = sorted((self.list_patterns.row(i) for i in self.list_patterns.selectedItems()), reverse=True)
        if not rows:
            return
        self.undo_stack.beginMacro(self.tr("Remove patterns"))
        for row in rows:
            text = self.list_patterns.item(row).data(Qt.ItemDataRole.UserRole) or ""
            self.undo_stack.push(_RemovePatternCommand(self, row, text))
        self.undo_stack.endMacro()
        if self.list_patterns.count() > 0:
            self.list_patterns.setCurrentRow(min(max(rows[-1] - 1, 0), self.list_patterns.count() - 1))

    def _on_pattern_edited(self, item: QListWidgetItem):
        row = self.list_patterns.row(item)
        new_value = item.text().strip()
        old_value = item.data(Qt.ItemDataRole.UserRole) or ""

        if not new_value:
            if old_value:
                # Clearing a committed row deletes it
                self._set_row_text(row, old_value)
                self.undo_stack.push(_RemovePatternCommand(self, row, old_value))
            else:
                self._take_row(row)
            return

        for other_row in range(self.list_patterns.count()):
            other = self.list_patterns.item(other_row)
            if other is not item and other.text().strip() == new_value:
                show_selectable_message_box(
                    self, self.tr("Duplicate Pattern"),
                    self.tr(f"Pattern '{new_value}' already exists."),
                    QMessageBox.Icon.Warning
                )
                if old_value:
                    self._set_row_text(row, old_value)
                else:
                    self._take_row(row)
                return

        self._set_row_text(row, new_value)
        if not old_value:
            self.undo_stack.push(_InsertPatternCommand(self, row, new_value, applied=True))
        elif new_value != old_value:
            self.undo_stack.push(_EditPatternCommand(self, row, old_value, new_value))

    def is_modified(self) -> bool:
        return (
            self.chk_hide.isChecked() != self.config.get_hide_library_frames()
            or self.chk_in_project.isChecked() != self.config.get_restrict_to_project_root()
            or self.edit_root.text().strip() != self.config.get_project_root()
            or self.patterns() != self.config.get_library_patterns()
        )

    def save_settings(self):
        if not self.is_modified():
            return
        self.config.set_hide_library_frames(self.chk_hide.isChecked())
        self.config.set_restrict_to_project_root(self.chk_in_project.isChecked())
        self.config.set_project_root(self.edit_root.text().strip())
        self.config.set_library_patterns(self.patterns())
        logger.info("Frame hider settings saved")
        self.settings_changed.emit()

    def accept(self):
        self.save_settings()
        super().accept()
