"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           gui/main_window.py
Version:        1.0.0
Description:    Reference debugger host. Shows one call-stack tab per debug
                session in a Debug dock (or the Services dock), walks the
                stack asynchronously in batches and exposes the frame hider
                actions in its toolbar.
------------------------------------------------------------------------------
"""

from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import Qt, QTimer, QModelIndex
from PyQt6.QtGui import QCloseEvent, QFont
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QLabel, QListView, QTabWidget, QDockWidget,
    QPlainTextEdit, QToolBar, QAbstractItemView
)

from core.config import AppConfig
from core.host import DebuggerHost, HostEvents, ToolPanel, DEBUG_PANEL_ID, SERVICES_PANEL_ID
from core.logger import get_logger
from core.models.frames import DisplayableFrame, HiddenFramesPlaceholder
from core.session import DebugSession
from gui.actions import ToggleHideLibraryFramesAction, HideFrameFromLibraryAction
from gui.frame_list_model import FrameListModel, FRAME_ROLE
from gui.qt_widget_tree import QtComponent
from gui.sample_target import capture_sample_stack
from gui.settings_dialog import SettingsDialog
from gui.utils import describe_entry

logger = get_logger("gui.main_window")

SOURCE_CONTEXT_LINES = 5


class SessionTab(QWidget):
    """
    Call-stack view of one session. Frames arrive in batches, the way a
    real debugger fills its frame list while walking a remote stack.
    """
    BATCH_SIZE = 8
    BATCH_INTERVAL_MS = 15

    def __init__(self, session: DebugSession, parent=None):
        super().__init__(parent)
        self.session = session
        self._pending: List[DisplayableFrame] = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(2, 2, 2, 2)

        self.frame_view = QListView()
        self.frame_view.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.frame_view.setUniformItemSizes(True)
        self.model = FrameListModel(self.frame_view)
        self.frame_view.setModel(self.model)
        self.frame_view.selectionModel().currentChanged.connect(self._on_current_changed)
        layout.addWidget(self.frame_view)

        self.position_label = QLabel()
        self.position_label.setStyleSheet("color: gray;")
        self.position_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        layout.addWidget(self.position_label)

        self._batch_timer = QTimer(self)
        self._batch_timer.setInterval(self.BATCH_INTERVAL_MS)
        self._batch_timer.timeout.connect(self._append_batch)

        session.paused.connect(self.populate)
        session.views_rebuild_requested.connect(self.populate)
        session.resumed.connect(self.clear)
        session.stopped.connect(self.clear)
        session.stack_frame_changed.connect(self._sync_position_label)

    @property
    def is_loading(self) -> bool:
        return bool(self._pending)

    def populate(self):
        """Walks the session's stack again from scratch."""
        self._batch_timer.stop()
        self.model.clear()
        self._pending = list(self.session.frames)
        if not self._pending:
            return
        self._append_batch()
        self._select_current_frame()
        if self._pending:
            self._batch_timer.start()

    def _append_batch(self):
        batch = self._pending[:self.BATCH_SIZE]
        self._pending = self._pending[self.BATCH_SIZE:]
        self.model.append_frames(batch)
        if not self._pending:
            self._batch_timer.stop()
            logger.debug(f"Stack walk of '{self.session.name}' complete ({self.model.rowCount()} rows)")

    def _select_current_frame(self):
        current = self.session.current_frame
        if current is None:
            return
        row = self.model.row_of(current)
        if row >= 0:
            self.frame_view.setCurrentIndex(self.model.index(row, 0))
        self._sync_position_label()

    def clear(self):
        self._batch_timer.stop()
        self._pending = []
        self.model.clear()
        self.position_label.clear()

    def _on_current_changed(self, current: QModelIndex, previous: QModelIndex):
        # Model resets clear the current index; that is not a user selection
        if not current.isValid():
            return
        entry = current.data(FRAME_ROLE)
        if isinstance(entry, DisplayableFrame):
            self.session.set_current_frame(entry)

    def _sync_position_label(self):
        self.position_label.setText(describe_entry(self.session.current_frame))


class DockToolPanel(ToolPanel):
    """ToolPanel over a dock widget holding a tab widget of session tabs."""

    def __init__(self, panel_id: str, dock: QDockWidget, tabs: QTabWidget):
        self.panel_id = panel_id
        self.dock = dock
        self.tabs = tabs

    def is_visible(self) -> bool:
        return self.dock.isVisible()

    def selected_content(self) -> Optional[QtComponent]:
        widget = self.tabs.currentWidget()
        if widget is None:
            return None
        return QtComponent(widget)


class MainWindow(QMainWindow, DebuggerHost):
    """
    Main application window. Implements the debugger host the frame hider
    attaches to.
    """

    def __init__(self, app_config: Optional[AppConfig] = None, parent=None):
        super().__init__(parent)
        self.app_config = app_config or AppConfig()
        self.events = HostEvents(self)
        self.service = None
        self._sessions: List[DebugSession] = []
        self._tabs: List[SessionTab] = []
        self._current: Optional[DebugSession] = None
        self._session_counter = 0

        self.setWindowTitle(self.tr("StackSnack"))
        self.resize(1000, 700)

        self._setup_source_view()
        self._setup_docks()
        self._setup_toolbar()
        self.statusBar().showMessage(self.tr("Ready"))

    # --- Layout ---

    def _setup_source_view(self):
        self.source_view = QPlainTextEdit()
        self.source_view.setReadOnly(True)
        self.source_view.setFont(QFont("monospace"))
        self.source_view.setPlaceholderText(self.tr("Select a stack frame to preview its source."))
        self.setCentralWidget(self.source_view)

    def _make_dock(self, title: str, object_name: str):
        tabs = QTabWidget()
        tabs.setDocumentMode(True)
        dock = QDockWidget(title, self)
        dock.setObjectName(object_name)
        dock.setWidget(tabs)
        return dock, tabs

    def _setup_docks(self):
        self.debug_dock, self.debug_tabs = self._make_dock(self.tr("Debug"), "DebugDock")
        self.addDockWidget(Qt.DockWidgetArea.BottomDockWidgetArea, self.debug_dock)

        self.services_dock, self.services_tabs = self._make_dock(self.tr("Services"), "ServicesDock")
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.services_dock)
        self.services_dock.hide()

        self._debug_panel = DockToolPanel(DEBUG_PANEL_ID, self.debug_dock, self.debug_tabs)
        self._services_panel = DockToolPanel(SERVICES_PANEL_ID, self.services_dock, self.services_tabs)

        self.debug_dock.visibilityChanged.connect(
            lambda visible: self._on_dock_visibility(DEBUG_PANEL_ID, visible))
        self.services_dock.visibilityChanged.connect(
            lambda visible: self._on_dock_visibility(SERVICES_PANEL_ID, visible))
        self.debug_tabs.currentChanged.connect(
            lambda index: self._on_tab_changed(self.debug_tabs, DEBUG_PANEL_ID, index))
        self.services_tabs.currentChanged.connect(
            lambda index: self._on_tab_changed(self.services_tabs, SERVICES_PANEL_ID, index))

    def _setup_toolbar(self):
        self.toolbar = QToolBar(self.tr("Debugger"))
        self.toolbar.setObjectName("DebuggerToolbar")
        self.addToolBar(Qt.ToolBarArea.TopToolBarArea, self.toolbar)

        self.pause_action = self.toolbar.addAction(self.tr("Pause Sample"))
        self.pause_action.triggered.connect(self.pause_sample)
        self.resume_action = self.toolbar.addAction(self.tr("Resume"))
        self.resume_action.triggered.connect(self.resume_current)
        self.stop_action = self.toolbar.addAction(self.tr("Stop"))
        self.stop_action.triggered.connect(self.stop_current)
        self.toolbar.addSeparator()
        self.services_toggle = self.services_dock.toggleViewAction()
        self.services_toggle.setText(self.tr("Services"))
        self.toolbar.addAction(self.services_toggle)

        # Frame hider actions are added once a service is attached
        self.toggle_hide_action: Optional[ToggleHideLibraryFramesAction] = None
        self.hide_library_action: Optional[HideFrameFromLibraryAction] = None
        self._update_actions()

    def attach_service(self, service) -> None:
        """Adds the frame hider actions for `service` to the toolbar."""
        self.service = service
        self.toolbar.addSeparator()
        self.toggle_hide_action = ToggleHideLibraryFramesAction(self.app_config, service, self, self)
        self.toolbar.addAction(self.toggle_hide_action)
        self.hide_library_action = HideFrameFromLibraryAction(self.app_config, service, self, self)
        self.toolbar.addAction(self.hide_library_action)
        self.settings_action = self.toolbar.addAction(self.tr("Settings..."))
        self.settings_action.triggered.connect(self.open_settings)
        self._update_actions()

    # --- DebuggerHost ---

    def current_session(self) -> Optional[DebugSession]:
        return self._current

    def sessions(self) -> List[DebugSession]:
        return list(self._sessions)

    def services_panel(self) -> Optional[ToolPanel]:
        return self._services_panel

    def debug_panel(self) -> Optional[ToolPanel]:
        return self._debug_panel

    # --- Sessions ---

    def new_session(self, name: Optional[str] = None, in_services: bool = False) -> DebugSession:
        self._session_counter += 1
        name = name or f"Session {self._session_counter}"
        session = DebugSession(name, self)
        tab = SessionTab(session)
        self._sessions.append(session)
        self._tabs.append(tab)

        session.stack_frame_changed.connect(lambda: self._on_frame_changed(session))
        session.paused.connect(self._update_actions)
        session.resumed.connect(self._update_actions)
        session.stopped.connect(self._update_actions)

        self._current = session
        self.events.session_started.emit(session)

        tabs, dock = (self.services_tabs, self.services_dock) if in_services else (self.debug_tabs, self.debug_dock)
        index = tabs.addTab(tab, name)
        tabs.setCurrentIndex(index)
        dock.show()
        logger.info(f"Started debug session '{name}'")
        self._update_actions()
        return session

    def tab_for(self, session: DebugSession) -> Optional[SessionTab]:
        for tab in self._tabs:
            if tab.session is session:
                return tab
        return None

    def pause_sample(self) -> DebugSession:
        """Runs the sample program and pauses the current session inside it."""
        session = self._current
        if session is None or session.is_stopped:
            session = self.new_session()
        frames = capture_sample_stack()
        session.pause(frames)
        self.statusBar().showMessage(self.tr(f"Paused '{session.name}' at {len(frames)} frames"))
        return session

    def resume_current(self):
        if self._current is not None:
            self._current.resume()
            self.statusBar().showMessage(self.tr(f"Resumed '{self._current.name}'"))

    def stop_current(self):
        if self._current is not None:
            self._current.stop()
            self.statusBar().showMessage(self.tr(f"Stopped '{self._current.name}'"))

    # --- Event plumbing ---

    def _on_dock_visibility(self, panel_id: str, visible: bool):
        if visible:
            self.events.panel_shown.emit(panel_id)

    def _on_tab_changed(self, tabs: QTabWidget, panel_id: str, index: int):
        widget = tabs.widget(index)
        if not isinstance(widget, SessionTab):
            return
        if widget.session is not self._current:
            self._current = widget.session
            self._update_actions()
        self.events.tab_selection_changed.emit(f"{panel_id}:{widget.session.name}")

    def _on_frame_changed(self, session: DebugSession):
        if session is self._current:
            self.show_source(session.current_frame)
        self._update_actions()

    def show_source(self, frame: Optional[DisplayableFrame]):
        """Previews the lines around a frame's source position."""
        if frame is None or isinstance(frame, HiddenFramesPlaceholder) or frame.source_position is None:
            self.source_view.clear()
            return
        position = frame.source_position
        try:
            lines = Path(position.path).read_text(errors="replace").splitlines()
        except OSError as e:
            logger.warning(f"Cannot preview source {position.path}: {e}")
            self.source_view.setPlainText(str(position))
            return

        first = max(position.line - SOURCE_CONTEXT_LINES, 1)
        last = min(position.line + SOURCE_CONTEXT_LINES, len(lines))
        snippet = []
        for number in range(first, last + 1):
            marker = ">" if number == position.line else " "
            snippet.append(f"{marker}{number:5d}  {lines[number - 1]}")
        self.source_view.setPlainText(f"{position}\n\n" + "\n".join(snippet))

    def _update_actions(self):
        session = self._current
        paused = session is not None and session.is_paused
        self.resume_action.setEnabled(paused)
        self.stop_action.setEnabled(session is not None and not session.is_stopped)
        if self.toggle_hide_action is not None:
            self.toggle_hide_action.update_description()
        if self.hide_library_action is not None:
            self.hide_library_action.update_enabled()

    def open_settings(self):
        dialog = SettingsDialog(self, config=self.app_config)
        dialog.settings_changed.connect(self._on_settings_changed)
        dialog.exec()

    def _on_settings_changed(self):
        if self.toggle_hide_action is not None:
            self.toggle_hide_action.blockSignals(True)
            self.toggle_hide_action.setChecked(self.app_config.get_hide_library_frames())
            self.toggle_hide_action.blockSignals(False)
        if self.service is not None:
            self.service.refresh_all_sessions()

    def closeEvent(self, event: QCloseEvent):
        """Handle window close."""
        for session in list(self._sessions):
            session.stop()
        if self.service is not None:
            self.service.dispose()
        super().closeEvent(event)
