"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/reconciliation.py
Version:        1.0.0
Description:    Keeps the host's call-stack list filtered. One controller per
                debug session; every trigger is turned into a delayed pass on
                the GUI thread, bursts are coalesced, at most one pass runs at
                a time, and frames the host appends after the pause are
                picked up by a listener on the raw list.
------------------------------------------------------------------------------
"""

import weakref
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from core.frame_classifier import classifier_for
from core.host import DebuggerHost, resolve_panel
from core.logger import get_logger, log_frame_view
from core.models.frames import HiddenFramesPlaceholder
from core.models.settings import FrameHiderSettings
from core.scheduler import UpdateAlarm
from core.session import DebugSession
from core.view_builder import build_filtered_view, count_frames, index_covering
from core.widget_locator import WidgetLocator
from core.widget_tree import FrameListWidget, PlaceholderRenderer

logger = get_logger("reconcile")

UPDATE_DELAY_MS = 10
BUSY_BACKOFF_MS = 50
RESYNC_DEBOUNCE_MS = 30
MAX_RETRIES = 10


class ReconciliationState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    RUNNING = "running"


class ReconciliationController(QObject):
    """
    Single-writer state machine owning when and how the frames list is
    filtered for one debug session.

    Args:
        session: The session whose frames are shown.
        host: Host facade used to find the current session and its panels.
        config: Anything with `get_frame_hider_settings()` (AppConfig).
        renderer_factory: Builds the placeholder-aware renderer from the
                          widget's original one. None skips renderer install.
        update_alarm / resync_alarm: Schedulers, injectable for tests.
    """
    pass_finished = pyqtSignal(bool)

    def __init__(
        self,
        session: DebugSession,
        host: DebuggerHost,
        config: Any,
        renderer_factory: Optional[Callable[[Any], Any]] = None,
        update_alarm: Optional[UpdateAlarm] = None,
        resync_alarm: Optional[UpdateAlarm] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.session = session
        self.host = host
        self.config = config
        self.renderer_factory = renderer_factory
        self.locator = WidgetLocator()

        self._update_alarm = update_alarm or UpdateAlarm(self)
        self._resync_alarm = resync_alarm or UpdateAlarm(self)

        self._is_updating = False
        self._retry_count = 0
        self._state = ReconciliationState.IDLE
        self._disposed = False
        self._listened_widget: Optional[weakref.ref] = None
        self._connections: List[Tuple[Any, Callable]] = []

        self._connect(session.paused, self._on_session_paused)
        self._connect(session.stack_frame_changed, self._on_stack_frame_changed)
        self._connect(session.settings_changed, self._on_settings_changed)
        self._connect(session.resumed, self._on_session_resumed)
        self._connect(session.stopped, self._on_session_stopped)

        events = getattr(host, "events", None)
        if events is not None:
            self._connect(events.panel_shown, self._on_panel_shown)
            self._connect(events.tab_selection_changed, self._on_tab_selection_changed)

    def _connect(self, signal, slot) -> None:
        signal.connect(slot)
        self._connections.append((signal, slot))

    # --- Introspection -----------------------------------------------------

    @property
    def state(self) -> ReconciliationState:
        return self._state

    @property
    def is_updating(self) -> bool:
        return self._is_updating

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # --- Triggers ----------------------------------------------------------

    def _on_session_paused(self) -> None:
        logger.debug("Session '%s' paused", self.session.name)
        # Frames list is rebuilt by the host on every pause
        self.invalidate()
        self._retry_count = 0
        self.schedule_update(UPDATE_DELAY_MS)

    def _on_stack_frame_changed(self) -> None:
        if isinstance(self.session.current_frame, HiddenFramesPlaceholder):
            return
        logger.debug("Stack frame changed")
        self.schedule_update(UPDATE_DELAY_MS)

    def _on_settings_changed(self) -> None:
        logger.debug("Settings changed")
        self.invalidate()
        self._retry_count = 0
        self.schedule_update(UPDATE_DELAY_MS)

    def _on_session_resumed(self) -> None:
        logger.debug("Session '%s' resumed", self.session.name)
        self.invalidate()
        self._retry_count = 0
        self._update_alarm.cancel_all_requests()
        if not self._is_updating:
            self._state = ReconciliationState.IDLE

    def _on_session_stopped(self) -> None:
        logger.debug("Session '%s' stopped", self.session.name)
        self.invalidate()
        self._retry_count = 0
        self._update_alarm.cancel_all_requests()
        if not self._is_updating:
            self._state = ReconciliationState.IDLE

    def _on_panel_shown(self, panel_id: str) -> None:
        if self._read_settings().hide_enabled:
            logger.debug("Panel '%s' shown", panel_id)
            self.schedule_update(UPDATE_DELAY_MS)

    def _on_tab_selection_changed(self, tab_id: str) -> None:
        logger.debug("Debug tab changed to '%s'", tab_id)
        # Switching tabs swaps the component, the old list is useless
        self.invalidate()
        self._retry_count = 0
        self.schedule_update(UPDATE_DELAY_MS)

    def force_refresh(self) -> None:
        """Drops every cache and runs a pass as soon as possible."""
        self.invalidate()
        self._retry_count = 0
        self.schedule_update(0)

    def schedule_refresh(self, delay_ms: int) -> None:
        """Runs `force_refresh` after `delay_ms` on this controller's alarm."""
        if self._disposed:
            return
        self._update_alarm.add_request(lambda: self.force_refresh(), delay_ms)
        if not self._is_updating:
            self._state = ReconciliationState.SCHEDULED

    # --- Scheduling ----------------------------------------------------------

    def schedule_update(self, delay_ms: int = UPDATE_DELAY_MS) -> None:
        if self._disposed:
            return
        if self.session is None or self.session.is_stopped:
            logger.debug("No active session, skipping update")
            return

        if self._is_updating:
            logger.debug("Update already in progress, deferring by %d ms", BUSY_BACKOFF_MS)
            self._update_alarm.add_request(lambda: self.schedule_update(UPDATE_DELAY_MS), BUSY_BACKOFF_MS)
            return

        self._update_alarm.cancel_all_requests()
        self._update_alarm.add_request(self._run_pass, delay_ms)
        self._state = ReconciliationState.SCHEDULED

    def _run_pass(self) -> None:
        if self._disposed:
            return
        if self._is_updating:
            logger.debug("Concurrent pass blocked, deferring")
            self._update_alarm.add_request(lambda: self.schedule_update(UPDATE_DELAY_MS), BUSY_BACKOFF_MS)
            return

        success = False
        self._is_updating = True
        self._state = ReconciliationState.RUNNING
        try:
            success = self._reconcile()
        except Exception:
            logger.exception("Failed to update debugger call stack")
        finally:
            self._is_updating = False
            if self._update_alarm.pending_count() > 0:
                self._state = ReconciliationState.SCHEDULED
            else:
                self._state = ReconciliationState.IDLE
        self.pass_finished.emit(success)

    def _reconcile(self) -> bool:
        active = self.host.current_session()
        if active is None or active is not self.session or not self.session.is_paused:
            logger.debug("No active paused session")
            self._retry_count = 0
            return False

        settings = self._read_settings()
        if not settings.hide_enabled:
            logger.debug("Hiding disabled")
            return False

        panel = resolve_panel(self.host)
        if panel is None:
            logger.debug("Neither Services nor Debug panel is visible")
            return False

        content = panel.selected_content()
        if content is None:
            logger.debug("Panel '%s' has no selected content", panel.panel_id)
            return False

        cached = self.locator.cached_widget()
        if cached is not None:
            if self._build_and_write(cached, settings):
                self._attach_listener(cached)
                self._retry_count = 0
                return True
            logger.debug("Cached frames list update failed, clearing cache")
            self.invalidate()

        widget = self.locator.find(content, context=self.session.name)
        if widget is not None:
            if self._build_and_write(widget, settings):
                self._attach_listener(widget)
                self._retry_count = 0
                return True
            self.invalidate()

        self._retry_count += 1
        if self._retry_count >= MAX_RETRIES:
            logger.warning("Frames list not found after %d attempts, giving up", MAX_RETRIES)
            self._retry_count = 0
            return False

        logger.debug("Frames list not ready, retry %d/%d", self._retry_count, MAX_RETRIES)
        self._update_alarm.add_request(self._run_pass, UPDATE_DELAY_MS)
        return False

    def _read_settings(self) -> FrameHiderSettings:
        return self.config.get_frame_hider_settings()

    # --- Build + write -------------------------------------------------------

    def _build_and_write(self, widget: FrameListWidget, settings: FrameHiderSettings) -> bool:
        raw = widget.elements()
        if not raw:
            logger.debug("Frames list is empty")
            return False

        view = build_filtered_view(raw, classifier_for(settings))
        if not view:
            return False

        previous_index = widget.selected_index
        # Raw position of the selected row, placeholders expanded
        previous_offset = count_frames(raw[:previous_index]) if 0 <= previous_index < len(raw) else -1

        self._install_renderer(widget)
        if not self._write_view(widget, view):
            return False

        log_frame_view("reconcile", raw, view)
        logger.debug("Updated frames list with %d entries (%d raw)", len(view), len(raw))
        self._restore_selection(widget, view, previous_offset)
        return True

    def _install_renderer(self, widget: FrameListWidget) -> None:
        if self.renderer_factory is None:
            return
        current = widget.cell_renderer
        if isinstance(current, PlaceholderRenderer):
            return
        widget.cell_renderer = self.renderer_factory(current)

    def _write_view(self, widget: FrameListWidget, view: list) -> bool:
        listening = self._current_listened_widget() is widget
        if listening:
            widget.remove_change_listener(self._on_raw_list_changed)
        try:
            widget.replace_contents(view)
        except (TypeError, ValueError) as e:
            logger.warning("Frames list rejected the filtered view: %s", e)
            return False
        finally:
            if listening:
                widget.add_change_listener(self._on_raw_list_changed)

        cache = self.locator.cache
        if cache is not None and cache.get() is widget:
            cache.last_filtered_model_size = widget.size()
        return True

    def _restore_selection(self, widget: FrameListWidget, view: list, previous_offset: int = -1) -> None:
        """
        Selects the session's current frame in the new view. A placeholder
        is rebuilt on every write, so when the current frame is one (or is
        no longer listed) the entry now covering the previously selected
        raw position is selected instead.
        """
        current = self.session.current_frame
        if current is not None and not isinstance(current, HiddenFramesPlaceholder):
            for index, entry in enumerate(view):
                if entry is current:
                    widget.selected_index = index
                    widget.scroll_to_visible(index)
                    return

        if previous_offset < 0:
            return
        index = index_covering(view, previous_offset)
        if index < 0:
            return
        widget.selected_index = index
        widget.scroll_to_visible(index)
        entry = view[index]
        if isinstance(current, HiddenFramesPlaceholder) and isinstance(entry, HiddenFramesPlaceholder):
            self.session.set_current_frame(entry)

    # --- Continuous resync -------------------------------------------------

    def _current_listened_widget(self) -> Optional[FrameListWidget]:
        if self._listened_widget is None:
            return None
        return self._listened_widget()

    def _attach_listener(self, widget: FrameListWidget) -> None:
        if self._current_listened_widget() is widget:
            return
        self._detach_listener()
        widget.add_change_listener(self._on_raw_list_changed)
        self._listened_widget = weakref.ref(widget)

    def _detach_listener(self) -> None:
        widget = self._current_listened_widget()
        if widget is not None and widget.is_alive():
            widget.remove_change_listener(self._on_raw_list_changed)
        self._listened_widget = None
        self._resync_alarm.cancel_all_requests()

    def _on_raw_list_changed(self) -> None:
        cache = self.locator.cache
        widget = cache.get() if cache is not None else None
        if widget is None:
            return
        if widget.size() == cache.last_filtered_model_size:
            return
        self._resync_alarm.cancel_all_requests()
        self._resync_alarm.add_request(self._resync, RESYNC_DEBOUNCE_MS)

    def _resync(self) -> None:
        if self._disposed:
            return
        if self._is_updating:
            self._resync_alarm.add_request(self._resync, RESYNC_DEBOUNCE_MS)
            return

        cache = self.locator.cache
        widget = cache.get() if cache is not None else None
        if widget is None or widget.size() == cache.last_filtered_model_size:
            return
        if not self.session.is_paused:
            return
        settings = self._read_settings()
        if not settings.hide_enabled:
            return

        logger.debug("Frames list grew to %d rows, re-filtering", widget.size())
        self._is_updating = True
        self._state = ReconciliationState.RUNNING
        try:
            if not self._build_and_write(widget, settings):
                self.invalidate()
        except Exception:
            logger.exception("Failed to re-filter appended frames")
        finally:
            self._is_updating = False
            if self._update_alarm.pending_count() > 0:
                self._state = ReconciliationState.SCHEDULED
            else:
                self._state = ReconciliationState.IDLE

    # --- Lifecycle -----------------------------------------------------------

    def invalidate(self) -> None:
        """Forgets the located widget and stops listening to it."""
        self._detach_listener()
        self.locator.invalidate()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._update_alarm.dispose()
        self._resync_alarm.dispose()
        self.invalidate()
        for signal, slot in self._connections:
            try:
                signal.disconnect(slot)
            except (TypeError, RuntimeError):
                logger.debug("Signal already disconnected")
        self._connections.clear()
        self._state = ReconciliationState.IDLE
        logger.debug("Controller for session '%s' disposed", self.session.name)
