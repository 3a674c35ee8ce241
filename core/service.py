"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/service.py
Version:        1.0.0
Description:    Wires the frame hider into a host: one ReconciliationController
                per debug session, created when the session starts and
                disposed with it.
------------------------------------------------------------------------------
"""

from typing import Any, Callable, Dict, Optional

from PyQt6.QtCore import QObject

from core.host import DebuggerHost
from core.logger import get_logger
from core.reconciliation import ReconciliationController
from core.session import DebugSession

logger = get_logger("service")

# Time the host needs to repopulate its views before we filter again
REBUILD_SETTLE_MS = 100


class StackSnackService(QObject):
    """
    Owns the per-session controllers of one host.
    """

    def __init__(
        self,
        host: DebuggerHost,
        config: Any,
        renderer_factory: Optional[Callable[[Any], Any]] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.host = host
        self.config = config
        self.renderer_factory = renderer_factory
        self.controllers: Dict[int, ReconciliationController] = {}

        host.events.session_started.connect(self.attach_session)
        for session in host.sessions():
            self.attach_session(session)
        logger.info("StackSnack service initialized")

    def attach_session(self, session: DebugSession) -> ReconciliationController:
        key = id(session)
        existing = self.controllers.get(key)
        if existing is not None:
            return existing

        controller = ReconciliationController(
            session, self.host, self.config, renderer_factory=self.renderer_factory, parent=self
        )
        self.controllers[key] = controller
        session.stopped.connect(lambda: self.detach_session(session))
        session.destroyed.connect(lambda *_: self._drop_controller(key))
        logger.info("Attached frame hider to session '%s'", session.name)

        # Session may already be sitting at a breakpoint
        if session.is_paused:
            controller.force_refresh()
        return controller

    def detach_session(self, session: DebugSession) -> None:
        self._drop_controller(id(session))

    def _drop_controller(self, key: int) -> None:
        controller = self.controllers.pop(key, None)
        if controller is not None:
            controller.dispose()
            controller.deleteLater()

    def controller_for(self, session: Optional[DebugSession]) -> Optional[ReconciliationController]:
        if session is None:
            return None
        return self.controllers.get(id(session))

    def force_refresh(self) -> bool:
        """
        Re-filters the current session from scratch.

        Returns:
            False if there is no session to refresh.
        """
        controller = self.controller_for(self.host.current_session())
        if controller is None:
            logger.debug("No active session to refresh")
            return False
        controller.force_refresh()
        return True

    def refresh_all_sessions(self) -> None:
        """
        Restores the raw frame lists of every paused session, then filters
        them again once the host had time to repopulate.
        """
        hide_enabled = self.config.get_frame_hider_settings().hide_enabled
        for session in self.host.sessions():
            if not session.is_paused:
                continue
            controller = self.controller_for(session)
            if controller is not None:
                controller.invalidate()
            session.rebuild_views()
            if hide_enabled and controller is not None:
                controller.schedule_refresh(REBUILD_SETTLE_MS)

    def dispose(self) -> None:
        for key in list(self.controllers):
            self._drop_controller(key)
        logger.info("StackSnack service disposed")
