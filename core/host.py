"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/host.py
Version:        1.0.0
Description:    What the frame hider needs from a host debugger: lifecycle
                and visibility events, the current session, and the tool
                panels that may contain a call-stack list.
------------------------------------------------------------------------------
"""

from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from core.session import DebugSession
from core.widget_tree import UIComponent

DEBUG_PANEL_ID = "Debug"
SERVICES_PANEL_ID = "Services"


class HostEvents(QObject):
    """Signals a host emits towards the frame hider."""
    session_started = pyqtSignal(object)   # DebugSession
    panel_shown = pyqtSignal(str)          # panel id
    tab_selection_changed = pyqtSignal(str)  # tab id


class ToolPanel:
    """A dockable tool panel holding one selected content component."""
    panel_id: str = ""

    def is_visible(self) -> bool:
        raise NotImplementedError

    def selected_content(self) -> Optional[UIComponent]:
        raise NotImplementedError


class DebuggerHost:
    """
    Host debugger facade. Implementations expose `events` as a HostEvents.
    """
    events: HostEvents

    def current_session(self) -> Optional[DebugSession]:
        raise NotImplementedError

    def sessions(self) -> List[DebugSession]:
        raise NotImplementedError

    def services_panel(self) -> Optional[ToolPanel]:
        return None

    def debug_panel(self) -> Optional[ToolPanel]:
        raise NotImplementedError


def resolve_panel(host: DebuggerHost) -> Optional[ToolPanel]:
    """Visible Services panel first, then a visible Debug panel, else None."""
    services = host.services_panel()
    if services is not None and services.is_visible():
        return services
    debug = host.debug_panel()
    if debug is not None and debug.is_visible():
        return debug
    return None
