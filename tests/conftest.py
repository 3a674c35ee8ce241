import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from typing import Any, Callable, List, Optional, Sequence
from PyQt6.QtCore import QSettings

from core.config import AppConfig
from core.host import DebuggerHost, HostEvents, ToolPanel, DEBUG_PANEL_ID, SERVICES_PANEL_ID
from core.models.frames import DisplayableFrame, SourcePosition, StackFrame
from core.widget_tree import FrameListWidget, UIComponent


def pytest_configure(config):
    config.addinivalue_line("markers", "level2: intensive integration tests")

def pytest_addoption(parser):
    parser.addoption(
        "--level2", action="store_true", default=False, help="run level 2 intensive integration tests"
    )

def pytest_collection_modifyitems(config, items):
    if config.getoption("--level2"):
        # --level2 given in cli: do not skip
        return
    skip_level2 = pytest.mark.skip(reason="need --level2 option to run")
    for item in items:
        if "level2" in item.keywords:
            item.add_marker(skip_level2)


@pytest.fixture
def config():
    """AppConfig backed by a throw-away QSettings store."""
    settings = QSettings("StackSnack", "TestConfig")
    settings.clear()

    app_config = AppConfig()
    app_config.settings = settings
    yield app_config
    settings.clear()


# --- Frames ---------------------------------------------------------------

PROJECT_ROOT = "/home/dev/project"
LIBRARY_DIR = "/home/dev/project/venv/lib/python3.12/site-packages"


def project_frame(name: str, line: int = 10) -> StackFrame:
    return StackFrame(name, SourcePosition(path=f"{PROJECT_ROOT}/app/{name}.py", line=line))

def library_frame(name: str, package: str = "requests", line: int = 20) -> StackFrame:
    return StackFrame(name, SourcePosition(path=f"{LIBRARY_DIR}/{package}/{name}.py", line=line))


@pytest.fixture
def frames():
    """Factories for project and library frames."""
    class _Frames:
        project = staticmethod(project_frame)
        library = staticmethod(library_frame)
        root = PROJECT_ROOT
    return _Frames


# --- Scheduling -------------------------------------------------------------

class ManualAlarm:
    """UpdateAlarm stand-in; requests only run when the test says so."""

    def __init__(self):
        self.requests: List[tuple] = []
        self.disposed = False
        self.history: List[int] = []

    def add_request(self, callback: Callable[[], None], delay_ms: int) -> None:
        if self.disposed:
            return
        self.requests.append((callback, delay_ms))
        self.history.append(delay_ms)

    def cancel_all_requests(self) -> None:
        self.requests.clear()

    def pending_count(self) -> int:
        return len(self.requests)

    def is_disposed(self) -> bool:
        return self.disposed

    def dispose(self) -> None:
        self.requests.clear()
        self.disposed = True

    def run_next(self) -> bool:
        if not self.requests:
            return False
        callback, _ = self.requests.pop(0)
        callback()
        return True

    def run_until_idle(self, max_steps: int = 100) -> int:
        steps = 0
        while self.requests and steps < max_steps:
            self.run_next()
            steps += 1
        return steps


@pytest.fixture
def make_alarm():
    return ManualAlarm


# --- Widget tree ----------------------------------------------------------

class FakeListWidget(FrameListWidget):
    def __init__(self, entries: Optional[Sequence[Any]] = None, showing: bool = True):
        self.entries: List[Any] = list(entries or [])
        self.alive = True
        self.showing = showing
        self.listeners: List[Callable[[], None]] = []
        self.renderer: Any = "original-renderer"
        self.selected = -1
        self.scrolled_to: List[int] = []
        self.writes = 0
        self.reject_writes = False

    def is_alive(self) -> bool:
        return self.alive

    def is_showing(self) -> bool:
        return self.alive and self.showing

    def size(self) -> int:
        return len(self.entries)

    def element_at(self, index: int) -> Any:
        return self.entries[index]

    def replace_contents(self, entries: Sequence[Any]) -> None:
        if self.reject_writes:
            raise TypeError("model is read-only")
        self.entries = list(entries)
        # A model reset drops the current index
        self.selected = -1
        self.writes += 1
        self._notify()

    def append(self, *new_entries: DisplayableFrame) -> None:
        """Host-side append, as a debugger walking the stack lazily does."""
        self.entries.extend(new_entries)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self.listeners):
            listener()

    def add_change_listener(self, listener) -> None:
        self.listeners.append(listener)

    def remove_change_listener(self, listener) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    @property
    def cell_renderer(self) -> Any:
        return self.renderer

    @cell_renderer.setter
    def cell_renderer(self, renderer: Any) -> None:
        self.renderer = renderer

    @property
    def selected_index(self) -> int:
        return self.selected

    @selected_index.setter
    def selected_index(self, index: int) -> None:
        self.selected = index

    def scroll_to_visible(self, index: int) -> None:
        self.scrolled_to.append(index)


class FakeComponent(UIComponent):
    def __init__(self, children: Sequence[UIComponent] = (), showing: bool = True,
                 list_widget: Optional[FakeListWidget] = None):
        self._children = list(children)
        self.showing = showing
        self.list_widget = list_widget
        self.visits = 0

    def is_showing(self) -> bool:
        return self.showing

    def children(self):
        self.visits += 1
        return list(self._children)

    def as_list_widget(self):
        return self.list_widget


@pytest.fixture
def tree():
    """Factories for fake widget-tree nodes."""
    class _Tree:
        List = FakeListWidget
        Component = FakeComponent

        @staticmethod
        def wrap(widget: FakeListWidget, **kwargs) -> FakeComponent:
            return FakeComponent(list_widget=widget, **kwargs)
    return _Tree


# --- Host -----------------------------------------------------------------

class FakePanel(ToolPanel):
    def __init__(self, panel_id: str, content: Optional[UIComponent] = None, visible: bool = True):
        self.panel_id = panel_id
        self.content = content
        self.visible = visible

    def is_visible(self) -> bool:
        return self.visible

    def selected_content(self) -> Optional[UIComponent]:
        return self.content


class FakeHost(DebuggerHost):
    def __init__(self):
        self.events = HostEvents()
        self.active = None
        self.all_sessions = []
        self.debug = FakePanel(DEBUG_PANEL_ID)
        self.services: Optional[FakePanel] = None

    def current_session(self):
        return self.active

    def sessions(self):
        return list(self.all_sessions)

    def services_panel(self):
        return self.services

    def debug_panel(self):
        return self.debug

    def add_session(self, session, current: bool = True):
        self.all_sessions.append(session)
        if current:
            self.active = session
        self.events.session_started.emit(session)
        return session


@pytest.fixture
def host(qapp):
    return FakeHost()

@pytest.fixture
def make_panel():
    return FakePanel
