"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           gui/qt_widget_tree.py
Version:        1.0.0
Description:    Qt adapter for the component tree interfaces. Any QWidget can
                be searched; any QListView is a list candidate. The adapter
                never owns the view: it keeps a weak reference and checks sip
                for deletion before every use.
------------------------------------------------------------------------------
"""

import weakref
from typing import Any, Callable, Iterable, List, Optional, Sequence

from PyQt6 import sip
from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QListView, QWidget

from core.widget_tree import FrameListWidget, UIComponent
from gui.frame_list_model import FRAME_ROLE

# QListView -> adapter; entries vanish together with the view's wrapper
_ADAPTERS: "weakref.WeakKeyDictionary[QListView, QtFrameListWidget]" = weakref.WeakKeyDictionary()


def _alive(obj) -> bool:
    return obj is not None and not sip.isdeleted(obj)


class QtFrameListWidget(FrameListWidget):
    """
    FrameListWidget over a QListView. Entries are read through FRAME_ROLE;
    replacing needs a model with `replace_all`.
    """

    def __init__(self, view: QListView):
        self._view_ref = weakref.ref(view)
        self._listeners: List[Callable[[], None]] = []
        self._connected_model = None

    @classmethod
    def for_view(cls, view: QListView) -> "QtFrameListWidget":
        adapter = _ADAPTERS.get(view)
        if adapter is None:
            adapter = cls(view)
            _ADAPTERS[view] = adapter
        return adapter

    def view(self) -> Optional[QListView]:
        view = self._view_ref()
        return view if _alive(view) else None

    def _model(self):
        view = self.view()
        if view is None:
            return None
        model = view.model()
        return model if _alive(model) else None

    def is_alive(self) -> bool:
        return self.view() is not None

    def is_showing(self) -> bool:
        view = self.view()
        return view is not None and view.isVisible()

    def size(self) -> int:
        model = self._model()
        return model.rowCount() if model is not None else 0

    def element_at(self, index: int) -> Any:
        model = self._model()
        if model is None:
            return None
        return model.index(index, 0).data(FRAME_ROLE)

    def replace_contents(self, entries: Sequence[Any]) -> None:
        model = self._model()
        replace_all = getattr(model, "replace_all", None)
        if replace_all is None:
            raise TypeError("List model does not support replacing its rows")
        replace_all(list(entries))

    # --- Change listeners ------------------------------------------------

    def add_change_listener(self, listener: Callable[[], None]) -> None:
        self._ensure_connected()
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_change_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
        if not self._listeners:
            self._disconnect_model()

    def _ensure_connected(self) -> None:
        model = self._model()
        if model is self._connected_model:
            return
        self._disconnect_model()
        if model is None:
            return
        model.rowsInserted.connect(self._notify)
        model.rowsRemoved.connect(self._notify)
        model.modelReset.connect(self._notify)
        model.dataChanged.connect(self._notify)
        self._connected_model = model

    def _disconnect_model(self) -> None:
        model = self._connected_model
        self._connected_model = None
        if not _alive(model):
            return
        model.rowsInserted.disconnect(self._notify)
        model.rowsRemoved.disconnect(self._notify)
        model.modelReset.disconnect(self._notify)
        model.dataChanged.disconnect(self._notify)

    def _notify(self, *args) -> None:
        for listener in list(self._listeners):
            listener()

    # --- Rendering and selection -----------------------------------------

    @property
    def cell_renderer(self) -> Any:
        view = self.view()
        return view.itemDelegate() if view is not None else None

    @cell_renderer.setter
    def cell_renderer(self, renderer: Any) -> None:
        view = self.view()
        if view is None:
            return
        # The view does not take ownership of its delegate
        if renderer is not None and renderer.parent() is None:
            renderer.setParent(view)
        view.setItemDelegate(renderer)

    @property
    def selected_index(self) -> int:
        view = self.view()
        if view is None:
            return -1
        index = view.currentIndex()
        return index.row() if index.isValid() else -1

    @selected_index.setter
    def selected_index(self, row: int) -> None:
        model = self._model()
        if model is None or not (0 <= row < model.rowCount()):
            return
        self.view().setCurrentIndex(model.index(row, 0))

    def scroll_to_visible(self, row: int) -> None:
        model = self._model()
        if model is None or not (0 <= row < model.rowCount()):
            return
        self.view().scrollTo(model.index(row, 0))


class QtComponent(UIComponent):
    """UIComponent over an arbitrary QWidget."""

    def __init__(self, widget: QWidget):
        self.widget = widget

    def is_showing(self) -> bool:
        return _alive(self.widget) and self.widget.isVisible()

    def children(self) -> Iterable[UIComponent]:
        if not _alive(self.widget):
            return
        for child in self.widget.findChildren(QWidget, options=Qt.FindChildOption.FindDirectChildrenOnly):
            yield QtComponent(child)

    def as_list_widget(self) -> Optional[FrameListWidget]:
        if isinstance(self.widget, QListView) and _alive(self.widget):
            return QtFrameListWidget.for_view(self.widget)
        return None
