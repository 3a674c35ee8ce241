"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/widget_tree.py
Version:        1.0.0
Description:    Toolkit-neutral view of the host's UI component tree. The
                reconciliation engine only talks to these interfaces; each
                host provides an adapter (see gui/qt_widget_tree.py).
------------------------------------------------------------------------------
"""

from typing import Any, Callable, Iterable, List, Optional, Sequence

ChangeListener = Callable[[], None]


class FrameListWidget:
    """
    A list widget whose rows are call-stack entries.
    """

    def is_alive(self) -> bool:
        """False once the underlying widget has been destroyed."""
        raise NotImplementedError

    def is_showing(self) -> bool:
        raise NotImplementedError

    def size(self) -> int:
        raise NotImplementedError

    def element_at(self, index: int) -> Any:
        raise NotImplementedError

    def elements(self) -> List[Any]:
        return [self.element_at(i) for i in range(self.size())]

    def replace_contents(self, entries: Sequence[Any]) -> None:
        """
        Replaces every row. Raises TypeError when the backing model
        refuses the new contents.
        """
        raise NotImplementedError

    def add_change_listener(self, listener: ChangeListener) -> None:
        raise NotImplementedError

    def remove_change_listener(self, listener: ChangeListener) -> None:
        raise NotImplementedError

    @property
    def cell_renderer(self) -> Any:
        raise NotImplementedError

    @cell_renderer.setter
    def cell_renderer(self, renderer: Any) -> None:
        raise NotImplementedError

    @property
    def selected_index(self) -> int:
        raise NotImplementedError

    @selected_index.setter
    def selected_index(self, index: int) -> None:
        raise NotImplementedError

    def scroll_to_visible(self, index: int) -> None:
        raise NotImplementedError


class UIComponent:
    """
    One node of the host's component tree.
    """

    def is_showing(self) -> bool:
        raise NotImplementedError

    def children(self) -> Iterable["UIComponent"]:
        raise NotImplementedError

    def as_list_widget(self) -> Optional[FrameListWidget]:
        """Returns the list capability of this node, if it has one."""
        return None


class PlaceholderRenderer:
    """
    Marker mixin for renderers that draw placeholders themselves and pass
    every other entry to `original`.
    """
    original: Any = None
