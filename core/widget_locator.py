"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/widget_locator.py
Version:        1.0.0
Description:    Finds the call-stack list inside an arbitrary component tree
                and remembers it weakly between reconciliation passes.
------------------------------------------------------------------------------
"""

import weakref
from typing import Any, Optional

from core.logger import get_logger
from core.models.frames import DisplayableFrame
from core.widget_tree import FrameListWidget, UIComponent

logger = get_logger("locator")


def is_frames_list(widget: FrameListWidget) -> bool:
    """
    Structural check that a list widget really is the call-stack list.
    """
    size = widget.size()
    if size == 0:
        return False
    first = widget.element_at(0)
    # A lone None row is what an unrelated, empty-rendered list looks like
    if size == 1 and first is None:
        return False
    return isinstance(first, DisplayableFrame)


class CachedWidgetRef:
    """
    Non-owning reference to a located list widget.

    `last_filtered_model_size` is the row count right after the last
    successful write; a different count means the host changed the list.
    """

    def __init__(self, widget: FrameListWidget, context: Any = None):
        self._ref = weakref.ref(widget)
        self.context = context
        self.last_filtered_model_size = -1

    def get(self) -> Optional[FrameListWidget]:
        widget = self._ref()
        if widget is None or not widget.is_alive():
            return None
        return widget


class WidgetLocator:
    """
    Depth-first search for the frames list, skipping hidden subtrees.
    """

    def __init__(self):
        self.cache: Optional[CachedWidgetRef] = None

    def find(self, root: Optional[UIComponent], context: Any = None) -> Optional[FrameListWidget]:
        """
        Searches `root` and caches the first qualifying list.

        Returns:
            The widget, or None so the caller can retry later.
        """
        widget = self._search(root)
        if widget is None:
            return None
        self.cache = CachedWidgetRef(widget, context)
        logger.debug("Found and cached frames list (context=%s)", context)
        return widget

    def _search(self, component: Optional[UIComponent]) -> Optional[FrameListWidget]:
        if component is None or not component.is_showing():
            return None

        widget = component.as_list_widget()
        if widget is not None:
            # A list is a leaf for our purposes, wrong list means keep looking elsewhere
            return widget if is_frames_list(widget) else None

        for child in component.children():
            found = self._search(child)
            if found is not None:
                return found
        return None

    def cached_widget(self) -> Optional[FrameListWidget]:
        """The cached widget if it is still alive and on screen."""
        if self.cache is None:
            return None
        widget = self.cache.get()
        if widget is None:
            self.cache = None
            return None
        if not widget.is_showing():
            return None
        return widget

    def invalidate(self) -> None:
        self.cache = None
