"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/view_builder.py
Version:        1.0.0
Description:    Collapses runs of library frames into a single placeholder.
                Works on raw host lists as well as on lists that were already
                filtered, so re-running it never changes an up-to-date view.
------------------------------------------------------------------------------
"""

from typing import Callable, List, Sequence

from core.models.frames import DisplayableFrame, HiddenFramesPlaceholder


def build_filtered_view(
    entries: Sequence[DisplayableFrame],
    classify: Callable[[DisplayableFrame], bool],
) -> List[DisplayableFrame]:
    """
    Builds the filtered call-stack view.

    Args:
        entries: Current list contents, innermost frame first. May already
                 contain placeholders from an earlier pass.
        classify: Returns True for frames that stay visible.

    Returns:
        The new list. Empty input gives empty output; callers treat that
        as "list not populated yet".
    """
    view: List[DisplayableFrame] = []
    hidden_count = 0

    for entry in entries:
        if not isinstance(entry, DisplayableFrame):
            continue

        # Placeholders are never re-classified, only re-counted
        if isinstance(entry, HiddenFramesPlaceholder):
            hidden_count += entry.hidden_count
            continue

        if not classify(entry):
            hidden_count += 1
            continue

        if hidden_count > 0:
            view.append(HiddenFramesPlaceholder(hidden_count))
            hidden_count = 0
        view.append(entry)

    if hidden_count > 0:
        if view and isinstance(view[-1], HiddenFramesPlaceholder):
            hidden_count += view.pop().hidden_count
        view.append(HiddenFramesPlaceholder(hidden_count))

    return view


def count_frames(entries: Sequence[DisplayableFrame]) -> int:
    """Number of real frames a list represents, placeholders expanded."""
    total = 0
    for entry in entries:
        if isinstance(entry, HiddenFramesPlaceholder):
            total += entry.hidden_count
        elif isinstance(entry, DisplayableFrame):
            total += 1
    return total


def index_covering(entries: Sequence[DisplayableFrame], offset: int) -> int:
    """
    Row of the entry that represents the raw frame at `offset`, counting
    placeholders as their hidden frames. Offsets past the end map to the
    last row; -1 for an empty list.
    """
    if not entries:
        return -1
    position = 0
    for index, entry in enumerate(entries):
        if isinstance(entry, HiddenFramesPlaceholder):
            position += entry.hidden_count
        elif isinstance(entry, DisplayableFrame):
            position += 1
        if offset < position:
            return index
    return len(entries) - 1
