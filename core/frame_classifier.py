"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/frame_classifier.py
Version:        1.0.0
Description:    Decides whether a stack frame is project code (kept visible)
                or library code (collapsed). Pure string logic on the frame's
                source path; safe to call as often as needed.
------------------------------------------------------------------------------
"""

import os
from typing import Callable, Iterable, Optional

from core.models.frames import DisplayableFrame, HiddenFramesPlaceholder
from core.models.settings import FrameHiderSettings


def _to_slashes(value: str) -> str:
    return value.replace("\\", "/")


def is_library_path(file_path: str, patterns: Iterable[str]) -> bool:
    """
    Returns True if any pattern occurs in the path (case-insensitive).
    Dotted patterns ('google.protobuf') are also tried as path fragments
    ('google/protobuf').
    """
    haystack = _to_slashes(file_path).lower()
    for pattern in patterns:
        if not pattern:
            continue
        needle = _to_slashes(pattern).lower()
        if needle in haystack:
            return True
        if "." in needle and needle.replace(".", "/") in haystack:
            return True
    return False


def is_under_root(file_path: str, project_root: str) -> bool:
    root = os.path.normcase(os.path.realpath(project_root))
    path = os.path.normcase(os.path.realpath(file_path))
    if path == root:
        return True
    return path.startswith(root.rstrip(os.sep) + os.sep)


def is_project_frame(
    frame: Optional[DisplayableFrame],
    patterns: Iterable[str],
    project_root: Optional[str] = None,
    restrict_to_project_root: bool = False,
) -> bool:
    """
    Classifies one frame.

    Args:
        frame: The frame to classify.
        patterns: Library path patterns.
        project_root: Root directory of the user's project, if known.
        restrict_to_project_root: Treat frames outside project_root as library frames.

    Returns:
        True for project frames. Frames without a source position and
        placeholders are never project frames.
    """
    if frame is None or isinstance(frame, HiddenFramesPlaceholder):
        return False

    position = frame.source_position
    if position is None or not position.path:
        return False

    if is_library_path(position.path, patterns):
        return False

    if restrict_to_project_root:
        if not project_root:
            return True
        return is_under_root(position.path, project_root)

    return True


def classifier_for(settings: FrameHiderSettings) -> Callable[[DisplayableFrame], bool]:
    """Binds a settings snapshot into a single-argument classify callable."""
    patterns = tuple(settings.library_patterns)

    def classify(frame: DisplayableFrame) -> bool:
        return is_project_frame(
            frame,
            patterns,
            project_root=settings.project_root,
            restrict_to_project_root=settings.restrict_to_project_root,
        )

    return classify


def extract_library_dir_name(file_path: str) -> Optional[str]:
    """
    Guesses a pattern for the library a file belongs to: the name of
    its parent directory. Returns None when there is none.
    """
    if not file_path:
        return None
    parent = os.path.basename(os.path.dirname(_to_slashes(file_path).rstrip("/")))
    return parent or None
