"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/models/__init__.py
Version:        1.0.0
Description:    Package initializer for core data models. Exports the frame
                entry types and the frame hider settings snapshot.
------------------------------------------------------------------------------
"""

from .frames import DisplayableFrame, SourcePosition, StackFrame, HiddenFramesPlaceholder
from .settings import FrameHiderSettings, DEFAULT_LIBRARY_PATTERNS
