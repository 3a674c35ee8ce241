"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/models/frames.py
Version:        1.0.0
Description:    Entry types shown in a call-stack list. StackFrame objects are
                owned by the host debugger and compared by identity;
                HiddenFramesPlaceholder is the synthetic entry standing in
                for a run of collapsed library frames.
------------------------------------------------------------------------------
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SourcePosition(BaseModel):
    """
    File and line a stack frame maps to.
    """
    model_config = ConfigDict(frozen=True)

    path: str
    line: int = Field(default=0, ge=0)

    def __str__(self) -> str:
        return f"{self.path}:{self.line}"


class DisplayableFrame:
    """
    Common base for everything that may appear in a call-stack list.
    """
    source_position: Optional[SourcePosition] = None

    def display_text(self) -> str:
        raise NotImplementedError


class StackFrame(DisplayableFrame):
    """
    One frame as exposed by the host. Equality is identity: two frames
    of a recursive call at the same line are still different frames.
    """
    def __init__(self, function: str, source_position: Optional[SourcePosition] = None):
        self.function = function
        self.source_position = source_position

    def display_text(self) -> str:
        if self.source_position is None:
            return f"{self.function}, <unknown source>"
        return f"{self.function}, {self.source_position}"

    def __repr__(self) -> str:
        return f"StackFrame({self.display_text()!r})"


class HiddenFramesPlaceholder(DisplayableFrame):
    """
    Stands in for `hidden_count` consecutive library frames.
    Placeholders with the same count compare equal so that a rebuilt
    view can be checked against the previous one.
    """
    def __init__(self, hidden_count: int):
        if hidden_count < 1:
            raise ValueError(f"hidden_count must be >= 1, got {hidden_count}")
        self.hidden_count = hidden_count

    def display_text(self) -> str:
        suffix = "s" if self.hidden_count > 1 else ""
        return f"{self.hidden_count} hidden frame{suffix}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, HiddenFramesPlaceholder):
            return NotImplemented
        return self.hidden_count == other.hidden_count

    def __hash__(self) -> int:
        return hash(("HiddenFramesPlaceholder", self.hidden_count))

    def __repr__(self) -> str:
        return f"HiddenFramesPlaceholder({self.hidden_count})"
