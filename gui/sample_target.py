"""
Small program the reference host "debugs". The stack is captured from
inside callbacks invoked by json and re, so it interleaves project frames
with standard-library frames.
"""

import json
import re
from typing import List

from core.models.frames import StackFrame
from core.session import capture_stack

SAMPLE_DOCUMENT = '{"session": {"name": "breakpoint in callback", "frames": [1, 2, 3]}}'


def _on_match(match: re.Match, captured: List[StackFrame]) -> str:
    captured.extend(capture_stack())
    return match.group(0).upper()


def _object_hook(obj: dict, captured: List[StackFrame]) -> dict:
    if "name" in obj and not captured:
        obj["name"] = re.sub(r"\w+", lambda m: _on_match(m, captured), obj["name"], count=1)
    return obj


def capture_sample_stack() -> List[StackFrame]:
    """Runs the sample and returns the stack seen at the 'breakpoint'."""
    captured: List[StackFrame] = []
    json.loads(SAMPLE_DOCUMENT, object_hook=lambda obj: _object_hook(obj, captured))
    return captured
