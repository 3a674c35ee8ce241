"""
------------------------------------------------------------------------------
Project:        StackSnack
File:           core/models/settings.py
Version:        1.0.0
Description:    Read-only snapshot of the frame hider settings as consumed by
                the reconciliation engine.
------------------------------------------------------------------------------
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LIBRARY_PATTERNS: List[str] = [
    "venv/",
    "site-packages/",
    "lib/python",
    "go/pkg/mod",
    "node_modules/",
]


class FrameHiderSettings(BaseModel):
    """
    Snapshot of the user settings. Mutation happens in AppConfig; the
    engine only ever reads a fresh snapshot per pass.
    """
    model_config = ConfigDict(frozen=True)

    hide_enabled: bool = False
    restrict_to_project_root: bool = True
    library_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_LIBRARY_PATTERNS))
    project_root: Optional[str] = None

    @field_validator("library_patterns", mode="before")
    @classmethod
    def normalize_patterns(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        seen = set()
        result = []
        for raw in value:
            pattern = str(raw).strip()
            if not pattern or pattern in seen:
                continue
            seen.add(pattern)
            result.append(pattern)
        return result

    @field_validator("project_root", mode="before")
    @classmethod
    def blank_root_is_none(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None
