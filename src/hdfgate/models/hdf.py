"""Evaluation (HDF) data models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel

from .threshold import ControlStatus, Severity


class Segment(BaseModel):
    """One test result within a control."""

    status: str
    code_desc: str = ""
    message: Optional[str] = None
    skip_message: Optional[str] = None


class EvaluatedControl(BaseModel):
    id: str
    title: Optional[str] = None
    desc: Optional[str] = None
    impact: float = 0.5
    severity: Severity
    status: ControlStatus
    waived: bool = False
    segments: list[Segment] = []
    tags: dict[str, Any] = {}
    descriptions: list[dict[str, Any]] = []
    extended_by: list[str] = []

    @property
    def segment_statuses(self) -> list[str]:
        return [s.status for s in self.segments]


class Profile(BaseModel):
    name: str
    title: Optional[str] = None
    sha256: Optional[str] = None
    parent_profile: Optional[str] = None
    controls: list[EvaluatedControl] = []

    def leaf_controls(self) -> list[EvaluatedControl]:
        """Controls not overridden by an overlay profile."""
        return [c for c in self.controls if not c.extended_by]


class Evaluation(BaseModel):
    profiles: list[Profile] = []

    @property
    def primary_profile(self) -> Optional[Profile]:
        return self.profiles[0] if self.profiles else None
