"""Evaluation and threshold file loading.

This is the only module in the core that touches the filesystem. Failures
are raised as ``DocumentLoadError`` with a ``LoadErrorKind`` so callers can
branch on the kind instead of on OS error codes.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..models.hdf import EvaluatedControl, Evaluation, Profile, Segment
from ..models.threshold import ControlStatus, Severity
from .errors import DocumentLoadError, LoadErrorKind


def severity_from_impact(impact: float) -> Severity:
    if impact < 0.1:
        return Severity.NONE
    if impact < 0.4:
        return Severity.LOW
    if impact < 0.7:
        return Severity.MEDIUM
    if impact < 0.9:
        return Severity.HIGH
    return Severity.CRITICAL


def status_from_results(impact: float, segment_statuses: list[str]) -> ControlStatus:
    if "error" in segment_statuses:
        return ControlStatus.PROFILE_ERROR
    if impact == 0:
        return ControlStatus.NOT_APPLICABLE
    if "failed" in segment_statuses:
        return ControlStatus.FAILED
    if "passed" in segment_statuses:
        return ControlStatus.PASSED
    return ControlStatus.NOT_REVIEWED


def _build_control(raw: dict) -> EvaluatedControl:
    impact = float(raw.get("impact", 0.5) or 0)
    segments = [Segment.model_validate(r) for r in raw.get("results") or raw.get("segments") or []]
    statuses = [s.status for s in segments]
    waiver = raw.get("waiver_data") or {}

    return EvaluatedControl(
        id=raw["id"],
        title=raw.get("title"),
        desc=raw.get("desc"),
        impact=impact,
        severity=raw.get("severity") or severity_from_impact(impact),
        status=raw.get("status") or status_from_results(impact, statuses),
        waived=bool(raw.get("waived", waiver.get("skipped_due_to_waiver", False))),
        segments=segments,
        tags=raw.get("tags") or {},
        descriptions=raw.get("descriptions") or [],
    )


def build_evaluation(document: dict) -> Evaluation:
    """Build an ``Evaluation`` from a parsed HDF execution document.

    A control in a dependency profile is marked as extended when the
    overlay profile named by its ``parent_profile`` defines the same id.
    """
    profiles = [
        Profile(
            name=raw.get("name", ""),
            title=raw.get("title"),
            sha256=raw.get("sha256"),
            parent_profile=raw.get("parent_profile"),
            controls=[_build_control(c) for c in raw.get("controls") or []],
        )
        for raw in document.get("profiles") or []
    ]

    by_name = {p.name: p for p in profiles}
    for profile in profiles:
        parent = by_name.get(profile.parent_profile or "")
        if parent is None:
            continue
        parent_ids = {c.id for c in parent.controls}
        for control in profile.controls:
            if control.id in parent_ids:
                control.extended_by.append(parent.name)

    return Evaluation(profiles=profiles)


def _read_text(path: Path) -> str:
    if not path.exists():
        raise DocumentLoadError(LoadErrorKind.NOT_FOUND, path, "file not found")
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentLoadError(LoadErrorKind.UNREADABLE, path, str(e)) from e


def load_evaluation(path: Path) -> Evaluation:
    """Read an HDF execution JSON file."""
    text = _read_text(path)
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentLoadError(LoadErrorKind.INVALID_JSON, path, f"invalid JSON: {e}") from e

    if not isinstance(document, dict) or not isinstance(document.get("profiles"), list):
        raise DocumentLoadError(
            LoadErrorKind.INVALID_DOCUMENT, path, "not an HDF execution document (no profiles)"
        )
    try:
        evaluation = build_evaluation(document)
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise DocumentLoadError(LoadErrorKind.INVALID_DOCUMENT, path, f"malformed control data: {e}") from e

    if not evaluation.profiles:
        raise DocumentLoadError(LoadErrorKind.INVALID_DOCUMENT, path, "document contains no profiles")
    return evaluation


def load_threshold_file(path: Path) -> Any:
    """Read a threshold file (YAML or JSON). An empty file yields ``{}``."""
    text = _read_text(path)
    try:
        content = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentLoadError(LoadErrorKind.INVALID_YAML, path, f"invalid YAML: {e}") from e
    return {} if content is None else content
