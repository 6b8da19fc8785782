"""Shared fixtures for HDF Gate tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from hdfgate.core.loader import build_evaluation
from hdfgate.models.hdf import EvaluatedControl, Profile, Segment
from hdfgate.models.threshold import ControlStatus, Severity


def _result(status: str, code_desc: str = "check", **extra) -> dict:
    return {"status": status, "code_desc": code_desc, **extra}


@pytest.fixture
def hdf_document() -> dict:
    """Return a small HDF execution document.

    Leaf counts: 3 Passed (2 critical, 1 medium), 1 Failed (high),
    1 Not Reviewed (medium), 1 Profile Error (low), 1 Not Applicable
    (none, waived). Compliance is 3/6 = 50%.
    """
    return {
        "platform": {"name": "ubuntu", "release": "22.04"},
        "version": "5.22.3",
        "profiles": [
            {
                "name": "demo-baseline",
                "title": "Demo Baseline",
                "sha256": "abc123",
                "controls": [
                    {
                        "id": "C-1",
                        "title": "SSH root login disabled",
                        "desc": "Root must not log in over SSH.",
                        "impact": 0.9,
                        "tags": {"nist": ["AC-6", "IA-2"], "gid": "V-1", "stig_id": "SV-1"},
                        "descriptions": [
                            {"label": "check", "data": "Inspect sshd_config."},
                            {"label": "fix", "data": "Set PermitRootLogin no."},
                        ],
                        "results": [_result("passed", "sshd PermitRootLogin is no")],
                    },
                    {
                        "id": "C-2",
                        "impact": 0.95,
                        "results": [_result("passed"), _result("passed")],
                    },
                    {
                        "id": "C-3",
                        "impact": 0.7,
                        "results": [
                            _result("passed"),
                            _result("failed", "auditd running", message="expected running"),
                        ],
                    },
                    {"id": "C-4", "impact": 0.5, "results": [_result("passed")]},
                    {
                        "id": "C-5",
                        "impact": 0.5,
                        "results": [_result("skipped", skip_message="manual review")],
                    },
                    {
                        "id": "C-6",
                        "impact": 0.3,
                        "results": [_result("error", message="command not found")],
                    },
                    {
                        "id": "C-7",
                        "desc": "Only applies to containers.",
                        "impact": 0.0,
                        "waiver_data": {"skipped_due_to_waiver": True},
                        "results": [_result("skipped", skip_message="waived")],
                    },
                ],
            }
        ],
    }


@pytest.fixture
def hdf_file(tmp_path: Path, hdf_document: dict) -> Path:
    path = tmp_path / "results.json"
    path.write_text(json.dumps(hdf_document), encoding="utf-8")
    return path


@pytest.fixture
def profile(hdf_document: dict) -> Profile:
    return build_evaluation(hdf_document).primary_profile


@pytest.fixture
def make_profile():
    """Factory building a profile from (id, status, severity) tuples."""

    def _make(*controls: tuple[str, ControlStatus, Severity], name: str = "test-profile") -> Profile:
        return Profile(
            name=name,
            controls=[
                EvaluatedControl(
                    id=control_id,
                    status=status,
                    severity=severity,
                    impact=0.0 if status == ControlStatus.NOT_APPLICABLE else 0.5,
                    segments=[Segment(status="passed")],
                )
                for control_id, status, severity in controls
            ],
        )

    return _make
