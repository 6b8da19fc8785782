"""Status counting and compliance calculation."""

from __future__ import annotations

from collections import Counter
from typing import Optional

from ..models.hdf import Profile
from ..models.threshold import ControlStatus, Severity, StatusCounts


def extract_status_counts(profile: Profile, severity: Optional[Severity | str] = None) -> StatusCounts:
    """Count a profile's leaf controls by status.

    When ``severity`` is given only controls of that severity are counted.
    Segment-level totals are collected alongside: segments of passed
    controls, failed and passed segments of failed controls, and segments
    of waived not-applicable controls.
    """
    counts: Counter[str] = Counter()
    wanted = Severity(severity) if severity is not None else None

    for control in profile.leaf_controls():
        if wanted is not None and control.severity != wanted:
            continue

        status = control.status
        counts[status.name.lower()] += 1

        segment_statuses = control.segment_statuses
        if status == ControlStatus.PASSED:
            counts["passed_tests"] += len(segment_statuses)
        elif status == ControlStatus.FAILED:
            counts["passing_tests_failed_control"] += segment_statuses.count("passed")
            counts["failed_tests"] += segment_statuses.count("failed")
        elif status == ControlStatus.NOT_APPLICABLE and control.waived:
            counts["waived"] += len(segment_statuses)

    return StatusCounts(**counts)


def calculate_compliance(counts: StatusCounts) -> int:
    """Percentage of applicable controls that passed, rounded half up.

    Not Applicable controls are excluded; an empty denominator gives 0.
    """
    total = counts.passed + counts.failed + counts.not_reviewed + counts.profile_error
    if total == 0:
        return 0
    return int(100 * counts.passed / total + 0.5)
