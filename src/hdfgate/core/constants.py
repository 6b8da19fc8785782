"""Threshold vocabulary and status name mappings."""

from __future__ import annotations

from ..models.threshold import ControlStatus, Severity, ThresholdStatus, ThresholdType

STATUSES: tuple[ThresholdStatus, ...] = (
    ThresholdStatus.PASSED,
    ThresholdStatus.FAILED,
    ThresholdStatus.SKIPPED,
    ThresholdStatus.ERROR,
    ThresholdStatus.NO_IMPACT,
)

# Severities that can be derived from a control's impact, excluding "none".
STANDARD_SEVERITIES: tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
)

SEVERITIES: tuple[Severity, ...] = STANDARD_SEVERITIES + (Severity.NONE,)

COUNT_TYPES: tuple[ThresholdType, ...] = (ThresholdType.MIN, ThresholdType.MAX)

COMPLIANCE_KEY = "compliance"
TOTAL_KEY = "total"

STATUS_NAME_MAP: dict[ThresholdStatus, ControlStatus] = {
    ThresholdStatus.PASSED: ControlStatus.PASSED,
    ThresholdStatus.FAILED: ControlStatus.FAILED,
    ThresholdStatus.SKIPPED: ControlStatus.NOT_REVIEWED,
    ThresholdStatus.NO_IMPACT: ControlStatus.NOT_APPLICABLE,
    ThresholdStatus.ERROR: ControlStatus.PROFILE_ERROR,
}

REVERSE_STATUS_NAME_MAP: dict[ControlStatus, ThresholdStatus] = {
    hdf: threshold for threshold, hdf in STATUS_NAME_MAP.items()
}


def severities_for_status(status: ThresholdStatus) -> tuple[Severity, ...]:
    """Severities that may appear under a status ("none" only under no_impact)."""
    if status == ThresholdStatus.NO_IMPACT:
        return SEVERITIES
    return STANDARD_SEVERITIES
