"""Threshold template generation from an evaluated profile.

By default the template requires the current counts or better: at least
as many passes, at most as many failures, skips, errors and
not-applicable controls.
"""

from __future__ import annotations

from ..models.hdf import Profile
from ..models.threshold import CountRange, ThresholdStatus, ThresholdValues
from .calculations import calculate_compliance, extract_status_counts
from .constants import SEVERITIES, STATUSES, severities_for_status
from .control_mapping import get_control_id_map
from .status import rename_status_name


def _bounds(status: ThresholdStatus, exact: bool) -> tuple[bool, bool]:
    """Return (set_min, set_max) for a status."""
    if exact:
        return True, True
    if status == ThresholdStatus.PASSED:
        return True, False
    return False, True


def generate_threshold(
    profile: Profile,
    exact: bool = False,
    include_control_ids: bool = False,
) -> ThresholdValues:
    """Build a starting threshold document from a profile's observed counts."""
    thresholds = ThresholdValues()
    overall = extract_status_counts(profile)

    compliance = thresholds.ensure_compliance()
    compliance.min = calculate_compliance(overall)
    if exact:
        compliance.max = compliance.min

    by_severity = {severity: extract_status_counts(profile, severity) for severity in SEVERITIES}

    for status in STATUSES:
        set_min, set_max = _bounds(status, exact)
        status_thresholds = thresholds.ensure_status(status)
        hdf_status = rename_status_name(status)

        for severity in severities_for_status(status):
            actual = by_severity[severity].for_status(hdf_status)
            bucket = status_thresholds.ensure_severity(severity)
            if set_min:
                bucket.min = actual
            if set_max:
                bucket.max = actual

        actual_total = overall.for_status(hdf_status)
        status_thresholds.total = CountRange(
            min=actual_total if set_min else None,
            max=actual_total if set_max else None,
        )

    if include_control_ids:
        thresholds = get_control_id_map(profile, thresholds)
        # Only no_impact may carry a "none" bucket.
        for status in STATUSES:
            if status != ThresholdStatus.NO_IMPACT:
                thresholds.ensure_status(status).none = None

    return thresholds
