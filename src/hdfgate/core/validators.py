"""Threshold validation engine.

Every threshold present in the document produces a check; validation never
stops at the first failure so a caller can report all violations at once.
"""

from __future__ import annotations

from typing import Optional

from ..models.hdf import Profile
from ..models.threshold import (
    ExactCount,
    Number,
    Severity,
    StatusCounts,
    ThresholdStatus,
    ThresholdValues,
)
from ..models.validation import (
    CheckStatus,
    CheckType,
    ExpectedThreshold,
    ThresholdCheck,
    ThresholdViolation,
    ValidationResult,
    ValidationSummary,
    ViolationType,
)
from .calculations import calculate_compliance, extract_status_counts
from .constants import STATUSES, TOTAL_KEY, severities_for_status
from .control_mapping import get_control_id_map
from .status import rename_status_name


def _status(passed: bool) -> CheckStatus:
    return CheckStatus.PASSED if passed else CheckStatus.FAILED


def _min_check(
    path: str,
    check_type: CheckType,
    actual: Number,
    threshold: Number,
    details: str,
    severity: Optional[str] = None,
    status_type: Optional[str] = None,
) -> ThresholdCheck:
    passed = actual >= threshold
    return ThresholdCheck(
        path=path,
        type=check_type,
        status=_status(passed),
        actual=actual,
        expected=ExpectedThreshold(min=threshold),
        severity=severity,
        status_type=status_type,
        violation=None if passed else ThresholdViolation(
            type=ViolationType.BELOW,
            amount=abs(actual - threshold),
            details=details,
        ),
    )


def _max_check(
    path: str,
    check_type: CheckType,
    actual: Number,
    threshold: Number,
    details: str,
    severity: Optional[str] = None,
    status_type: Optional[str] = None,
) -> ThresholdCheck:
    passed = actual <= threshold
    return ThresholdCheck(
        path=path,
        type=check_type,
        status=_status(passed),
        actual=actual,
        expected=ExpectedThreshold(max=threshold),
        severity=severity,
        status_type=status_type,
        violation=None if passed else ThresholdViolation(
            type=ViolationType.EXCEEDS,
            amount=abs(actual - threshold),
            details=details,
        ),
    )


def _actual_count(counts: StatusCounts, status: ThresholdStatus) -> int:
    return counts.for_status(rename_status_name(status))


def validate_compliance(profile: Profile, thresholds: ThresholdValues) -> list[ThresholdCheck]:
    """Check overall compliance against ``compliance.min`` / ``compliance.max``."""
    compliance = thresholds.compliance
    if compliance is None or (compliance.min is None and compliance.max is None):
        return []

    actual = calculate_compliance(extract_status_counts(profile))
    checks: list[ThresholdCheck] = []

    if compliance.min is not None:
        checks.append(_min_check(
            "compliance.min",
            CheckType.COMPLIANCE,
            actual,
            compliance.min,
            f"Compliance is {actual}%, required >= {compliance.min}%",
        ))
    if compliance.max is not None:
        checks.append(_max_check(
            "compliance.max",
            CheckType.COMPLIANCE,
            actual,
            compliance.max,
            f"Compliance is {actual}%, required <= {compliance.max}%",
        ))

    return checks


def validate_total_counts(profile: Profile, thresholds: ThresholdValues) -> list[ThresholdCheck]:
    """Check per-status totals, in either the exact or the min/max form."""
    checks: list[ThresholdCheck] = []
    counts = extract_status_counts(profile)

    for status in STATUSES:
        status_thresholds = thresholds.status(status)
        if status_thresholds is None or status_thresholds.total is None:
            continue

        total = status_thresholds.total
        actual = _actual_count(counts, status)
        name = status.value

        if isinstance(total, ExactCount):
            passed = actual == total.exact
            checks.append(ThresholdCheck(
                path=f"{name}.{TOTAL_KEY}",
                type=CheckType.COUNT,
                status=_status(passed),
                actual=actual,
                expected=ExpectedThreshold(exact=total.exact),
                severity=TOTAL_KEY,
                status_type=name,
                violation=None if passed else ThresholdViolation(
                    type=ViolationType.EXCEEDS if actual > total.exact else ViolationType.BELOW,
                    amount=abs(actual - total.exact),
                    details=f"Expected exactly {total.exact} {name} controls, got {actual}",
                ),
            ))
            continue

        if total.min is not None:
            checks.append(_min_check(
                f"{name}.{TOTAL_KEY}.min",
                CheckType.COUNT,
                actual,
                total.min,
                f"Total {name} controls ({actual}) is less than minimum ({total.min})",
                severity=TOTAL_KEY,
                status_type=name,
            ))
        if total.max is not None:
            checks.append(_max_check(
                f"{name}.{TOTAL_KEY}.max",
                CheckType.COUNT,
                actual,
                total.max,
                f"Total {name} controls ({actual}) exceeds maximum ({total.max})",
                severity=TOTAL_KEY,
                status_type=name,
            ))

    return checks


def validate_severity_counts(profile: Profile, thresholds: ThresholdValues) -> list[ThresholdCheck]:
    """Check ``<status>.<severity>.min|max`` counts."""
    checks: list[ThresholdCheck] = []
    counts_by_severity: dict[Severity, StatusCounts] = {}

    for status in STATUSES:
        status_thresholds = thresholds.status(status)
        if status_thresholds is None:
            continue

        for severity in severities_for_status(status):
            severity_threshold = status_thresholds.severity(severity)
            if severity_threshold is None:
                continue
            if severity_threshold.min is None and severity_threshold.max is None:
                continue

            if severity not in counts_by_severity:
                counts_by_severity[severity] = extract_status_counts(profile, severity)
            actual = _actual_count(counts_by_severity[severity], status)
            prefix = f"{status.value}.{severity.value}"

            if severity_threshold.min is not None:
                checks.append(_min_check(
                    f"{prefix}.min",
                    CheckType.COUNT,
                    actual,
                    severity_threshold.min,
                    f"{severity.value} severity {status.value} controls ({actual}) "
                    f"< min ({severity_threshold.min})",
                    severity=severity.value,
                    status_type=status.value,
                ))
            if severity_threshold.max is not None:
                checks.append(_max_check(
                    f"{prefix}.max",
                    CheckType.COUNT,
                    actual,
                    severity_threshold.max,
                    f"{severity.value} severity {status.value} controls ({actual}) "
                    f"> max ({severity_threshold.max})",
                    severity=severity.value,
                    status_type=status.value,
                ))

    return checks


def validate_control_ids(profile: Profile, thresholds: ThresholdValues) -> list[ThresholdCheck]:
    """Check that each listed bucket holds exactly the expected control ids.

    Comparison is by set, so ordering and duplicates in the expected list
    do not matter.
    """
    checks: list[ThresholdCheck] = []
    actual_map: Optional[ThresholdValues] = None

    for status in STATUSES:
        status_thresholds = thresholds.status(status)
        if status_thresholds is None:
            continue

        for severity in severities_for_status(status):
            severity_threshold = status_thresholds.severity(severity)
            if severity_threshold is None or severity_threshold.controls is None:
                continue

            if actual_map is None:
                actual_map = get_control_id_map(profile)
            actual_status = actual_map.status(status)
            actual_bucket = actual_status.severity(severity) if actual_status else None
            actual_controls = list(actual_bucket.controls or []) if actual_bucket else []
            expected_controls = severity_threshold.controls

            expected_set = set(expected_controls)
            actual_set = set(actual_controls)
            missing = sorted(expected_set - actual_set)
            unexpected = sorted(actual_set - expected_set)
            passed = not missing and not unexpected

            checks.append(ThresholdCheck(
                path=f"{status.value}.{severity.value}.controls",
                type=CheckType.CONTROL_ID,
                status=_status(passed),
                actual=actual_controls,
                expected=ExpectedThreshold(controls=list(expected_controls)),
                severity=severity.value,
                status_type=status.value,
                violation=None if passed else ThresholdViolation(
                    type=ViolationType.MISMATCH,
                    details=f"Missing: {len(missing)}, Unexpected: {len(unexpected)}",
                    missing=missing,
                    unexpected=unexpected,
                ),
            ))

    return checks


def summarize_checks(checks: list[ThresholdCheck]) -> tuple[int, int]:
    """Return (passed, failed) counts for a list of checks."""
    failed = sum(1 for c in checks if c.status == CheckStatus.FAILED)
    return len(checks) - failed, failed


def validate_thresholds(profile: Profile, thresholds: ThresholdValues) -> ValidationResult:
    """Validate a profile against a threshold document.

    Collects every check before returning; ``passed`` is true only when no
    check failed. An empty document yields no checks and passes.
    """
    checks = [
        *validate_compliance(profile, thresholds),
        *validate_total_counts(profile, thresholds),
        *validate_severity_counts(profile, thresholds),
        *validate_control_ids(profile, thresholds),
    ]

    passed_count, failed_count = summarize_checks(checks)
    overall = extract_status_counts(profile)
    compliance_ran = any(c.type == CheckType.COMPLIANCE for c in checks)

    return ValidationResult(
        passed=failed_count == 0,
        checks=checks,
        summary=ValidationSummary(
            total_checks=len(checks),
            passed_checks=passed_count,
            failed_checks=failed_count,
            total_controls=overall.total_controls,
            compliance=calculate_compliance(overall) if compliance_ran else None,
            compliance_required=thresholds.compliance.model_copy() if compliance_ran else None,
        ),
    )
