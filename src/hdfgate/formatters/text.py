"""Shared value formatting for check reports."""

from __future__ import annotations

from ..models.validation import CheckType, ThresholdCheck, ViolationType


def _num(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_actual_value(check: ThresholdCheck) -> str:
    if isinstance(check.actual, list):
        return f"{len(check.actual)} controls"
    if check.type == CheckType.COMPLIANCE:
        return f"{_num(check.actual)}%"
    return _num(check.actual)


def format_expected_value(check: ThresholdCheck) -> str:
    expected = check.expected
    unit = "%" if check.type == CheckType.COMPLIANCE else ""
    if expected.min is not None and expected.max is not None:
        return f"{_num(expected.min)}-{_num(expected.max)}{unit}"
    if expected.min is not None:
        return f">= {_num(expected.min)}{unit}"
    if expected.max is not None:
        return f"<= {_num(expected.max)}{unit}"
    if expected.exact is not None:
        return f"= {_num(expected.exact)}"
    if expected.controls is not None:
        return f"{len(expected.controls)} specific controls"
    return ""


def format_violation_brief(check: ThresholdCheck) -> str:
    violation = check.violation
    if violation is None:
        return ""

    if violation.type == ViolationType.MISMATCH:
        return violation.details or "Control ID mismatch"

    actual = len(check.actual) if isinstance(check.actual, list) else check.actual
    expected = check.expected
    threshold = next(v for v in (expected.min, expected.max, expected.exact) if v is not None)
    unit = "%" if check.type == CheckType.COMPLIANCE else ""
    amount = _num(violation.amount) if violation.amount is not None else "?"

    if violation.type == ViolationType.EXCEEDS:
        return f"{_num(actual)}{unit} > {_num(threshold)}{unit} (exceeds by {amount}{unit})"
    return f"{_num(actual)}{unit} < {_num(threshold)}{unit} (below by {amount}{unit})"
