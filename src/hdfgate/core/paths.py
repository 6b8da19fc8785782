"""Threshold key grammar.

A threshold key is one of::

    compliance.(min|max)
    <status>.total                      legacy exact count
    <status>.total.(min|max)
    <status>.<severity>.(min|max|controls)

where ``none`` is only a legal severity under ``no_impact``.
"""

from __future__ import annotations

import math

from ..models.threshold import ParsedThresholdPath, Severity, ThresholdStatus, ThresholdType
from .constants import COMPLIANCE_KEY, COUNT_TYPES, SEVERITIES, STATUSES, TOTAL_KEY
from .errors import ThresholdErrorCode, ThresholdValidationError

EXPECTED_FORMAT = (
    '"compliance.min|max", "<status>.total", "<status>.total.min|max" '
    'or "<status>.<severity>.min|max|controls"'
)

_STATUS_VALUES = [s.value for s in STATUSES]
_SEVERITY_VALUES = [s.value for s in SEVERITIES]
_TYPE_VALUES = [t.value for t in ThresholdType]


def is_valid_status(value: str) -> bool:
    return value in _STATUS_VALUES


def is_valid_severity(value: str) -> bool:
    return value in _SEVERITY_VALUES


def is_valid_threshold_type(value: str) -> bool:
    return value in _TYPE_VALUES


def is_valid_threshold_count(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    )


def is_valid_compliance_percentage(value: object) -> bool:
    return is_valid_threshold_count(value) and value <= 100


def _invalid(path: str, reason: str) -> ThresholdValidationError:
    return ThresholdValidationError(
        f'{reason} in threshold key "{path}". Expected format: {EXPECTED_FORMAT}',
        ThresholdErrorCode.INVALID_KEY_FORMAT,
        {"key": path, "expected_format": EXPECTED_FORMAT},
    )


def _parse_status(path: str, value: str) -> ThresholdStatus:
    if not is_valid_status(value):
        raise _invalid(
            path, f'Invalid status name "{value}" (expected one of {", ".join(_STATUS_VALUES)})'
        )
    return ThresholdStatus(value)


def parse_threshold_path(path: str) -> ParsedThresholdPath:
    """Parse a dotted threshold key into its structured form.

    Raises:
        ThresholdValidationError: The key does not match the grammar.
    """
    parts = path.split(".")
    if len(parts) not in (2, 3):
        raise _invalid(path, f"Expected 2-3 parts, got {len(parts)}")

    if parts[0] == COMPLIANCE_KEY:
        if len(parts) != 2 or parts[1] not in ("min", "max"):
            raise _invalid(path, f'Invalid compliance threshold type "{".".join(parts[1:])}"')
        return ParsedThresholdPath(kind="compliance", type=ThresholdType(parts[1]))

    status = _parse_status(path, parts[0])

    if len(parts) == 2:
        if parts[1] != TOTAL_KEY:
            raise _invalid(path, f'Two-part status keys must end in "total", got "{parts[1]}"')
        return ParsedThresholdPath(kind="total", status_name=status)

    severity, type_ = parts[1], parts[2]

    if severity == TOTAL_KEY:
        if type_ not in [t.value for t in COUNT_TYPES]:
            raise _invalid(path, f'Invalid threshold type "{type_}" for total (expected min or max)')
        return ParsedThresholdPath(kind="total", status_name=status, type=ThresholdType(type_))

    if not is_valid_severity(severity):
        raise _invalid(
            path, f'Invalid severity "{severity}" (expected one of {", ".join(_SEVERITY_VALUES)})'
        )
    if severity == Severity.NONE.value and status != ThresholdStatus.NO_IMPACT:
        raise _invalid(path, 'Invalid severity "none" (only valid with status "no_impact")')
    if not is_valid_threshold_type(type_):
        raise _invalid(
            path, f'Invalid threshold type "{type_}" (expected one of {", ".join(_TYPE_VALUES)})'
        )

    return ParsedThresholdPath(
        kind="severity",
        status_name=status,
        severity=Severity(severity),
        type=ThresholdType(type_),
    )


def is_threshold_key(key: str) -> bool:
    try:
        parse_threshold_path(key)
    except ThresholdValidationError:
        return False
    return True


def is_control_id_key(key: str) -> bool:
    try:
        parsed = parse_threshold_path(key)
    except ThresholdValidationError:
        return False
    return parsed.type == ThresholdType.CONTROLS
