"""Threshold document encodings.

A threshold document is accepted either nested::

    compliance:
      min: 80
    failed:
      critical:
        max: 0

or flattened to dot-notation keys (``{"compliance.min": 80,
"failed.critical.max": 0}``). Both are routed through
``unflatten_threshold`` so every key and value is validated the same way.
"""

from __future__ import annotations

import math
from typing import Any

from ..models.threshold import (
    CountRange,
    ExactCount,
    ParsedThresholdPath,
    ThresholdType,
    ThresholdValues,
)
from .errors import ThresholdErrorCode, ThresholdValidationError
from .paths import is_control_id_key, is_threshold_key, is_valid_compliance_percentage, parse_threshold_path


def flatten_profile_summary(nested: dict) -> dict[str, Any]:
    """Flatten a nested summary or threshold document into dot-notation keys.

    ``{"passed": {"critical": 0, "total": 227}}`` becomes
    ``{"passed.critical": 0, "passed.total": 227}``. Lists (control ids)
    are leaves.
    """
    result: dict[str, Any] = {}

    def _walk(prefix: str, node: dict) -> None:
        for key, value in node.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            if isinstance(value, dict):
                _walk(path, value)
            else:
                result[path] = value

    _walk("", nested)
    return result


def _check_value(key: str, parsed: ParsedThresholdPath, value: Any) -> None:
    if parsed.type == ThresholdType.CONTROLS:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ThresholdValidationError(
                f'Invalid value for "{key}": must be a list of control ids, '
                f"got {type(value).__name__}",
                ThresholdErrorCode.INVALID_THRESHOLD_VALUE,
                {"key": key, "value": value},
            )
        return

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ThresholdValidationError(
            f'Invalid value for "{key}": must be a number, got {type(value).__name__}',
            ThresholdErrorCode.INVALID_THRESHOLD_VALUE,
            {"key": key, "value": value, "type": type(value).__name__},
        )
    if not math.isfinite(value):
        raise ThresholdValidationError(
            f'Invalid value for "{key}": must be a finite number, got {value}',
            ThresholdErrorCode.NON_FINITE_VALUE,
            {"key": key, "value": value},
        )
    if value < 0:
        raise ThresholdValidationError(
            f'Invalid value for "{key}": must be non-negative, got {value}',
            ThresholdErrorCode.NEGATIVE_VALUE,
            {"key": key, "value": value},
        )
    if parsed.kind == "compliance" and not is_valid_compliance_percentage(value):
        raise ThresholdValidationError(
            f'Invalid compliance value for "{key}": must be between 0-100, got {value}',
            ThresholdErrorCode.INVALID_PERCENTAGE,
            {"key": key, "value": value, "valid_range": "0-100"},
        )


def unflatten_threshold(threshold: Any) -> ThresholdValues:
    """Build a ``ThresholdValues`` from a flattened dot-notation mapping.

    Every key is parsed against the threshold grammar and every value is
    checked before anything is built; the first invalid entry aborts.

    Raises:
        ThresholdValidationError: The mapping is not a valid threshold document.
    """
    if not isinstance(threshold, dict):
        raise ThresholdValidationError(
            "Threshold must be a mapping of threshold keys to values",
            ThresholdErrorCode.INVALID_THRESHOLD_FORMAT,
            {"received": type(threshold).__name__},
        )

    entries: list[tuple[ParsedThresholdPath, Any]] = []
    for key, value in threshold.items():
        parsed = parse_threshold_path(str(key))
        _check_value(str(key), parsed, value)
        entries.append((parsed, value))

    legacy_totals = {p.status_name for p, _ in entries if p.is_legacy_total}
    ranged_totals = {p.status_name for p, _ in entries if p.kind == "total" and p.type is not None}
    ambiguous = legacy_totals & ranged_totals
    if ambiguous:
        status = sorted(s.value for s in ambiguous)[0]
        raise ThresholdValidationError(
            f'Ambiguous total for "{status}": "{status}.total" cannot be combined '
            f'with "{status}.total.min" or "{status}.total.max"',
            ThresholdErrorCode.AMBIGUOUS_TOTAL,
            {"status": status},
        )

    result = ThresholdValues()
    for parsed, value in entries:
        if parsed.kind == "compliance":
            setattr(result.ensure_compliance(), parsed.type.value, value)
            continue

        status_thresholds = result.ensure_status(parsed.status_name)
        if parsed.kind == "total":
            if parsed.is_legacy_total:
                status_thresholds.total = ExactCount(exact=value)
            else:
                if status_thresholds.total is None:
                    status_thresholds.total = CountRange()
                setattr(status_thresholds.total, parsed.type.value, value)
        else:
            severity_threshold = status_thresholds.ensure_severity(parsed.severity)
            if parsed.type == ThresholdType.CONTROLS:
                value = list(value)
            setattr(severity_threshold, parsed.type.value, value)

    return result


def _parse_number(raw: str) -> Any:
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def parse_inline_threshold(inline: str) -> dict[str, Any]:
    """Parse the inline CLI form ``"{compliance.min: 80}, {passed.total.min: 18}"``.

    Values that are not numbers are passed through unchanged so that
    ``unflatten_threshold`` reports them.
    """
    result: dict[str, Any] = {}
    for chunk in inline.split(","):
        entry = chunk.strip().replace("{", "").replace("}", "").strip()
        if not entry:
            continue
        if ":" not in entry:
            raise ThresholdValidationError(
                f'Invalid inline threshold entry "{entry}": expected "key: value"',
                ThresholdErrorCode.INVALID_THRESHOLD_FORMAT,
                {"entry": entry},
            )
        key, value = entry.split(":", 1)
        key = key.strip()
        if is_control_id_key(key):
            raise ThresholdValidationError(
                f'Control id lists are not supported inline ("{key}"); use --templateFile',
                ThresholdErrorCode.INVALID_THRESHOLD_FORMAT,
                {"entry": entry, "key": key},
            )
        result[key] = _parse_number(value)
    return result


def load_threshold_document(document: Any) -> ThresholdValues:
    """Validate a parsed threshold document in either encoding."""
    if not isinstance(document, dict):
        raise ThresholdValidationError(
            "Threshold document must be a mapping",
            ThresholdErrorCode.INVALID_THRESHOLD_FORMAT,
            {"received": type(document).__name__},
        )
    if all(is_threshold_key(str(key)) for key in document):
        return unflatten_threshold(document)
    return unflatten_threshold(flatten_profile_summary(document))
