"""Tests for core/thresholds.py."""

from __future__ import annotations

import math

import pytest

from hdfgate.core.errors import ThresholdErrorCode, ThresholdValidationError
from hdfgate.core.thresholds import (
    flatten_profile_summary,
    load_threshold_document,
    parse_inline_threshold,
    unflatten_threshold,
)
from hdfgate.models.threshold import (
    ComplianceThreshold,
    CountRange,
    ExactCount,
    SeverityThreshold,
    StatusThresholds,
    ThresholdValues,
)


class TestFlattenProfileSummary:
    def test_flattens_nested(self):
        nested = {"passed": {"critical": 0, "total": 227}, "compliance": {"min": 80}}
        assert flatten_profile_summary(nested) == {
            "passed.critical": 0,
            "passed.total": 227,
            "compliance.min": 80,
        }

    def test_lists_are_leaves(self):
        nested = {"failed": {"high": {"controls": ["V-1", "V-2"]}}}
        assert flatten_profile_summary(nested) == {"failed.high.controls": ["V-1", "V-2"]}

    def test_already_flat(self):
        flat = {"compliance.min": 80}
        assert flatten_profile_summary(flat) == flat


class TestUnflattenThreshold:
    def test_builds_structure(self):
        result = unflatten_threshold({
            "compliance.min": 80,
            "passed.total.min": 18,
            "failed.critical.max": 0,
            "failed.high.controls": ["V-2", "V-1"],
        })
        assert result.compliance == ComplianceThreshold(min=80)
        assert result.passed.total == CountRange(min=18)
        assert result.failed.critical.max == 0
        assert result.failed.high.controls == ["V-2", "V-1"]
        assert result.skipped is None

    def test_legacy_total_is_exact(self):
        result = unflatten_threshold({"failed.total": 2})
        assert result.failed.total == ExactCount(exact=2)

    def test_empty_mapping(self):
        assert unflatten_threshold({}) == ThresholdValues()

    @pytest.mark.parametrize("value", [[1, 2], None, "compliance.min", 42])
    def test_rejects_non_mapping(self, value):
        with pytest.raises(ThresholdValidationError) as exc_info:
            unflatten_threshold(value)
        assert exc_info.value.code == ThresholdErrorCode.INVALID_THRESHOLD_FORMAT

    def test_rejects_bad_key(self):
        with pytest.raises(ThresholdValidationError) as exc_info:
            unflatten_threshold({"compliance.min": 80, "passed.urgent.min": 1})
        assert exc_info.value.code == ThresholdErrorCode.INVALID_KEY_FORMAT

    @pytest.mark.parametrize(
        "value, code",
        [
            ("eighty", ThresholdErrorCode.INVALID_THRESHOLD_VALUE),
            (True, ThresholdErrorCode.INVALID_THRESHOLD_VALUE),
            (math.nan, ThresholdErrorCode.NON_FINITE_VALUE),
            (math.inf, ThresholdErrorCode.NON_FINITE_VALUE),
            (-1, ThresholdErrorCode.NEGATIVE_VALUE),
        ],
    )
    def test_rejects_bad_count(self, value, code):
        with pytest.raises(ThresholdValidationError) as exc_info:
            unflatten_threshold({"failed.total.max": value})
        assert exc_info.value.code == code
        assert exc_info.value.details["key"] == "failed.total.max"

    def test_rejects_out_of_range_percentage(self):
        with pytest.raises(ThresholdValidationError) as exc_info:
            unflatten_threshold({"compliance.max": 101})
        assert exc_info.value.code == ThresholdErrorCode.INVALID_PERCENTAGE

    def test_negative_percentage_reports_negative(self):
        with pytest.raises(ThresholdValidationError) as exc_info:
            unflatten_threshold({"compliance.min": -5})
        assert exc_info.value.code == ThresholdErrorCode.NEGATIVE_VALUE

    def test_counts_may_exceed_100(self):
        result = unflatten_threshold({"passed.total.min": 250})
        assert result.passed.total.min == 250

    def test_controls_must_be_string_list(self):
        with pytest.raises(ThresholdValidationError) as exc_info:
            unflatten_threshold({"passed.high.controls": [1, 2]})
        assert exc_info.value.code == ThresholdErrorCode.INVALID_THRESHOLD_VALUE

    def test_ambiguous_total(self):
        with pytest.raises(ThresholdValidationError) as exc_info:
            unflatten_threshold({"failed.total": 2, "failed.total.max": 3})
        assert exc_info.value.code == ThresholdErrorCode.AMBIGUOUS_TOTAL
        assert exc_info.value.details == {"status": "failed"}

    def test_legacy_and_ranged_totals_on_different_statuses(self):
        result = unflatten_threshold({"failed.total": 2, "passed.total.min": 3})
        assert result.failed.total == ExactCount(exact=2)
        assert result.passed.total == CountRange(min=3)


class TestRoundTrip:
    def test_unflatten_flatten_identity(self):
        original = ThresholdValues(
            compliance=ComplianceThreshold(min=80, max=95),
            passed=StatusThresholds(
                total=CountRange(min=18),
                critical=SeverityThreshold(min=5, controls=["V-1", "V-2"]),
            ),
            failed=StatusThresholds(total=ExactCount(exact=2), high=SeverityThreshold(max=0)),
            no_impact=StatusThresholds(none=SeverityThreshold(max=10)),
        )
        flat = flatten_profile_summary(original.to_document())
        assert unflatten_threshold(flat) == original

    def test_exact_total_serializes_to_number(self):
        values = ThresholdValues(failed=StatusThresholds(total=ExactCount(exact=2)))
        assert values.to_document() == {"failed": {"total": 2}}

    def test_exact_total_validates_from_number(self):
        values = ThresholdValues.model_validate({"passed": {"total": 5}})
        assert values.passed.total == ExactCount(exact=5)

    def test_ranged_total_stays_a_range(self):
        values = ThresholdValues.model_validate({"passed": {"total": {"min": 1}}})
        assert values.passed.total == CountRange(min=1)

    def test_dump_validate_identity(self):
        original = ThresholdValues(
            compliance=ComplianceThreshold(min=80),
            passed=StatusThresholds(total=CountRange(min=18), low=SeverityThreshold(controls=[])),
            failed=StatusThresholds(total=ExactCount(exact=2)),
        )
        assert ThresholdValues.model_validate(original.model_dump()) == original
        assert ThresholdValues.model_validate(original.to_document()) == original

    def test_empty_sections_equal_absent(self):
        assert ThresholdValues(passed=StatusThresholds(total=CountRange())) == ThresholdValues()
        assert ThresholdValues(compliance=ComplianceThreshold()) == ThresholdValues()
        values = ThresholdValues(failed=StatusThresholds(high=SeverityThreshold(), low=SeverityThreshold(max=0)))
        assert values.failed.high is None
        assert unflatten_threshold(flatten_profile_summary(values.to_document())) == values

    def test_empty_control_list_is_kept(self):
        values = ThresholdValues(passed=StatusThresholds(low=SeverityThreshold(controls=[])))
        assert values.passed.low.controls == []


class TestParseInlineThreshold:
    def test_parses_braced_entries(self):
        result = parse_inline_threshold("{compliance.min: 80}, {passed.total.min: 18}, {failed.total.max: 2}")
        assert result == {"compliance.min": 80, "passed.total.min": 18, "failed.total.max": 2}

    def test_floats_and_bare_entries(self):
        assert parse_inline_threshold("compliance.min: 80.5") == {"compliance.min": 80.5}

    def test_non_numeric_passed_through(self):
        result = parse_inline_threshold("{compliance.min: high}")
        assert result == {"compliance.min": "high"}
        with pytest.raises(ThresholdValidationError) as exc_info:
            unflatten_threshold(result)
        assert exc_info.value.code == ThresholdErrorCode.INVALID_THRESHOLD_VALUE

    def test_missing_colon(self):
        with pytest.raises(ThresholdValidationError) as exc_info:
            parse_inline_threshold("{compliance.min 80}")
        assert exc_info.value.code == ThresholdErrorCode.INVALID_THRESHOLD_FORMAT

    def test_empty_string(self):
        assert parse_inline_threshold("") == {}

    def test_control_lists_rejected(self):
        with pytest.raises(ThresholdValidationError) as exc_info:
            parse_inline_threshold("{compliance.min: 80}, {failed.high.controls: V-1}")
        assert exc_info.value.code == ThresholdErrorCode.INVALID_THRESHOLD_FORMAT


class TestLoadThresholdDocument:
    def test_nested_and_flat_agree(self):
        nested = {"compliance": {"min": 80}, "failed": {"critical": {"max": 0}, "total": 2}}
        flat = {"compliance.min": 80, "failed.critical.max": 0, "failed.total": 2}
        assert load_threshold_document(nested) == load_threshold_document(flat)

    def test_mixed_encodings(self):
        result = load_threshold_document({"compliance.min": 80, "failed": {"total": {"max": 1}}})
        assert result.compliance.min == 80
        assert result.failed.total == CountRange(max=1)

    def test_flat_key_with_nested_value(self):
        with pytest.raises(ThresholdValidationError) as exc_info:
            load_threshold_document({"compliance.min": {"value": 80}})
        assert exc_info.value.code == ThresholdErrorCode.INVALID_THRESHOLD_VALUE

    def test_rejects_list(self):
        with pytest.raises(ThresholdValidationError) as exc_info:
            load_threshold_document([{"compliance.min": 80}])
        assert exc_info.value.code == ThresholdErrorCode.INVALID_THRESHOLD_FORMAT
