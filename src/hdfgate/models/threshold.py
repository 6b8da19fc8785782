"""Threshold data models."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, model_serializer, model_validator

Number = Union[int, float]


def _drop_empty(model: BaseModel) -> None:
    """Replace sub-models with no fields set by ``None``.

    An empty ``{}`` section carries no threshold, so it compares equal to an
    absent one.
    """
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel) and all(
            getattr(value, field) is None for field in type(value).model_fields
        ):
            setattr(model, name, None)


class ThresholdStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    ERROR = "error"
    NO_IMPACT = "no_impact"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class ControlStatus(str, Enum):
    """Status display names used in HDF documents."""

    PASSED = "Passed"
    FAILED = "Failed"
    NOT_REVIEWED = "Not Reviewed"
    NOT_APPLICABLE = "Not Applicable"
    PROFILE_ERROR = "Profile Error"


class ThresholdType(str, Enum):
    MIN = "min"
    MAX = "max"
    CONTROLS = "controls"


class ExactCount(BaseModel):
    """Legacy ``status.total: N`` form. Deprecated, kept for compatibility."""

    exact: Number

    @model_validator(mode="before")
    @classmethod
    def _from_number(cls, data):
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return {"exact": data}
        return data

    @model_serializer
    def _as_number(self) -> Number:
        return self.exact


class CountRange(BaseModel):
    min: Optional[Number] = None
    max: Optional[Number] = None


TotalThreshold = Union[ExactCount, CountRange]


class SeverityThreshold(BaseModel):
    min: Optional[Number] = None
    max: Optional[Number] = None
    controls: Optional[list[str]] = None


class ComplianceThreshold(BaseModel):
    min: Optional[Number] = None
    max: Optional[Number] = None


class StatusThresholds(BaseModel):
    total: Optional[TotalThreshold] = None
    critical: Optional[SeverityThreshold] = None
    high: Optional[SeverityThreshold] = None
    medium: Optional[SeverityThreshold] = None
    low: Optional[SeverityThreshold] = None
    none: Optional[SeverityThreshold] = None

    @model_validator(mode="after")
    def _normalize(self) -> StatusThresholds:
        _drop_empty(self)
        return self

    def severity(self, severity: Severity | str) -> Optional[SeverityThreshold]:
        return getattr(self, Severity(severity).value)

    def ensure_severity(self, severity: Severity | str) -> SeverityThreshold:
        name = Severity(severity).value
        if getattr(self, name) is None:
            setattr(self, name, SeverityThreshold())
        return getattr(self, name)


class ThresholdValues(BaseModel):
    """Structured threshold document.

    Mirrors the nested YAML/JSON encoding::

        compliance: {min: 80}
        passed: {total: {min: 18}, critical: {min: 5}}
        failed: {high: {max: 0, controls: [V-1234]}}
    """

    compliance: Optional[ComplianceThreshold] = None
    passed: Optional[StatusThresholds] = None
    failed: Optional[StatusThresholds] = None
    skipped: Optional[StatusThresholds] = None
    error: Optional[StatusThresholds] = None
    no_impact: Optional[StatusThresholds] = None

    @model_validator(mode="after")
    def _normalize(self) -> ThresholdValues:
        _drop_empty(self)
        return self

    def status(self, status: ThresholdStatus | str) -> Optional[StatusThresholds]:
        return getattr(self, ThresholdStatus(status).value)

    def ensure_status(self, status: ThresholdStatus | str) -> StatusThresholds:
        name = ThresholdStatus(status).value
        if getattr(self, name) is None:
            setattr(self, name, StatusThresholds())
        return getattr(self, name)

    def ensure_compliance(self) -> ComplianceThreshold:
        if self.compliance is None:
            self.compliance = ComplianceThreshold()
        return self.compliance

    def to_document(self) -> dict:
        """Return the nested document encoding (bare numbers for exact totals)."""
        return self.model_dump(exclude_none=True)


class StatusCounts(BaseModel):
    """Control counts for one profile, optionally narrowed to a severity."""

    model_config = ConfigDict(frozen=True)

    passed: int = 0
    failed: int = 0
    not_reviewed: int = 0
    not_applicable: int = 0
    profile_error: int = 0
    passed_tests: int = 0
    failed_tests: int = 0
    passing_tests_failed_control: int = 0
    waived: int = 0

    def for_status(self, status: ControlStatus | str) -> int:
        field_name = ControlStatus(status).name.lower()
        return getattr(self, field_name)

    @property
    def total_controls(self) -> int:
        return (
            self.passed
            + self.failed
            + self.not_reviewed
            + self.not_applicable
            + self.profile_error
        )


class ParsedThresholdPath(BaseModel):
    """Structured form of a dotted threshold key."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["compliance", "total", "severity"]
    status_name: Optional[ThresholdStatus] = None
    severity: Optional[Severity] = None
    type: Optional[ThresholdType] = None

    @property
    def is_legacy_total(self) -> bool:
        return self.kind == "total" and self.type is None
