"""Validation result data models.

Serialized field names are camelCase (``totalChecks``, ``statusType``) so
reports stay compatible with existing CI consumers.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .threshold import ComplianceThreshold, Number


class CheckType(str, Enum):
    COMPLIANCE = "compliance"
    COUNT = "count"
    CONTROL_ID = "control_id"


class CheckStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


class ViolationType(str, Enum):
    BELOW = "below"
    EXCEEDS = "exceeds"
    MISMATCH = "mismatch"


class OutputFormat(str, Enum):
    DEFAULT = "default"
    DETAILED = "detailed"
    QUIET = "quiet"
    JSON = "json"
    YAML = "yaml"
    MARKDOWN = "markdown"
    JUNIT = "junit"


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExpectedThreshold(_ReportModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    min: Optional[Number] = None
    max: Optional[Number] = None
    exact: Optional[Number] = None
    controls: Optional[list[str]] = None


class ThresholdViolation(_ReportModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    type: ViolationType
    amount: Optional[Number] = None
    details: str = ""
    missing: Optional[list[str]] = None
    unexpected: Optional[list[str]] = None


class ThresholdCheck(_ReportModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    path: str
    type: CheckType
    status: CheckStatus
    actual: Union[int, float, list[str]]
    expected: ExpectedThreshold
    severity: Optional[str] = None
    status_type: Optional[str] = None
    violation: Optional[ThresholdViolation] = None

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASSED


class ValidationSummary(_ReportModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    total_checks: int = 0
    passed_checks: int = 0
    failed_checks: int = 0
    total_controls: int = 0
    compliance: Optional[int] = None
    compliance_required: Optional[ComplianceThreshold] = None


class ValidationResult(_ReportModel):
    passed: bool
    checks: list[ThresholdCheck] = []
    summary: ValidationSummary = ValidationSummary()

    def failed_checks(self) -> list[ThresholdCheck]:
        return [c for c in self.checks if c.status == CheckStatus.FAILED]

    def passed_checks(self) -> list[ThresholdCheck]:
        return [c for c in self.checks if c.status == CheckStatus.PASSED]

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FilteredResult(BaseModel):
    result: ValidationResult
    original_failure_count: int = 0
    filtered_out_failure_count: int = 0
    filtered_out_check_count: int = 0


class OutputOptions(BaseModel):
    format: OutputFormat = OutputFormat.DEFAULT
    show_passed: bool = False
    colors: bool = True
    include_control_ids: bool = True
