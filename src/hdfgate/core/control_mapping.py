"""Control id mapping and per-control summaries."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel

from ..models.hdf import EvaluatedControl, Profile
from ..models.threshold import ThresholdValues
from .ckl import ckl_control_status, control_finding_details
from .constants import STATUSES
from .status import reverse_status_name


class ControlSummary(BaseModel):
    """One control, flattened for diagnostics and checklist-style output."""

    vuln_num: str
    rule_title: Optional[str] = None
    vuln_discuss: Optional[str] = None
    severity: str
    gid: Optional[Any] = None
    group_title: Optional[Any] = None
    rule_id: Optional[Any] = None
    rule_ver: Optional[Any] = None
    cci_ref: Optional[Any] = None
    nist: str = ""
    check_content: Optional[Any] = None
    fix_text: Optional[Any] = None
    impact: str = ""
    profile_name: str = ""
    profile_shasum: Optional[str] = None
    status: list[str] = []
    message: list[str] = []
    control_status: str
    finding_details: str = ""


def get_control_id_map(profile: Profile, seed: Optional[ThresholdValues] = None) -> ThresholdValues:
    """Group leaf control ids under ``<status>.<severity>.controls``.

    Ids are appended to any lists already present in ``seed``; the seed
    itself is left untouched.
    """
    result = seed.model_copy(deep=True) if seed is not None else ThresholdValues()

    for control in profile.leaf_controls():
        status = reverse_status_name(control.status.value)
        bucket = result.ensure_status(status).ensure_severity(control.severity)
        bucket.controls = [*(bucket.controls or []), control.id]

    return result


def get_description_contents(label: str, descriptions: Optional[list[dict]]) -> Any:
    """Return the ``data`` of the description with the given label, if any."""
    for description in descriptions or []:
        if description.get("label") == label:
            return description.get("data")
    return None


def _segment_messages(control: EvaluatedControl) -> list[str]:
    messages: list[str] = []
    for segment in control.segments:
        if segment.status == "skipped":
            messages.append(f"SKIPPED -- Test: {segment.code_desc}\nMessage: {segment.skip_message}\n")
        elif segment.status == "failed":
            messages.append(f"FAILED -- Test: {segment.code_desc}\nMessage: {segment.message}\n")
        elif segment.status == "passed":
            messages.append(f"PASS -- {segment.code_desc}\n")
        elif segment.status == "error":
            messages.append(f"PROFILE_ERROR -- Test: {segment.code_desc}\nMessage: {segment.message}\n")
    if control.impact == 0:
        messages.append(f"NOT_APPLICABLE -- Description: {control.desc}\n\n")
    return messages


def extract_control_summaries_by_severity(profile: Profile) -> dict[str, dict[str, ControlSummary]]:
    """Build one ``ControlSummary`` per leaf control, keyed by status then id."""
    result: dict[str, dict[str, ControlSummary]] = {s.value: {} for s in STATUSES}

    for control in profile.leaf_controls():
        ckl_status = ckl_control_status(control, for_summary=True)
        messages = _segment_messages(control)
        tags = control.tags

        summary = ControlSummary(
            vuln_num=control.id,
            rule_title=control.title or None,
            vuln_discuss=control.desc or None,
            severity=control.severity.value,
            gid=tags.get("gid"),
            group_title=tags.get("gtitle"),
            rule_id=tags.get("rid"),
            rule_ver=tags.get("stig_id"),
            cci_ref=tags.get("cci"),
            nist=" ".join(tags.get("nist") or []),
            check_content=get_description_contents("check", control.descriptions),
            fix_text=get_description_contents("fix", control.descriptions),
            impact=str(control.impact),
            profile_name=profile.name,
            profile_shasum=profile.sha256,
            status=control.segment_statuses,
            message=messages,
            control_status=ckl_status,
            finding_details=control_finding_details(messages, ckl_status),
        )
        result[reverse_status_name(control.status.value).value][control.id] = summary

    return result
