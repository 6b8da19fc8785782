"""DISA checklist (CKL) status helpers used for control summaries."""

from __future__ import annotations

from ..models.hdf import EvaluatedControl

NOT_APPLICABLE = "Not_Applicable"
PROFILE_ERROR = "Profile_Error"
OPEN = "Open"
NOT_A_FINDING = "NotAFinding"
NOT_REVIEWED = "Not_Reviewed"


def ckl_control_status(control: EvaluatedControl, for_summary: bool = False) -> str:
    """Checklist status for a control.

    With ``for_summary`` a control without any test results is reported as
    a profile error rather than not reviewed.
    """
    statuses = control.segment_statuses

    if control.impact == 0:
        return NOT_APPLICABLE
    if "error" in statuses or (not statuses and for_summary):
        return PROFILE_ERROR
    if "failed" in statuses:
        return OPEN
    if "passed" in statuses:
        return NOT_A_FINDING
    return NOT_REVIEWED


def control_finding_details(messages: list[str], ckl_status: str) -> str:
    """Human-readable finding details for a checklist entry."""
    joined = "\n".join(sorted(messages))

    if ckl_status == OPEN:
        return f"One or more of the automated tests failed or was inconclusive for the control \n\n {joined}"
    if ckl_status == NOT_A_FINDING:
        return f"All Automated tests passed for the control \n\n {joined}"
    if ckl_status == NOT_REVIEWED:
        return f"Automated test skipped due to known accepted condition in the control : \n\n{joined}"
    if ckl_status == NOT_APPLICABLE:
        return f"Justification: \n {joined}"
    return "No test available or some test errors occurred for this control"
