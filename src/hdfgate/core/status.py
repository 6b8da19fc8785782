"""Conversion between threshold status names and HDF status names."""

from __future__ import annotations

from ..models.threshold import ControlStatus, ThresholdStatus
from .constants import REVERSE_STATUS_NAME_MAP, STATUS_NAME_MAP


def rename_status_name(status_name: str) -> ControlStatus:
    """Map a threshold status (``skipped``) to its HDF name (``Not Reviewed``).

    Unknown names map to Profile Error.
    """
    try:
        return STATUS_NAME_MAP[ThresholdStatus(status_name)]
    except ValueError:
        return ControlStatus.PROFILE_ERROR


def reverse_status_name(status_name: str) -> ThresholdStatus:
    """Map an HDF status (``Not Applicable``) to its threshold name (``no_impact``).

    Unknown names map to ``error``.
    """
    try:
        return REVERSE_STATUS_NAME_MAP[ControlStatus(status_name)]
    except ValueError:
        return ThresholdStatus.ERROR
