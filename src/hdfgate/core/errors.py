"""Error types for threshold documents and document loading."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional


class ThresholdErrorCode(str, Enum):
    INVALID_THRESHOLD_FORMAT = "INVALID_THRESHOLD_FORMAT"
    INVALID_KEY_FORMAT = "INVALID_KEY_FORMAT"
    INVALID_THRESHOLD_VALUE = "INVALID_THRESHOLD_VALUE"
    NEGATIVE_VALUE = "NEGATIVE_VALUE"
    NON_FINITE_VALUE = "NON_FINITE_VALUE"
    INVALID_PERCENTAGE = "INVALID_PERCENTAGE"
    AMBIGUOUS_TOTAL = "AMBIGUOUS_TOTAL"


class ThresholdValidationError(ValueError):
    """A threshold document is malformed.

    Raised before any comparison runs; a threshold that is simply not met
    is reported as a failed check instead.
    """

    def __init__(
        self,
        message: str,
        code: ThresholdErrorCode,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class LoadErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNREADABLE = "unreadable"
    INVALID_JSON = "invalid_json"
    INVALID_YAML = "invalid_yaml"
    INVALID_DOCUMENT = "invalid_document"


class DocumentLoadError(Exception):
    """An evaluation or threshold file could not be read."""

    def __init__(self, kind: LoadErrorKind, path: Path | str, message: str):
        super().__init__(f"{path}: {message}")
        self.kind = kind
        self.path = str(path)
        self.message = message
