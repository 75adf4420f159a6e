"""
Typed failure reasons for the analysis pipeline.

Dirty input (short files, rows without orgnr, unparsable numbers) is never
raised; it is skipped or defaulted where it is read. These exceptions cover
the conditions a caller has to react to.
"""

from enum import Enum
from typing import Any, Optional


class FailureReason(str, Enum):
    """Why an analysis step could not produce a result."""

    NO_USABLE_FILES = "no_usable_files"
    NOT_ENOUGH_DATA = "not_enough_data"
    NO_DATASET = "no_dataset"
    UNKNOWN_COMPANY = "unknown_company"


class AnalysisError(Exception):
    """Base exception for analysis failures."""

    reason: FailureReason = FailureReason.NOT_ENOUGH_DATA

    def __init__(self, details: str, context: Optional[dict[str, Any]] = None):
        self.details = details
        self.context = context or {}
        super().__init__(f"{self.reason.value}: {details}")

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.reason.value, "message": self.details, **self.context}


class DataFormatError(AnalysisError):
    """None of the ingested files produced any usable rows."""

    reason = FailureReason.NO_USABLE_FILES


class InsufficientDataError(AnalysisError):
    """Too few qualifying events for the requested clustering."""

    reason = FailureReason.NOT_ENOUGH_DATA


class DatasetNotLoadedError(AnalysisError):
    """A query was made before any extracts were ingested."""

    reason = FailureReason.NO_DATASET


class CompanyNotFoundError(AnalysisError):
    """No company with the requested orgnr exists in the dataset."""

    reason = FailureReason.UNKNOWN_COMPANY
