"""
Result types returned by the campaign lifecycle operations.

Expected failures (invalid input, missing preconditions, collaborator
rejections, a pending request) come back as a failed Result carrying a
CampaignError instead of being raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    # Local validation
    VALIDATION_FAILED = "VALIDATION_FAILED"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"

    # Preconditions
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    NO_MEDIA = "NO_MEDIA"
    MISSING_CAMPAIGN_ID = "MISSING_CAMPAIGN_ID"
    LEGAL_ENTITY_NOT_FOUND = "LEGAL_ENTITY_NOT_FOUND"
    INVALID_STEP = "INVALID_STEP"

    # Collaborator failures
    DRAFT_SAVE_FAILED = "DRAFT_SAVE_FAILED"
    UPDATE_FAILED = "UPDATE_FAILED"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    LOOKUP_FAILED = "LOOKUP_FAILED"

    # A request or upload is already in flight
    BUSY = "BUSY"


@dataclass
class CampaignError:
    code: ErrorCode
    message: str
    fields: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


@dataclass
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[CampaignError] = None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, code: ErrorCode, message: str, fields: Optional[List[str]] = None) -> "Result":
        return cls(ok=False, error=CampaignError(code=code, message=message, fields=list(fields or [])))

    def __bool__(self) -> bool:
        return self.ok
