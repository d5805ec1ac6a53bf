from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    TRANSIENT = "transient"
    CONFLICT = "conflict"
    FATAL = "fatal"


class WizardError(Exception):
    category = ErrorCategory.FATAL


class MissingContextError(WizardError):
    """Raised when the wizard is used without a center, member or user."""


class WizardBusyError(WizardError):
    """Raised when a mutating call arrives while a crop or submit is in flight."""
    category = ErrorCategory.TRANSIENT


class InvalidTransitionError(WizardError):
    category = ErrorCategory.VALIDATION


class CropNotConfirmedError(WizardError):
    category = ErrorCategory.VALIDATION

    def __init__(self, message: str = "Crop image first"):
        super().__init__(message)
        self.message = message


class ImageDecodeError(WizardError):
    category = ErrorCategory.VALIDATION


class ApiError(Exception):
    """An HTTP call failed; `category` tells the caller how to surface it."""

    def __init__(self, category: ErrorCategory, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.category = category
        self.message = message
        self.status_code = status_code
        self.detail = detail


@dataclass
class Notification:
    message: str
    category: ErrorCategory
    fatal: bool = False
    field_errors: Dict[str, str] = field(default_factory=dict)
