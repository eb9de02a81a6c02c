"""Core models shared by the resolver, the normalizer and the dialogs.

Defines dialog modes, submission states and the result types that
travel between the registry, the state machine and the container.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Canonical field -> message mapping produced by the normalizer
NormalizedErrors = dict[str, str]

# Raw error value of any supported validation library, as read from JSON
ErrorValue = Any

# Sentinel key holding form-level (non-field) errors
FORM_ERROR_KEY = "_error"


class DialogMode(str, Enum):
    """Built-in dialog modes.

    Custom modes are plain strings; every API that accepts a mode
    accepts either a DialogMode or a str.
    """

    CREATE = "create"
    EDIT = "edit"
    VIEW = "view"
    DELETE = "delete"
    CUSTOM = "custom"


class SubmissionState(str, Enum):
    """State of a dialog's submission state machine."""

    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def busy(self) -> bool:
        """Whether an attempt is in flight."""
        return self in (SubmissionState.VALIDATING, SubmissionState.SUBMITTING)


def mode_value(mode: DialogMode | str) -> str:
    """Return the plain string for a dialog mode."""
    if isinstance(mode, DialogMode):
        return mode.value
    return str(mode)


class FormState(BaseModel):
    """Tracked state of a form bound in the dialog registry."""

    is_valid: bool = True
    is_dirty: bool = False
    errors: NormalizedErrors = Field(default_factory=dict)


class FormDataResult(BaseModel):
    """Result of validating and reading a registered form."""

    is_valid: bool
    data: dict[str, Any] | None = None
    errors: NormalizedErrors | None = None


class SubmissionOutcome(BaseModel):
    """Settled result of one submission attempt."""

    mode: str
    state: SubmissionState
    success: bool
    payload: Any = None
    errors: NormalizedErrors = Field(default_factory=dict)
    failure: str | None = None  # Name of the DialogError subclass, if any

    model_config = ConfigDict(arbitrary_types_allowed=True)
