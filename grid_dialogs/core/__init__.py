"""Core shared infrastructure for grid-dialogs.

Contains the models, error taxonomy and record helpers shared by the
form resolver, the error normalizer and the dialog pipeline.
"""

from grid_dialogs.core.errors import (
    DialogError,
    FormInvalid,
    FormValidationError,
    MissingIdentityFailure,
    NoFormDataError,
    SubmissionFailure,
    ValidationFailure,
)
from grid_dialogs.core.models import (
    FORM_ERROR_KEY,
    DialogMode,
    ErrorValue,
    FormDataResult,
    FormState,
    NormalizedErrors,
    SubmissionOutcome,
    SubmissionState,
    mode_value,
)
from grid_dialogs.core.records import (
    extract_record_id,
    merge_record,
    with_identity,
)

__all__ = [
    # Models
    "FORM_ERROR_KEY",
    "DialogMode",
    "ErrorValue",
    "FormDataResult",
    "FormState",
    "NormalizedErrors",
    "SubmissionOutcome",
    "SubmissionState",
    "mode_value",
    # Errors
    "DialogError",
    "FormInvalid",
    "FormValidationError",
    "MissingIdentityFailure",
    "NoFormDataError",
    "SubmissionFailure",
    "ValidationFailure",
    # Records
    "extract_record_id",
    "merge_record",
    "with_identity",
]
