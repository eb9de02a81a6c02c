"""Error taxonomy for the submission pipeline.

Every DialogError carries already-normalized errors so that consumers
never see a library-specific error object. None of them are fatal:
a dialog that raised one can always be submitted again.
"""

from typing import Any

from grid_dialogs.core.models import FORM_ERROR_KEY, NormalizedErrors


class DialogError(Exception):
    """Base class for recoverable submission errors."""

    default_message = "Submission failed"

    def __init__(
        self,
        message: str | None = None,
        errors: NormalizedErrors | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable summary. Defaults to the class message.
            errors: Normalized field -> message mapping. Defaults to
                the summary under the form-level key.
        """
        self.message = message or self.default_message
        self.errors: NormalizedErrors = (
            dict(errors) if errors else {FORM_ERROR_KEY: self.message}
        )
        super().__init__(self.message)


class ValidationFailure(DialogError):
    """Field-level validation failed; the user corrects input and resubmits."""

    default_message = "Validation failed"


class SubmissionFailure(DialogError):
    """The mode handler returned something other than True, or raised."""

    default_message = "Submission failed"


class MissingIdentityFailure(DialogError):
    """A delete or update was attempted without a resolvable record id."""

    default_message = "missing record ID"


class NoFormDataError(DialogError):
    """No extraction strategy applied and no fallback record was available."""

    default_message = "No form data available"


class FormInvalid(Exception):
    """Raw rejection raised by an extraction strategy.

    Carries the form's own (un-normalized) error payload, mirroring the
    ``{errors: ...}`` value a dual-callback form hands to its invalid
    callback.
    """

    def __init__(self, errors: Any, message: str = "Validation failed") -> None:
        self.errors = errors if errors is not None else {}
        self.message = message
        super().__init__(message)


class FormValidationError(Exception):
    """Validation error raised by the concrete form handles.

    Exposes ``issues`` (ZodLike) or ``details`` (JoiLike) lists so the
    normalizer can classify it structurally.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        *,
        issues: list[dict[str, Any]] | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message
        if issues is not None:
            self.issues = issues
        if details is not None:
            self.details = details
        super().__init__(message)
