"""grid-dialogs: form adapter and dialog submission pipeline for data grids."""

__version__ = "0.1.0"

# These imports must come after __version__ so the CLI can import it
from grid_dialogs.config import GlobalConfig, SubmissionConfig
from grid_dialogs.core import (
    DialogError,
    DialogMode,
    FormDataResult,
    MissingIdentityFailure,
    NoFormDataError,
    SubmissionFailure,
    SubmissionOutcome,
    SubmissionState,
    ValidationFailure,
)
from grid_dialogs.dialogs import (
    CrudHandlers,
    DialogContainer,
    DialogRegistry,
    HookChain,
    SubmissionStateMachine,
    SubmitHooks,
)
from grid_dialogs.forms import FormHandleResolver, FormRef, create_form_adapter
from grid_dialogs.normalize import normalize_errors

__all__ = [
    "__version__",
    # Config
    "GlobalConfig",
    "SubmissionConfig",
    # Core
    "DialogError",
    "DialogMode",
    "FormDataResult",
    "MissingIdentityFailure",
    "NoFormDataError",
    "SubmissionFailure",
    "SubmissionOutcome",
    "SubmissionState",
    "ValidationFailure",
    # Pipeline
    "CrudHandlers",
    "DialogContainer",
    "DialogRegistry",
    "FormHandleResolver",
    "FormRef",
    "HookChain",
    "SubmissionStateMachine",
    "SubmitHooks",
    "create_form_adapter",
    "normalize_errors",
]
