"""Dialog submission pipeline.

State machine, lifecycle hooks, CRUD handlers, the provider-scoped
dialog registry and the dialog container.
"""

from grid_dialogs.dialogs.container import (
    DEFAULT_SUBMIT_LABELS,
    DEFAULT_TITLES,
    DialogContainer,
    FormProps,
)
from grid_dialogs.dialogs.display import split_errors
from grid_dialogs.dialogs.handlers import CrudHandlers
from grid_dialogs.dialogs.hooks import HookChain, SubmitHooks
from grid_dialogs.dialogs.machine import SubmissionStateMachine
from grid_dialogs.dialogs.registry import DialogRegistry

__all__ = [
    # State machine
    "SubmissionStateMachine",
    # Hooks and handlers
    "CrudHandlers",
    "HookChain",
    "SubmitHooks",
    # Registry
    "DialogRegistry",
    # Container
    "DEFAULT_SUBMIT_LABELS",
    "DEFAULT_TITLES",
    "DialogContainer",
    "FormProps",
    "split_errors",
]
