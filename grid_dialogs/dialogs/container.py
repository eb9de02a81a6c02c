"""Dialog container.

Owns the active record and the submission state machine of the dialog
that is currently open, and exposes the props a form component needs.
"""

from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from grid_dialogs.config import SubmissionConfig
from grid_dialogs.core.models import DialogMode, NormalizedErrors, SubmissionState, mode_value
from grid_dialogs.dialogs.display import split_errors
from grid_dialogs.dialogs.handlers import CrudHandlers
from grid_dialogs.dialogs.hooks import HookChain, SubmitHooks
from grid_dialogs.dialogs.machine import SubmissionStateMachine
from grid_dialogs.dialogs.registry import DialogRegistry
from grid_dialogs.forms.refs import FormRef
from grid_dialogs.forms.resolver import FormHandleResolver
from grid_dialogs.logs import get_logger

logger = get_logger(__name__)

DEFAULT_TITLES = {
    DialogMode.CREATE.value: "Add new",
    DialogMode.EDIT.value: "Edit",
    DialogMode.DELETE.value: "Confirm delete",
    DialogMode.VIEW.value: "View details",
}
DEFAULT_SUBMIT_LABELS = {
    DialogMode.CREATE.value: "Add",
    DialogMode.EDIT.value: "Save changes",
    DialogMode.DELETE.value: "Delete",
}
DEFAULT_LOADING_LABELS = {
    DialogMode.CREATE.value: "Adding...",
    DialogMode.EDIT.value: "Saving...",
    DialogMode.DELETE.value: "Deleting...",
}


class FormProps(BaseModel):
    """Props handed to the form component rendered inside a dialog."""

    data: Any = None
    loading: bool = False
    error: str | None = None
    on_submit: Callable[..., Any] | None = None
    on_close: Callable[..., Any] | None = None
    validation_errors: NormalizedErrors = Field(default_factory=dict)
    is_read_only: bool = False

    model_config = ConfigDict(arbitrary_types_allowed=True)


class DialogContainer:
    """Holds the open dialog, its record, its form and its state machine."""

    def __init__(
        self,
        handlers: CrudHandlers | None = None,
        hooks: SubmitHooks | None = None,
        registry: DialogRegistry | None = None,
        resolver: FormHandleResolver | None = None,
        config: SubmissionConfig | None = None,
        builtin_hooks: SubmitHooks | None = None,
        on_state_change: Callable[[SubmissionState], Any] | None = None,
    ) -> None:
        """Initialize a closed container.

        Args:
            handlers: CRUD handlers shared by every dialog opened here.
            hooks: Caller lifecycle hooks.
            registry: Registry to fall back to when no form is mounted.
            resolver: Form resolver shared by the state machines.
            config: Submission settings.
            builtin_hooks: Hooks that run before the caller's hooks.
            on_state_change: Listener forwarded to each state machine.
        """
        self.config = config or SubmissionConfig()
        self.handlers = handlers or CrudHandlers()
        self.hooks = HookChain.of(builtin_hooks, hooks)
        self.registry = registry
        self.resolver = resolver or FormHandleResolver(config=self.config)
        self.on_state_change = on_state_change

        self.form_ref = FormRef(weak=True)
        self.machine: SubmissionStateMachine | None = None
        self.mode: str | None = None
        self.record: Any = None
        self.title: str | None = None
        self.description: str | None = None

    # Opening and closing

    @property
    def is_open(self) -> bool:
        return self.machine is not None

    def open(
        self,
        mode: DialogMode | str,
        record: Any = None,
        title: str | None = None,
        description: str | None = None,
    ) -> SubmissionStateMachine:
        """Open a dialog, replacing any dialog that is already open.

        Args:
            mode: Dialog mode.
            record: Active record for edit, view, delete and custom modes.
            title: Title override; defaults per mode.
            description: Optional subtitle.

        Returns:
            The new dialog's state machine.
        """
        if self.machine is not None:
            self.close()

        self.mode = mode_value(mode)
        self.record = record
        self.title = title or DEFAULT_TITLES.get(self.mode, "Dialog")
        self.description = description
        self.machine = SubmissionStateMachine(
            self.mode,
            handle=self.form_ref,
            record=record,
            handlers=self.handlers,
            hooks=self.hooks,
            resolver=self.resolver,
            config=self.config,
            on_state_change=self.on_state_change,
            on_close=self.close,
        )
        logger.debug("dialog_opened", mode=self.mode, has_record=record is not None)
        return self.machine

    def open_create(self, title: str | None = None, description: str | None = None) -> SubmissionStateMachine:
        return self.open(DialogMode.CREATE, None, title, description)

    def open_edit(
        self, record: Any, title: str | None = None, description: str | None = None
    ) -> SubmissionStateMachine:
        return self.open(DialogMode.EDIT, record, title, description)

    def open_view(
        self, record: Any, title: str | None = None, description: str | None = None
    ) -> SubmissionStateMachine:
        return self.open(DialogMode.VIEW, record, title, description)

    def open_delete(
        self, record: Any, title: str | None = None, description: str | None = None
    ) -> SubmissionStateMachine:
        return self.open(DialogMode.DELETE, record, title, description)

    def open_custom(
        self,
        mode: str,
        record: Any = None,
        title: str | None = None,
        description: str | None = None,
    ) -> SubmissionStateMachine:
        return self.open(mode, record, title, description)

    def close(self) -> None:
        """Close the dialog; in-flight work is discarded."""
        if self.machine is not None:
            self.machine.unmount()
            logger.debug("dialog_closed", mode=self.mode, state=self.machine.state.value)
        self.machine = None
        self.mode = None
        self.record = None
        self.title = None
        self.description = None
        self.form_ref.clear()

    def replace_record(self, record: Any) -> None:
        """Swap the active record (never mutated in place)."""
        self.record = record
        if self.machine is not None:
            self.machine.record = record

    # Form

    def mount_form(self, handle: Any) -> None:
        """Mount the form handle rendered inside the dialog.

        The container tracks the handle weakly; its owner keeps it alive.
        """
        self.form_ref.set(handle)

    def unmount_form(self) -> None:
        self.form_ref.clear()

    async def confirm(self) -> bool:
        """Submit the open dialog; it closes itself on success.

        Returns:
            True if the submission succeeded.
        """
        machine = self.machine
        if machine is None:
            return False
        if not self.form_ref.alive and self.registry is not None and self.mode is not None:
            registered = self.registry.get_form(self.mode)
            if registered is not None:
                machine.form_ref.set(registered)
        return await machine.submit()

    # Display

    @property
    def state(self) -> SubmissionState | None:
        return self.machine.state if self.machine is not None else None

    @property
    def errors(self) -> NormalizedErrors:
        return dict(self.machine.errors) if self.machine is not None else {}

    @property
    def submit_label(self) -> str:
        if self.machine is not None and self.machine.busy:
            return DEFAULT_LOADING_LABELS.get(self.mode or "", "Processing...")
        return DEFAULT_SUBMIT_LABELS.get(self.mode or "", "")

    def form_props(self) -> FormProps:
        """Build the props for the form component of the open dialog."""
        errors = self.errors
        summary = errors.get(self.config.error_key)
        return FormProps(
            data=self.record,
            loading=self.machine.busy if self.machine is not None else False,
            error=summary,
            on_submit=self.confirm,
            on_close=self.close,
            validation_errors=errors,
            is_read_only=self.mode == DialogMode.VIEW.value,
        )

    def field_errors(self, fields: Iterable[str]) -> NormalizedErrors:
        """Errors that render beside one of ``fields``."""
        return split_errors(self.errors, fields)[0]

    def summary_errors(self, fields: Iterable[str]) -> NormalizedErrors:
        """Errors that render in the summary (unknown keys and form-level)."""
        return split_errors(self.errors, fields)[1]
