"""Submission state machine for one open dialog.

States::

    idle -> validating -> submitting -> succeeded
                      \\             \\-> failed
                       \\-> failed (validation) / idle (vetoed)

``failed`` is a resting state: the next ``submit()`` goes back through
``idle`` and retries. ``succeeded`` is terminal until ``reset()``.

Every attempt captures the machine's generation; ``unmount()`` bumps
it, and any continuation that resumes after an await with a stale
generation is discarded without touching state, listeners or later
hooks.
"""

from collections.abc import Callable, Mapping
from typing import Any

from grid_dialogs.config import SubmissionConfig
from grid_dialogs.core.errors import (
    DialogError,
    MissingIdentityFailure,
    NoFormDataError,
    SubmissionFailure,
    ValidationFailure,
)
from grid_dialogs.core.models import (
    FORM_ERROR_KEY,
    DialogMode,
    NormalizedErrors,
    SubmissionOutcome,
    SubmissionState,
    mode_value,
)
from grid_dialogs.core.records import as_dict, extract_record_id
from grid_dialogs.dialogs.handlers import CrudHandlers
from grid_dialogs.dialogs.hooks import HookChain, SubmitHooks
from grid_dialogs.forms.refs import FormRef
from grid_dialogs.forms.resolver import FormHandleResolver
from grid_dialogs.logs import get_logger
from grid_dialogs.normalize.normalizer import ErrorNormalizer

logger = get_logger(__name__)

EMPTY_PAYLOAD_MESSAGE = "No data was entered"


class SubmissionStateMachine:
    """Drives one dialog's submission through validation and its handler.

    Example:
        >>> machine = SubmissionStateMachine(
        ...     "create",
        ...     handle=form,
        ...     handlers=CrudHandlers(on_create=save),
        ... )
        >>> ok = await machine.submit()
    """

    def __init__(
        self,
        mode: DialogMode | str,
        *,
        handle: Any = None,
        record: Any = None,
        handlers: CrudHandlers | None = None,
        hooks: HookChain | SubmitHooks | None = None,
        resolver: FormHandleResolver | None = None,
        normalizer: ErrorNormalizer | None = None,
        config: SubmissionConfig | None = None,
        on_state_change: Callable[[SubmissionState], Any] | None = None,
        on_close: Callable[[], Any] | None = None,
    ) -> None:
        """Initialize the machine in the idle state.

        Args:
            mode: Dialog mode this machine submits for.
            handle: Form handle to extract the payload from. A bare handle
                is owned by the machine; pass a weak FormRef to track a
                handle owned elsewhere.
            record: The active record.
            handlers: Caller CRUD handlers.
            hooks: Lifecycle hooks, a single SubmitHooks or a HookChain.
            resolver: Form resolver. Defaults to one built from ``config``.
            normalizer: Error normalizer. Defaults to one built from ``config``.
            config: Submission settings.
            on_state_change: Listener called with the new state on every
                transition.
            on_close: Called once after a successful submission.
        """
        self.mode = mode_value(mode)
        self.config = config or SubmissionConfig()
        self.form_ref = handle if isinstance(handle, FormRef) else FormRef(handle)
        self.record = record
        self.handlers = handlers or CrudHandlers()
        self.hooks = hooks if isinstance(hooks, HookChain) else HookChain(hooks)
        self.resolver = resolver or FormHandleResolver(config=self.config)
        self.normalizer = normalizer or ErrorNormalizer(
            error_key=self.config.error_key,
            fallback_message=self.config.fallback_message,
        )
        self.on_state_change = on_state_change
        self.on_close = on_close

        self.state = SubmissionState.IDLE
        self.errors: NormalizedErrors = {}
        self.outcome: SubmissionOutcome | None = None
        self.history: list[SubmissionState] = [SubmissionState.IDLE]
        self._generation = 0
        self._mounted = True
        self._log = logger.bind(mode=self.mode)

    # Lifecycle

    @property
    def generation(self) -> int:
        """Current generation; bumped by unmount() and reset()."""
        return self._generation

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def busy(self) -> bool:
        """Whether an attempt is validating or submitting."""
        return self.state.busy

    @property
    def read_only(self) -> bool:
        return self.mode == DialogMode.VIEW.value

    def unmount(self) -> None:
        """Invalidate in-flight work; later continuations become no-ops."""
        self._generation += 1
        self._mounted = False
        self._log.debug("submission_unmounted", generation=self._generation)

    def reset(self) -> None:
        """Return to idle and clear errors, discarding any in-flight attempt."""
        if self.busy:
            self._generation += 1
        self.errors = {}
        if self.state is not SubmissionState.IDLE:
            self._transition(SubmissionState.IDLE)

    def _is_current(self, generation: int) -> bool:
        return self._mounted and generation == self._generation

    def _transition(self, state: SubmissionState) -> None:
        previous = self.state
        self.state = state
        self.history.append(state)
        self._log.debug("submission_state_changed", previous=previous.value, state=state.value)
        if self.on_state_change is not None:
            self.on_state_change(state)

    def _settle(self, success: bool, payload: Any = None, error: DialogError | None = None) -> bool:
        self.outcome = SubmissionOutcome(
            mode=self.mode,
            state=self.state,
            success=success,
            payload=payload,
            errors=dict(self.errors),
            failure=type(error).__name__ if error is not None else None,
        )
        return success

    def _errors_of(self, error: DialogError) -> NormalizedErrors:
        errors = dict(error.errors)
        if self.config.error_key != FORM_ERROR_KEY and FORM_ERROR_KEY in errors:
            # Pipeline errors are built with the default form-level key
            errors.setdefault(self.config.error_key, errors.pop(FORM_ERROR_KEY))
        return errors

    def _fail(self, error: DialogError, payload: Any = None) -> bool:
        self.errors = self._errors_of(error)
        self._transition(SubmissionState.FAILED)
        self._log.info("submission_failed", failure=type(error).__name__, fields=sorted(self.errors))
        return self._settle(False, payload, error)

    # Submission

    async def submit(self) -> bool:
        """Run one submission attempt.

        Returns:
            True if the handler succeeded; False on failure, veto, a
            busy, unmounted or already succeeded machine, read-only mode,
            or when the attempt was discarded by an unmount.
        """
        if not self._mounted or self.busy:
            return False
        if self.read_only or self.state is SubmissionState.SUCCEEDED:
            return False

        generation = self._generation
        if self.state is not SubmissionState.IDLE:
            self._transition(SubmissionState.IDLE)
        self.errors = {}

        if self.mode == DialogMode.DELETE.value:
            return await self._submit_delete(generation)

        self._transition(SubmissionState.VALIDATING)
        try:
            payload = await self.resolver.resolve(self.form_ref, self.mode, self.record)
        except Exception as exc:
            if not self._is_current(generation):
                return False
            error_cls = NoFormDataError if isinstance(exc, NoFormDataError) else ValidationFailure
            error = error_cls(errors=self.normalizer.normalize(exc))
            await self.hooks.notify_invalid(self.mode, self._errors_of(error), lambda: self._is_current(generation))
            if not self._is_current(generation):
                return False
            return self._fail(error)

        if not self._is_current(generation):
            return False

        if self.config.reject_empty_payload and isinstance(payload, Mapping) and not payload:
            error = ValidationFailure(
                EMPTY_PAYLOAD_MESSAGE,
                errors={self.config.error_key: EMPTY_PAYLOAD_MESSAGE},
            )
            await self.hooks.notify_invalid(self.mode, self._errors_of(error), lambda: self._is_current(generation))
            if not self._is_current(generation):
                return False
            return self._fail(error)

        return await self._run_handler(payload, generation)

    async def _submit_delete(self, generation: int) -> bool:
        if extract_record_id(self.record) is None:
            return self._fail(MissingIdentityFailure())
        self._transition(SubmissionState.SUBMITTING)
        return await self._run_handler(as_dict(self.record), generation)

    async def _run_handler(self, payload: Any, generation: int) -> bool:
        def alive() -> bool:
            return self._is_current(generation)

        handler_called = False
        try:
            proceed, payload = await self.hooks.run_before_submit(self.mode, payload, alive)
            if not alive():
                return False
            if not proceed:
                self._transition(SubmissionState.IDLE)
                return self._settle(False, payload)

            payload = await self.hooks.run_valid_submit(self.mode, payload, alive)
            if not alive():
                return False

            if self.state is not SubmissionState.SUBMITTING:
                self._transition(SubmissionState.SUBMITTING)
            handler_called = True
            result = await self.handlers.dispatch(self.mode, payload, self.record)
        except Exception as exc:
            if not alive():
                return False
            if isinstance(exc, DialogError):
                error: DialogError = exc
            else:
                error = SubmissionFailure(errors=self.normalizer.normalize(exc))
            if handler_called and not isinstance(exc, MissingIdentityFailure):
                await self.hooks.notify_after_submit(self.mode, payload, False, alive)
                if not alive():
                    return False
            return self._fail(error, payload)

        if not alive():
            return False

        success = result is True
        await self.hooks.notify_after_submit(self.mode, payload, success, alive)
        if not alive():
            return False

        if not success:
            return self._fail(SubmissionFailure(), payload)

        self._transition(SubmissionState.SUCCEEDED)
        self._settle(True, payload)
        if self.on_close is not None:
            self.on_close()
        return True
