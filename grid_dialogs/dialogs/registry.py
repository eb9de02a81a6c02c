"""Dialog registry for form adapters.

A registry is scoped to one provider (a table, a page) and passed to
the dialogs that need it; there is no module-level instance. Forms are
keyed by dialog mode, and each registration carries tracked form state.
"""

import asyncio
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from grid_dialogs.config import SubmissionConfig
from grid_dialogs.core.models import DialogMode, FormDataResult, FormState, NormalizedErrors, mode_value
from grid_dialogs.core.records import as_dict
from grid_dialogs.forms.capabilities import lookup_callable, maybe_await
from grid_dialogs.logs import get_logger
from grid_dialogs.normalize.normalizer import ErrorNormalizer

logger = get_logger(__name__)


class DialogRegistry:
    """Registry of form adapters bound to dialog modes.

    Registration is last-write-wins. The first registered mode becomes
    the active mode until it is unregistered.
    """

    def __init__(
        self,
        config: SubmissionConfig | None = None,
        normalizer: ErrorNormalizer | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            config: Submission settings (error key, registration grace).
            normalizer: Error normalizer. Defaults to one built from ``config``.
        """
        self.config = config or SubmissionConfig()
        self.normalizer = normalizer or ErrorNormalizer(
            error_key=self.config.error_key,
            fallback_message=self.config.fallback_message,
        )
        self._forms: dict[str, Any] = {}
        self._states: dict[str, FormState] = {}
        self.active_mode: str | None = None

    # Registration

    def register_form(self, mode: DialogMode | str, adapter: Any) -> None:
        """Bind a form adapter to a mode, replacing any previous binding.

        Args:
            mode: The dialog mode.
            adapter: Object exposing some of ``validate``, ``get_values``,
                ``get_validated_values``, ``is_dirty``, ``reset``,
                ``get_errors``, ``is_valid``, ``set_errors``, ``submit``.
        """
        key = mode_value(mode)
        self._forms[key] = adapter
        self._states[key] = FormState()
        if self.active_mode is None:
            self.active_mode = key
        logger.debug("form_registered", mode=key)

    def unregister_form(self, mode: DialogMode | str, adapter: Any = None) -> bool:
        """Remove a mode's binding.

        Args:
            mode: The dialog mode.
            adapter: When given, the binding is removed only if it is still
                this adapter (a newer registration is left alone).

        Returns:
            True if a binding was removed.
        """
        key = mode_value(mode)
        current = self._forms.get(key)
        if current is None:
            return False
        if adapter is not None and current is not adapter:
            logger.debug("form_unregister_skipped", mode=key)
            return False

        del self._forms[key]
        self._states.pop(key, None)
        if self.active_mode == key:
            self.active_mode = None
        logger.debug("form_unregistered", mode=key)
        return True

    @contextmanager
    def registered(self, mode: DialogMode | str, adapter: Any) -> Iterator[Any]:
        """Register for the duration of a ``with`` block.

        Example:
            >>> with registry.registered("edit", adapter):
            ...     result = await registry.validate_and_get_form_data("edit")
        """
        self.register_form(mode, adapter)
        try:
            yield adapter
        finally:
            self.unregister_form(mode, adapter)

    def get_form(self, mode: DialogMode | str) -> Any:
        """Return the adapter bound to a mode, or None."""
        return self._forms.get(mode_value(mode))

    def has_form(self, mode: DialogMode | str) -> bool:
        return mode_value(mode) in self._forms

    @property
    def modes(self) -> list[str]:
        """List registered modes."""
        return list(self._forms.keys())

    def set_active_mode(self, mode: DialogMode | str | None) -> None:
        self.active_mode = mode_value(mode) if mode is not None else None

    # Tracked state

    def _call(self, mode: str, capability: str, default: Any, *args: Any) -> Any:
        method = lookup_callable(self._forms.get(mode), capability)
        if method is None:
            return default
        try:
            return method(*args)
        except Exception:
            logger.warning("form_adapter_error", mode=mode, operation=capability, exc_info=True)
            return default

    def is_form_dirty(self, mode: DialogMode | str) -> bool:
        key = mode_value(mode)
        state = self._states.get(key)
        if state is not None:
            return state.is_dirty
        return bool(self._call(key, "is_dirty", False))

    def is_form_valid(self, mode: DialogMode | str) -> bool:
        key = mode_value(mode)
        state = self._states.get(key)
        if state is not None:
            return state.is_valid
        return bool(self._call(key, "is_valid", True))

    def get_form_values(self, mode: DialogMode | str) -> dict[str, Any]:
        """Return the form's current values without validation."""
        values = self._call(mode_value(mode), "get_values", None)
        return as_dict(values) if values is not None else {}

    def get_form_errors(self, mode: DialogMode | str) -> NormalizedErrors:
        """Return the tracked (normalized) errors, or the adapter's own."""
        key = mode_value(mode)
        state = self._states.get(key)
        if state is not None:
            return dict(state.errors)
        raw = self._call(key, "get_errors", None)
        return self.normalizer.normalize(raw) if raw else {}

    def set_form_dirty(self, is_dirty: bool, mode: DialogMode | str) -> None:
        state = self._states.get(mode_value(mode))
        if state is not None:
            state.is_dirty = is_dirty

    def set_form_valid(self, is_valid: bool, mode: DialogMode | str) -> None:
        state = self._states.get(mode_value(mode))
        if state is not None:
            state.is_valid = is_valid

    def set_form_errors(self, errors: Any, mode: DialogMode | str) -> None:
        """Store errors for a mode, normalized; empty values clear them."""
        state = self._states.get(mode_value(mode))
        if state is not None:
            state.errors = self.normalizer.normalize(errors) if errors else {}

    # Operations

    def reset_form(self, mode: DialogMode | str, values: Mapping[str, Any] | None = None) -> None:
        """Reset a form to ``values``; a call without values is a no-op."""
        if values is None:
            return
        key = mode_value(mode)
        self._call(key, "reset", None, values)
        state = self._states.setdefault(key, FormState())
        state.is_dirty = False
        state.errors = {}

    async def validate_form(self, mode: DialogMode | str) -> bool:
        """Validate a registered form and track the result."""
        key = mode_value(mode)
        form = self._forms.get(key)
        if form is None:
            return True
        validate = lookup_callable(form, "validate")
        if validate is None:
            return self.is_form_valid(key)
        try:
            result = await maybe_await(validate())
        except Exception:
            logger.warning("form_validation_error", mode=key, exc_info=True)
            return False
        is_valid = not result if isinstance(result, Mapping) else bool(result)
        self.set_form_valid(is_valid, key)
        return is_valid

    async def submit_form(self, mode: DialogMode | str) -> bool:
        """Submit a registered form through its own ``submit`` or by validating it."""
        key = mode_value(mode)
        form = self._forms.get(key)
        if form is None:
            return False
        submit = lookup_callable(form, "submit")
        if submit is None:
            return await self.validate_form(key)
        try:
            return bool(await maybe_await(submit()))
        except Exception:
            logger.warning("form_submit_error", mode=key, exc_info=True)
            return False

    def _failure_errors(self, form: Any, error: Any = None) -> NormalizedErrors:
        errors: NormalizedErrors = self.normalizer.normalize(error) if error is not None else {}
        get_errors = lookup_callable(form, "get_errors")
        if get_errors is not None:
            try:
                raw = get_errors()
            except Exception:
                logger.warning("form_get_errors_failed", exc_info=True)
                raw = None
            if raw:
                errors = {**self.normalizer.normalize(raw), **errors}
        errors.setdefault(self.config.error_key, self.config.fallback_message)
        return errors

    def _invalid(self, key: str, errors: NormalizedErrors) -> FormDataResult:
        self.set_form_valid(False, key)
        state = self._states.get(key)
        if state is not None:
            state.errors = dict(errors)
        return FormDataResult(is_valid=False, data=None, errors=errors)

    async def validate_and_get_form_data(self, mode: DialogMode | str) -> FormDataResult:
        """Validate a registered form and return its data.

        If the mode is not registered yet, waits ``registration_grace``
        seconds once for a late registration. Extraction then tries
        ``get_validated_values``, ``validate`` + ``get_values``,
        ``get_values``, and finally returns valid empty data.

        Args:
            mode: The dialog mode.

        Returns:
            FormDataResult; errors are always normalized.
        """
        key = mode_value(mode)
        form = self._forms.get(key)
        if form is None and self.config.registration_grace > 0:
            logger.debug("form_not_registered_retrying", mode=key, modes=self.modes)
            await asyncio.sleep(self.config.registration_grace)
            form = self._forms.get(key)

        if form is None:
            logger.warning("form_not_found", mode=key, modes=self.modes)
            return FormDataResult(
                is_valid=False,
                data=None,
                errors={self.config.error_key: f"Form not found for {key}"},
            )

        get_validated_values = lookup_callable(form, "get_validated_values")
        validate = lookup_callable(form, "validate")
        get_values = lookup_callable(form, "get_values")

        if get_validated_values is not None:
            try:
                data = await maybe_await(get_validated_values())
            except Exception as exc:
                logger.info("form_validation_failed", mode=key, error=type(exc).__name__)
                return self._invalid(key, self._failure_errors(form, exc))
            return FormDataResult(is_valid=True, data=as_dict(data))

        if validate is not None and get_values is not None:
            try:
                result = await maybe_await(validate())
            except Exception:
                logger.warning("form_validation_error", mode=key, exc_info=True)
                result = False
            is_valid = not result if isinstance(result, Mapping) else bool(result)
            if not is_valid:
                return self._invalid(key, self._failure_errors(form))
            try:
                data = get_values()
            except Exception:
                logger.warning("form_values_error", mode=key, exc_info=True)
                return FormDataResult(
                    is_valid=False,
                    data=None,
                    errors={self.config.error_key: "Error getting form values"},
                )
            return FormDataResult(is_valid=True, data=as_dict(data))

        if get_values is not None:
            try:
                return FormDataResult(is_valid=True, data=as_dict(get_values()))
            except Exception:
                logger.warning("form_values_error", mode=key, exc_info=True)

        logger.warning("form_has_no_data_capability", mode=key)
        return FormDataResult(is_valid=True, data={})
