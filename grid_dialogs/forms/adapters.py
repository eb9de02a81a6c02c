"""Library adapters exposing a uniform registry-facing form API.

``create_form_adapter`` inspects the referenced handle and picks the
adapter for a React-Hook-Form-like handle, a Formik-like handle, or the
generic fallback. Every adapter tolerates the handle having vanished:
queries return empty or false values and ``get_validated_values``
raises NoFormDataError.
"""

from collections.abc import Mapping
from typing import Any

from grid_dialogs.core.errors import FormInvalid, NoFormDataError
from grid_dialogs.forms.capabilities import (
    lookup,
    lookup_callable,
    lookup_path,
    maybe_await,
    read_form_errors,
)
from grid_dialogs.forms.refs import FormRef
from grid_dialogs.logs import get_logger

logger = get_logger(__name__)


def _error_text(error: Any) -> str:
    if isinstance(error, str):
        return error
    message = lookup(error, "message") if error is not None else None
    return message if isinstance(message, str) else "Invalid field"


def _flag(value: Any) -> bool:
    if callable(value):
        value = value()
    return bool(value)


class FormAdapter:
    """Base adapter over a FormRef.

    Subclasses override the operations whose semantics differ per form
    library; the defaults here are the generic behavior.
    """

    library = "generic"

    def __init__(self, ref: FormRef | Any) -> None:
        self.ref = ref if isinstance(ref, FormRef) else FormRef(ref)

    @property
    def form(self) -> Any:
        """The referenced handle, or None."""
        return self.ref.current

    def _require_form(self) -> Any:
        form = self.form
        if form is None:
            raise NoFormDataError("Form reference is missing")
        return form

    # Values

    def get_values(self) -> Any:
        """Return the current values without validation, or None."""
        form = self.form
        getter = lookup_callable(form, "get_values")
        if getter is not None:
            return getter()
        return lookup(form, "values")

    async def validate(self) -> bool:
        """Validate the form; True when it holds no errors."""
        form = self.form
        if form is None:
            return False
        try:
            validator = lookup_callable(form, "validate")
            if validator is not None:
                result = await maybe_await(validator())
                return not result if isinstance(result, Mapping) else bool(result)
            validate_form = lookup_callable(form, "validate_form")
            if validate_form is not None:
                return not await maybe_await(validate_form())
            trigger = lookup_callable(form, "trigger")
            if trigger is not None:
                return bool(await maybe_await(trigger()))
        except Exception:
            logger.warning("form_validation_error", library=self.library, exc_info=True)
            return False
        return True

    async def get_validated_values(self) -> Any:
        """Return validated values.

        Raises:
            NoFormDataError: If the handle vanished or exposes no values.
            FormInvalid: If validation fails.
        """
        form = self._require_form()

        getter = lookup_callable(form, "get_validated_values")
        if getter is not None:
            return await maybe_await(getter())

        trigger = lookup_callable(form, "trigger")
        if trigger is not None:
            if not await maybe_await(trigger()):
                raise FormInvalid(read_form_errors(form))
            return self.get_values()

        validate_form = lookup_callable(form, "validate_form")
        if validate_form is not None:
            errors = await maybe_await(validate_form())
            if errors:
                raise FormInvalid(errors)
            return lookup(form, "values")

        if lookup_callable(form, "validate") is not None and not await self.validate():
            raise FormInvalid(read_form_errors(form))

        values = self.get_values()
        if values is None:
            raise NoFormDataError("Form values not available")
        return values

    def reset(self, values: Any = None) -> None:
        """Reset the form to its initial values or to ``values``."""
        form = self.form
        reset = lookup_callable(form, "reset")
        reset_form = lookup_callable(form, "reset_form")
        set_values = lookup_callable(form, "set_values")
        if reset is not None:
            reset(values)
        elif reset_form is not None:
            reset_form({"values": values})
        elif set_values is not None:
            set_values(values or {})

    def set_values(self, values: Mapping[str, Any]) -> None:
        """Replace the form values."""
        form = self.form
        set_values = lookup_callable(form, "set_values")
        reset = lookup_callable(form, "reset")
        if set_values is not None:
            set_values(values)
        elif reset is not None:
            reset(values)

    # Submission

    async def submit(self) -> bool:
        """Submit the form programmatically; True when it completed."""
        form = self.form
        if form is None:
            return False
        try:
            for capability in ("submit", "submit_form"):
                trigger = lookup_callable(form, capability)
                if trigger is not None:
                    await maybe_await(trigger())
                    return True
            handle_submit = lookup_callable(form, "handle_submit")
            if handle_submit is not None:
                await maybe_await(handle_submit(lambda *args: True)())
                return True
        except Exception:
            logger.warning("form_submit_error", library=self.library, exc_info=True)
        return False

    # Errors

    def set_errors(self, errors: Mapping[str, Any]) -> None:
        """Push field errors into the form."""
        form = self.form
        set_errors = lookup_callable(form, "set_errors")
        set_error = lookup_callable(form, "set_error")
        if set_errors is not None:
            set_errors(dict(errors))
        elif set_error is not None:
            for field, error in errors.items():
                set_error(field, {"type": "manual", "message": _error_text(error)})

    def clear_errors(self) -> None:
        """Remove all field errors from the form."""
        form = self.form
        clear = lookup_callable(form, "clear_errors")
        set_errors = lookup_callable(form, "set_errors")
        if clear is not None:
            clear()
        elif set_errors is not None:
            set_errors({})

    def get_errors(self) -> Any:
        """Return the form's current (raw) errors."""
        if self.form is None:
            return {}
        return read_form_errors(self.form)

    # Flags

    def is_dirty(self) -> bool:
        form = self.form
        flag = lookup_path(form, "form_state", "is_dirty")
        if flag is None:
            flag = lookup(form, "is_dirty")
        if flag is None:
            flag = lookup(form, "dirty")
        return _flag(flag)

    def is_submitting(self) -> bool:
        form = self.form
        flag = lookup_path(form, "form_state", "is_submitting")
        if flag is None:
            flag = lookup(form, "is_submitting")
        return _flag(flag)

    def is_valid(self) -> bool:
        form = self.form
        if form is None:
            return False
        flag = lookup_path(form, "form_state", "is_valid")
        if flag is not None:
            return _flag(flag)
        return not self.get_errors()


class GenericFormAdapter(FormAdapter):
    """Adapter for handles with a basic, library-independent API."""


class ReactHookFormAdapter(FormAdapter):
    """Adapter for React-Hook-Form-like handles (``trigger`` + ``form_state``)."""

    library = "react-hook-form"

    def get_values(self) -> Any:
        getter = lookup_callable(self.form, "get_values")
        return getter() if getter is not None else None

    async def validate(self) -> bool:
        trigger = lookup_callable(self.form, "trigger")
        if trigger is None:
            return False
        try:
            return bool(await maybe_await(trigger()))
        except Exception:
            logger.warning("form_validation_error", library=self.library, exc_info=True)
            return False

    async def get_validated_values(self) -> Any:
        form = self._require_form()
        trigger = lookup_callable(form, "trigger")
        if trigger is None:
            raise NoFormDataError("Form reference is missing a trigger method")
        if not await maybe_await(trigger()):
            raise FormInvalid(read_form_errors(form))
        return self.get_values()

    def reset(self, values: Any = None) -> None:
        reset = lookup_callable(self.form, "reset")
        if reset is not None:
            reset(values)

    def set_errors(self, errors: Mapping[str, Any]) -> None:
        set_error = lookup_callable(self.form, "set_error")
        if set_error is None:
            return
        for field, error in errors.items():
            set_error(field, {"type": "manual", "message": _error_text(error)})

    def clear_errors(self) -> None:
        clear = lookup_callable(self.form, "clear_errors")
        if clear is not None:
            clear()

    def get_errors(self) -> Any:
        errors = lookup_path(self.form, "form_state", "errors")
        return errors if errors is not None else {}

    def is_dirty(self) -> bool:
        return _flag(lookup_path(self.form, "form_state", "is_dirty"))

    def is_submitting(self) -> bool:
        return _flag(lookup_path(self.form, "form_state", "is_submitting"))

    def is_valid(self) -> bool:
        return _flag(lookup_path(self.form, "form_state", "is_valid"))


class FormikAdapter(FormAdapter):
    """Adapter for Formik-like handles (``values`` + ``errors`` + ``validate_form``)."""

    library = "formik"

    def get_values(self) -> Any:
        if self.form is None:
            return None
        return lookup(self.form, "values") or {}

    async def validate(self) -> bool:
        validate_form = lookup_callable(self.form, "validate_form")
        if validate_form is None:
            return True
        try:
            return not await maybe_await(validate_form())
        except Exception:
            logger.warning("form_validation_error", library=self.library, exc_info=True)
            return True

    async def get_validated_values(self) -> Any:
        form = self._require_form()
        validate_form = lookup_callable(form, "validate_form")
        if validate_form is None:
            raise NoFormDataError("Form reference is missing a validate_form method")
        errors = await maybe_await(validate_form())
        if errors:
            raise FormInvalid(errors)
        return self.get_values()

    def reset(self, values: Any = None) -> None:
        reset_form = lookup_callable(self.form, "reset_form")
        if reset_form is not None:
            reset_form({"values": values if values is not None else lookup(self.form, "initial_values")})

    async def submit(self) -> bool:
        submit_form = lookup_callable(self.form, "submit_form")
        if submit_form is None:
            return False
        try:
            await maybe_await(submit_form())
        except Exception:
            logger.warning("form_submit_error", library=self.library, exc_info=True)
            return False
        return True

    def set_values(self, values: Mapping[str, Any]) -> None:
        set_values = lookup_callable(self.form, "set_values")
        if set_values is not None:
            set_values(values)

    def set_errors(self, errors: Mapping[str, Any]) -> None:
        set_errors = lookup_callable(self.form, "set_errors")
        if set_errors is not None:
            set_errors(dict(errors))

    def clear_errors(self) -> None:
        self.set_errors({})

    def get_errors(self) -> Any:
        if self.form is None:
            return {}
        return lookup(self.form, "errors") or {}

    def is_dirty(self) -> bool:
        return _flag(lookup(self.form, "dirty"))

    def is_valid(self) -> bool:
        if self.form is None:
            return False
        return not self.get_errors()


def is_react_hook_form(handle: Any) -> bool:
    """``form_state`` + ``control`` + callable ``handle_submit`` and ``register``."""
    return (
        lookup(handle, "form_state") is not None
        and lookup(handle, "control") is not None
        and lookup_callable(handle, "handle_submit") is not None
        and lookup_callable(handle, "register") is not None
    )


def is_formik(handle: Any) -> bool:
    """``values`` and ``errors`` mappings + callable ``handle_submit`` and ``set_field_value``."""
    return (
        isinstance(lookup(handle, "values"), Mapping)
        and isinstance(lookup(handle, "errors"), Mapping)
        and lookup_callable(handle, "handle_submit") is not None
        and lookup_callable(handle, "set_field_value") is not None
    )


def create_form_adapter(ref: FormRef | Any) -> FormAdapter:
    """Detect the form library behind a ref and build its adapter.

    Args:
        ref: A FormRef, or a bare form handle the adapter then owns.

    Returns:
        A ReactHookFormAdapter, FormikAdapter or GenericFormAdapter.
    """
    form_ref = ref if isinstance(ref, FormRef) else FormRef(ref)
    handle = form_ref.current
    if is_react_hook_form(handle):
        return ReactHookFormAdapter(form_ref)
    if is_formik(handle):
        return FormikAdapter(form_ref)
    return GenericFormAdapter(form_ref)
