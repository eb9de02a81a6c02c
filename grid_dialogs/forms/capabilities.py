"""Capability lookup on opaque form handles.

A form handle is any object (or mapping) exposing some subset of the
form capabilities. Each capability is looked up under its snake_case name
first and then under the camelCase spelling used by bridged objects.
"""

import inspect
from collections.abc import Callable, Mapping
from typing import Any

# Capability name -> attribute / key spellings, tried in order
ALIASES: dict[str, tuple[str, ...]] = {
    "get_validated_values": ("get_validated_values", "getValidatedValues"),
    "validate": ("validate",),
    "get_values": ("get_values", "getValues"),
    "handle_submit": ("handle_submit", "handleSubmit"),
    "elements": ("elements",),
    "props": ("props",),
    "values": ("values",),
    "state": ("state",),
    "internal_state": ("_internal_state", "_internalState"),
    "form_state": ("form_state", "formState"),
    "errors": ("errors",),
    "control": ("control",),
    "register": ("register",),
    "trigger": ("trigger",),
    "reset": ("reset",),
    "reset_form": ("reset_form", "resetForm"),
    "initial_values": ("initial_values", "initialValues"),
    "set_values": ("set_values", "setValues"),
    "set_field_value": ("set_field_value", "setFieldValue"),
    "set_error": ("set_error", "setError"),
    "set_errors": ("set_errors", "setErrors"),
    "clear_errors": ("clear_errors", "clearErrors"),
    "validate_form": ("validate_form", "validateForm"),
    "submit": ("submit",),
    "submit_form": ("submit_form", "submitForm"),
    "is_dirty": ("is_dirty", "isDirty"),
    "dirty": ("dirty",),
    "is_submitting": ("is_submitting", "isSubmitting"),
    "is_valid": ("is_valid", "isValid"),
}


def _read(target: Any, name: str) -> Any:
    if isinstance(target, Mapping):
        return target.get(name)
    if isinstance(target, (str, bytes)):
        return None
    return getattr(target, name, None)


def lookup(handle: Any, capability: str) -> Any:
    """Return the first non-null member for a capability, or None.

    Mappings are read by key only, so ``dict.values`` and friends are
    never mistaken for form capabilities.
    """
    if handle is None:
        return None
    for name in ALIASES.get(capability, (capability,)):
        value = _read(handle, name)
        if value is not None:
            return value
    return None


def lookup_callable(handle: Any, capability: str) -> Callable[..., Any] | None:
    """Return a capability member only when it is callable."""
    member = lookup(handle, capability)
    return member if callable(member) else None


def has_capability(handle: Any, capability: str) -> bool:
    """Whether a handle exposes a non-null member for a capability."""
    return lookup(handle, capability) is not None


def lookup_path(handle: Any, *capabilities: str) -> Any:
    """Follow a chain of capabilities, e.g. ``("form_state", "errors")``."""
    current = handle
    for capability in capabilities:
        current = lookup(current, capability)
        if current is None:
            return None
    return current


async def maybe_await(value: Any) -> Any:
    """Await a value if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def read_form_errors(handle: Any) -> Any:
    """Read a handle's current errors from its form state or ``errors``."""
    errors = lookup_path(handle, "form_state", "errors")
    if errors is None:
        errors = lookup(handle, "errors")
    if callable(errors):
        errors = errors()
    return errors if errors is not None else {}
