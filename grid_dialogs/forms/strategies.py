"""Ranked extraction strategies for form handles.

Each strategy checks one capability and, when it applies, extracts the
form payload through it. The resolver runs exactly one strategy per
call: the first one, in ranked order, whose capability is present.
"""

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from grid_dialogs.core.errors import FormInvalid
from grid_dialogs.forms.capabilities import (
    lookup,
    lookup_callable,
    maybe_await,
    read_form_errors,
)


@runtime_checkable
class FormStrategy(Protocol):
    """Protocol for payload extraction strategies."""

    @property
    def name(self) -> str:
        """Return the capability name this strategy is selected by."""
        ...

    def applies(self, handle: Any) -> bool:
        """Return True if the handle exposes this strategy's capability."""
        ...

    async def extract(self, handle: Any) -> Any:
        """Extract the payload.

        Args:
            handle: The form handle ``applies()`` accepted.

        Returns:
            The extracted payload, or None when the form produced nothing.

        Raises:
            Exception: Any validation error value; it propagates unmodified.
        """
        ...


class ValidatedValuesStrategy:
    """Await ``get_validated_values()``; it raises on invalid input."""

    name = "get_validated_values"

    def applies(self, handle: Any) -> bool:
        return lookup_callable(handle, "get_validated_values") is not None

    async def extract(self, handle: Any) -> Any:
        return await maybe_await(lookup_callable(handle, "get_validated_values")())


class ValidateThenValuesStrategy:
    """Run ``validate()`` and read ``get_values()`` when it passes."""

    name = "validate"

    def applies(self, handle: Any) -> bool:
        return (
            lookup_callable(handle, "validate") is not None
            and lookup_callable(handle, "get_values") is not None
        )

    async def extract(self, handle: Any) -> Any:
        is_valid = await maybe_await(lookup_callable(handle, "validate")())
        if isinstance(is_valid, Mapping):
            # Formik-style validate() returns the error map itself
            if is_valid:
                raise FormInvalid(is_valid)
        elif not is_valid:
            raise FormInvalid(read_form_errors(handle))
        return await maybe_await(lookup_callable(handle, "get_values")())


class HandleSubmitStrategy:
    """Drive the dual-callback ``handle_submit(on_valid, on_invalid)`` API.

    Both callbacks settle one future: the valid payload resolves it, the
    invalid payload rejects it with FormInvalid. If the form fires
    neither callback the strategy yields None.
    """

    name = "handle_submit"

    def applies(self, handle: Any) -> bool:
        return lookup_callable(handle, "handle_submit") is not None

    async def extract(self, handle: Any) -> Any:
        loop = asyncio.get_running_loop()
        settled: asyncio.Future = loop.create_future()

        def on_valid(data: Any = None, *args: Any) -> None:
            if not settled.done():
                settled.set_result(data)

        def on_invalid(errors: Any = None, *args: Any) -> None:
            if not settled.done():
                settled.set_exception(FormInvalid(errors))

        trigger = lookup_callable(handle, "handle_submit")(on_valid, on_invalid)
        outcome = trigger() if callable(trigger) else trigger
        await maybe_await(outcome)

        if not settled.done():
            settled.cancel()
            return None
        return await settled


class ValuesStrategy:
    """Read ``get_values()`` without validation; always valid."""

    name = "get_values"

    def applies(self, handle: Any) -> bool:
        return lookup_callable(handle, "get_values") is not None

    async def extract(self, handle: Any) -> Any:
        return await maybe_await(lookup_callable(handle, "get_values")())


class ElementsStrategy:
    """Collect ``{name: value}`` from a raw collection of input elements."""

    name = "elements"

    def applies(self, handle: Any) -> bool:
        elements = lookup(handle, "elements")
        return isinstance(elements, Iterable) and not isinstance(elements, (str, bytes))

    async def extract(self, handle: Any) -> Any:
        data: dict[str, Any] = {}
        for element in lookup(handle, "elements"):
            if isinstance(element, Mapping):
                name, value = element.get("name"), element.get("value")
            else:
                name, value = getattr(element, "name", None), getattr(element, "value", None)
            if name:
                data[str(name)] = value
        return data


class PropsValuesStrategy:
    """Read ``props.values`` directly."""

    name = "props.values"

    def applies(self, handle: Any) -> bool:
        return lookup(lookup(handle, "props"), "values") is not None

    async def extract(self, handle: Any) -> Any:
        return lookup(lookup(handle, "props"), "values")


class StateStrategy:
    """Read ``state`` or ``_internal_state`` directly."""

    name = "state"

    def applies(self, handle: Any) -> bool:
        return lookup(handle, "state") is not None or lookup(handle, "internal_state") is not None

    async def extract(self, handle: Any) -> Any:
        state = lookup(handle, "state")
        return state if state is not None else lookup(handle, "internal_state")


def default_strategies() -> list[FormStrategy]:
    """Return the built-in strategies in ranked order."""
    return [
        ValidatedValuesStrategy(),
        ValidateThenValuesStrategy(),
        HandleSubmitStrategy(),
        ValuesStrategy(),
        ElementsStrategy(),
        PropsValuesStrategy(),
        StateStrategy(),
    ]
