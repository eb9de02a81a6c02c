"""CRUD handlers supplied by the caller.

Handlers perform the actual create/update/delete (network, storage);
the pipeline only interprets their results. A result of exactly True
is success; anything else, including truthy values, is failure.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field

from grid_dialogs.core.errors import MissingIdentityFailure, SubmissionFailure
from grid_dialogs.core.models import DialogMode, mode_value
from grid_dialogs.core.records import extract_record_id
from grid_dialogs.forms.capabilities import maybe_await


class CrudHandlers(BaseModel):
    """Mode handlers; each may be sync or async.

    Attributes:
        on_create: ``(data)`` for create dialogs.
        on_update: ``(id, data)`` for edit dialogs.
        on_delete: ``(id)`` for delete dialogs.
        custom: Custom mode name -> ``(data)`` handler.
    """

    on_create: Callable[..., Any] | None = None
    on_update: Callable[..., Any] | None = None
    on_delete: Callable[..., Any] | None = None
    custom: dict[str, Callable[..., Any]] = Field(default_factory=dict)

    def supports(self, mode: DialogMode | str) -> bool:
        """Whether a handler is registered for a mode."""
        name = mode_value(mode)
        if name == DialogMode.CREATE.value:
            return self.on_create is not None
        if name == DialogMode.EDIT.value:
            return self.on_update is not None
        if name == DialogMode.DELETE.value:
            return self.on_delete is not None
        return name in self.custom

    async def dispatch(self, mode: DialogMode | str, payload: Any, record: Any = None) -> Any:
        """Call the handler for a mode and return its raw result.

        Args:
            mode: The dialog mode.
            payload: The final submission payload.
            record: The active record, used to resolve ids.

        Returns:
            Whatever the handler returned (awaited if awaitable).

        Raises:
            MissingIdentityFailure: If edit or delete has no resolvable id.
            SubmissionFailure: If no handler is registered for the mode.
        """
        name = mode_value(mode)
        if not self.supports(name):
            raise SubmissionFailure(f"No handler registered for mode: {name}")

        if name == DialogMode.CREATE.value:
            return await maybe_await(self.on_create(payload))

        if name in (DialogMode.EDIT.value, DialogMode.DELETE.value):
            record_id = extract_record_id(payload) if name == DialogMode.EDIT.value else None
            if record_id is None:
                record_id = extract_record_id(record)
            if record_id is None:
                raise MissingIdentityFailure()
            if name == DialogMode.EDIT.value:
                return await maybe_await(self.on_update(record_id, payload))
            return await maybe_await(self.on_delete(record_id))

        return await maybe_await(self.custom[name](payload))
