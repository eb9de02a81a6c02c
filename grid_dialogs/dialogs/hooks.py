"""Submission lifecycle hooks.

SubmitHooks groups the optional callbacks a caller can attach to a
dialog. HookChain runs several SubmitHooks in order, builtin hooks
first, strictly sequentially.
"""

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel

from grid_dialogs.core.models import NormalizedErrors
from grid_dialogs.forms.capabilities import maybe_await
from grid_dialogs.logs import get_logger

logger = get_logger(__name__)

Alive = Callable[[], bool]


def _always_alive() -> bool:
    return True


class SubmitHooks(BaseModel):
    """Optional lifecycle callbacks; each may be sync or async.

    Attributes:
        on_before_submit: ``(mode, data)``. Returning exactly False vetoes
            the submission; returning a mapping replaces the payload.
        on_valid_submit: ``(mode, data)``. May return a replacement payload.
        on_after_submit: ``(mode, data, success)``. Notification only.
        on_invalid_submit: ``(mode, errors)`` with normalized errors.
        on_validation_error: ``(mode, errors)`` with normalized errors.
    """

    on_before_submit: Callable[..., Any] | None = None
    on_valid_submit: Callable[..., Any] | None = None
    on_after_submit: Callable[..., Any] | None = None
    on_invalid_submit: Callable[..., Any] | None = None
    on_validation_error: Callable[..., Any] | None = None


class HookChain:
    """Ordered composition of SubmitHooks.

    Every runner takes an ``alive`` predicate and stops calling further
    hooks as soon as it returns False, so no hook runs on behalf of an
    unmounted dialog.
    """

    def __init__(self, *hooks: SubmitHooks | None) -> None:
        self._hooks: list[SubmitHooks] = [hook for hook in hooks if hook is not None]

    @classmethod
    def of(cls, builtin: "SubmitHooks | HookChain | None", caller: SubmitHooks | None = None) -> "HookChain":
        """Build a chain running ``builtin`` hooks before ``caller`` hooks."""
        if isinstance(builtin, HookChain):
            return cls(*builtin._hooks, caller)
        return cls(builtin, caller)

    def callbacks(self, name: str) -> list[Callable[..., Any]]:
        """Return the non-null callbacks for one hook name, in chain order."""
        found = []
        for hooks in self._hooks:
            callback = getattr(hooks, name)
            if callback is not None:
                found.append(callback)
        return found

    def __len__(self) -> int:
        return len(self._hooks)

    async def run_before_submit(
        self, mode: str, data: Any, alive: Alive = _always_alive
    ) -> tuple[bool, Any]:
        """Run before-submit hooks.

        Returns:
            ``(proceed, data)``: proceed is False when a hook vetoed.
        """
        for callback in self.callbacks("on_before_submit"):
            result = await maybe_await(callback(mode, data))
            if not alive():
                return False, data
            if result is False:
                logger.debug("submission_vetoed", mode=mode)
                return False, data
            if isinstance(result, Mapping):
                data = dict(result)
        return True, data

    async def run_valid_submit(self, mode: str, data: Any, alive: Alive = _always_alive) -> Any:
        """Run valid-submit hooks; a non-None result replaces the payload."""
        for callback in self.callbacks("on_valid_submit"):
            result = await maybe_await(callback(mode, data))
            if not alive():
                return data
            if result is not None:
                data = result
        return data

    async def notify_after_submit(
        self, mode: str, data: Any, success: bool, alive: Alive = _always_alive
    ) -> None:
        """Notify after-submit hooks; failures are logged, never propagated."""
        for callback in self.callbacks("on_after_submit"):
            if not alive():
                return
            try:
                await maybe_await(callback(mode, data, success))
            except Exception:
                logger.warning("after_submit_hook_failed", mode=mode, exc_info=True)

    async def notify_invalid(
        self, mode: str, errors: NormalizedErrors, alive: Alive = _always_alive
    ) -> None:
        """Notify invalid-submit hooks, then validation-error hooks."""
        for name in ("on_invalid_submit", "on_validation_error"):
            for callback in self.callbacks(name):
                if not alive():
                    return
                try:
                    await maybe_await(callback(mode, dict(errors)))
                except Exception:
                    logger.warning("invalid_submit_hook_failed", mode=mode, hook=name, exc_info=True)
