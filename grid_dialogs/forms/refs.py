"""References to form handles."""

import weakref
from typing import Any


class FormRef:
    """Holder of a form handle.

    By default the ref owns its handle. A ref created with ``weak=True``
    tracks a handle owned elsewhere (a form mounted inside a dialog) and
    never keeps it alive after its owner dropped it; objects that cannot
    be weakly referenced (plain dicts, for instance) are then held
    directly until ``clear()``.
    """

    def __init__(self, handle: Any = None, weak: bool = False) -> None:
        self.weak = weak
        self._weak: weakref.ref | None = None
        self._strong: Any = None
        if handle is not None:
            self.set(handle)

    def set(self, handle: Any) -> None:
        """Point the ref at a new handle, replacing any previous one."""
        self.clear()
        if handle is None:
            return
        if not self.weak:
            self._strong = handle
            return
        try:
            self._weak = weakref.ref(handle)
        except TypeError:
            self._strong = handle

    def clear(self) -> None:
        """Drop the referenced handle."""
        self._weak = None
        self._strong = None

    @property
    def current(self) -> Any:
        """The referenced handle, or None if it vanished or was cleared."""
        if self._weak is not None:
            return self._weak()
        return self._strong

    @property
    def alive(self) -> bool:
        """Whether the ref still resolves to a handle."""
        return self.current is not None

    def __repr__(self) -> str:
        return f"FormRef(current={self.current!r}, weak={self.weak})"
