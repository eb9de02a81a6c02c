"""Form handle resolver.

Selects one extraction strategy for an opaque form handle, runs it and
applies the mode-specific payload rules (edit identity injection and
the active-record fallback).
"""

from collections.abc import Sequence
from typing import Any

from grid_dialogs.config import SubmissionConfig
from grid_dialogs.core.errors import NoFormDataError
from grid_dialogs.core.models import DialogMode, mode_value
from grid_dialogs.core.records import as_dict, merge_record, with_identity
from grid_dialogs.forms.refs import FormRef
from grid_dialogs.forms.strategies import FormStrategy, default_strategies
from grid_dialogs.logs import get_logger

logger = get_logger(__name__)


class FormHandleResolver:
    """Extracts a payload from any form handle through ranked strategies.

    Strategies are tried in order and the first one whose capability is
    present is the only one run (no merging across strategies).
    """

    def __init__(
        self,
        strategies: Sequence[FormStrategy] | None = None,
        config: SubmissionConfig | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            strategies: Ordered strategies. Defaults to the built-in ranking.
            config: Submission settings for fallback and edit merging.
        """
        self._strategies: list[FormStrategy] = (
            list(strategies) if strategies is not None else default_strategies()
        )
        self.config = config or SubmissionConfig()

    @property
    def strategy_names(self) -> list[str]:
        """List strategy names in ranked order."""
        return [strategy.name for strategy in self._strategies]

    def select(self, handle: Any) -> FormStrategy | None:
        """Return the strategy that would run for a handle, without running it."""
        if isinstance(handle, FormRef):
            handle = handle.current
        if handle is None:
            return None
        for strategy in self._strategies:
            if strategy.applies(handle):
                return strategy
        return None

    async def resolve(
        self,
        handle: Any,
        mode: DialogMode | str,
        record: Any = None,
    ) -> Any:
        """Extract the submission payload for a dialog mode.

        Args:
            handle: The form handle, a FormRef to it, or None.
            mode: The dialog mode being submitted.
            record: The active record, if any.

        Returns:
            The payload. Edit payloads carry the record's ``id`` when the
            form did not supply one.

        Raises:
            NoFormDataError: If no strategy applies (or the strategy
                yields nothing) and no record fallback is available.
            Exception: Anything the chosen strategy raises, unmodified.
        """
        if isinstance(handle, FormRef):
            handle = handle.current

        mode_name = mode_value(mode)
        strategy = self.select(handle)
        data = None

        if strategy is not None:
            logger.debug("form_strategy_selected", mode=mode_name, strategy=strategy.name)
            data = await strategy.extract(handle)

        if data is None:
            if record is None or not self.config.fallback_to_record:
                raise NoFormDataError()
            # The stale record is submitted in place of missing form data
            logger.warning(
                "form_data_missing_using_record",
                mode=mode_name,
                strategy=strategy.name if strategy else None,
            )
            data = as_dict(record)

        if mode_name == DialogMode.EDIT.value and record is not None:
            if self.config.merge_record_on_edit:
                data = merge_record(record, data)
            data = with_identity(data, record)

        return data
