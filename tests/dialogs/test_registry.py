"""Tests for the dialog registry."""

import asyncio
from typing import Any

import pytest

from grid_dialogs.config import SubmissionConfig
from grid_dialogs.dialogs import DialogRegistry
from grid_dialogs.forms import DictFormHandle, SchemaFormHandle, create_form_adapter


class CheckedAdapter:
    """Adapter with validate() + get_values() but no validated values."""

    def __init__(self, valid: bool, values: dict[str, Any], errors: Any = None) -> None:
        self.valid = valid
        self.values = values
        self.errors = errors
        self.reset_calls: list[Any] = []

    async def validate(self) -> bool:
        return self.valid

    def get_values(self) -> dict[str, Any]:
        return dict(self.values)

    def get_errors(self) -> Any:
        return self.errors

    def reset(self, values: Any) -> None:
        self.reset_calls.append(values)


@pytest.fixture
def registry(config: SubmissionConfig) -> DialogRegistry:
    """Return a registry with no registration grace delay."""
    return DialogRegistry(config)


def form_data(registry: DialogRegistry, mode: str) -> Any:
    return asyncio.run(registry.validate_and_get_form_data(mode))


class TestRegistration:
    """Tests for registering and unregistering forms."""

    def test_last_write_wins(self, registry: DialogRegistry) -> None:
        """Test the latest registration for a mode wins."""
        first, second = object(), object()
        registry.register_form("edit", first)
        registry.register_form("edit", second)

        assert registry.get_form("edit") is second
        assert registry.modes == ["edit"]

    def test_first_registration_becomes_active(self, registry: DialogRegistry) -> None:
        """Test the first registered mode becomes active."""
        registry.register_form("create", object())
        registry.register_form("edit", object())

        assert registry.active_mode == "create"

        registry.unregister_form("create")
        assert registry.active_mode is None

    def test_guarded_unregister(self, registry: DialogRegistry) -> None:
        """Test unregister only removes the matching handle."""
        stale, current = object(), object()
        registry.register_form("edit", stale)
        registry.register_form("edit", current)

        assert registry.unregister_form("edit", stale) is False
        assert registry.has_form("edit")
        assert registry.unregister_form("edit", current) is True
        assert not registry.has_form("edit")
        assert registry.unregister_form("edit") is False

    def test_registered_context_unregisters_on_error(self, registry: DialogRegistry) -> None:
        """Test the context manager unregisters when its body raises."""
        adapter = object()
        with pytest.raises(RuntimeError):
            with registry.registered("create", adapter) as bound:
                assert bound is adapter
                assert registry.has_form("create")
                raise RuntimeError("render failed")

        assert not registry.has_form("create")

    def test_registered_context_leaves_newer_binding(self, registry: DialogRegistry) -> None:
        """Test the context manager leaves a newer registration alone."""
        newer = object()
        with registry.registered("create", object()):
            registry.register_form("create", newer)

        assert registry.get_form("create") is newer


class TestTrackedState:
    """Tests for tracked dirty, valid and error state."""

    def test_defaults(self, registry: DialogRegistry) -> None:
        """Test default tracked state."""
        registry.register_form("edit", object())

        assert registry.is_form_dirty("edit") is False
        assert registry.is_form_valid("edit") is True
        assert registry.get_form_errors("edit") == {}

    def test_setters(self, registry: DialogRegistry) -> None:
        """Test tracked state setters."""
        registry.register_form("edit", object())
        registry.set_form_dirty(True, "edit")
        registry.set_form_valid(False, "edit")

        assert registry.is_form_dirty("edit") is True
        assert registry.is_form_valid("edit") is False

    def test_errors_are_stored_normalized(self, registry: DialogRegistry) -> None:
        """Test stored errors are normalized."""
        registry.register_form("edit", object())
        registry.set_form_errors(
            {"issues": [{"path": ["address", "city"], "message": "Required"}]}, "edit"
        )

        assert registry.get_form_errors("edit") == {"address.city": "Required"}

        registry.set_form_errors({}, "edit")
        assert registry.get_form_errors("edit") == {}

    def test_unregistered_mode_reads_defaults(self, registry: DialogRegistry) -> None:
        """Test an unregistered mode reads default state."""
        assert registry.is_form_dirty("missing") is False
        assert registry.get_form_values("missing") == {}
        assert registry.get_form_errors("missing") == {}

    def test_reset_form(self, registry: DialogRegistry) -> None:
        """Test reset_form with and without new values."""
        adapter = CheckedAdapter(True, {"name": "Ada"})
        registry.register_form("edit", adapter)
        registry.set_form_dirty(True, "edit")

        registry.reset_form("edit")
        assert adapter.reset_calls == []

        registry.reset_form("edit", {"name": "Grace"})
        assert adapter.reset_calls == [{"name": "Grace"}]
        assert registry.is_form_dirty("edit") is False

    def test_validate_and_submit_form(self, registry: DialogRegistry) -> None:
        """Test validate_form and submit_form."""
        registry.register_form("edit", CheckedAdapter(False, {}))

        assert asyncio.run(registry.validate_form("edit")) is False
        assert registry.is_form_valid("edit") is False
        assert asyncio.run(registry.submit_form("edit")) is False
        assert asyncio.run(registry.submit_form("missing")) is False


class TestValidateAndGetFormData:
    """Tests for validate_and_get_form_data."""

    def test_validated_values(self, registry: DialogRegistry) -> None:
        """Test validated values are returned as data."""
        registry.register_form("create", create_form_adapter(DictFormHandle({"name": "Ada"})))

        result = form_data(registry, "create")

        assert result.is_valid
        assert result.data == {"name": "Ada"}

    def test_validation_failure_is_normalized(
        self, registry: DialogRegistry, user_schema: dict[str, Any]
    ) -> None:
        """Test validation failures come back normalized."""
        handle = SchemaFormHandle(user_schema, {"name": "Ada", "email": "nope"})
        registry.register_form("create", create_form_adapter(handle))

        result = form_data(registry, "create")

        assert not result.is_valid
        assert result.data is None
        assert "email" in result.errors
        assert result.errors["_error"] == "Validation failed"
        assert registry.is_form_valid("create") is False
        assert registry.get_form_errors("create") == result.errors

    def test_validate_then_values(self, registry: DialogRegistry) -> None:
        """Test validate() gates get_values()."""
        registry.register_form("edit", CheckedAdapter(True, {"id": 1, "name": "Ada"}))

        result = form_data(registry, "edit")

        assert result.is_valid
        assert result.data == {"id": 1, "name": "Ada"}

    def test_validate_false_uses_adapter_errors(self, registry: DialogRegistry) -> None:
        """Test a failed validate() reports the adapter errors."""
        adapter = CheckedAdapter(False, {}, errors={"name": {"type": "required", "message": "Required"}})
        registry.register_form("edit", adapter)

        result = form_data(registry, "edit")

        assert not result.is_valid
        assert result.errors == {"name": "Required", "_error": "Validation failed"}

    def test_values_only(self, registry: DialogRegistry) -> None:
        """Test a values-only form is valid."""
        registry.register_form("edit", {"get_values": lambda: {"a": 1}})
        assert form_data(registry, "edit").data == {"a": 1}

    def test_no_capability_is_valid_and_empty(self, registry: DialogRegistry) -> None:
        """Test a form without capabilities is valid and empty."""
        registry.register_form("edit", object())

        result = form_data(registry, "edit")

        assert result.is_valid
        assert result.data == {}

    def test_form_not_found(self, registry: DialogRegistry) -> None:
        """Test error when no form is registered for the mode."""
        result = form_data(registry, "edit")

        assert not result.is_valid
        assert result.errors == {"_error": "Form not found for edit"}

    def test_late_registration_within_grace(self) -> None:
        """Test a form registered within the grace period is found."""
        registry = DialogRegistry(SubmissionConfig(registration_grace=0.05))

        async def scenario() -> Any:
            pending = asyncio.create_task(registry.validate_and_get_form_data("create"))
            await asyncio.sleep(0)
            registry.register_form("create", {"get_values": lambda: {"late": True}})
            return await pending

        result = asyncio.run(scenario())

        assert result.is_valid
        assert result.data == {"late": True}
