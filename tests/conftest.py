"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any

import pytest
from pydantic import BaseModel, Field

from grid_dialogs.config import SubmissionConfig


class Recorder:
    """Callable that records its calls and returns a fixed result."""

    def __init__(self, result: Any = True) -> None:
        self.result = result
        self.calls: list[tuple[Any, ...]] = []

    def __call__(self, *args: Any) -> Any:
        self.calls.append(args)
        return self.result


class UserForm(BaseModel):
    """Pydantic model used to validate form handles in tests."""

    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@]+@[^@]+$")
    age: int | None = None


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config() -> SubmissionConfig:
    """Return a submission config with no registration grace delay."""
    return SubmissionConfig(registration_grace=0.0)


@pytest.fixture
def user_schema() -> dict[str, Any]:
    """Return a JSON schema for a user form."""
    return {
        "type": "object",
        "properties": {
            "name": {"type": "string", "minLength": 1},
            "email": {"type": "string", "pattern": "^[^@]+@[^@]+$"},
            "age": {"type": "integer", "minimum": 0},
        },
        "required": ["name", "email"],
    }


@pytest.fixture
def edit_record() -> dict[str, Any]:
    """Return an active record for edit dialogs."""
    return {"id": 42, "name": "Ada", "email": "ada@example.com"}


@pytest.fixture
def grid_dialogs_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point GRID_DIALOGS_HOME at a temporary directory."""
    home = tmp_path / "home"
    monkeypatch.setenv("GRID_DIALOGS_HOME", str(home))
    return home


@pytest.fixture
def recorder() -> type[Recorder]:
    """Return the Recorder class for building spy handlers and hooks."""
    return Recorder


@pytest.fixture
def user_form() -> type[UserForm]:
    """Return the pydantic user form model."""
    return UserForm
