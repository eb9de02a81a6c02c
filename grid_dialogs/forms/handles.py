"""Concrete form handles for Python callers.

These wrap a set of values with a validation backend and expose the
capabilities the resolver looks for. Their validation errors carry
archetype-shaped lists, so they normalize like errors from any other
validation library.
"""

from collections.abc import Mapping
from typing import Any

from jsonschema.exceptions import ValidationError as SchemaValidationError
from jsonschema.validators import validator_for
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from grid_dialogs.core.errors import FormValidationError


class DictFormHandle:
    """Form over a plain mapping with dirty tracking and reset.

    Exposes ``get_values`` only, so the resolver treats it as always valid.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._initial: dict[str, Any] = dict(values or {})
        self._values: dict[str, Any] = dict(self._initial)
        self.errors: dict[str, Any] = {}

    def get_values(self) -> dict[str, Any]:
        return dict(self._values)

    def set_value(self, name: str, value: Any) -> None:
        """Set one field."""
        self._values[name] = value

    # Formik-style spelling
    set_field_value = set_value

    def set_values(self, values: Mapping[str, Any]) -> None:
        self._values = dict(values)

    def set_errors(self, errors: Mapping[str, Any]) -> None:
        self.errors = dict(errors)

    def clear_errors(self) -> None:
        self.errors = {}

    def reset(self, values: Mapping[str, Any] | None = None) -> None:
        """Reset to ``values`` (which become the new baseline) or the initial values."""
        if values is not None:
            self._initial = dict(values)
        self._values = dict(self._initial)
        self.errors = {}

    @property
    def is_dirty(self) -> bool:
        return self._values != self._initial


class ModelFormHandle(DictFormHandle):
    """Form validated by a pydantic model.

    Example:
        >>> handle = ModelFormHandle(UserForm, {"email": "a@b.c"})
        >>> await resolver.resolve(handle, "create")

    On failure ``get_validated_values`` raises a FormValidationError whose
    ``issues`` list holds one ``{path, message, code}`` entry per pydantic
    error.
    """

    def __init__(
        self,
        model: type[BaseModel],
        values: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(values)
        self.model = model

    def get_validated_values(self) -> dict[str, Any]:
        """Validate the values against the model.

        Returns:
            The model's dump of the validated values.

        Raises:
            FormValidationError: With ZodLike ``issues`` on invalid input.
        """
        try:
            instance = self.model.model_validate(self._values)
        except ModelValidationError as e:
            issues = [
                {
                    "path": list(error["loc"]),
                    "message": error["msg"],
                    "code": error["type"],
                }
                for error in e.errors()
            ]
            self.errors = {"issues": issues}
            raise FormValidationError(
                f"{self.model.__name__} validation failed",
                issues=issues,
            ) from e

        self.errors = {}
        return instance.model_dump()


def _schema_error_path(error: SchemaValidationError) -> list[Any]:
    path = list(error.absolute_path)
    if error.validator == "required" and isinstance(error.instance, Mapping):
        # Point required errors at the missing property, not its parent
        missing = [
            name
            for name in error.validator_value
            if name not in error.instance and repr(name) in error.message
        ]
        if missing:
            path.append(missing[0])
    return path


class SchemaFormHandle(DictFormHandle):
    """Form validated by a JSON schema.

    ``validate()`` reports validity; ``get_validated_values`` raises a
    FormValidationError whose ``details`` list holds one ``{path, message}``
    entry per schema violation.
    """

    def __init__(
        self,
        schema: Mapping[str, Any],
        values: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the handle.

        Args:
            schema: JSON schema for the form values.
            values: Initial values.

        Raises:
            jsonschema.SchemaError: If the schema itself is invalid.
        """
        super().__init__(values)
        validator_cls = validator_for(schema)
        validator_cls.check_schema(schema)
        self.schema = dict(schema)
        self._validator = validator_cls(self.schema)

    def _details(self) -> list[dict[str, Any]]:
        errors = sorted(
            self._validator.iter_errors(self._values),
            key=lambda e: [str(p) for p in e.absolute_path],
        )
        return [
            {
                "path": _schema_error_path(error),
                "message": error.message,
                "type": error.validator,
            }
            for error in errors
        ]

    def validate(self) -> bool:
        details = self._details()
        self.errors = {"details": details} if details else {}
        return not details

    def get_validated_values(self) -> dict[str, Any]:
        """Validate the values against the schema.

        Raises:
            FormValidationError: With JoiLike ``details`` on invalid input.
        """
        details = self._details()
        if details:
            self.errors = {"details": details}
            raise FormValidationError("Schema validation failed", details=details)
        self.errors = {}
        return self.get_values()
