"""Tests for validation error normalization."""

from typing import Any

import pytest

from grid_dialogs.core.errors import FormInvalid, FormValidationError
from grid_dialogs.normalize import (
    ErrorArchetype,
    ErrorNormalizer,
    create_validation_error,
    detect_archetype,
    extract_error_message,
    first_error_message,
    get_field_error,
    normalize_errors,
    path_to_key,
)


class FormattedError:
    """Error exposing only a Zod-style format() tree."""

    def __init__(self, tree: dict[str, Any]) -> None:
        self._tree = tree

    def format(self) -> dict[str, Any]:
        return self._tree


class BrokenFormatError:
    """Error whose format() raises."""

    def format(self) -> dict[str, Any]:
        raise RuntimeError("format exploded")


class RaisingIssuesError:
    """Error whose issues property raises."""

    @property
    def issues(self) -> list[Any]:
        raise RuntimeError("boom")


class RaisingMessageError:
    """Error whose issues and message properties both raise."""

    @property
    def issues(self) -> list[Any]:
        raise RuntimeError("boom")

    @property
    def message(self) -> str:
        raise RuntimeError("boom")


class TestDetectArchetype:
    """Tests for structural archetype detection."""

    def test_issues_list_is_zod(self) -> None:
        """Test an issues list is detected as Zod."""
        assert detect_archetype({"issues": []}) == ErrorArchetype.ZOD

    def test_wrapped_zod_error_is_zod(self) -> None:
        """Test a wrapped Zod error is detected as Zod."""
        assert detect_archetype({"zodError": {"issues": []}}) == ErrorArchetype.ZOD

    def test_format_method_is_zod(self) -> None:
        """Test a format() method is detected as Zod."""
        assert detect_archetype(FormattedError({})) == ErrorArchetype.ZOD

    def test_inner_list_is_yup(self) -> None:
        """A Yup error also carries a list of message strings under errors."""
        error = {"errors": ["Required"], "inner": [{"path": "name", "message": "Required"}]}
        assert detect_archetype(error) == ErrorArchetype.YUP

    def test_details_list_is_joi(self) -> None:
        """Test a details list is detected as Joi."""
        assert detect_archetype({"details": []}) == ErrorArchetype.JOI

    def test_everything_else_is_field_message(self) -> None:
        """Test anything else is a field-message map."""
        assert detect_archetype({"email": "Invalid"}) == ErrorArchetype.FIELD_MESSAGE
        assert detect_archetype("format") == ErrorArchetype.FIELD_MESSAGE
        assert detect_archetype(None) == ErrorArchetype.FIELD_MESSAGE


class TestPathToKey:
    """Tests for path segment joining."""

    def test_string_segments_join_with_dots(self) -> None:
        """Test string segments are joined with dots."""
        assert path_to_key(["address", "city"]) == "address.city"

    def test_integer_segments_use_brackets(self) -> None:
        """Test integer segments are written as indices."""
        assert path_to_key(["items", 0, "name"]) == "items[0].name"

    def test_empty_path(self) -> None:
        """Test an empty path gives an empty key."""
        assert path_to_key([]) == ""

    def test_string_path_is_kept(self) -> None:
        """Test a string path is returned as is."""
        assert path_to_key("user.email") == "user.email"


class TestZodLike:
    """Tests for ZodLike errors."""

    def test_issue_path_to_message(self) -> None:
        """Test issue paths map to their messages."""
        error = {"issues": [{"path": ["email"], "message": "Invalid email"}]}
        assert normalize_errors(error) == {"email": "Invalid email"}

    def test_nested_and_indexed_paths(self) -> None:
        """Test nested and indexed issue paths."""
        error = {
            "issues": [
                {"path": ["address", "city"], "message": "Required"},
                {"path": ["items", 1, "qty"], "message": "Too small"},
            ]
        }
        assert normalize_errors(error) == {
            "address.city": "Required",
            "items[1].qty": "Too small",
        }

    def test_empty_path_is_form_level(self) -> None:
        """Test an empty issue path becomes a form-level error."""
        error = {"issues": [{"path": [], "message": "Passwords differ"}]}
        assert normalize_errors(error) == {"_error": "Passwords differ"}

    def test_duplicate_paths_keep_last_message(self) -> None:
        """Test the last issue for a path wins."""
        error = {
            "issues": [
                {"path": ["name"], "message": "Too short"},
                {"path": ["name"], "message": "Must be alphanumeric"},
            ]
        }
        assert normalize_errors(error) == {"name": "Must be alphanumeric"}

    def test_wrapped_zod_error(self) -> None:
        """Test a Zod error wrapped under error."""
        error = {"zodError": {"issues": [{"path": ["age"], "message": "Expected number"}]}}
        assert normalize_errors(error) == {"age": "Expected number"}

    def test_issue_shaped_errors_list(self) -> None:
        """Test an errors list shaped like issues."""
        error = {"errors": [{"path": ["name"], "message": "Required"}]}
        assert normalize_errors(error) == {"name": "Required"}

    def test_exception_with_issues(self) -> None:
        """Test an exception carrying issues."""
        error = FormValidationError(issues=[{"path": ["email"], "message": "Bad email"}])
        assert normalize_errors(error) == {"email": "Bad email"}

    def test_format_tree_first_message_wins(self) -> None:
        """Test the first message of a format() tree wins."""
        error = FormattedError(
            {
                "_errors": [],
                "email": {"_errors": ["Invalid email", "Too long"]},
                "address": {"_errors": [], "zip": {"_errors": ["Bad zip"]}},
            }
        )
        assert normalize_errors(error) == {
            "email": "Invalid email",
            "address.zip": "Bad zip",
        }

    def test_non_string_messages_are_coerced(self) -> None:
        """Test non-string messages are coerced to strings."""
        error = {"issues": [{"path": ["code"], "message": 404}]}
        assert normalize_errors(error) == {"code": "404"}

    def test_empty_issues_fall_back_to_message(self) -> None:
        """Test empty issues fall back to the top-level message."""
        error = {"issues": [], "message": "Schema rejected input"}
        assert normalize_errors(error) == {"_error": "Schema rejected input"}

    def test_raising_format_does_not_propagate(self) -> None:
        """Test a raising format() falls back to the default message."""
        assert normalize_errors(BrokenFormatError()) == {"_error": "Validation failed"}

    def test_raising_issues_property_does_not_propagate(self) -> None:
        """Test a raising issues property falls back to the default message."""
        assert normalize_errors(RaisingIssuesError()) == {"_error": "Validation failed"}

    def test_raising_message_property_uses_fallback(self) -> None:
        """Test a raising message property uses the configured fallback."""
        normalizer = ErrorNormalizer(error_key="form", fallback_message="Try again")
        assert normalizer.normalize(RaisingMessageError()) == {"form": "Try again"}


class TestYupLike:
    """Tests for YupLike errors."""

    def test_inner_path_to_message(self) -> None:
        """Test inner paths map to their messages."""
        error = {
            "message": "2 errors occurred",
            "inner": [
                {"path": "name", "message": "Name is required"},
                {"path": "address.city", "message": "City is required"},
            ],
        }
        assert normalize_errors(error) == {
            "name": "Name is required",
            "address.city": "City is required",
        }

    def test_entries_without_path_are_skipped(self) -> None:
        """Test inner entries without a path are skipped."""
        error = {
            "inner": [{"message": "orphan"}, {"path": "email", "message": "Bad email"}],
        }
        assert normalize_errors(error) == {"email": "Bad email"}

    def test_empty_inner_falls_back_to_message(self) -> None:
        """Test an empty inner list falls back to the message."""
        error = {"inner": [], "message": "2 errors occurred"}
        assert normalize_errors(error) == {"_error": "2 errors occurred"}


class TestJoiLike:
    """Tests for JoiLike errors."""

    def test_empty_path_is_form_level(self) -> None:
        """Test an empty detail path becomes a form-level error."""
        error = {"details": [{"path": [], "message": "Unknown failure"}]}
        assert normalize_errors(error) == {"_error": "Unknown failure"}

    def test_path_joined_with_dots(self) -> None:
        """Test detail paths are joined with dots."""
        error = {
            "details": [
                {"path": ["address", "city"], "message": "City is required"},
                {"path": ["tags", 0], "message": "Invalid tag"},
            ]
        }
        assert normalize_errors(error) == {
            "address.city": "City is required",
            "tags.0": "Invalid tag",
        }

    def test_custom_error_key(self) -> None:
        """Test a custom form-level error key."""
        normalizer = ErrorNormalizer(error_key="_form")
        error = {"details": [{"path": [], "message": "Unknown failure"}]}
        assert normalizer.normalize(error) == {"_form": "Unknown failure"}


class TestFieldMessageLike:
    """Tests for nested field -> message structures."""

    def test_flat_strings(self) -> None:
        """Test a flat field-message map."""
        assert normalize_errors({"email": "Invalid", "name": "Required"}) == {
            "email": "Invalid",
            "name": "Required",
        }

    def test_field_error_objects(self) -> None:
        """Test field error objects with type and message."""
        error = {
            "email": {"type": "pattern", "message": "Invalid email", "ref": {}},
            "name": {"type": "required", "message": "Name is required"},
        }
        assert normalize_errors(error) == {
            "email": "Invalid email",
            "name": "Name is required",
        }

    def test_nested_groups(self) -> None:
        """Test nested groups flatten to dot paths."""
        error = {"address": {"city": {"type": "minLength", "message": "Too short"}}}
        assert normalize_errors(error) == {"address.city": "Too short"}

    def test_errors_mapping_is_unwrapped(self) -> None:
        """Test an errors mapping is unwrapped."""
        error = {"errors": {"name": "Required"}}
        assert normalize_errors(error) == {"name": "Required"}

    def test_nested_errors_keep_path(self) -> None:
        """Test nested errors keep their path."""
        error = {"address": {"errors": {"zip": "Bad zip"}}}
        assert normalize_errors(error) == {"address.zip": "Bad zip"}

    def test_formik_error_nodes(self) -> None:
        """Test Formik-style error nodes."""
        error = {"name": {"error": "Too short"}, "email": {"error": True}}
        assert normalize_errors(error) == {
            "name": "Too short",
            "email": "Invalid value",
        }

    def test_lists_use_indices(self) -> None:
        """Test list entries are keyed by index."""
        error = {"items": [{"qty": "Must be positive"}, None, "Bad item"]}
        assert normalize_errors(error) == {
            "items[0].qty": "Must be positive",
            "items[2]": "Bad item",
        }

    def test_exception_contributes_errors_attribute(self) -> None:
        """Test an exception contributes its errors attribute."""
        error = FormInvalid({"name": {"type": "required", "message": "Required"}})
        assert normalize_errors(error) == {"name": "Required"}

    def test_plain_exception_uses_message(self) -> None:
        """Test a plain exception becomes a form-level message."""
        assert normalize_errors(ValueError("Server rejected record")) == {
            "_error": "Server rejected record"
        }

    def test_exception_without_message_uses_fallback(self) -> None:
        """Test an exception without a message uses the fallback."""
        assert normalize_errors(ValueError()) == {"_error": "Validation failed"}

    def test_string_is_form_level(self) -> None:
        """Test a string becomes a form-level message."""
        assert normalize_errors("Something went wrong") == {"_error": "Something went wrong"}

    def test_none_uses_fallback(self) -> None:
        """Test None uses the fallback message."""
        assert normalize_errors(None) == {"_error": "Validation failed"}

    def test_custom_fallback_message(self) -> None:
        """Test a custom fallback message."""
        normalizer = ErrorNormalizer(fallback_message="Please check the form")
        assert normalizer.normalize({}) == {"_error": "Please check the form"}

    def test_cyclic_structure_terminates(self) -> None:
        """Test a cyclic structure is walked once."""
        error: dict[str, Any] = {"group": {}}
        error["group"]["parent"] = error
        error["group"]["name"] = "Required"
        assert normalize_errors(error) == {"group.name": "Required"}


class TestNormalizerInvariants:
    """Properties that hold for every archetype."""

    @pytest.mark.parametrize(
        "error",
        [
            {"issues": [{"path": ["a"], "message": {"nested": True}}]},
            {"inner": [{"path": "a", "message": None}]},
            {"details": [{"path": ["a"], "message": ["x"]}]},
            {"a": {"b": {"type": "x", "message": "m"}}},
            {"inner": []},
            {"details": []},
            {"issues": []},
            {},
            [],
            object(),
            42,
        ],
    )
    def test_non_empty_and_all_strings(self, error: Any) -> None:
        """Test results are non-empty string maps."""
        result = normalize_errors(error)
        assert result
        assert all(isinstance(key, str) for key in result)
        assert all(isinstance(value, str) for value in result.values())

    def test_flat_maps_are_idempotent(self) -> None:
        """Test normalizing a flat map is idempotent."""
        flat = {"email": "Invalid email", "_error": "Fix the form", "items[0].qty": "Too small"}
        once = normalize_errors(flat)
        assert once == flat
        assert normalize_errors(once) == once


class TestHelpers:
    """Tests for message extraction helpers."""

    def test_extract_error_message_string(self) -> None:
        """Test the message of a string."""
        assert extract_error_message("Boom") == "Boom"

    def test_extract_error_message_empty(self) -> None:
        """Test the message of empty values."""
        assert extract_error_message(None) == ""
        assert extract_error_message("") == ""

    def test_extract_error_message_field_error(self) -> None:
        """Test the message of a field error object."""
        assert extract_error_message({"type": "required", "ref": {}, "message": "Required"}) == "Required"

    def test_extract_error_message_field_error_without_message(self) -> None:
        """Test a field error without a message names its type."""
        assert (
            extract_error_message({"type": "required", "ref": {}})
            == "Field validation failed: required"
        )

    def test_extract_error_message_first_issue(self) -> None:
        """Test the first issue message is used."""
        error = {"issues": [{"path": ["a"], "message": "First"}, {"path": ["b"], "message": "Second"}]}
        assert extract_error_message(error) == "First"

    def test_extract_error_message_exception(self) -> None:
        """Test the message of a plain exception."""
        assert extract_error_message(RuntimeError("Network down")) == "Network down"

    def test_extract_error_message_structured_exception(self) -> None:
        """Test the message of a structured exception."""
        error = FormValidationError("Invalid", details=[{"path": ["a"], "message": "A is bad"}])
        assert extract_error_message(error) == "Invalid"

    def test_extract_error_message_serializes_unknown_mappings(self) -> None:
        """Test unknown mappings are serialized."""
        assert extract_error_message({"code": 500}) == '{"code": 500}'

    def test_first_error_message(self) -> None:
        """Test first_error_message."""
        error = {"details": [{"path": ["name"], "message": "Name is required"}]}
        assert first_error_message(error) == "Name is required"
        assert first_error_message(None) is None

    def test_get_field_error(self) -> None:
        """Test get_field_error."""
        error = {"issues": [{"path": ["email"], "message": "Invalid email"}]}
        assert get_field_error(error, "email") == "Invalid email"
        assert get_field_error(error, "name") is None
        assert get_field_error(None, "email") is None

    def test_create_validation_error_round_trips(self) -> None:
        """Test create_validation_error normalizes back to its input."""
        error = create_validation_error({"name": "Required", "_error": "Fix the form"})
        assert isinstance(error, FormInvalid)
        assert normalize_errors(error) == {"name": "Required", "_error": "Fix the form"}
