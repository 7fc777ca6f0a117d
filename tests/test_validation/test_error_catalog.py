"""Tests for the coded error catalog."""

from __future__ import annotations

import json

import pytest

from atakora.validation.error_catalog import (
    CATEGORY_PREFIXES,
    ERROR_CATALOG,
    ErrorCategory,
    ErrorSeverity,
    ValidationError,
    create_validation_error,
    get_all_errors,
    get_error_definition,
    get_errors_by_category,
    interpolate,
    search_errors,
)

EXPECTED_CODES = {
    "ARM001", "ARM002", "ARM003", "ARM004",
    "NET001", "NET002",
    "SEC001",
    "TYPE001",
    "SCHEMA001",
}


class TestCatalogContents:
    def test_codes(self) -> None:
        assert set(ERROR_CATALOG) == EXPECTED_CODES
        assert len(get_all_errors()) == 9

    def test_keys_match_codes(self) -> None:
        for code, definition in ERROR_CATALOG.items():
            assert definition.code == code

    def test_every_field_filled(self) -> None:
        for definition in get_all_errors():
            assert definition.title
            assert definition.message
            assert definition.description
            assert definition.example
            assert definition.suggestion
            assert definition.related_docs

    def test_prefix_matches_category(self) -> None:
        for definition in get_all_errors():
            prefix = definition.code.rstrip("0123456789")
            assert definition.category in CATEGORY_PREFIXES[prefix]

    def test_arm004_is_deployment(self) -> None:
        assert get_error_definition("ARM004").category == ErrorCategory.deployment

    def test_default_severity(self) -> None:
        assert all(d.severity == ErrorSeverity.error for d in get_all_errors())

    def test_catalog_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            ERROR_CATALOG["NEW001"] = ERROR_CATALOG["ARM001"]  # type: ignore[index]

    def test_definitions_are_frozen(self) -> None:
        with pytest.raises(Exception):
            ERROR_CATALOG["ARM001"].title = "changed"  # type: ignore[misc]


class TestInterpolate:
    def test_replaces_keys(self) -> None:
        assert interpolate("Hello {name}", {"name": "World"}) == "Hello World"

    def test_missing_key_left_literal(self) -> None:
        assert interpolate("{a} and {b}", {"a": "1"}) == "1 and {b}"

    def test_no_context(self) -> None:
        assert interpolate("{a}", None) == "{a}"
        assert interpolate("{a}", {}) == "{a}"

    def test_none_value_rendered(self) -> None:
        assert interpolate("{a}", {"a": None}) == "None"
        assert interpolate("{a} {b}", {"a": None}) == "None {b}"

    def test_non_string_values(self) -> None:
        assert interpolate("priority {p}", {"p": 100}) == "priority 100"

    def test_doubled_braces(self) -> None:
        assert interpolate("{{x}}", {"x": "foo"}) == "{foo}"

    def test_non_identifier_tokens_untouched(self) -> None:
        assert interpolate("{a-b} {} {", {"a": "1"}) == "{a-b} {} {"

    def test_repeated_key(self) -> None:
        assert interpolate("{x}/{x}", {"x": "7"}) == "7/7"

    def test_no_placeholders_identity(self) -> None:
        assert interpolate("plain text", {"x": "1"}) == "plain text"


class TestValidationError:
    def test_net001_message(self) -> None:
        error = ValidationError("NET001", {"subnetCidr": "192.168.1.0/24", "vnetCidr": "10.0.0.0/16"})
        assert error.message == "Subnet CIDR 192.168.1.0/24 is not within VNet range 10.0.0.0/16"
        assert str(error) == error.message
        assert error.code == "NET001"
        assert error.category == ErrorCategory.networking

    def test_sec001_message(self) -> None:
        error = create_validation_error("SEC001", {"rule1": "A", "rule2": "B", "priority": 100})
        assert error.message == "NSG rule priority conflict: rules A and B both have priority 100"
        assert error.context == {"rule1": "A", "rule2": "B", "priority": "100"}

    def test_is_raisable(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            raise create_validation_error("ARM001")
        assert excinfo.value.code == "ARM001"
        assert excinfo.value.context is None

    def test_unknown_code(self) -> None:
        with pytest.raises(KeyError):
            ValidationError("XYZ999")
        with pytest.raises(KeyError):
            get_error_definition("XYZ999")

    def test_format_with_context(self) -> None:
        error = create_validation_error("NET002", {"subnet1": "a", "subnet2": "b"})
        text = error.format()
        lines = text.split("\n")
        assert lines[0] == "ValidationError [NET002]: Overlapping Subnet Address Spaces"
        assert lines[1] == "  Subnet address spaces overlap: a and b"
        assert "Context:" in lines
        assert "  subnet1: a" in lines
        assert "Suggestion:" in lines
        assert "Documentation:" in lines
        assert "Example:" in lines

    def test_format_without_context(self) -> None:
        text = create_validation_error("ARM002").format()
        assert "Context:" not in text
        assert "  /docs/guides/common-validation-errors.md#arm002" in text.split("\n")

    def test_format_example_indented(self) -> None:
        text = create_validation_error("ARM001").format()
        example = text.split("Example:\n", 1)[1]
        assert all(line.startswith("  ") for line in example.split("\n"))

    def test_to_json_keys(self) -> None:
        data = create_validation_error("ARM004").to_json()
        assert set(data) == {
            "code", "category", "title", "message", "description",
            "suggestion", "relatedDocs", "severity", "context", "example",
        }
        assert data["category"] == "Deployment"
        assert data["severity"] == "error"
        assert data["context"] is None

    def test_to_json_serializable(self) -> None:
        data = create_validation_error("SEC001", {"rule1": "A", "rule2": "B", "priority": 200}).to_json()
        assert json.loads(json.dumps(data)) == data


class TestQueries:
    def test_by_category(self) -> None:
        codes = {d.code for d in get_errors_by_category(ErrorCategory.networking)}
        assert codes == {"NET001", "NET002"}

    def test_by_category_arm(self) -> None:
        codes = {d.code for d in get_errors_by_category(ErrorCategory.arm_structure)}
        assert codes == {"ARM001", "ARM002", "ARM003"}

    def test_search_case_insensitive(self) -> None:
        codes = {d.code for d in search_errors("DELEGATION")}
        assert "ARM001" in codes

    def test_search_by_code(self) -> None:
        assert [d.code for d in search_errors("sec001")] == ["SEC001"]

    def test_search_no_match(self) -> None:
        assert search_errors("zzz-not-present") == []
