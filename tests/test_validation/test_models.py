"""Tests for validation result models and the builder."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from atakora.validation.models import (
    ConstructValidationError,
    ValidationIssue,
    ValidationResult,
    ValidationResultBuilder,
    ValidationSeverity,
)


class TestValidationIssue:
    def test_defaults(self) -> None:
        issue = ValidationIssue(severity=ValidationSeverity.error, message="Broken")
        assert issue.details is None
        assert issue.suggestion is None
        assert issue.property_path is None
        assert issue.resource_id is None

    def test_frozen(self) -> None:
        issue = ValidationIssue(severity=ValidationSeverity.info, message="Note")
        with pytest.raises(PydanticValidationError):
            issue.message = "Changed"  # type: ignore[misc]


class TestValidationResult:
    def test_empty_is_valid(self) -> None:
        result = ValidationResult()
        assert result.is_valid is True
        assert result.error_count == 0
        assert result.warning_count == 0
        assert result.info_count == 0

    def test_dump_includes_counts(self) -> None:
        result = ValidationResultBuilder().add_warning("w").build()
        dumped = result.model_dump()
        assert dumped["is_valid"] is True
        assert dumped["warning_count"] == 1
        assert dumped["issues"][0]["severity"] == ValidationSeverity.warning

    def test_filters(self) -> None:
        result = (
            ValidationResultBuilder()
            .add_error("e1")
            .add_warning("w1")
            .add_info("i1")
            .add_error("e2")
            .build()
        )
        assert [i.message for i in result.errors()] == ["e1", "e2"]
        assert [i.message for i in result.warnings()] == ["w1"]
        assert [i.message for i in result.infos()] == ["i1"]

    def test_raise_for_errors(self) -> None:
        result = (
            ValidationResultBuilder()
            .add_warning("just a warning")
            .add_error("first", "details", "fix it", "path.to.prop")
            .add_error("second")
            .build()
        )
        with pytest.raises(ConstructValidationError) as exc_info:
            result.raise_for_errors()
        assert exc_info.value.message == "first"
        assert exc_info.value.details == "details"
        assert exc_info.value.suggestion == "fix it"
        assert exc_info.value.property_path == "path.to.prop"

    def test_raise_for_errors_ignores_warnings(self) -> None:
        result = ValidationResultBuilder().add_warning("w").add_info("i").build()
        result.raise_for_errors()


class TestValidationResultBuilder:
    def test_chaining_returns_builder(self) -> None:
        builder = ValidationResultBuilder()
        assert builder.add_error("e") is builder
        assert builder.add_warning("w") is builder
        assert builder.add_info("i") is builder
        assert builder.merge(ValidationResult()) is builder

    def test_counts_match_issues(self) -> None:
        builder = ValidationResultBuilder()
        for n in range(5):
            builder.add_error(f"e{n}")
            if n % 2:
                builder.add_warning(f"w{n}")
            if n % 3 == 0:
                builder.add_info(f"i{n}")
            result = builder.build()
            assert result.is_valid == (result.error_count == 0)
            assert result.error_count + result.warning_count + result.info_count == len(
                result.issues
            )

    def test_warnings_do_not_block_validity(self) -> None:
        result = ValidationResultBuilder().add_warning("w").add_info("i").build()
        assert result.is_valid is True
        assert result.warning_count == 1
        assert result.info_count == 1

    def test_fields_recorded(self) -> None:
        result = (
            ValidationResultBuilder()
            .add_error("msg", "why", "how", "a.b", resource_id="nsg-1")
            .build()
        )
        issue = result.issues[0]
        assert issue.severity == ValidationSeverity.error
        assert issue.details == "why"
        assert issue.suggestion == "how"
        assert issue.property_path == "a.b"
        assert issue.resource_id == "nsg-1"

    def test_no_deduplication(self) -> None:
        result = ValidationResultBuilder().add_error("same").add_error("same").build()
        assert result.error_count == 2

    def test_merge_preserves_order(self) -> None:
        sub = ValidationResultBuilder().add_error("sub1").add_warning("sub2").build()
        result = ValidationResultBuilder().add_info("first").merge(sub).add_error("last").build()
        assert [i.message for i in result.issues] == ["first", "sub1", "sub2", "last"]

    def test_build_is_idempotent(self) -> None:
        builder = ValidationResultBuilder().add_error("e").add_warning("w")
        assert builder.build() == builder.build()

    def test_builder_usable_after_build(self) -> None:
        builder = ValidationResultBuilder().add_error("e")
        first = builder.build()
        builder.add_warning("w")
        second = builder.build()
        assert len(first.issues) == 1
        assert len(second.issues) == 2
        assert second.issues[0] == first.issues[0]


class TestConstructValidationError:
    def test_is_value_error(self) -> None:
        assert issubclass(ConstructValidationError, ValueError)

    def test_str_with_all_fields(self) -> None:
        err = ConstructValidationError("Broken", "It is broken", "Fix it", "props.name")
        assert str(err) == (
            "ValidationError: Broken\n"
            "  Property: props.name\n"
            "  Details: It is broken\n"
            "  Suggestion: Fix it"
        )

    def test_str_message_only(self) -> None:
        assert str(ConstructValidationError("Broken")) == "ValidationError: Broken"
