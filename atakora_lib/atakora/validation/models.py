"""Validation data models and the result builder."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, computed_field


class ValidationSeverity(str, Enum):
    """Severity level for validation issues."""

    error = "error"
    warning = "warning"
    info = "info"


class ValidationIssue(BaseModel):
    """A single validation finding."""

    model_config = ConfigDict(frozen=True)

    severity: ValidationSeverity
    message: str
    details: str | None = None
    suggestion: str | None = None
    property_path: str | None = None
    resource_id: str | None = None


class ValidationResult(BaseModel):
    """Immutable aggregate of validation issues.

    Counts and validity are derived from ``issues`` so they can never drift
    out of step with it. Warnings and info never affect validity.
    """

    model_config = ConfigDict(frozen=True)

    issues: tuple[ValidationIssue, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def error_count(self) -> int:
        return self._count(ValidationSeverity.error)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def warning_count(self) -> int:
        return self._count(ValidationSeverity.warning)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def info_count(self) -> int:
        return self._count(ValidationSeverity.info)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        return self.error_count == 0

    def _count(self, severity: ValidationSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.error]

    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.warning]

    def infos(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.info]

    def raise_for_errors(self) -> None:
        """Raise the first error issue as a ConstructValidationError, if any."""
        for issue in self.issues:
            if issue.severity == ValidationSeverity.error:
                raise ConstructValidationError(
                    issue.message,
                    details=issue.details,
                    suggestion=issue.suggestion,
                    property_path=issue.property_path,
                )


class ValidationResultBuilder:
    """Mutable accumulator for issues found during one validation pass.

    A builder belongs to the call that created it. ``build()`` does not
    consume the builder; each call snapshots everything added so far.
    """

    def __init__(self) -> None:
        self._issues: list[ValidationIssue] = []

    def _add(
        self,
        severity: ValidationSeverity,
        message: str,
        details: str | None,
        suggestion: str | None,
        property_path: str | None,
        resource_id: str | None,
    ) -> ValidationResultBuilder:
        self._issues.append(
            ValidationIssue(
                severity=severity,
                message=message,
                details=details,
                suggestion=suggestion,
                property_path=property_path,
                resource_id=resource_id,
            )
        )
        return self

    def add_error(
        self,
        message: str,
        details: str | None = None,
        suggestion: str | None = None,
        property_path: str | None = None,
        *,
        resource_id: str | None = None,
    ) -> ValidationResultBuilder:
        return self._add(
            ValidationSeverity.error, message, details, suggestion, property_path, resource_id
        )

    def add_warning(
        self,
        message: str,
        details: str | None = None,
        suggestion: str | None = None,
        property_path: str | None = None,
        *,
        resource_id: str | None = None,
    ) -> ValidationResultBuilder:
        return self._add(
            ValidationSeverity.warning, message, details, suggestion, property_path, resource_id
        )

    def add_info(
        self,
        message: str,
        details: str | None = None,
        suggestion: str | None = None,
        property_path: str | None = None,
        *,
        resource_id: str | None = None,
    ) -> ValidationResultBuilder:
        return self._add(
            ValidationSeverity.info, message, details, suggestion, property_path, resource_id
        )

    def add_issue(self, issue: ValidationIssue) -> ValidationResultBuilder:
        self._issues.append(issue)
        return self

    def merge(self, result: ValidationResult) -> ValidationResultBuilder:
        """Append all issues of a sub-result, preserving their order."""
        self._issues.extend(result.issues)
        return self

    def build(self) -> ValidationResult:
        return ValidationResult(issues=tuple(self._issues))


class ConstructValidationError(ValueError):
    """Raised when a resource cannot be constructed from the given properties."""

    def __init__(
        self,
        message: str,
        details: str | None = None,
        suggestion: str | None = None,
        property_path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.suggestion = suggestion
        self.property_path = property_path

    def __str__(self) -> str:
        lines = [f"ValidationError: {self.message}"]
        if self.property_path:
            lines.append(f"  Property: {self.property_path}")
        if self.details:
            lines.append(f"  Details: {self.details}")
        if self.suggestion:
            lines.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(lines)
