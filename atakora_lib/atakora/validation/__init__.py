"""Validation framework: CIDR math, results, property validators and the error catalog."""

from atakora.validation.cidr import (
    cidrs_overlap,
    is_valid_cidr,
    is_valid_port_range,
    is_within_cidr,
    parse_cidr,
)
from atakora.validation.error_catalog import (
    ERROR_CATALOG,
    ErrorCategory,
    ErrorDefinition,
    ErrorSeverity,
    ValidationError,
    create_validation_error,
    get_all_errors,
    get_error_definition,
    get_errors_by_category,
    interpolate,
    search_errors,
)
from atakora.validation.models import (
    ConstructValidationError,
    ValidationIssue,
    ValidationResult,
    ValidationResultBuilder,
    ValidationSeverity,
)
from atakora.validation.resource_validator import ResourceValidator
from atakora.validation.pipeline import validate_template

__all__ = [
    "ERROR_CATALOG",
    "ConstructValidationError",
    "ErrorCategory",
    "ErrorDefinition",
    "ErrorSeverity",
    "ResourceValidator",
    "ValidationError",
    "ValidationIssue",
    "ValidationResult",
    "ValidationResultBuilder",
    "ValidationSeverity",
    "cidrs_overlap",
    "create_validation_error",
    "get_all_errors",
    "get_error_definition",
    "get_errors_by_category",
    "interpolate",
    "is_valid_cidr",
    "is_valid_port_range",
    "is_within_cidr",
    "parse_cidr",
    "search_errors",
    "validate_template",
]
