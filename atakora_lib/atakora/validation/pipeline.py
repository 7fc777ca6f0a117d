"""Validation pipeline for ARM template documents."""

from __future__ import annotations

import logging
from typing import Any

from atakora.config import ValidationOptions
from atakora.validation.models import (
    ValidationResult,
    ValidationResultBuilder,
    ValidationSeverity,
)
from atakora.validation.nsg_rules import check_nsg_rules
from atakora.validation.resource_validator import ResourceValidator
from atakora.validation.template_syntax import check_template_syntax

logger = logging.getLogger(__name__)


def escalate_warnings(result: ValidationResult) -> ValidationResult:
    """Return a copy of ``result`` with every warning turned into an error."""
    builder = ValidationResultBuilder()
    for issue in result.issues:
        if issue.severity == ValidationSeverity.warning:
            issue = issue.model_copy(update={"severity": ValidationSeverity.error})
        builder.add_issue(issue)
    return builder.build()


def _check_tags(
    builder: ValidationResultBuilder,
    tags: Any,
    max_tags: int,
    resource_id: str | None,
) -> None:
    if not isinstance(tags, dict):
        builder.add_error(
            "tags must be an object",
            f"Got {type(tags).__name__}",
            'Declare tags as a mapping of names to strings (e.g., {"env": "dev"})',
            "tags",
            resource_id=resource_id,
        )
        return

    string_tags: dict[str, str] = {}
    for key, value in tags.items():
        if isinstance(value, str):
            string_tags[str(key)] = value
            continue
        builder.add_error(
            f"Tag value for '{key}' must be a string",
            f"Got {type(value).__name__}",
            "Quote the tag value",
            f"tags.{key}",
            resource_id=resource_id,
        )
    builder.merge(ResourceValidator.validate_tags(string_tags, max_tags))


def check_resource_structure(resources: list[Any], max_tags: int = 50) -> ValidationResult:
    """Run the structural check registered for each resource's type, plus tag limits."""
    from atakora.resources import STRUCTURE_CHECKS

    builder = ValidationResultBuilder()
    for index, resource in enumerate(resources):
        if not isinstance(resource, dict):
            builder.add_error(
                f"Resource at index {index} must be an object",
                f"Got {type(resource).__name__}",
                "Declare each resource as an object with type, apiVersion and name",
                f"resources[{index}]",
            )
            continue
        name = resource.get("name")
        resource_id = None if name is None else str(name)
        if resource.get("tags") is not None:
            _check_tags(builder, resource["tags"], max_tags, resource_id)
        check = STRUCTURE_CHECKS.get(str(resource.get("type")))
        if check is not None:
            builder.merge(check(resource))
    return builder.build()


def validate_template(text: str, options: ValidationOptions | None = None) -> ValidationResult:
    """Run the template checks in sequence.

    Order: 1. Syntax -> 2. NSG rules -> 3. Per-resource structure.
    If syntax fails, returns immediately since nothing else can be checked.
    """
    options = options or ValidationOptions()

    # Step 1: syntax
    check = check_template_syntax(text)
    if not check.result.is_valid or check.template is None:
        logger.info("Template failed syntax check with %d errors", check.result.error_count)
        return check.result

    resources = check.template["resources"]
    builder = ValidationResultBuilder()
    builder.merge(check.result)

    # Step 2: NSG rule contents
    builder.merge(check_nsg_rules(check.template, options.extra_service_tags))

    # Step 3: ARM structure per resource type
    builder.merge(check_resource_structure(resources, options.max_tags))

    result = builder.build()
    if options.warnings_as_errors:
        result = escalate_warnings(result)

    logger.info(
        "Template validation produced %d errors, %d warnings across %d resources",
        result.error_count,
        result.warning_count,
        len(resources),
    )
    return result
