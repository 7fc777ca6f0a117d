"""Reusable property validators for Azure resources.

Every method is a pure function returning a ValidationResult; nothing here
raises. Combine results with ValidationResultBuilder.merge().
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from atakora.validation.cidr import is_valid_cidr
from atakora.validation.models import ValidationResult, ValidationResultBuilder

MAX_TAG_NAME_LENGTH = 512
MAX_TAG_VALUE_LENGTH = 256


def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def _strict_anchors(source: str) -> str:
    """Rewrite each unescaped ``$`` outside a character class to ``\\Z``.

    Python's `$` also matches just before a trailing newline, so
    ``"name\\n"`` would otherwise pass a pattern such as ``^[a-z]+$``.
    """
    out: list[str] = []
    i = 0
    in_class = False
    while i < len(source):
        char = source[i]
        if char == "\\":
            out.append(source[i:i + 2])
            i += 2
            continue
        if in_class:
            if char == "]":
                in_class = False
        elif char == "[":
            in_class = True
            out.append(char)
            i += 1
            # a leading ] is a literal member of the class
            for literal in ("^", "]"):
                if source.startswith(literal, i):
                    out.append(literal)
                    i += 1
            continue
        elif char == "$":
            char = r"\Z"
        out.append(char)
        i += 1
    return "".join(out)


def _compile(pattern: re.Pattern[str] | str) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        if pattern.flags & re.MULTILINE:
            return pattern
        return re.compile(_strict_anchors(pattern.pattern), pattern.flags)
    return re.compile(_strict_anchors(pattern))


def _pattern_text(pattern: re.Pattern[str] | str) -> str:
    return pattern.pattern if isinstance(pattern, re.Pattern) else pattern


class ResourceValidator:
    """Common validation checks shared by resource constructs."""

    @staticmethod
    def validate_resource_name(
        name: str | None,
        resource_type: str,
        min_length: int = 1,
        max_length: int = 64,
        pattern: re.Pattern[str] | str | None = None,
    ) -> ValidationResult:
        """Check a resource name against length bounds and an optional pattern.

        An empty name is reported alone; otherwise length and pattern
        violations are all reported.
        """
        builder = ValidationResultBuilder()

        if name is None or _is_blank(name):
            builder.add_error(
                f"{resource_type} name cannot be empty",
                "Resource names are required for all Azure resources",
                "Provide a valid name for the resource",
                "name",
            )
            return builder.build()

        if len(name) < min_length:
            builder.add_error(
                f"{resource_type} name is too short",
                f"Name '{name}' has {len(name)} characters but minimum is {min_length}",
                f"Provide a name with at least {min_length} characters",
                "name",
            )

        if len(name) > max_length:
            builder.add_error(
                f"{resource_type} name is too long",
                f"Name '{name}' has {len(name)} characters but maximum is {max_length}",
                f"Shorten the name to {max_length} characters or less",
                "name",
            )

        if pattern is not None:
            compiled = _compile(pattern)
            if not compiled.search(name):
                builder.add_error(
                    f"{resource_type} name has invalid format",
                    f"Name '{name}' does not match the required pattern: {_pattern_text(pattern)}",
                    "Check Azure naming conventions for this resource type",
                    "name",
                )

        return builder.build()

    @staticmethod
    def validate_location(location: str | None, required: bool = True) -> ValidationResult:
        """Only presence is checked; region names are not matched against a list."""
        builder = ValidationResultBuilder()
        if required and _is_blank(location):
            builder.add_error(
                "Location cannot be empty",
                "Azure resources must be deployed to a specific region",
                'Provide a valid Azure region (e.g., "eastus", "westus2")',
                "location",
            )
        return builder.build()

    @staticmethod
    def validate_tags(
        tags: Mapping[str, str] | None,
        max_tags: int = 50,
    ) -> ValidationResult:
        builder = ValidationResultBuilder()
        if not tags:
            return builder.build()

        if len(tags) > max_tags:
            builder.add_error(
                "Too many tags",
                f"Resource has {len(tags)} tags but maximum is {max_tags}",
                f"Remove {len(tags) - max_tags} tags to meet Azure limits",
                "tags",
            )

        for key, value in tags.items():
            if _is_blank(key):
                builder.add_error(
                    "Tag name cannot be empty",
                    None,
                    "Remove or rename the empty tag",
                    "tags",
                )

            if key and len(key) > MAX_TAG_NAME_LENGTH:
                builder.add_error(
                    f"Tag name '{key}' is too long",
                    f"Tag names must be {MAX_TAG_NAME_LENGTH} characters or less (got {len(key)})",
                    "Shorten the tag name",
                    f"tags.{key}",
                )

            if value and len(value) > MAX_TAG_VALUE_LENGTH:
                builder.add_error(
                    f"Tag value for '{key}' is too long",
                    f"Tag values must be {MAX_TAG_VALUE_LENGTH} characters or less (got {len(value)})",
                    "Shorten the tag value",
                    f"tags.{key}",
                )

        return builder.build()

    @staticmethod
    def validate_cidr(cidr: str | None, property_name: str) -> ValidationResult:
        builder = ValidationResultBuilder()

        if cidr is None or _is_blank(cidr):
            builder.add_error(
                f"{property_name} cannot be empty",
                "CIDR ranges are required for network configuration",
                'Provide a valid CIDR range (e.g., "10.0.0.0/16")',
                property_name,
            )
            return builder.build()

        if not is_valid_cidr(cidr):
            builder.add_error(
                f"{property_name} has invalid CIDR format",
                f"Value '{cidr}' is not valid CIDR notation",
                'Use format: xxx.xxx.xxx.xxx/yy (e.g., "10.0.0.0/16")',
                property_name,
            )

        return builder.build()

    @staticmethod
    def validate_cidr_array(
        cidrs: Sequence[str] | None,
        property_name: str,
        min_count: int = 1,
    ) -> ValidationResult:
        """Check the entry count and then every entry, reporting both kinds."""
        builder = ValidationResultBuilder()

        if not cidrs:
            if min_count > 0:
                builder.add_error(
                    f"{property_name} cannot be empty",
                    f"At least {min_count} CIDR range(s) required",
                    'Provide valid CIDR ranges (e.g., ["10.0.0.0/16"])',
                    property_name,
                )
            return builder.build()

        if len(cidrs) < min_count:
            builder.add_error(
                f"{property_name} has too few entries",
                f"Found {len(cidrs)} entries but minimum is {min_count}",
                f"Add {min_count - len(cidrs)} more CIDR range(s)",
                property_name,
            )

        for index, cidr in enumerate(cidrs):
            builder.merge(ResourceValidator.validate_cidr(cidr, f"{property_name}[{index}]"))

        return builder.build()

    @staticmethod
    def validate_required(value: Any, property_name: str) -> ValidationResult:
        """Presence check: empty strings and zero are present values."""
        builder = ValidationResultBuilder()
        if value is None:
            builder.add_error(
                f"{property_name} is required",
                "This property must be provided",
                f"Set a value for {property_name}",
                property_name,
            )
        return builder.build()

    @staticmethod
    def validate_pattern(
        value: str | None,
        property_name: str,
        pattern: re.Pattern[str] | str,
        pattern_description: str | None = None,
    ) -> ValidationResult:
        """Format check only; absent values pass. Pair with validate_required.

        ``$`` in ``pattern`` anchors at the very end of ``value``, so a trailing
        newline never satisfies it (MULTILINE patterns are used as given).
        """
        builder = ValidationResultBuilder()
        if not value:
            return builder.build()

        compiled = _compile(pattern)
        if not compiled.search(value):
            if pattern_description:
                details = f"Value '{value}' does not match required format: {pattern_description}"
            else:
                details = f"Value '{value}' does not match pattern: {_pattern_text(pattern)}"
            builder.add_error(
                f"{property_name} has invalid format",
                details,
                "Check the expected format for this property",
                property_name,
            )
        return builder.build()

    @staticmethod
    def validate_range(
        value: float | None,
        property_name: str,
        minimum: float,
        maximum: float,
    ) -> ValidationResult:
        """Inclusive bounds check; None passes."""
        builder = ValidationResultBuilder()
        if value is None:
            return builder.build()

        if value < minimum or value > maximum:
            builder.add_error(
                f"{property_name} is out of range",
                f"Value {value} must be between {minimum} and {maximum} (inclusive)",
                f"Choose a value between {minimum} and {maximum}",
                property_name,
            )
        return builder.build()
