"""ARM template document parsing using ruamel.yaml.

ARM templates are JSON, which ruamel.yaml reads as YAML, so the same parser
accepts both hand-written YAML templates and synthesized JSON.
"""

from __future__ import annotations

from io import StringIO
from typing import Any

from pydantic import BaseModel
from ruamel.yaml import YAML, YAMLError

from atakora.validation.models import ValidationResult, ValidationResultBuilder


class TemplateCheck(BaseModel):
    """Outcome of parsing a template: issues plus the parsed document."""

    result: ValidationResult
    template: dict[str, Any] | None = None


def _to_plain(obj: Any) -> Any:
    """Convert ruamel's commented containers to plain dicts and lists."""
    if hasattr(obj, "items"):
        return {str(k): _to_plain(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_to_plain(item) for item in obj]
    return obj


def check_template_syntax(text: str) -> TemplateCheck:
    """Parse a template and check it has a top-level ``resources`` list."""
    builder = ValidationResultBuilder()

    if not text or not text.strip():
        builder.add_error("Empty template document")
        return TemplateCheck(result=builder.build())

    yaml = YAML(typ="safe", pure=True)

    try:
        parsed = yaml.load(StringIO(text))
    except YAMLError as e:
        details = None
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            details = f"line {mark.line + 1}, column {mark.column + 1}"  # 0-indexed
        builder.add_error(f"Template could not be parsed: {e}", details)
        return TemplateCheck(result=builder.build())

    if not hasattr(parsed, "items"):
        builder.add_error(
            "Template must be a mapping",
            f"Top-level value is {type(parsed).__name__}",
            "Wrap the template in an object with $schema, contentVersion and resources",
        )
        return TemplateCheck(result=builder.build())

    template = _to_plain(parsed)
    if not isinstance(template.get("resources"), list):
        builder.add_error(
            "Template has no resources list",
            "ARM templates must declare a top-level 'resources' array",
            "Add a 'resources' array, even if it is empty",
            "resources",
        )
        return TemplateCheck(result=builder.build())

    return TemplateCheck(result=builder.build(), template=template)
