"""Catalog of coded validation errors.

Every hard validation failure has an entry here with a stable code, a
message template, an explanation, an example of correct usage, an
actionable suggestion and a documentation link.

Code ranges by prefix:

- ARM001-ARM099: ARM structure and deployment
- NET001-NET099: networking
- SEC001-SEC099: security
- TYPE001-TYPE099: type safety
- SCHEMA001-SCHEMA099: schema

Codes are a public contract: once shipped they are never reused or
renumbered. Add new codes by appending entries to ``_DEFINITIONS``.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict


class ErrorSeverity(str, Enum):
    """Severity level for catalog errors."""

    error = "error"
    warning = "warning"
    info = "info"


class ErrorCategory(str, Enum):
    arm_structure = "ARM Structure"
    deployment = "Deployment"
    networking = "Networking"
    security = "Security"
    type_safety = "Type Safety"
    schema = "Schema"


# Code prefix -> categories allowed to use it.
CATEGORY_PREFIXES: Mapping[str, frozenset[ErrorCategory]] = MappingProxyType({
    "ARM": frozenset({ErrorCategory.arm_structure, ErrorCategory.deployment}),
    "NET": frozenset({ErrorCategory.networking}),
    "SEC": frozenset({ErrorCategory.security}),
    "TYPE": frozenset({ErrorCategory.type_safety}),
    "SCHEMA": frozenset({ErrorCategory.schema}),
})


class ErrorDefinition(BaseModel):
    """A single catalog entry. ``message`` and ``suggestion`` are templates."""

    model_config = ConfigDict(frozen=True)

    code: str
    category: ErrorCategory
    title: str
    message: str
    description: str
    example: str
    suggestion: str
    related_docs: str
    severity: ErrorSeverity = ErrorSeverity.error


_DOCS = "/docs/guides/common-validation-errors.md"

_DEFINITIONS = (
    ErrorDefinition(
        code="ARM001",
        category=ErrorCategory.arm_structure,
        title="Invalid Delegation Structure",
        message="Delegation structure requires properties wrapper",
        description=(
            "ARM requires delegation objects to be wrapped in a properties field. "
            'The serviceName must be inside properties: { serviceName: "..." }. '
            "This is an ARM-specific requirement that applies to subnet delegations."
        ),
        example=(
            "{\n"
            "  name: 'webapp-delegation',\n"
            "  properties: {\n"
            "    serviceName: 'Microsoft.Web/serverFarms'\n"
            "  }\n"
            "}"
        ),
        suggestion="Wrap your delegation serviceName in a properties object",
        related_docs=f"{_DOCS}#arm001",
    ),
    ErrorDefinition(
        code="ARM002",
        category=ErrorCategory.arm_structure,
        title="Subnet Address Prefix Incorrect",
        message="Subnet addressPrefix must be inside properties object",
        description=(
            "ARM subnet structure requires addressPrefix to be nested inside the "
            "properties field, not at the root level of the subnet object. This is "
            "part of ARM's resource property pattern."
        ),
        example=(
            "{\n"
            "  name: 'MySubnet',\n"
            "  properties: {\n"
            "    addressPrefix: '10.0.1.0/24'\n"
            "  }\n"
            "}"
        ),
        suggestion="Move addressPrefix into the properties object",
        related_docs=f"{_DOCS}#arm002",
    ),
    ErrorDefinition(
        code="ARM003",
        category=ErrorCategory.arm_structure,
        title="Invalid Resource Reference",
        message="Resource reference must use ARM expression syntax",
        description=(
            "Resource references in ARM templates must use ARM expression syntax "
            "with the resourceId() function, not literal strings. Literal strings "
            "don't establish proper dependencies and won't resolve correctly during "
            "deployment."
        ),
        example=(
            "{\n"
            "  networkSecurityGroup: {\n"
            "    id: \"[resourceId('Microsoft.Network/networkSecurityGroups', 'MyNSG')]\"\n"
            "  }\n"
            "}"
        ),
        suggestion=(
            "Use resourceId() ARM expression instead of literal string. Pass the "
            "resource object directly or reference an existing resource by its ID."
        ),
        related_docs=f"{_DOCS}#arm003",
    ),
    ErrorDefinition(
        code="ARM004",
        category=ErrorCategory.deployment,
        title="Network Access Lockdown Before Deployment",
        message="Network access locked down before deployment prevents provisioning",
        description=(
            "The resource has publicNetworkAccess set to 'Disabled' in the deployment "
            "template. Azure Resource Manager needs network access to provision "
            "resources. Setting publicNetworkAccess to 'Disabled' before deployment "
            "prevents ARM from completing provisioning, causing timeouts or failures."
        ),
        example=(
            "# Deploy with access enabled\n"
            "server = ArmSqlServer(SqlServerProps(\n"
            "    ...,\n"
            "    public_network_access='Enabled',  # allow during deployment\n"
            "))\n"
            "\n"
            "# Lock down post-deployment using policy or template update"
        ),
        suggestion=(
            "Set publicNetworkAccess to 'Enabled' for initial deployment, then lock "
            "down using Azure Policy or a second deployment after the resource is "
            "fully provisioned."
        ),
        related_docs=f"{_DOCS}#arm004",
    ),
    ErrorDefinition(
        code="NET001",
        category=ErrorCategory.networking,
        title="Subnet CIDR Outside VNet Range",
        message="Subnet CIDR {subnetCidr} is not within VNet range {vnetCidr}",
        description=(
            "The subnet's addressPrefix (CIDR range) falls outside the VNet's "
            "addressSpace. All subnets must be within their parent VNet's address "
            "range. Check your CIDR calculations."
        ),
        example=(
            "vnet = ArmVirtualNetwork(VirtualNetworkProps(\n"
            "    ...,\n"
            "    address_space=AddressSpace(address_prefixes=['10.0.0.0/16']),\n"
            "    subnets=[InlineSubnet(name='AppSubnet', address_prefix='10.0.1.0/24')],\n"
            "))"
        ),
        suggestion=(
            "Ensure the subnet CIDR is within the VNet address space. For VNet "
            "10.0.0.0/16, subnets must be 10.0.x.x/y where y >= 16."
        ),
        related_docs=f"{_DOCS}#net001",
    ),
    ErrorDefinition(
        code="NET002",
        category=ErrorCategory.networking,
        title="Overlapping Subnet Address Spaces",
        message="Subnet address spaces overlap: {subnet1} and {subnet2}",
        description=(
            "Two or more subnets have overlapping CIDR ranges. Each subnet must have "
            "a unique, non-overlapping address space within the VNet. Overlapping "
            "subnets cause deployment failures."
        ),
        example=(
            "subnets=[\n"
            "    InlineSubnet(name='Subnet1', address_prefix='10.0.1.0/24'),\n"
            "    InlineSubnet(name='Subnet2', address_prefix='10.0.2.0/24'),  # no overlap\n"
            "]"
        ),
        suggestion=(
            "Assign non-overlapping CIDR ranges to each subnet. Use a subnet planning "
            "tool or calculator to avoid overlaps."
        ),
        related_docs=f"{_DOCS}#net002",
    ),
    ErrorDefinition(
        code="SEC001",
        category=ErrorCategory.security,
        title="NSG Rule Priority Conflict",
        message="NSG rule priority conflict: rules {rule1} and {rule2} both have priority {priority}",
        description=(
            "Two or more NSG rules have the same priority value. Each security rule "
            "in a Network Security Group must have a unique priority between 100 and "
            "4096. Lower numbers have higher priority."
        ),
        example=(
            "security_rules=[\n"
            "    SecurityRule(name='AllowHTTPS', priority=100, ...),\n"
            "    SecurityRule(name='AllowHTTP', priority=110, ...),  # unique priority\n"
            "]"
        ),
        suggestion=(
            "Assign unique priorities to each NSG rule. Leave gaps (10-100) between "
            "priorities to allow for future rules."
        ),
        related_docs=f"{_DOCS}#sec001",
    ),
    ErrorDefinition(
        code="TYPE001",
        category=ErrorCategory.type_safety,
        title="Invalid Property Type",
        message="Property {property} has invalid type {actual}, expected {expected}",
        description=(
            "A property value doesn't match the expected type. Typed property "
            "models catch most of these up front; this code covers values that "
            "arrive untyped at runtime."
        ),
        example="address_space=AddressSpace(address_prefixes=['10.0.0.0/16'])  # list of strings",
        suggestion=(
            "Check the property type definition and ensure your value matches. Use "
            "a type checker for early validation."
        ),
        related_docs="/docs/guides/validation-architecture.md#layer-1-compile-time-type-safety",
    ),
    ErrorDefinition(
        code="SCHEMA001",
        category=ErrorCategory.schema,
        title="Schema Validation Failed",
        message="Resource {resource} failed schema validation: {details}",
        description=(
            "The generated ARM resource doesn't match Azure's schema requirements. "
            "This could be due to missing required fields, invalid values, or "
            "incorrect structure."
        ),
        example="# Ensure all required fields are provided and match schema",
        suggestion=(
            "Check the Azure ARM schema documentation for the resource type and API "
            "version. Ensure all required properties are set."
        ),
        related_docs="/docs/guides/validation-architecture.md#layer-5-schema-compliance-synthesis-time",
    ),
)

ERROR_CATALOG: Mapping[str, ErrorDefinition] = MappingProxyType(
    {definition.code: definition for definition in _DEFINITIONS}
)


def _is_identifier_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def interpolate(template: str, context: Mapping[str, Any] | None = None) -> str:
    """Replace ``{key}`` tokens with values from ``context``.

    Present keys are rendered with ``str()``, ``None`` included; tokens whose
    key is missing from ``context`` are left as-is. Only
    ``{`` + word characters + ``}`` is a token; anything else is copied
    through untouched.
    """
    if not context:
        return template

    out: list[str] = []
    i = 0
    length = len(template)
    while i < length:
        char = template[i]
        if char == "{":
            end = i + 1
            while end < length and _is_identifier_char(template[end]):
                end += 1
            if end < length and end > i + 1 and template[end] == "}":
                key = template[i + 1:end]
                if key in context:
                    out.append(str(context[key]))
                else:
                    out.append(template[i:end + 1])
                i = end + 1
                continue
        out.append(char)
        i += 1
    return "".join(out)


class ValidationError(Exception):
    """A catalog-backed validation failure.

    Resolves ``code`` in the catalog and renders its message and suggestion
    templates with ``context``.
    """

    def __init__(self, code: str, context: Mapping[str, Any] | None = None) -> None:
        definition = get_error_definition(code)
        message = interpolate(definition.message, context)
        super().__init__(message)

        self.code = definition.code
        self.category = definition.category
        self.title = definition.title
        self.message = message
        self.description = definition.description
        self.example = definition.example
        self.suggestion = interpolate(definition.suggestion, context)
        self.related_docs = definition.related_docs
        self.severity = definition.severity
        self.context: dict[str, str] | None = (
            {key: str(value) for key, value in context.items()} if context is not None else None
        )

    def format(self) -> str:
        """Render a multi-line report for terminal display."""
        lines = [f"ValidationError [{self.code}]: {self.title}", f"  {self.message}"]

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        lines.append("")
        lines.append("Suggestion:")
        lines.append(f"  {self.suggestion}")

        lines.append("")
        lines.append("Documentation:")
        lines.append(f"  {self.related_docs}")

        if self.example:
            lines.append("")
            lines.append("Example:")
            for line in self.example.split("\n"):
                lines.append(f"  {line}")

        return "\n".join(lines)

    def to_json(self) -> dict[str, Any]:
        """Structured form for tooling. Key names are part of the public contract."""
        return {
            "code": self.code,
            "category": self.category.value,
            "title": self.title,
            "message": self.message,
            "description": self.description,
            "suggestion": self.suggestion,
            "relatedDocs": self.related_docs,
            "severity": self.severity.value,
            "context": self.context,
            "example": self.example,
        }


def create_validation_error(
    code: str,
    context: Mapping[str, Any] | None = None,
) -> ValidationError:
    """Build a ValidationError for ``code``; raises KeyError for unknown codes.

    Usage::

        raise create_validation_error("NET001", {"subnetCidr": "192.168.1.0/24", "vnetCidr": "10.0.0.0/16"})
    """
    return ValidationError(code, context)


def get_error_definition(code: str) -> ErrorDefinition:
    try:
        return ERROR_CATALOG[code]
    except KeyError:
        raise KeyError(f"Unknown validation error code: {code!r}") from None


def get_errors_by_category(category: ErrorCategory) -> list[ErrorDefinition]:
    return [d for d in ERROR_CATALOG.values() if d.category == category]


def search_errors(keyword: str) -> list[ErrorDefinition]:
    """Case-insensitive substring search over code, title, description and message."""
    needle = keyword.lower()
    return [
        d
        for d in ERROR_CATALOG.values()
        if needle in d.code.lower()
        or needle in d.title.lower()
        or needle in d.description.lower()
        or needle in d.message.lower()
    ]


def get_all_errors() -> list[ErrorDefinition]:
    return list(ERROR_CATALOG.values())
