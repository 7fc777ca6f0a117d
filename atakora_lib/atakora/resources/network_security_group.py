"""Network Security Group (Microsoft.Network/networkSecurityGroups)."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from atakora.resources.base import ArmResource, drop_none, template_name
from atakora.validation.cidr import is_valid_port_range
from atakora.validation.error_catalog import create_validation_error
from atakora.validation.models import (
    ConstructValidationError,
    ValidationResult,
    ValidationResultBuilder,
)
from atakora.validation.resource_validator import ResourceValidator

MAX_DESCRIPTION_LENGTH = 140
MIN_PRIORITY = 100
MAX_PRIORITY = 4096


class SecurityRuleProtocol(str, Enum):
    tcp = "Tcp"
    udp = "Udp"
    icmp = "Icmp"
    esp = "Esp"
    ah = "Ah"
    any = "*"


class SecurityRuleAccess(str, Enum):
    allow = "Allow"
    deny = "Deny"


class SecurityRuleDirection(str, Enum):
    inbound = "Inbound"
    outbound = "Outbound"


class SecurityRule(BaseModel):
    name: str = ""
    priority: int
    description: str | None = None
    protocol: SecurityRuleProtocol | None = None
    access: SecurityRuleAccess | None = None
    direction: SecurityRuleDirection | None = None
    source_port_range: str | None = None
    source_port_ranges: list[str] | None = None
    destination_port_range: str | None = None
    destination_port_ranges: list[str] | None = None
    source_address_prefix: str | None = None
    source_address_prefixes: list[str] | None = None
    destination_address_prefix: str | None = None
    destination_address_prefixes: list[str] | None = None


class NetworkSecurityGroupProps(BaseModel):
    network_security_group_name: str = ""
    location: str = ""
    security_rules: list[SecurityRule] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
    flush_connection: bool | None = None


def _enum_value(value: Enum | None) -> str | None:
    return value.value if value is not None else None


def _require_one(single: str | None, many: list[str] | None) -> bool:
    return bool(single) or bool(many)


def _check_ports(rule: SecurityRule, index: int, side: str) -> None:
    single = getattr(rule, f"{side}_port_range")
    many = getattr(rule, f"{side}_port_ranges")
    camel = "sourcePortRange" if side == "source" else "destinationPortRange"
    example = '"80"' if side == "source" else '"443"'

    if not _require_one(single, many):
        raise ConstructValidationError(
            f"Security rule '{rule.name}': missing {side} port specification",
            f"Either {camel} or {camel}s must be specified",
            f'Add {camel} (e.g., "*" or {example} or "1000-2000")',
            f"securityRules[{index}].{camel}",
        )

    for value in ([single] if single else []) + list(many or []):
        if not is_valid_port_range(value):
            raise ConstructValidationError(
                f"Security rule '{rule.name}': invalid {side} port range",
                f"Port range '{value}' is not valid",
                f'Use format: "*", single port (e.g., {example}), or range (e.g., "1000-2000")',
                f"securityRules[{index}].{camel}",
            )


def validate_security_rule(rule: SecurityRule, index: int) -> None:
    """Raise ConstructValidationError for the first problem found in ``rule``."""
    if not rule.name or not rule.name.strip():
        raise ConstructValidationError(
            f"Security rule at index {index}: name cannot be empty",
            "All security rules must have a name",
            'Provide a descriptive name for the rule (e.g., "AllowHTTP")',
            f"securityRules[{index}].name",
        )

    if rule.description and len(rule.description) > MAX_DESCRIPTION_LENGTH:
        raise ConstructValidationError(
            f"Security rule '{rule.name}': description too long",
            f"Description has {len(rule.description)} characters but maximum is {MAX_DESCRIPTION_LENGTH}",
            f"Shorten the description to {MAX_DESCRIPTION_LENGTH} characters or less",
            f"securityRules[{index}].description",
        )

    priority_check = ResourceValidator.validate_range(
        rule.priority, f"securityRules[{index}].priority", MIN_PRIORITY, MAX_PRIORITY
    )
    if not priority_check.is_valid:
        raise ConstructValidationError(
            f"Security rule '{rule.name}': priority out of range",
            f"Priority {rule.priority} is not within valid range {MIN_PRIORITY}-{MAX_PRIORITY}",
            f"Use a priority between {MIN_PRIORITY} and {MAX_PRIORITY}",
            f"securityRules[{index}].priority",
        )

    _check_ports(rule, index, "source")
    _check_ports(rule, index, "destination")

    if not _require_one(rule.source_address_prefix, rule.source_address_prefixes):
        raise ConstructValidationError(
            f"Security rule '{rule.name}': missing source address specification",
            "Either sourceAddressPrefix or sourceAddressPrefixes must be specified",
            'Add sourceAddressPrefix (e.g., "*", "Internet", or CIDR like "10.0.0.0/24")',
            f"securityRules[{index}].sourceAddressPrefix",
        )

    if not _require_one(rule.destination_address_prefix, rule.destination_address_prefixes):
        raise ConstructValidationError(
            f"Security rule '{rule.name}': missing destination address specification",
            "Either destinationAddressPrefix or destinationAddressPrefixes must be specified",
            'Add destinationAddressPrefix (e.g., "*", "VirtualNetwork", or CIDR like "10.0.1.0/24")',
            f"securityRules[{index}].destinationAddressPrefix",
        )

    if rule.protocol is None:
        raise ConstructValidationError(
            f"Security rule '{rule.name}': missing protocol",
            "Protocol is required for all security rules",
            'Specify protocol: "Tcp", "Udp", "Icmp", or "*"',
            f"securityRules[{index}].protocol",
        )

    if rule.access is None:
        raise ConstructValidationError(
            f"Security rule '{rule.name}': missing access",
            "Access (Allow/Deny) is required for all security rules",
            'Specify access: "Allow" or "Deny"',
            f"securityRules[{index}].access",
        )

    if rule.direction is None:
        raise ConstructValidationError(
            f"Security rule '{rule.name}': missing direction",
            "Direction is required for all security rules",
            'Specify direction: "Inbound" or "Outbound"',
            f"securityRules[{index}].direction",
        )


def validate_unique_priorities(rules: list[SecurityRule]) -> None:
    """Raise SEC001 for the first pair of rules sharing a priority."""
    seen: dict[int, str] = {}
    for rule in rules:
        if rule.priority in seen:
            raise create_validation_error(
                "SEC001",
                {
                    "rule1": seen[rule.priority],
                    "rule2": rule.name,
                    "priority": str(rule.priority),
                },
            )
        seen[rule.priority] = rule.name


def check_nsg_structure(template: dict[str, Any]) -> ValidationResult:
    """Structural checks on an NSG resource in ARM form."""
    builder = ValidationResultBuilder()
    name = template_name(template)
    properties = template.get("properties")

    if properties is not None and not isinstance(properties, dict):
        builder.add_error(
            "Network security group properties must be an object",
            f"Got {type(properties).__name__}",
            "Wrap securityRules in a properties object",
            "properties",
            resource_id=name,
        )
        return builder.build()

    rules = (properties or {}).get("securityRules") or []
    if not isinstance(rules, list):
        builder.add_error(
            "securityRules must be an array",
            f"Got {type(rules).__name__}",
            "Declare securityRules as a list of rule objects",
            "properties.securityRules",
            resource_id=name,
        )
        return builder.build()

    for index, rule in enumerate(rules):
        path = f"properties.securityRules[{index}]"
        if not isinstance(rule, dict):
            builder.add_error(
                f"Security rule at index {index} must be an object",
                f"Got {type(rule).__name__}",
                "Declare each rule as { name: ..., properties: { ... } }",
                path,
                resource_id=name,
            )
            continue

        props = rule.get("properties")
        if not props:
            builder.add_error(
                f"Security rule at index {index} missing properties wrapper",
                "ARM template security rules must have a properties object",
                "Wrap the rule fields in a properties object",
                path,
                resource_id=name,
            )
            continue
        if not isinstance(props, dict):
            builder.add_error(
                f"Security rule {rule.get('name')} properties must be an object",
                f"Got {type(props).__name__}",
                "Wrap the rule fields in a properties object",
                f"{path}.properties",
                resource_id=name,
            )
            continue

        if rule.get("priority") is not None and props.get("priority") is None:
            builder.add_error(
                f"Security rule {rule.get('name')} has priority at wrong nesting level",
                "Priority must be inside properties object, not at rule root",
                "Move priority to properties.priority",
                f"{path}.priority",
                resource_id=name,
            )

        if props.get("direction") == "Inbound" and props.get("destinationPortRange") == "*":
            builder.add_warning(
                f"Security rule {rule.get('name')} allows all inbound ports",
                'Inbound rule with destination port "*" may be overly permissive',
                "Consider restricting to specific ports for better security",
                f"{path}.properties.destinationPortRange",
                resource_id=name,
            )

        if props.get("protocol") == "Icmp" and (
            props.get("destinationPortRange") != "*" or props.get("sourcePortRange") != "*"
        ):
            builder.add_warning(
                f"Security rule {rule.get('name')} uses ICMP with specific ports",
                "ICMP protocol does not use ports; port specifications are ignored",
                'Use "*" for both source and destination ports with ICMP',
                f"{path}.properties.protocol",
                resource_id=name,
            )

    return builder.build()


class ArmNetworkSecurityGroup(ArmResource[NetworkSecurityGroupProps]):
    """Network security group with rule validation."""

    resource_type = "Microsoft.Network/networkSecurityGroups"
    api_version = "2024-07-01"

    @property
    def name(self) -> str:
        return self.props.network_security_group_name

    def validate_props(self, props: NetworkSecurityGroupProps) -> None:
        ResourceValidator.validate_resource_name(
            props.network_security_group_name, "Network security group", 1, 80
        ).raise_for_errors()
        ResourceValidator.validate_location(props.location).raise_for_errors()
        ResourceValidator.validate_tags(props.tags).raise_for_errors()

        for index, rule in enumerate(props.security_rules):
            validate_security_rule(rule, index)
        validate_unique_priorities(props.security_rules)

    def to_arm_template(self) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        if self.props.security_rules:
            properties["securityRules"] = [
                {
                    "name": rule.name,
                    "properties": drop_none({
                        "description": rule.description,
                        "protocol": _enum_value(rule.protocol),
                        "sourcePortRange": rule.source_port_range,
                        "sourcePortRanges": rule.source_port_ranges,
                        "destinationPortRange": rule.destination_port_range,
                        "destinationPortRanges": rule.destination_port_ranges,
                        "sourceAddressPrefix": rule.source_address_prefix,
                        "sourceAddressPrefixes": rule.source_address_prefixes,
                        "destinationAddressPrefix": rule.destination_address_prefix,
                        "destinationAddressPrefixes": rule.destination_address_prefixes,
                        "access": _enum_value(rule.access),
                        "priority": rule.priority,
                        "direction": _enum_value(rule.direction),
                    }),
                }
                for rule in self.props.security_rules
            ]
        if self.props.flush_connection is not None:
            properties["flushConnection"] = self.props.flush_connection

        return drop_none({
            "type": self.resource_type,
            "apiVersion": self.api_version,
            "name": self.name,
            "location": self.props.location,
            "tags": self.props.tags or None,
            "properties": properties or None,
        })

    def validate_arm_structure(self) -> ValidationResult:
        return check_nsg_structure(self.to_arm_template())
