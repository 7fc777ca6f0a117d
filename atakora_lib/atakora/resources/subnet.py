"""Subnet (Microsoft.Network/virtualNetworks/subnets).

The delegation, service endpoint and structural helpers here are shared with
inline subnets declared on a virtual network.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from atakora.resources.base import ArmResource, drop_none, template_name
from atakora.validation.cidr import is_valid_cidr, parse_cidr
from atakora.validation.error_catalog import get_error_definition
from atakora.validation.models import (
    ConstructValidationError,
    ValidationResult,
    ValidationResultBuilder,
)

AZURE_RESERVED_ADDRESSES = 5
MIN_USABLE_ADDRESSES = 3


class Delegation(BaseModel):
    name: str = ""
    service_name: str = ""


class ServiceEndpoint(BaseModel):
    service: str = ""
    locations: list[str] | None = None


class SubnetProps(BaseModel):
    name: str = ""
    virtual_network_name: str = ""
    address_prefix: str | None = None
    address_prefixes: list[str] | None = None
    network_security_group_id: str | None = None
    delegations: list[Delegation] = Field(default_factory=list)
    service_endpoints: list[ServiceEndpoint] = Field(default_factory=list)
    default_outbound_access: bool | None = None
    sharing_scope: str | None = None


def _blank(value: str | None) -> bool:
    return not value or not value.strip()


def validate_delegations(delegations: list[Delegation], path: str, owner: str) -> None:
    for index, delegation in enumerate(delegations):
        if _blank(delegation.name):
            raise ConstructValidationError(
                f"Delegation in {owner} missing name",
                f"Delegation at index {index} has no name",
                'Add a name for the delegation (e.g., "delegation")',
                f"{path}delegations[{index}].name",
            )
        if _blank(delegation.service_name):
            raise ConstructValidationError(
                f"Delegation in {owner} missing serviceName",
                f"Delegation '{delegation.name}' has no serviceName",
                'Add a serviceName (e.g., "Microsoft.Web/serverFarms")',
                f"{path}delegations[{index}].serviceName",
            )


def validate_service_endpoints(endpoints: list[ServiceEndpoint], path: str, owner: str) -> None:
    for index, endpoint in enumerate(endpoints):
        if _blank(endpoint.service):
            raise ConstructValidationError(
                f"Service endpoint in {owner} missing service",
                f"Service endpoint at index {index} has no service",
                'Add a service name (e.g., "Microsoft.Storage")',
                f"{path}serviceEndpoints[{index}].service",
            )


def delegations_to_arm(delegations: list[Delegation]) -> list[dict[str, Any]] | None:
    if not delegations:
        return None
    return [
        {"name": d.name, "properties": {"serviceName": d.service_name}} for d in delegations
    ]


def service_endpoints_to_arm(endpoints: list[ServiceEndpoint]) -> list[dict[str, Any]] | None:
    if not endpoints:
        return None
    return [drop_none({"service": e.service, "locations": e.locations}) for e in endpoints]


def is_literal_nsg_id(nsg_id: Any) -> bool:
    return (
        isinstance(nsg_id, str)
        and not nsg_id.startswith("[")
        and "/networkSecurityGroups/" in nsg_id
    )


def check_subnet_properties(
    builder: ValidationResultBuilder,
    properties: dict[str, Any],
    path: str,
    owner: str,
    resource_id: str | None = None,
) -> None:
    """Check delegation wrappers and NSG references inside a subnet's properties."""
    arm001 = get_error_definition("ARM001")

    delegations = properties.get("delegations") or []
    if not isinstance(delegations, list):
        builder.add_error(
            f"Delegations in {owner} must be an array",
            f"Got {type(delegations).__name__}",
            "Declare delegations as a list of delegation objects",
            f"{path}.delegations",
            resource_id=resource_id,
        )
        delegations = []

    for index, delegation in enumerate(delegations):
        delegation_path = f"{path}.delegations[{index}]"
        if not isinstance(delegation, dict):
            builder.add_error(
                f"Delegation in {owner} must be an object",
                f"Got {type(delegation).__name__}",
                arm001.suggestion,
                delegation_path,
                resource_id=resource_id,
            )
            continue

        wrapper = delegation.get("properties")
        if not wrapper:
            builder.add_error(
                f"Delegation in {owner} missing properties wrapper",
                'ARM requires delegations to have format: { name: "...", properties: { serviceName: "..." } }',
                arm001.suggestion,
                delegation_path,
                resource_id=resource_id,
            )
        elif not isinstance(wrapper, dict):
            builder.add_error(
                f"Delegation in {owner} properties must be an object",
                f"Got {type(wrapper).__name__}",
                arm001.suggestion,
                f"{delegation_path}.properties",
                resource_id=resource_id,
            )
            continue
        elif not wrapper.get("serviceName"):
            builder.add_error(
                f"Delegation in {owner} missing serviceName in properties",
                "Delegation properties must contain serviceName",
                "Add serviceName to delegation.properties",
                f"{delegation_path}.properties.serviceName",
                resource_id=resource_id,
            )

        if delegation.get("serviceName") and not (wrapper or {}).get("serviceName"):
            builder.add_error(
                f"Delegation in {owner} has serviceName at wrong level",
                "serviceName must be inside properties object, not at delegation root",
                (
                    f'Move serviceName to properties: {{ name: "{delegation.get("name")}", '
                    f'properties: {{ serviceName: "{delegation["serviceName"]}" }} }}'
                ),
                delegation_path,
                resource_id=resource_id,
            )

    nsg = properties.get("networkSecurityGroup")
    if nsg is not None and not isinstance(nsg, dict):
        builder.add_error(
            f"NSG reference in {owner} must be an object",
            f"Got {type(nsg).__name__}",
            'Use networkSecurityGroup: { id: "[resourceId(...)]" }',
            f"{path}.networkSecurityGroup",
            resource_id=resource_id,
        )
        return

    nsg_id = (nsg or {}).get("id")
    if is_literal_nsg_id(nsg_id):
        builder.add_warning(
            f"NSG reference in {owner} may be using literal ID instead of ARM expression",
            f"NSG ID: {nsg_id}",
            get_error_definition("ARM003").suggestion,
            f"{path}.networkSecurityGroup.id",
            resource_id=resource_id,
        )


def check_subnet_prefix(
    builder: ValidationResultBuilder,
    prefix: Any,
    path: str,
    owner: str,
    resource_id: str | None = None,
) -> bool:
    """Check one subnet address prefix; return whether it is usable CIDR.

    Prefixes of /30 and smaller get a warning: Azure reserves five addresses
    in every subnet.
    """
    if not is_valid_cidr(prefix):
        builder.add_error(
            f"Invalid CIDR notation for addressPrefix in {owner}",
            f"Value '{prefix}' is not valid CIDR notation",
            'Use format: xxx.xxx.xxx.xxx/yy (e.g., "10.0.1.0/24")',
            path,
            resource_id=resource_id,
        )
        return False

    prefix_length = parse_cidr(prefix).prefix_length
    usable = 2 ** (32 - prefix_length) - AZURE_RESERVED_ADDRESSES
    if usable < MIN_USABLE_ADDRESSES:
        builder.add_warning(
            f"Subnet /{prefix_length} in {owner} has only {max(usable, 0)} usable IP addresses",
            "Azure reserves the first 4 and the last IP address in each subnet",
            f"Use /29 or larger for at least {MIN_USABLE_ADDRESSES} usable IPs",
            path,
            resource_id=resource_id,
        )
    return True


def check_subnet_structure(template: dict[str, Any]) -> ValidationResult:
    """Structural checks on a standalone subnet resource in ARM form."""
    builder = ValidationResultBuilder()
    name = template_name(template)
    properties = template.get("properties")

    if not properties:
        builder.add_error(
            "Subnet ARM template missing properties wrapper",
            "ARM template subnets must have a properties object",
            "Include a properties object in the subnet resource",
            "properties",
            resource_id=name,
        )
        return builder.build()

    if not isinstance(properties, dict):
        builder.add_error(
            "Subnet properties must be an object",
            f"Got {type(properties).__name__}",
            "Include a properties object in the subnet resource",
            "properties",
            resource_id=name,
        )
        return builder.build()

    owner = f"subnet {name}"
    check_subnet_properties(builder, properties, "properties", owner, name)

    prefix = properties.get("addressPrefix")
    prefixes = properties.get("addressPrefixes")
    if not prefix and not prefixes:
        builder.add_error(
            "Subnet missing address prefix in ARM template",
            "ARM template must have either addressPrefix or addressPrefixes in properties",
            get_error_definition("ARM002").suggestion,
            "properties.addressPrefix",
            resource_id=name,
        )
    elif prefix:
        check_subnet_prefix(builder, prefix, "properties.addressPrefix", owner, name)
    elif isinstance(prefixes, list):
        for index, value in enumerate(prefixes):
            check_subnet_prefix(builder, value, f"properties.addressPrefixes[{index}]", owner, name)
    else:
        builder.add_error(
            "addressPrefixes must be an array",
            f"Got {type(prefixes).__name__}",
            "Declare addressPrefixes as a list of CIDR strings",
            "properties.addressPrefixes",
            resource_id=name,
        )

    return builder.build()


class ArmSubnet(ArmResource[SubnetProps]):
    """Subnet declared as its own resource under an existing virtual network."""

    resource_type = "Microsoft.Network/virtualNetworks/subnets"
    api_version = "2024-07-01"

    @property
    def name(self) -> str:
        return self.props.name

    def validate_props(self, props: SubnetProps) -> None:
        if _blank(props.name):
            raise ConstructValidationError(
                "Subnet name cannot be empty",
                "Subnet names are required for all subnets",
                "Provide a valid subnet name",
                "name",
            )

        if _blank(props.virtual_network_name):
            raise ConstructValidationError(
                "Virtual network name cannot be empty",
                "Subnets must specify the parent virtual network name",
                "Provide the name of the virtual network this subnet belongs to",
                "virtualNetworkName",
            )

        if props.address_prefixes:
            if props.address_prefix:
                raise ConstructValidationError(
                    "Cannot specify both addressPrefix and addressPrefixes",
                    "Use either addressPrefix or addressPrefixes, not both",
                    "Remove one of these properties",
                    "addressPrefix/addressPrefixes",
                )
            for index, prefix in enumerate(props.address_prefixes):
                if not is_valid_cidr(prefix):
                    raise ConstructValidationError(
                        "Invalid CIDR notation in addressPrefixes",
                        f"Address prefix at index {index}: '{prefix}' is not valid CIDR notation",
                        'Use format: xxx.xxx.xxx.xxx/yy (e.g., "10.0.1.0/24")',
                        f"addressPrefixes[{index}]",
                    )
        else:
            if _blank(props.address_prefix):
                raise ConstructValidationError(
                    "Either addressPrefix or addressPrefixes must be provided",
                    "Subnets require an address range",
                    'Provide addressPrefix with a valid CIDR notation (e.g., "10.0.1.0/24")',
                    "addressPrefix",
                )
            if not is_valid_cidr(props.address_prefix or ""):
                raise ConstructValidationError(
                    "Invalid CIDR notation for addressPrefix",
                    f"Value '{props.address_prefix}' is not valid CIDR notation",
                    'Use format: xxx.xxx.xxx.xxx/yy (e.g., "10.0.1.0/24")',
                    "addressPrefix",
                )

        validate_delegations(props.delegations, "", f"subnet {props.name}")
        validate_service_endpoints(props.service_endpoints, "", f"subnet {props.name}")

        if props.sharing_scope and props.default_outbound_access is not False:
            raise ConstructValidationError(
                "Invalid sharingScope configuration",
                "sharingScope can only be set when defaultOutboundAccess is set to false",
                "Set defaultOutboundAccess to false or remove sharingScope",
                "sharingScope/defaultOutboundAccess",
            )

    def to_arm_template(self) -> dict[str, Any]:
        nsg = (
            {"id": self.props.network_security_group_id}
            if self.props.network_security_group_id
            else None
        )
        properties = drop_none({
            "addressPrefix": self.props.address_prefix,
            "addressPrefixes": self.props.address_prefixes,
            "networkSecurityGroup": nsg,
            "delegations": delegations_to_arm(self.props.delegations),
            "serviceEndpoints": service_endpoints_to_arm(self.props.service_endpoints),
            "defaultOutboundAccess": self.props.default_outbound_access,
            "sharingScope": self.props.sharing_scope,
        })
        return {
            "type": self.resource_type,
            "apiVersion": self.api_version,
            "name": f"{self.props.virtual_network_name}/{self.name}",
            "properties": properties,
        }

    def validate_arm_structure(self) -> ValidationResult:
        return check_subnet_structure(self.to_arm_template())
