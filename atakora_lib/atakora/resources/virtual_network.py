"""Virtual network (Microsoft.Network/virtualNetworks)."""

from __future__ import annotations

from itertools import combinations
from typing import Any

from pydantic import BaseModel, Field

from atakora.resources.base import ArmResource, drop_none, template_name
from atakora.resources.subnet import (
    Delegation,
    ServiceEndpoint,
    check_subnet_prefix,
    check_subnet_properties,
    delegations_to_arm,
    service_endpoints_to_arm,
    validate_delegations,
    validate_service_endpoints,
)
from atakora.validation.cidr import cidrs_overlap, is_valid_cidr, is_within_cidr
from atakora.validation.error_catalog import (
    create_validation_error,
    get_error_definition,
    interpolate,
)
from atakora.validation.models import (
    ConstructValidationError,
    ValidationResult,
    ValidationResultBuilder,
)
from atakora.validation.resource_validator import ResourceValidator


class AddressSpace(BaseModel):
    address_prefixes: list[str] = Field(default_factory=list)


class InlineSubnet(BaseModel):
    name: str = ""
    address_prefix: str = ""
    network_security_group_id: str | None = None
    delegations: list[Delegation] = Field(default_factory=list)
    service_endpoints: list[ServiceEndpoint] = Field(default_factory=list)


class VirtualNetworkProps(BaseModel):
    virtual_network_name: str = ""
    location: str = ""
    resource_group_name: str = ""
    address_space: AddressSpace | None = None
    subnets: list[InlineSubnet] = Field(default_factory=list)
    dns_servers: list[str] | None = None
    enable_ddos_protection: bool = False
    enable_vm_protection: bool = False
    tags: dict[str, str] = Field(default_factory=dict)


def validate_inline_subnets(subnets: list[InlineSubnet], vnet_prefixes: list[str]) -> None:
    """Check names, ranges and nested settings of inline subnets.

    Containment failures raise NET001 and overlaps raise NET002.
    """
    seen_names: set[str] = set()

    for index, subnet in enumerate(subnets):
        if not subnet.name or not subnet.name.strip():
            raise ConstructValidationError(
                "Subnet name cannot be empty",
                f"Subnet at index {index} has no name",
                "Provide a valid subnet name",
                f"subnets[{index}].name",
            )

        if subnet.name in seen_names:
            raise ConstructValidationError(
                f"Duplicate subnet name: {subnet.name}",
                "Subnet names must be unique within a virtual network",
                "Use a different name for this subnet",
                f"subnets[{index}].name",
            )
        seen_names.add(subnet.name)

        cidr_check = ResourceValidator.validate_cidr(
            subnet.address_prefix, f"subnets[{index}].addressPrefix"
        )
        if not cidr_check.is_valid:
            issue = cidr_check.errors()[0]
            raise ConstructValidationError(
                f"Invalid subnet address prefix for {subnet.name}",
                issue.details,
                issue.suggestion,
                issue.property_path,
            )

        if not any(is_within_cidr(subnet.address_prefix, vnet) for vnet in vnet_prefixes):
            raise create_validation_error(
                "NET001",
                {"subnetCidr": subnet.address_prefix, "vnetCidr": ", ".join(vnet_prefixes)},
            )

        owner = f"subnet {subnet.name}"
        validate_delegations(subnet.delegations, f"subnets[{index}].", owner)
        validate_service_endpoints(subnet.service_endpoints, f"subnets[{index}].", owner)

    for first, second in combinations(subnets, 2):
        if cidrs_overlap(first.address_prefix, second.address_prefix):
            raise create_validation_error(
                "NET002",
                {
                    "subnet1": f"{first.name} ({first.address_prefix})",
                    "subnet2": f"{second.name} ({second.address_prefix})",
                },
            )


def _vnet_prefixes(properties: dict[str, Any]) -> list[str]:
    address_space = properties.get("addressSpace")
    if not isinstance(address_space, dict):
        return []
    prefixes = address_space.get("addressPrefixes")
    if not isinstance(prefixes, list):
        return []
    return [prefix for prefix in prefixes if is_valid_cidr(prefix)]


def check_virtual_network_structure(template: dict[str, Any]) -> ValidationResult:
    """Structural checks on a virtual network in ARM form, including inline subnets.

    Inline subnet prefixes must sit inside the address space (NET001) and must
    not overlap each other (NET002).
    """
    builder = ValidationResultBuilder()
    name = template_name(template)
    arm002 = get_error_definition("ARM002")
    net001 = get_error_definition("NET001")
    net002 = get_error_definition("NET002")

    vnet_properties = template.get("properties")
    if vnet_properties is not None and not isinstance(vnet_properties, dict):
        builder.add_error(
            "Virtual network properties must be an object",
            f"Got {type(vnet_properties).__name__}",
            "Wrap addressSpace and subnets in a properties object",
            "properties",
            resource_id=name,
        )
        return builder.build()

    vnet_properties = vnet_properties or {}
    subnets = vnet_properties.get("subnets") or []
    if not isinstance(subnets, list):
        builder.add_error(
            "Virtual network subnets must be an array",
            f"Got {type(subnets).__name__}",
            "Declare subnets as a list of subnet objects",
            "properties.subnets",
            resource_id=name,
        )
        return builder.build()

    vnet_prefixes = _vnet_prefixes(vnet_properties)
    placed: list[tuple[str, str]] = []

    for index, subnet in enumerate(subnets):
        path = f"properties.subnets[{index}]"
        if not isinstance(subnet, dict):
            builder.add_error(
                f"Subnet at index {index} must be an object",
                f"Got {type(subnet).__name__}",
                "Declare each subnet as { name: ..., properties: { addressPrefix: ... } }",
                path,
                resource_id=name,
            )
            continue

        subnet_name = subnet.get("name")
        properties = subnet.get("properties")
        if not properties:
            builder.add_error(
                f"Subnet at index {index} missing properties wrapper",
                "ARM template subnets must have a properties object",
                "Wrap the subnet fields in a properties object",
                path,
                resource_id=name,
            )
            continue
        if not isinstance(properties, dict):
            builder.add_error(
                f"Subnet {subnet_name} properties must be an object",
                f"Got {type(properties).__name__}",
                "Wrap the subnet fields in a properties object",
                f"{path}.properties",
                resource_id=name,
            )
            continue

        if subnet.get("addressPrefix") and not properties.get("addressPrefix"):
            builder.add_error(
                f"Subnet {subnet_name} has addressPrefix at wrong nesting level",
                arm002.message,
                arm002.suggestion,
                f"{path}.addressPrefix",
                resource_id=name,
            )

        owner = f"subnet {subnet_name}"
        check_subnet_properties(builder, properties, f"{path}.properties", owner, name)

        prefix = properties.get("addressPrefix")
        prefix_path = f"{path}.properties.addressPrefix"
        if not prefix or not check_subnet_prefix(builder, prefix, prefix_path, owner, name):
            continue

        if vnet_prefixes and not any(is_within_cidr(prefix, vnet) for vnet in vnet_prefixes):
            context = {"subnetCidr": prefix, "vnetCidr": ", ".join(vnet_prefixes)}
            builder.add_error(
                f"{net001.code}: {interpolate(net001.message, context)}",
                net001.description,
                net001.suggestion,
                prefix_path,
                resource_id=name,
            )

        for other_name, other_prefix in placed:
            if cidrs_overlap(prefix, other_prefix):
                context = {
                    "subnet1": f"{other_name} ({other_prefix})",
                    "subnet2": f"{subnet_name} ({prefix})",
                }
                builder.add_error(
                    f"{net002.code}: {interpolate(net002.message, context)}",
                    net002.description,
                    net002.suggestion,
                    prefix_path,
                    resource_id=name,
                )
        placed.append((str(subnet_name), prefix))

    return builder.build()


class ArmVirtualNetwork(ArmResource[VirtualNetworkProps]):
    """Virtual network with address space and inline subnet validation."""

    resource_type = "Microsoft.Network/virtualNetworks"
    api_version = "2024-07-01"

    @property
    def name(self) -> str:
        return self.props.virtual_network_name

    @property
    def resource_id(self) -> str:
        return (
            f"/subscriptions/{{subscriptionId}}/resourceGroups/{self.props.resource_group_name}"
            f"/providers/{self.resource_type}/{self.name}"
        )

    def validate_props(self, props: VirtualNetworkProps) -> None:
        ResourceValidator.validate_resource_name(
            props.virtual_network_name, "Virtual network", 2, 64
        ).raise_for_errors()
        ResourceValidator.validate_location(props.location).raise_for_errors()
        ResourceValidator.validate_resource_name(
            props.resource_group_name, "Resource group", 1, 90
        ).raise_for_errors()
        ResourceValidator.validate_tags(props.tags).raise_for_errors()

        if props.address_space is None:
            raise ConstructValidationError(
                "Address space must be specified",
                "Virtual networks require at least one address space",
                'Add address_space with address_prefixes (e.g., ["10.0.0.0/16"])',
                "addressSpace",
            )

        prefixes = props.address_space.address_prefixes
        ResourceValidator.validate_cidr_array(
            prefixes, "addressSpace.addressPrefixes"
        ).raise_for_errors()

        if props.subnets:
            validate_inline_subnets(props.subnets, prefixes)

    def to_arm_template(self) -> dict[str, Any]:
        subnets = [
            {
                "name": subnet.name,
                "properties": drop_none({
                    "addressPrefix": subnet.address_prefix,
                    "networkSecurityGroup": (
                        {"id": subnet.network_security_group_id}
                        if subnet.network_security_group_id
                        else None
                    ),
                    "delegations": delegations_to_arm(subnet.delegations),
                    "serviceEndpoints": service_endpoints_to_arm(subnet.service_endpoints),
                }),
            }
            for subnet in self.props.subnets
        ]
        address_space = self.props.address_space or AddressSpace()
        properties = drop_none({
            "addressSpace": {"addressPrefixes": list(address_space.address_prefixes)},
            "subnets": subnets or None,
            "dhcpOptions": (
                {"dnsServers": self.props.dns_servers} if self.props.dns_servers else None
            ),
            "enableDdosProtection": self.props.enable_ddos_protection,
            "enableVmProtection": self.props.enable_vm_protection,
        })
        return drop_none({
            "type": self.resource_type,
            "apiVersion": self.api_version,
            "name": self.name,
            "location": self.props.location,
            "tags": self.props.tags or None,
            "properties": properties,
        })

    def validate_arm_structure(self) -> ValidationResult:
        return check_virtual_network_structure(self.to_arm_template())
