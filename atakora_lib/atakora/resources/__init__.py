"""ARM resources with construction-time and structural validation."""

from typing import Any, Callable

from atakora.resources.network_security_group import (
    ArmNetworkSecurityGroup,
    NetworkSecurityGroupProps,
    SecurityRule,
    SecurityRuleAccess,
    SecurityRuleDirection,
    SecurityRuleProtocol,
    check_nsg_structure,
)
from atakora.resources.sql_server import (
    ArmSqlServer,
    PublicNetworkAccess,
    SqlServerProps,
    SqlServerVersion,
    check_sql_server_structure,
)
from atakora.resources.subnet import (
    ArmSubnet,
    Delegation,
    ServiceEndpoint,
    SubnetProps,
    check_subnet_structure,
)
from atakora.resources.virtual_network import (
    AddressSpace,
    ArmVirtualNetwork,
    InlineSubnet,
    VirtualNetworkProps,
    check_virtual_network_structure,
)
from atakora.validation.models import ValidationResult

# ARM resource type -> structural check over the resource's template dict
STRUCTURE_CHECKS: dict[str, Callable[[dict[str, Any]], ValidationResult]] = {
    ArmNetworkSecurityGroup.resource_type: check_nsg_structure,
    ArmSqlServer.resource_type: check_sql_server_structure,
    ArmSubnet.resource_type: check_subnet_structure,
    ArmVirtualNetwork.resource_type: check_virtual_network_structure,
}

__all__ = [
    "AddressSpace",
    "ArmNetworkSecurityGroup",
    "ArmSqlServer",
    "ArmSubnet",
    "ArmVirtualNetwork",
    "Delegation",
    "InlineSubnet",
    "NetworkSecurityGroupProps",
    "PublicNetworkAccess",
    "STRUCTURE_CHECKS",
    "SecurityRule",
    "SecurityRuleAccess",
    "SecurityRuleDirection",
    "SecurityRuleProtocol",
    "ServiceEndpoint",
    "SqlServerProps",
    "SqlServerVersion",
    "SubnetProps",
    "VirtualNetworkProps",
]
