"""Template-level checks for Network Security Group rules.

Works on synthesized ARM template dicts, so it also catches problems in
templates that were not produced by the resource classes.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

from atakora.validation.cidr import is_valid_cidr, is_valid_port_range
from atakora.validation.error_catalog import get_error_definition, interpolate
from atakora.validation.models import ValidationResult, ValidationResultBuilder

NSG_RESOURCE_TYPE = "Microsoft.Network/networkSecurityGroups"

VALID_PROTOCOLS = ("Tcp", "Udp", "Icmp", "Esp", "Ah", "*")

MIN_PRIORITY = 100
MAX_PRIORITY = 4096

IP_RE = re.compile(r"[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}")

# https://learn.microsoft.com/en-us/azure/virtual-network/service-tags-overview
VALID_SERVICE_TAGS = frozenset({
    "ActionGroup",
    "ApiManagement",
    "AppConfiguration",
    "AppService",
    "AppServiceManagement",
    "AzureActiveDirectory",
    "AzureActiveDirectoryDomainServices",
    "AzureArcInfrastructure",
    "AzureAttestation",
    "AzureBackup",
    "AzureBotService",
    "AzureCloud",
    "AzureCognitiveSearch",
    "AzureConnectors",
    "AzureContainerRegistry",
    "AzureCosmosDB",
    "AzureDatabricks",
    "AzureDataExplorerManagement",
    "AzureDataLake",
    "AzureDevOps",
    "AzureDevSpaces",
    "AzureDigitalTwins",
    "AzureEventGrid",
    "AzureFrontDoor.Backend",
    "AzureFrontDoor.Frontend",
    "AzureHealthcareAPIs",
    "AzureInformationProtection",
    "AzureIoTHub",
    "AzureKeyVault",
    "AzureLoadBalancer",
    "AzureMachineLearning",
    "AzureMonitor",
    "AzureOpenDatasets",
    "AzurePlatformDNS",
    "AzurePlatformIMDS",
    "AzurePlatformLKM",
    "AzureResourceManager",
    "AzureSecurityCenter",
    "AzureSignalR",
    "AzureSiteRecovery",
    "AzureSphere",
    "AzureStorage",
    "AzureTrafficManager",
    "AzureUpdateDelivery",
    "BatchNodeManagement",
    "ChaosStudio",
    "CognitiveServicesManagement",
    "DataFactory",
    "Dynamics365ForMarketingEmail",
    "EventHub",
    "GatewayManager",
    "GuestAndHybridManagement",
    "HDInsight",
    "Internet",
    "LogicApps",
    "M365ManagementActivityApi",
    "MicrosoftCloudAppSecurity",
    "MicrosoftContainerRegistry",
    "PowerBI",
    "PowerPlatformInfra",
    "PowerPlatformPlex",
    "PowerQueryOnline",
    "ServiceBus",
    "ServiceFabric",
    "Sql",
    "SqlManagement",
    "Storage",
    "StorageSyncService",
    "VirtualNetwork",
    "WindowsVirtualDesktop",
})

# Common mistakes
SERVICE_TAG_HINTS = {
    "AzureBastion": "VirtualNetwork (Bastion traffic comes from VNet)",
    "Bastion": "VirtualNetwork",
    "AzureBastionSubnet": "VirtualNetwork",
}


def is_valid_address_prefix(prefix: str, extra_service_tags: Iterable[str] = ()) -> bool:
    """Accept ``*``, CIDR, a bare IPv4 address, or a known service tag."""
    if prefix == "*":
        return True
    if is_valid_cidr(prefix) or IP_RE.fullmatch(prefix):
        return True
    return prefix in VALID_SERVICE_TAGS or prefix in set(extra_service_tags)


def suggest_service_tag(invalid_tag: str) -> str:
    hint = SERVICE_TAG_HINTS.get(invalid_tag)
    if hint:
        return f"Did you mean '{hint}'?"
    return "Use a valid service tag, CIDR notation, or IP address"


def _check_port_ranges(
    builder: ValidationResultBuilder,
    nsg_name: str,
    rule_name: str,
    path: str,
    props: dict[str, Any],
) -> None:
    port_range = props.get("destinationPortRange")
    port_ranges = props.get("destinationPortRanges")

    if isinstance(port_range, str) and port_range:
        if "," in port_range:
            quoted = "', '".join(p.strip() for p in port_range.split(","))
            builder.add_error(
                f"Security rule '{rule_name}' has invalid port range: '{port_range}'",
                "Use destinationPortRanges array for multiple ports",
                f"Change to destinationPortRanges: ['{quoted}']",
                f"{path}.destinationPortRange",
                resource_id=nsg_name,
            )
        elif not is_valid_port_range(port_range):
            builder.add_error(
                f"Security rule '{rule_name}' has invalid port range format: '{port_range}'",
                "Ports must be within 0-65535 and ranges must be ascending",
                "Use single port (443), range (1-65535), or * for all",
                f"{path}.destinationPortRange",
                resource_id=nsg_name,
            )

    if isinstance(port_ranges, list):
        for index, port in enumerate(port_ranges):
            if not isinstance(port, str) or not is_valid_port_range(port):
                builder.add_error(
                    f"Security rule '{rule_name}' has invalid port in destinationPortRanges: '{port}'",
                    None,
                    "Use single port (443), range (1-65535), or * for all",
                    f"{path}.destinationPortRanges[{index}]",
                    resource_id=nsg_name,
                )


def _check_address_prefixes(
    builder: ValidationResultBuilder,
    nsg_name: str,
    rule_name: str,
    path: str,
    props: dict[str, Any],
    extra_service_tags: Iterable[str],
) -> None:
    for field, label in (
        ("sourceAddressPrefix", "source"),
        ("destinationAddressPrefix", "destination"),
    ):
        prefix = props.get(field)
        if isinstance(prefix, str) and prefix and not is_valid_address_prefix(
            prefix, extra_service_tags
        ):
            builder.add_error(
                f"Security rule '{rule_name}' has invalid {label} address prefix: '{prefix}'",
                None,
                suggest_service_tag(prefix),
                f"{path}.{field}",
                resource_id=nsg_name,
            )


def _check_protocol(
    builder: ValidationResultBuilder,
    nsg_name: str,
    rule_name: str,
    path: str,
    props: dict[str, Any],
) -> None:
    protocol = props.get("protocol")
    if protocol and protocol not in VALID_PROTOCOLS:
        builder.add_error(
            f"Security rule '{rule_name}' has invalid protocol: '{protocol}'",
            None,
            f"Valid protocols: {', '.join(VALID_PROTOCOLS)}",
            f"{path}.protocol",
            resource_id=nsg_name,
        )


def _check_priority(
    builder: ValidationResultBuilder,
    nsg_name: str,
    rule_name: str,
    path: str,
    props: dict[str, Any],
) -> None:
    priority = props.get("priority")
    if priority is None:
        return
    if not isinstance(priority, int) or priority < MIN_PRIORITY or priority > MAX_PRIORITY:
        builder.add_error(
            f"Security rule '{rule_name}' has invalid priority: {priority}",
            None,
            f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}",
            f"{path}.priority",
            resource_id=nsg_name,
        )


def _check_unique_priorities(
    builder: ValidationResultBuilder,
    nsg_name: str,
    ranked: list[tuple[int, str, int]],
) -> None:
    """Report SEC001 for each rule reusing a priority, against the first holder."""
    sec001 = get_error_definition("SEC001")
    first_holder: dict[int, str] = {}
    for index, rule_name, priority in ranked:
        if priority not in first_holder:
            first_holder[priority] = rule_name
            continue
        context = {"rule1": first_holder[priority], "rule2": rule_name, "priority": priority}
        builder.add_error(
            f"{sec001.code}: {interpolate(sec001.message, context)}",
            sec001.description,
            sec001.suggestion,
            f"properties.securityRules[{index}].properties.priority",
            resource_id=nsg_name,
        )


def check_nsg(nsg: dict[str, Any], extra_service_tags: Iterable[str] = ()) -> ValidationResult:
    """Check every security rule of one NSG resource dict.

    Rules or properties that are not objects are skipped here; the structural
    check for the resource type reports them.
    """
    builder = ValidationResultBuilder()
    nsg_name = str(nsg.get("name", "unknown"))
    properties = nsg.get("properties")
    rules = properties.get("securityRules") if isinstance(properties, dict) else None
    ranked: list[tuple[int, str, int]] = []

    for index, rule in enumerate(rules if isinstance(rules, list) else []):
        if not isinstance(rule, dict):
            continue
        props = rule.get("properties")
        if not isinstance(props, dict):
            continue
        rule_name = str(rule.get("name", f"rule-{index}"))
        path = f"properties.securityRules[{index}].properties"

        _check_port_ranges(builder, nsg_name, rule_name, path, props)
        _check_address_prefixes(builder, nsg_name, rule_name, path, props, extra_service_tags)
        _check_protocol(builder, nsg_name, rule_name, path, props)
        _check_priority(builder, nsg_name, rule_name, path, props)

        priority = props.get("priority")
        if isinstance(priority, int) and MIN_PRIORITY <= priority <= MAX_PRIORITY:
            ranked.append((index, rule_name, priority))

    _check_unique_priorities(builder, nsg_name, ranked)
    return builder.build()


def check_nsg_rules(
    template: dict[str, Any],
    extra_service_tags: Iterable[str] = (),
) -> ValidationResult:
    """Check all NSG resources in a parsed ARM template."""
    builder = ValidationResultBuilder()
    resources = template.get("resources")
    if not isinstance(resources, list):
        return builder.build()

    for resource in resources:
        if isinstance(resource, dict) and resource.get("type") == NSG_RESOURCE_TYPE:
            builder.merge(check_nsg(resource, extra_service_tags))

    return builder.build()
