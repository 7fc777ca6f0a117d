"""Tests for the network security group resource."""

from __future__ import annotations

from typing import Any

import pytest

from atakora.resources import (
    ArmNetworkSecurityGroup,
    NetworkSecurityGroupProps,
    SecurityRule,
    SecurityRuleAccess,
    SecurityRuleDirection,
    SecurityRuleProtocol,
)
from atakora.resources.network_security_group import check_nsg_structure
from atakora.validation import ConstructValidationError, ValidationError


def _rule(**overrides: Any) -> SecurityRule:
    values: dict[str, Any] = {
        "name": "AllowHTTPS",
        "priority": 100,
        "protocol": SecurityRuleProtocol.tcp,
        "access": SecurityRuleAccess.allow,
        "direction": SecurityRuleDirection.inbound,
        "source_port_range": "*",
        "destination_port_range": "443",
        "source_address_prefix": "Internet",
        "destination_address_prefix": "VirtualNetwork",
    }
    values.update(overrides)
    return SecurityRule(**values)


def _props(*rules: SecurityRule, **overrides: Any) -> NetworkSecurityGroupProps:
    values: dict[str, Any] = {
        "network_security_group_name": "nsg-web-01",
        "location": "eastus",
        "security_rules": list(rules),
    }
    values.update(overrides)
    return NetworkSecurityGroupProps(**values)


class TestConstruction:
    def test_valid(self) -> None:
        nsg = ArmNetworkSecurityGroup(_props(_rule(), _rule(name="AllowHTTP", priority=110)))
        assert nsg.name == "nsg-web-01"
        assert nsg.resource_id.endswith(
            "/providers/Microsoft.Network/networkSecurityGroups/nsg-web-01"
        )

    def test_empty_name(self) -> None:
        with pytest.raises(ConstructValidationError) as excinfo:
            ArmNetworkSecurityGroup(_props(network_security_group_name=""))
        assert excinfo.value.message == "Network security group name cannot be empty"
        assert excinfo.value.property_path == "name"

    def test_name_too_long(self) -> None:
        with pytest.raises(ConstructValidationError, match="too long"):
            ArmNetworkSecurityGroup(_props(network_security_group_name="n" * 81))

    def test_empty_location(self) -> None:
        with pytest.raises(ConstructValidationError) as excinfo:
            ArmNetworkSecurityGroup(_props(location=""))
        assert excinfo.value.message == "Location cannot be empty"

    def test_duplicate_priorities(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            ArmNetworkSecurityGroup(_props(_rule(name="A"), _rule(name="B")))
        assert excinfo.value.code == "SEC001"
        assert excinfo.value.message == (
            "NSG rule priority conflict: rules A and B both have priority 100"
        )


class TestSecurityRuleValidation:
    def test_empty_rule_name(self) -> None:
        with pytest.raises(ConstructValidationError) as excinfo:
            ArmNetworkSecurityGroup(_props(_rule(name="")))
        assert excinfo.value.message == "Security rule at index 0: name cannot be empty"
        assert excinfo.value.property_path == "securityRules[0].name"

    def test_description_too_long(self) -> None:
        with pytest.raises(ConstructValidationError, match="description too long"):
            ArmNetworkSecurityGroup(_props(_rule(description="d" * 141)))

    @pytest.mark.parametrize("priority", [99, 4097])
    def test_priority_out_of_range(self, priority: int) -> None:
        with pytest.raises(ConstructValidationError) as excinfo:
            ArmNetworkSecurityGroup(_props(_rule(priority=priority)))
        assert excinfo.value.message == "Security rule 'AllowHTTPS': priority out of range"

    def test_missing_source_port(self) -> None:
        with pytest.raises(ConstructValidationError, match="missing source port specification"):
            ArmNetworkSecurityGroup(_props(_rule(source_port_range=None)))

    def test_port_ranges_list_accepted(self) -> None:
        rule = _rule(destination_port_range=None, destination_port_ranges=["80", "443"])
        ArmNetworkSecurityGroup(_props(rule))

    def test_invalid_destination_port(self) -> None:
        with pytest.raises(ConstructValidationError) as excinfo:
            ArmNetworkSecurityGroup(_props(_rule(destination_port_range="80,443")))
        assert excinfo.value.message == "Security rule 'AllowHTTPS': invalid destination port range"
        assert excinfo.value.property_path == "securityRules[0].destinationPortRange"

    def test_missing_source_address(self) -> None:
        with pytest.raises(ConstructValidationError, match="missing source address"):
            ArmNetworkSecurityGroup(_props(_rule(source_address_prefix=None)))

    def test_missing_protocol(self) -> None:
        with pytest.raises(ConstructValidationError, match="missing protocol"):
            ArmNetworkSecurityGroup(_props(_rule(protocol=None)))

    def test_missing_direction(self) -> None:
        with pytest.raises(ConstructValidationError, match="missing direction"):
            ArmNetworkSecurityGroup(_props(_rule(direction=None)))

    def test_error_text_includes_suggestion(self) -> None:
        with pytest.raises(ConstructValidationError) as excinfo:
            ArmNetworkSecurityGroup(_props(_rule(access=None)))
        assert "Suggestion: Specify access" in str(excinfo.value)


class TestArmTemplate:
    def test_rules_wrapped_in_properties(self) -> None:
        template = ArmNetworkSecurityGroup(_props(_rule(), tags={"env": "dev"})).to_arm_template()
        assert template["type"] == "Microsoft.Network/networkSecurityGroups"
        assert template["apiVersion"] == "2024-07-01"
        assert template["tags"] == {"env": "dev"}
        rule = template["properties"]["securityRules"][0]
        assert rule["name"] == "AllowHTTPS"
        assert rule["properties"]["priority"] == 100
        assert rule["properties"]["protocol"] == "Tcp"
        assert "destinationPortRanges" not in rule["properties"]

    def test_no_rules_no_properties(self) -> None:
        template = ArmNetworkSecurityGroup(_props()).to_arm_template()
        assert "properties" not in template
        assert "tags" not in template

    def test_generated_structure_is_valid(self) -> None:
        nsg = ArmNetworkSecurityGroup(_props(_rule()))
        assert nsg.validate_arm_structure().issues == ()


class TestCheckNsgStructure:
    def test_missing_wrapper(self) -> None:
        template = {"name": "nsg", "properties": {"securityRules": [{"name": "R", "priority": 100}]}}
        result = check_nsg_structure(template)
        assert result.error_count == 1
        assert result.issues[0].message == "Security rule at index 0 missing properties wrapper"
        assert result.issues[0].resource_id == "nsg"

    def test_priority_at_root(self) -> None:
        rule = {"name": "R", "priority": 100, "properties": {"protocol": "Tcp"}}
        result = check_nsg_structure({"properties": {"securityRules": [rule]}})
        assert result.issues[0].message == "Security rule R has priority at wrong nesting level"

    def test_all_inbound_ports_warning(self) -> None:
        rule = _rule(destination_port_range="*")
        result = ArmNetworkSecurityGroup(_props(rule)).validate_arm_structure()
        assert result.is_valid
        assert result.warning_count == 1
        assert "allows all inbound ports" in result.issues[0].message

    def test_outbound_wildcard_not_flagged(self) -> None:
        rule = _rule(destination_port_range="*", direction=SecurityRuleDirection.outbound)
        assert ArmNetworkSecurityGroup(_props(rule)).validate_arm_structure().issues == ()

    def test_icmp_with_ports_warning(self) -> None:
        rule = _rule(protocol=SecurityRuleProtocol.icmp)
        result = ArmNetworkSecurityGroup(_props(rule)).validate_arm_structure()
        assert result.warning_count == 1
        assert "ICMP" in result.issues[0].message


class TestMalformedNsgStructure:
    def test_properties_not_object(self) -> None:
        result = check_nsg_structure({"name": "nsg", "properties": "x"})
        assert [i.message for i in result.issues] == [
            "Network security group properties must be an object"
        ]
        assert result.issues[0].details == "Got str"

    def test_rules_not_array(self) -> None:
        result = check_nsg_structure({"properties": {"securityRules": {"name": "R"}}})
        assert [i.message for i in result.issues] == ["securityRules must be an array"]

    def test_rule_not_object(self) -> None:
        result = check_nsg_structure({"properties": {"securityRules": ["R"]}})
        assert [i.message for i in result.issues] == ["Security rule at index 0 must be an object"]

    def test_rule_properties_not_object(self) -> None:
        rule = {"name": "R", "properties": ["Tcp"]}
        result = check_nsg_structure({"properties": {"securityRules": [rule]}})
        assert result.issues[0].message == "Security rule R properties must be an object"
        assert result.issues[0].property_path == "properties.securityRules[0].properties"

    def test_non_string_name(self) -> None:
        result = check_nsg_structure({"name": 42, "properties": "x"})
        assert result.issues[0].resource_id == "42"
