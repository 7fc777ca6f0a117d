"""Azure SQL logical server (Microsoft.Sql/servers)."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from atakora.resources.base import ArmResource, drop_none, template_name
from atakora.validation.error_catalog import get_error_definition
from atakora.validation.models import (
    ConstructValidationError,
    ValidationResult,
    ValidationResultBuilder,
)
from atakora.validation.resource_validator import ResourceValidator

SERVER_NAME_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?\Z")
SERVER_NAME_MAX_LENGTH = 63
MIN_PASSWORD_LENGTH = 8

RESERVED_LOGINS = frozenset({
    "admin",
    "administrator",
    "sa",
    "root",
    "dbmanager",
    "loginmanager",
    "dbo",
    "guest",
    "public",
})

SUPPORTED_TLS_VERSIONS = ("1.0", "1.1", "1.2", "1.3")


class SqlServerVersion(str, Enum):
    v12_0 = "12.0"


class PublicNetworkAccess(str, Enum):
    enabled = "Enabled"
    disabled = "Disabled"


class SqlServerProps(BaseModel):
    server_name: str = ""
    location: str = ""
    administrator_login: str = ""
    administrator_login_password: str = Field(default="", repr=False)
    version: SqlServerVersion = SqlServerVersion.v12_0
    public_network_access: PublicNetworkAccess | None = None
    minimal_tls_version: str | None = None
    tags: dict[str, str] = Field(default_factory=dict)


def check_sql_server_structure(template: dict[str, Any]) -> ValidationResult:
    """Deployment-time checks on a SQL server in ARM form."""
    builder = ValidationResultBuilder()
    name = template_name(template)
    properties = template.get("properties") or {}

    if not isinstance(properties, dict):
        builder.add_error(
            "SQL server properties must be an object",
            f"Got {type(properties).__name__}",
            "Wrap the server settings in a properties object",
            "properties",
            resource_id=name,
        )
        return builder.build()

    if properties.get("publicNetworkAccess") == PublicNetworkAccess.disabled.value:
        arm004 = get_error_definition("ARM004")
        builder.add_error(
            f"{arm004.code}: {arm004.message}",
            arm004.description,
            arm004.suggestion,
            "properties.publicNetworkAccess",
            resource_id=name,
        )

    tls = properties.get("minimalTlsVersion")
    if tls is not None and tls not in SUPPORTED_TLS_VERSIONS:
        builder.add_error(
            f"Unsupported minimal TLS version '{tls}'",
            f"Supported versions: {', '.join(SUPPORTED_TLS_VERSIONS)}",
            "Set minimalTlsVersion to '1.2'",
            "properties.minimalTlsVersion",
            resource_id=name,
        )
    elif tls in ("1.0", "1.1"):
        builder.add_warning(
            f"SQL server {name} allows TLS {tls}",
            "TLS versions below 1.2 are deprecated",
            "Set minimalTlsVersion to '1.2'",
            "properties.minimalTlsVersion",
            resource_id=name,
        )
    elif tls is None:
        builder.add_info(
            f"SQL server {name} does not pin a minimal TLS version",
            None,
            "Set minimalTlsVersion to '1.2'",
            "properties.minimalTlsVersion",
            resource_id=name,
        )

    return builder.build()


class ArmSqlServer(ArmResource[SqlServerProps]):
    """SQL logical server with name and administrator credential checks."""

    resource_type = "Microsoft.Sql/servers"
    api_version = "2021-11-01"

    @property
    def name(self) -> str:
        return self.props.server_name

    def validate_props(self, props: SqlServerProps) -> None:
        name = props.server_name
        if not name or not name.strip():
            raise ConstructValidationError(
                "SQL Server name cannot be empty",
                "Server names are required and form part of the server's DNS name",
                "Provide a valid server name",
                "serverName",
            )

        if len(name) > SERVER_NAME_MAX_LENGTH:
            raise ConstructValidationError(
                f"SQL Server name must be 1-{SERVER_NAME_MAX_LENGTH} characters",
                f"Name '{name}' has {len(name)} characters",
                f"Shorten the name to {SERVER_NAME_MAX_LENGTH} characters or less",
                "serverName",
            )

        if not ResourceValidator.validate_pattern(name, "serverName", SERVER_NAME_RE).is_valid:
            raise ConstructValidationError(
                f"SQL Server name must match pattern {SERVER_NAME_RE.pattern}",
                f"Name '{name}' must be lowercase letters, numbers and hyphens, "
                "and cannot start or end with a hyphen",
                "Use only lowercase letters, digits and inner hyphens",
                "serverName",
            )

        ResourceValidator.validate_location(props.location).raise_for_errors()

        login = props.administrator_login
        if not login or not login.strip():
            raise ConstructValidationError(
                "Administrator login cannot be empty",
                "SQL authentication requires an administrator login",
                "Provide an administrator login name",
                "administratorLogin",
            )

        if login.lower() in RESERVED_LOGINS:
            raise ConstructValidationError(
                "Administrator login cannot be a reserved name",
                f"'{login}' is reserved by SQL Server",
                f"Avoid: {', '.join(sorted(RESERVED_LOGINS))}",
                "administratorLogin",
            )

        if len(props.administrator_login_password) < MIN_PASSWORD_LENGTH:
            raise ConstructValidationError(
                f"Administrator login password must be at least {MIN_PASSWORD_LENGTH} characters",
                None,
                "Use a longer password, ideally from a secret store",
                "administratorLoginPassword",
            )

        ResourceValidator.validate_tags(props.tags).raise_for_errors()

    def to_arm_template(self) -> dict[str, Any]:
        properties = drop_none({
            "administratorLogin": self.props.administrator_login,
            "administratorLoginPassword": self.props.administrator_login_password,
            "version": self.props.version.value,
            "publicNetworkAccess": (
                self.props.public_network_access.value
                if self.props.public_network_access is not None
                else None
            ),
            "minimalTlsVersion": self.props.minimal_tls_version,
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
        return check_sql_server_structure(self.to_arm_template())
