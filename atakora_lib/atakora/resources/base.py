"""Base class for ARM resources that validate their own properties."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from atakora.validation.models import ValidationResult

logger = logging.getLogger(__name__)

PropsT = TypeVar("PropsT", bound=BaseModel)


class ArmResource(ABC, Generic[PropsT]):
    """An ARM resource built from a props model.

    ``validate_props`` runs on construction and raises when the resource
    cannot be represented. ``validate_arm_structure`` inspects the generated
    template afterwards and only reports.
    """

    resource_type: str
    api_version: str

    def __init__(self, props: PropsT) -> None:
        self.validate_props(props)
        self.props = props
        logger.debug("Constructed %s '%s'", self.resource_type, self.name)

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    def resource_id(self) -> str:
        return (
            "/subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}"
            f"/providers/{self.resource_type}/{self.name}"
        )

    @abstractmethod
    def validate_props(self, props: PropsT) -> None:
        ...

    @abstractmethod
    def to_arm_template(self) -> dict[str, Any]:
        ...

    @abstractmethod
    def validate_arm_structure(self) -> ValidationResult:
        ...


def drop_none(values: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value is None, mirroring how ARM omits unset fields."""
    return {key: value for key, value in values.items() if value is not None}


def template_name(template: dict[str, Any]) -> str | None:
    """The resource ``name`` of a template dict as a string, if present."""
    name = template.get("name")
    return None if name is None else str(name)
