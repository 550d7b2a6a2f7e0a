"""Person attribute data models.

Person attribute types are server-defined field descriptors. The set is fetched
once per session and is immutable afterwards; assignments are rebuilt for every
submission attempt.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class PersonAttributeType:
    """Registry person attribute type definition.

    Attributes:
        uuid: Opaque registry identifier
        display: Display name used for keyword matching
        format: Value format (e.g. java.lang.String)
    """

    uuid: str
    display: str
    format: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PersonAttributeType":
        """Build from a registry representation ({uuid, display, format})."""
        return cls(
            uuid=str(data["uuid"]),
            display=str(data.get("display") or ""),
            format=data.get("format"),
        )


@dataclass(frozen=True)
class AttributeAssignment:
    """Value assigned to a person attribute type for one submission."""

    attribute_type: str
    value: str

    def to_payload(self) -> dict[str, str]:
        return {"attributeType": self.attribute_type, "value": self.value}
