"""Mapping of free-text contact fields onto person attribute types.

The registry exposes an extensible list of person attribute types. Contact and
identity fields from the intake form are matched to those types by keyword
containment in the type's display name, driven by the ATTRIBUTE_RULES table.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from patient_intake.models.attributes import AttributeAssignment, PersonAttributeType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributeRule:
    """Maps one RegistrationInput field to attribute types by keyword.

    Attributes:
        field: RegistrationInput field name supplying the value
        keywords: Lower-case keywords; any one contained in a type's display matches
    """

    field: str
    keywords: tuple[str, ...]


# Evaluated in order; each rule contributes at most one assignment
ATTRIBUTE_RULES: tuple[AttributeRule, ...] = (
    AttributeRule(field="telephone_residence", keywords=("phone", "telephone")),
    AttributeRule(field="telephone_mobile", keywords=("mobile",)),
    AttributeRule(field="nic_no", keywords=("nic", "identity")),
)


def match_attribute_type(
    attribute_types: Sequence[PersonAttributeType],
    keywords: Sequence[str],
) -> Optional[PersonAttributeType]:
    """Find the first attribute type whose display name contains any keyword.

    Matching is case-insensitive substring containment. Ties are broken by
    list order: the earliest matching entry of the fetched schema wins.

    Args:
        attribute_types: Attribute types in the order the registry returned them
        keywords: Keywords to look for

    Returns:
        The matching attribute type, or None
    """
    lowered = [keyword.lower() for keyword in keywords]
    for attribute_type in attribute_types:
        display = attribute_type.display.lower()
        if any(keyword in display for keyword in lowered):
            return attribute_type
    return None


def resolve_attributes(
    attribute_types: Sequence[PersonAttributeType],
    values: Mapping[str, Optional[str]],
    rules: Sequence[AttributeRule] = ATTRIBUTE_RULES,
) -> list[AttributeAssignment]:
    """Build attribute assignments for the non-empty fields in values.

    A field with a value but no matching attribute type is skipped; this is not
    an error. An empty result means the submission carries no attributes.

    Args:
        attribute_types: Fetched person attribute types
        values: Field name to value mapping (e.g. from RegistrationInput)
        rules: Rule table to evaluate, defaults to ATTRIBUTE_RULES

    Returns:
        Assignments in rule order

    Example:
        >>> types = [PersonAttributeType(uuid="a1", display="Mobile Number")]
        >>> resolve_attributes(types, {"telephone_mobile": "0771234567"})
        [AttributeAssignment(attribute_type='a1', value='0771234567')]
    """
    assignments: list[AttributeAssignment] = []

    for rule in rules:
        value = values.get(rule.field)
        if not value:
            continue

        attribute_type = match_attribute_type(attribute_types, rule.keywords)
        if attribute_type is None:
            logger.debug(
                f"No attribute type matches {rule.field} (keywords: {', '.join(rule.keywords)}); "
                f"field omitted"
            )
            continue

        assignments.append(
            AttributeAssignment(attribute_type=attribute_type.uuid, value=value)
        )
        logger.debug(f"Resolved {rule.field} to attribute type '{attribute_type.display}'")

    return assignments
