from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional


class CriticalityLevel(str, Enum):
    BREAKING = "BREAKING"
    DANGEROUS = "DANGEROUS"
    NON_BREAKING = "NON_BREAKING"


class ChangeType(str, Enum):
    # schema roots
    SCHEMA_QUERY_TYPE_CHANGED = "SCHEMA_QUERY_TYPE_CHANGED"
    SCHEMA_MUTATION_TYPE_CHANGED = "SCHEMA_MUTATION_TYPE_CHANGED"
    SCHEMA_SUBSCRIPTION_TYPE_CHANGED = "SCHEMA_SUBSCRIPTION_TYPE_CHANGED"

    # types
    TYPE_ADDED = "TYPE_ADDED"
    TYPE_REMOVED = "TYPE_REMOVED"
    TYPE_KIND_CHANGED = "TYPE_KIND_CHANGED"
    TYPE_DESCRIPTION_CHANGED = "TYPE_DESCRIPTION_CHANGED"

    # object / interface fields
    FIELD_ADDED = "FIELD_ADDED"
    FIELD_REMOVED = "FIELD_REMOVED"
    FIELD_TYPE_CHANGED = "FIELD_TYPE_CHANGED"
    FIELD_DESCRIPTION_CHANGED = "FIELD_DESCRIPTION_CHANGED"
    FIELD_DEPRECATION_ADDED = "FIELD_DEPRECATION_ADDED"
    FIELD_DEPRECATION_REMOVED = "FIELD_DEPRECATION_REMOVED"
    FIELD_DEPRECATION_REASON_CHANGED = "FIELD_DEPRECATION_REASON_CHANGED"

    # arguments
    FIELD_ARGUMENT_ADDED = "FIELD_ARGUMENT_ADDED"
    FIELD_ARGUMENT_REMOVED = "FIELD_ARGUMENT_REMOVED"
    FIELD_ARGUMENT_TYPE_CHANGED = "FIELD_ARGUMENT_TYPE_CHANGED"
    FIELD_ARGUMENT_DEFAULT_CHANGED = "FIELD_ARGUMENT_DEFAULT_CHANGED"
    FIELD_ARGUMENT_DESCRIPTION_CHANGED = "FIELD_ARGUMENT_DESCRIPTION_CHANGED"

    # input objects
    INPUT_FIELD_ADDED = "INPUT_FIELD_ADDED"
    INPUT_FIELD_REMOVED = "INPUT_FIELD_REMOVED"
    INPUT_FIELD_TYPE_CHANGED = "INPUT_FIELD_TYPE_CHANGED"
    INPUT_FIELD_DEFAULT_VALUE_CHANGED = "INPUT_FIELD_DEFAULT_VALUE_CHANGED"
    INPUT_FIELD_DESCRIPTION_CHANGED = "INPUT_FIELD_DESCRIPTION_CHANGED"

    # enums
    ENUM_VALUE_ADDED = "ENUM_VALUE_ADDED"
    ENUM_VALUE_REMOVED = "ENUM_VALUE_REMOVED"
    ENUM_VALUE_DESCRIPTION_CHANGED = "ENUM_VALUE_DESCRIPTION_CHANGED"
    ENUM_VALUE_DEPRECATION_ADDED = "ENUM_VALUE_DEPRECATION_ADDED"
    ENUM_VALUE_DEPRECATION_REMOVED = "ENUM_VALUE_DEPRECATION_REMOVED"

    # unions
    UNION_MEMBER_ADDED = "UNION_MEMBER_ADDED"
    UNION_MEMBER_REMOVED = "UNION_MEMBER_REMOVED"

    # implemented interfaces (object and interface types)
    OBJECT_TYPE_INTERFACE_ADDED = "OBJECT_TYPE_INTERFACE_ADDED"
    OBJECT_TYPE_INTERFACE_REMOVED = "OBJECT_TYPE_INTERFACE_REMOVED"

    # directives
    DIRECTIVE_ADDED = "DIRECTIVE_ADDED"
    DIRECTIVE_REMOVED = "DIRECTIVE_REMOVED"
    DIRECTIVE_LOCATION_ADDED = "DIRECTIVE_LOCATION_ADDED"
    DIRECTIVE_LOCATION_REMOVED = "DIRECTIVE_LOCATION_REMOVED"
    DIRECTIVE_ARGUMENT_ADDED = "DIRECTIVE_ARGUMENT_ADDED"
    DIRECTIVE_ARGUMENT_REMOVED = "DIRECTIVE_ARGUMENT_REMOVED"


# the subject of these changes only exists in the old schema
_REMOVALS = frozenset({
    ChangeType.TYPE_REMOVED,
    ChangeType.FIELD_REMOVED,
    ChangeType.FIELD_ARGUMENT_REMOVED,
    ChangeType.INPUT_FIELD_REMOVED,
    ChangeType.ENUM_VALUE_REMOVED,
    ChangeType.UNION_MEMBER_REMOVED,
    ChangeType.OBJECT_TYPE_INTERFACE_REMOVED,
    ChangeType.DIRECTIVE_REMOVED,
    ChangeType.DIRECTIVE_LOCATION_REMOVED,
    ChangeType.DIRECTIVE_ARGUMENT_REMOVED,
})


@dataclass(frozen=True)
class Criticality:
    level: CriticalityLevel
    reason: Optional[str] = None


@dataclass(frozen=True)
class Change:
    type: ChangeType
    message: str
    criticality: Criticality
    path: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None

    @property
    def level(self) -> CriticalityLevel:
        return self.criticality.level

    @property
    def is_breaking(self) -> bool:
        return self.criticality.level == CriticalityLevel.BREAKING

    @property
    def is_removal(self) -> bool:
        return self.type in _REMOVALS

    def with_level(self, level: CriticalityLevel, reason: Optional[str] = None) -> "Change":
        return replace(
            self,
            criticality=Criticality(level=level, reason=reason or self.criticality.reason),
        )


def breaking(reason: Optional[str] = None) -> Criticality:
    return Criticality(level=CriticalityLevel.BREAKING, reason=reason)


def dangerous(reason: Optional[str] = None) -> Criticality:
    return Criticality(level=CriticalityLevel.DANGEROUS, reason=reason)


def safe(reason: Optional[str] = None) -> Criticality:
    return Criticality(level=CriticalityLevel.NON_BREAKING, reason=reason)
