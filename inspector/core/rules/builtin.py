from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Set

from graphql import (
    GraphQLSchema,
    get_named_type,
    is_input_object_type,
    is_interface_type,
    is_object_type,
    is_union_type,
)

from inspector.core.diff.changes import Change, ChangeType, CriticalityLevel

log = logging.getLogger("inspector.rules")

_DESCRIPTION_CHANGES = {
    ChangeType.TYPE_DESCRIPTION_CHANGED,
    ChangeType.FIELD_DESCRIPTION_CHANGED,
    ChangeType.FIELD_ARGUMENT_DESCRIPTION_CHANGED,
    ChangeType.INPUT_FIELD_DESCRIPTION_CHANGED,
    ChangeType.ENUM_VALUE_DESCRIPTION_CHANGED,
}

_DEPRECATED_REMOVALS = {
    ChangeType.FIELD_REMOVED,
    ChangeType.ENUM_VALUE_REMOVED,
}


def suppress_removal_of_deprecated_field(
    *,
    changes: List[Change],
    old_schema: GraphQLSchema,
    new_schema: GraphQLSchema,
    config: Dict[str, Any],
) -> List[Change]:
    out: List[Change] = []
    for change in changes:
        if (
            change.type in _DEPRECATED_REMOVALS
            and change.is_breaking
            and (change.meta or {}).get("is_deprecated")
        ):
            change = change.with_level(CriticalityLevel.DANGEROUS)
        out.append(change)
    return out


def dangerous_breaking(
    *,
    changes: List[Change],
    old_schema: GraphQLSchema,
    new_schema: GraphQLSchema,
    config: Dict[str, Any],
) -> List[Change]:
    return [c.with_level(CriticalityLevel.DANGEROUS) if c.is_breaking else c for c in changes]


def ignore_description_changes(
    *,
    changes: List[Change],
    old_schema: GraphQLSchema,
    new_schema: GraphQLSchema,
    config: Dict[str, Any],
) -> List[Change]:
    return [c for c in changes if c.type not in _DESCRIPTION_CHANGES]


def safe_unreachable(
    *,
    changes: List[Change],
    old_schema: GraphQLSchema,
    new_schema: GraphQLSchema,
    config: Dict[str, Any],
) -> List[Change]:
    reachable = reachable_types(old_schema)
    out: List[Change] = []
    for change in changes:
        if change.level != CriticalityLevel.NON_BREAKING and change.path and not change.path.startswith("@"):
            type_name = change.path.split(".", 1)[0]
            if type_name not in reachable:
                change = change.with_level(
                    CriticalityLevel.NON_BREAKING,
                    "Unreachable schema",
                )
        out.append(change)
    return out


def consider_usage(
    *,
    changes: List[Change],
    old_schema: GraphQLSchema,
    new_schema: GraphQLSchema,
    config: Dict[str, Any],
) -> List[Change]:
    """
    Downgrade breaking changes to schema parts no client uses.

    ``config["check_usage"]`` receives one ``{"type", "field", "argument"}``
    entry per breaking change and returns a parallel list of booleans
    (True when the coordinate is still in use).
    """
    check_usage = (config or {}).get("check_usage")
    if not callable(check_usage):
        return changes

    candidates = [(i, c) for i, c in enumerate(changes) if c.is_breaking and c.path]
    if not candidates:
        return changes

    coordinates = [_coordinate(c.path) for _, c in candidates]
    used = list(check_usage(coordinates) or [])
    log.debug("consider_usage checked=%s used=%s", len(coordinates), sum(1 for u in used if u))

    out = list(changes)
    for (i, change), in_use in zip(candidates, used):
        if not in_use:
            out[i] = change.with_level(CriticalityLevel.DANGEROUS, "Not used by any known client")
    return out


BUILTIN_RULES = {
    "suppressRemovalOfDeprecatedField": suppress_removal_of_deprecated_field,
    "dangerousBreaking": dangerous_breaking,
    "ignoreDescriptionChanges": ignore_description_changes,
    "safeUnreachable": safe_unreachable,
    "considerUsage": consider_usage,
}


def _coordinate(path: str) -> Dict[str, Optional[str]]:
    parts = path.split(".")
    return {
        "type": parts[0],
        "field": parts[1] if len(parts) > 1 else None,
        "argument": parts[2] if len(parts) > 2 else None,
    }


def reachable_types(schema: GraphQLSchema) -> Set[str]:
    roots = [t for t in (schema.query_type, schema.mutation_type, schema.subscription_type) if t]
    seen: Set[str] = set()
    stack = list(roots)

    while stack:
        t = get_named_type(stack.pop())
        if t is None or t.name in seen:
            continue
        seen.add(t.name)

        if is_object_type(t) or is_interface_type(t):
            for field in t.fields.values():
                stack.append(field.type)
                stack.extend(arg.type for arg in field.args.values())
            stack.extend(t.interfaces)
            if is_interface_type(t):
                stack.extend(schema.get_possible_types(t))
        elif is_union_type(t):
            stack.extend(t.types)
        elif is_input_object_type(t):
            stack.extend(f.type for f in t.fields.values())

    return seen
