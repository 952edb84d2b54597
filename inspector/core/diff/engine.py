"""
Schema difference detection.

``find_changes`` walks two ``GraphQLSchema`` objects and returns one
``Change`` per difference, classified as breaking, dangerous or safe.
``diff_schemas`` additionally passes the list through the configured rules,
in order, so each rule sees the output of the previous one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from graphql import (
    GraphQLArgument,
    GraphQLEnumType,
    GraphQLField,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLUnionType,
    Undefined,
    ast_from_value,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_introspection_type,
    is_list_type,
    is_named_type,
    is_non_null_type,
    is_object_type,
    is_scalar_type,
    is_specified_directive,
    is_specified_scalar_type,
    is_union_type,
    print_ast,
)
from graphql.language import Node

from inspector.core.diff.changes import Change, ChangeType, breaking, dangerous, safe

log = logging.getLogger("inspector.diff")

DEPRECATED_FIELD_REMOVAL_REASON = (
    "Removing a deprecated field is a breaking change. Before removing it, you may want "
    "to look at the field's usage to see the impact of removing the field."
)


def diff_schemas(
    old_schema: GraphQLSchema,
    new_schema: GraphQLSchema,
    rules: Sequence[Any] = (),
    config: Optional[Dict[str, Any]] = None,
) -> List[Change]:
    changes = find_changes(old_schema, new_schema)
    for rule in rules:
        changes = list(
            rule(changes=changes, old_schema=old_schema, new_schema=new_schema, config=config or {})
        )
        log.debug("rule %s -> %s changes", getattr(rule, "__name__", rule), len(changes))
    return changes


def find_changes(old_schema: GraphQLSchema, new_schema: GraphQLSchema) -> List[Change]:
    changes: List[Change] = []
    changes.extend(_schema_roots(old_schema, new_schema))
    changes.extend(_types(old_schema, new_schema))
    changes.extend(_directives(old_schema, new_schema))
    return changes


# ---------------------------------------------------------------------
# Schema roots
# ---------------------------------------------------------------------

def _schema_roots(old: GraphQLSchema, new: GraphQLSchema) -> Iterable[Change]:
    roots = (
        ("query", old.query_type, new.query_type, ChangeType.SCHEMA_QUERY_TYPE_CHANGED),
        ("mutation", old.mutation_type, new.mutation_type, ChangeType.SCHEMA_MUTATION_TYPE_CHANGED),
        ("subscription", old.subscription_type, new.subscription_type, ChangeType.SCHEMA_SUBSCRIPTION_TYPE_CHANGED),
    )
    for label, a, b, change_type in roots:
        a_name = a.name if a else "unknown"
        b_name = b.name if b else "unknown"
        if a_name != b_name:
            yield Change(
                type=change_type,
                message=f"Schema {label} root has changed from '{a_name}' to '{b_name}'",
                criticality=breaking(),
            )


# ---------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------

def _user_types(schema: GraphQLSchema) -> Dict[str, GraphQLNamedType]:
    return {
        name: t
        for name, t in schema.type_map.items()
        if not is_introspection_type(t) and not is_specified_scalar_type(t)
    }


def _kind(t: GraphQLNamedType) -> str:
    if is_object_type(t):
        return "OBJECT"
    if is_interface_type(t):
        return "INTERFACE"
    if is_union_type(t):
        return "UNION"
    if is_enum_type(t):
        return "ENUM"
    if is_input_object_type(t):
        return "INPUT_OBJECT"
    if is_scalar_type(t):
        return "SCALAR"
    return type(t).__name__


def _types(old: GraphQLSchema, new: GraphQLSchema) -> Iterable[Change]:
    old_types = _user_types(old)
    new_types = _user_types(new)

    for name in sorted(set(old_types) | set(new_types)):
        a = old_types.get(name)
        b = new_types.get(name)

        if b is None:
            yield Change(
                type=ChangeType.TYPE_REMOVED,
                message=f"Type '{name}' was removed",
                criticality=breaking(),
                path=name,
            )
            continue

        if a is None:
            yield Change(
                type=ChangeType.TYPE_ADDED,
                message=f"Type '{name}' was added",
                criticality=safe(),
                path=name,
            )
            continue

        if _kind(a) != _kind(b):
            yield Change(
                type=ChangeType.TYPE_KIND_CHANGED,
                message=f"'{name}' kind changed from '{_kind(a)}' to '{_kind(b)}'",
                criticality=breaking(),
                path=name,
            )
            continue

        if (a.description or None) != (b.description or None):
            yield Change(
                type=ChangeType.TYPE_DESCRIPTION_CHANGED,
                message=f"Description '{a.description or ''}' on type '{name}' has changed to '{b.description or ''}'",
                criticality=safe(),
                path=name,
            )

        if isinstance(a, (GraphQLObjectType, GraphQLInterfaceType)):
            yield from _fields(a, b)
            yield from _interfaces(a, b)
        elif isinstance(a, GraphQLUnionType):
            yield from _union_members(a, b)
        elif isinstance(a, GraphQLEnumType):
            yield from _enum_values(a, b)
        elif isinstance(a, GraphQLInputObjectType):
            yield from _input_fields(a, b)


def _interfaces(a: GraphQLNamedType, b: GraphQLNamedType) -> Iterable[Change]:
    # interfaces may implement interfaces too
    kind = "object type" if isinstance(a, GraphQLObjectType) else "interface"
    old_names = [i.name for i in a.interfaces]  # type: ignore[attr-defined]
    new_names = [i.name for i in b.interfaces]  # type: ignore[attr-defined]
    for name in old_names:
        if name not in new_names:
            yield Change(
                type=ChangeType.OBJECT_TYPE_INTERFACE_REMOVED,
                message=f"'{a.name}' {kind} no longer implements '{name}' interface",
                criticality=breaking(),
                path=a.name,
            )
    for name in new_names:
        if name not in old_names:
            yield Change(
                type=ChangeType.OBJECT_TYPE_INTERFACE_ADDED,
                message=f"'{a.name}' {kind} implements '{name}' interface",
                criticality=dangerous(
                    f"Adding an interface to an {kind} may break existing clients "
                    "that were not programming defensively against a new possible type."
                ),
                path=a.name,
            )


def _union_members(a: GraphQLUnionType, b: GraphQLUnionType) -> Iterable[Change]:
    old_names = [t.name for t in a.types]
    new_names = [t.name for t in b.types]
    for name in old_names:
        if name not in new_names:
            yield Change(
                type=ChangeType.UNION_MEMBER_REMOVED,
                message=f"Member '{name}' was removed from Union type '{a.name}'",
                criticality=breaking(),
                path=a.name,
            )
    for name in new_names:
        if name not in old_names:
            yield Change(
                type=ChangeType.UNION_MEMBER_ADDED,
                message=f"Member '{name}' was added to Union type '{a.name}'",
                criticality=dangerous(
                    "Adding a possible type to Unions may break existing clients "
                    "that were not programming defensively against a new possible type."
                ),
                path=a.name,
            )


def _enum_values(a: GraphQLEnumType, b: GraphQLEnumType) -> Iterable[Change]:
    for name, value in a.values.items():
        path = f"{a.name}.{name}"
        other = b.values.get(name)
        if other is None:
            yield Change(
                type=ChangeType.ENUM_VALUE_REMOVED,
                message=f"Enum value '{name}' was removed from enum '{a.name}'",
                criticality=breaking(),
                path=path,
                meta={"is_deprecated": value.deprecation_reason is not None},
            )
            continue
        if (value.description or None) != (other.description or None):
            yield Change(
                type=ChangeType.ENUM_VALUE_DESCRIPTION_CHANGED,
                message=f"Description for enum value '{path}' changed from '{value.description or ''}' to '{other.description or ''}'",
                criticality=safe(),
                path=path,
            )
        if value.deprecation_reason is None and other.deprecation_reason is not None:
            yield Change(
                type=ChangeType.ENUM_VALUE_DEPRECATION_ADDED,
                message=f"Enum value '{path}' was deprecated with reason '{other.deprecation_reason}'",
                criticality=safe(),
                path=path,
            )
        elif value.deprecation_reason is not None and other.deprecation_reason is None:
            yield Change(
                type=ChangeType.ENUM_VALUE_DEPRECATION_REMOVED,
                message=f"Enum value '{path}' is no longer deprecated",
                criticality=safe(),
                path=path,
            )

    for name in b.values:
        if name not in a.values:
            yield Change(
                type=ChangeType.ENUM_VALUE_ADDED,
                message=f"Enum value '{name}' was added to enum '{a.name}'",
                criticality=dangerous(
                    "Adding an enum value may break existing clients that were not "
                    "programming defensively against an added case when querying an enum."
                ),
                path=f"{a.name}.{name}",
            )


# ---------------------------------------------------------------------
# Fields and arguments
# ---------------------------------------------------------------------

def _fields(a: GraphQLNamedType, b: GraphQLNamedType) -> Iterable[Change]:
    kind = "object type" if isinstance(a, GraphQLObjectType) else "interface"
    old_fields: Dict[str, GraphQLField] = a.fields  # type: ignore[attr-defined]
    new_fields: Dict[str, GraphQLField] = b.fields  # type: ignore[attr-defined]

    for name, field in old_fields.items():
        path = f"{a.name}.{name}"
        other = new_fields.get(name)
        if other is None:
            if field.deprecation_reason is not None:
                yield Change(
                    type=ChangeType.FIELD_REMOVED,
                    message=f"Field '{name}' (deprecated) was removed from {kind} '{a.name}'",
                    criticality=breaking(DEPRECATED_FIELD_REMOVAL_REASON),
                    path=path,
                    meta={"type_name": a.name, "field_name": name, "is_deprecated": True},
                )
            else:
                yield Change(
                    type=ChangeType.FIELD_REMOVED,
                    message=f"Field '{name}' was removed from {kind} '{a.name}'",
                    criticality=breaking(
                        "Removing a field is a breaking change. It is preferable to deprecate "
                        "the field before removing it."
                    ),
                    path=path,
                    meta={"type_name": a.name, "field_name": name, "is_deprecated": False},
                )
            continue
        yield from _field(path, field, other)

    for name in new_fields:
        if name not in old_fields:
            yield Change(
                type=ChangeType.FIELD_ADDED,
                message=f"Field '{name}' was added to {kind} '{a.name}'",
                criticality=safe(),
                path=f"{a.name}.{name}",
            )


def _field(path: str, a: GraphQLField, b: GraphQLField) -> Iterable[Change]:
    if (a.description or None) != (b.description or None):
        yield Change(
            type=ChangeType.FIELD_DESCRIPTION_CHANGED,
            message=f"Field '{path}' description changed from '{a.description or ''}' to '{b.description or ''}'",
            criticality=safe(),
            path=path,
        )

    if a.deprecation_reason is None and b.deprecation_reason is not None:
        yield Change(
            type=ChangeType.FIELD_DEPRECATION_ADDED,
            message=f"Field '{path}' is deprecated",
            criticality=safe(),
            path=path,
        )
    elif a.deprecation_reason is not None and b.deprecation_reason is None:
        yield Change(
            type=ChangeType.FIELD_DEPRECATION_REMOVED,
            message=f"Field '{path}' is no longer deprecated",
            criticality=dangerous(),
            path=path,
        )
    elif a.deprecation_reason != b.deprecation_reason:
        yield Change(
            type=ChangeType.FIELD_DEPRECATION_REASON_CHANGED,
            message=f"Deprecation reason on field '{path}' has changed from '{a.deprecation_reason}' to '{b.deprecation_reason}'",
            criticality=safe(),
            path=path,
        )

    old_type, new_type = str(a.type), str(b.type)
    if old_type != new_type:
        is_safe = is_safe_output_change(a.type, b.type)
        yield Change(
            type=ChangeType.FIELD_TYPE_CHANGED,
            message=f"Field '{path}' changed type from '{old_type}' to '{new_type}'",
            criticality=safe() if is_safe else breaking(
                "Changing the type of a field is a breaking change unless the new type is "
                "a non-null version of the old type."
            ),
            path=path,
        )

    yield from _arguments(path, a.args, b.args)


def _arguments(
    field_path: str,
    old_args: Dict[str, GraphQLArgument],
    new_args: Dict[str, GraphQLArgument],
) -> Iterable[Change]:
    for name, arg in old_args.items():
        path = f"{field_path}.{name}"
        other = new_args.get(name)
        if other is None:
            yield Change(
                type=ChangeType.FIELD_ARGUMENT_REMOVED,
                message=f"Argument '{name}: {arg.type}' was removed from field '{field_path}'",
                criticality=breaking(),
                path=path,
            )
            continue

        if (arg.description or None) != (other.description or None):
            yield Change(
                type=ChangeType.FIELD_ARGUMENT_DESCRIPTION_CHANGED,
                message=f"Description for argument '{name}' on field '{field_path}' changed from '{arg.description or ''}' to '{other.description or ''}'",
                criticality=safe(),
                path=path,
            )

        old_type, new_type = str(arg.type), str(other.type)
        if old_type != new_type:
            yield Change(
                type=ChangeType.FIELD_ARGUMENT_TYPE_CHANGED,
                message=f"Type for argument '{name}' on field '{field_path}' changed from '{old_type}' to '{new_type}'",
                criticality=safe() if is_safe_input_change(arg.type, other.type) else breaking(),
                path=path,
            )
        else:
            old_default = format_default(arg)
            new_default = format_default(other)
            if old_default != new_default:
                yield Change(
                    type=ChangeType.FIELD_ARGUMENT_DEFAULT_CHANGED,
                    message=f"Default value for argument '{name}' on field '{field_path}' changed from '{old_default}' to '{new_default}'",
                    criticality=dangerous(
                        "Changing the default value for an argument may change the runtime "
                        "behaviour of a field if it was never provided."
                    ),
                    path=path,
                )

    for name, arg in new_args.items():
        if name in old_args:
            continue
        required = is_required_input(arg)
        yield Change(
            type=ChangeType.FIELD_ARGUMENT_ADDED,
            message=f"Argument '{name}: {arg.type}'{' (with default value)' if has_default(arg) else ''} added to field '{field_path}'",
            criticality=breaking() if required else dangerous(),
            path=f"{field_path}.{name}",
        )


def _input_fields(a: GraphQLInputObjectType, b: GraphQLInputObjectType) -> Iterable[Change]:
    old_fields: Dict[str, GraphQLInputField] = a.fields
    new_fields: Dict[str, GraphQLInputField] = b.fields

    for name, field in old_fields.items():
        path = f"{a.name}.{name}"
        other = new_fields.get(name)
        if other is None:
            yield Change(
                type=ChangeType.INPUT_FIELD_REMOVED,
                message=f"Input field '{name}' was removed from input object type '{a.name}'",
                criticality=breaking(),
                path=path,
            )
            continue

        if (field.description or None) != (other.description or None):
            yield Change(
                type=ChangeType.INPUT_FIELD_DESCRIPTION_CHANGED,
                message=f"Input field '{path}' description changed from '{field.description or ''}' to '{other.description or ''}'",
                criticality=safe(),
                path=path,
            )

        old_type, new_type = str(field.type), str(other.type)
        if old_type != new_type:
            yield Change(
                type=ChangeType.INPUT_FIELD_TYPE_CHANGED,
                message=f"Input field '{path}' changed type from '{old_type}' to '{new_type}'",
                criticality=safe() if is_safe_input_change(field.type, other.type) else breaking(),
                path=path,
            )
        else:
            old_default = format_default(field)
            new_default = format_default(other)
            if old_default != new_default:
                yield Change(
                    type=ChangeType.INPUT_FIELD_DEFAULT_VALUE_CHANGED,
                    message=f"Input field '{path}' default value changed from '{old_default}' to '{new_default}'",
                    criticality=dangerous(),
                    path=path,
                )

    for name, field in new_fields.items():
        if name in old_fields:
            continue
        required = is_required_input(field)
        yield Change(
            type=ChangeType.INPUT_FIELD_ADDED,
            message=f"Input field '{name}' of type '{field.type}' was added to input object type '{a.name}'",
            criticality=breaking(
                "Adding a required input field to an existing input object type is a breaking change "
                "because it will cause existing uses of this input object type to error."
            ) if required else dangerous(),
            path=f"{a.name}.{name}",
        )


# ---------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------

def _directives(old: GraphQLSchema, new: GraphQLSchema) -> Iterable[Change]:
    old_dirs = {d.name: d for d in old.directives if not is_specified_directive(d)}
    new_dirs = {d.name: d for d in new.directives if not is_specified_directive(d)}

    for name in sorted(set(old_dirs) | set(new_dirs)):
        a = old_dirs.get(name)
        b = new_dirs.get(name)
        path = f"@{name}"
        if b is None:
            yield Change(
                type=ChangeType.DIRECTIVE_REMOVED,
                message=f"Directive '{name}' was removed",
                criticality=breaking(),
                path=path,
            )
            continue
        if a is None:
            yield Change(
                type=ChangeType.DIRECTIVE_ADDED,
                message=f"Directive '{name}' was added",
                criticality=safe(),
                path=path,
            )
            continue

        old_locations = [loc.name for loc in a.locations]
        new_locations = [loc.name for loc in b.locations]
        for loc in old_locations:
            if loc not in new_locations:
                yield Change(
                    type=ChangeType.DIRECTIVE_LOCATION_REMOVED,
                    message=f"Location '{loc}' was removed from directive '{name}'",
                    criticality=breaking(),
                    path=path,
                )
        for loc in new_locations:
            if loc not in old_locations:
                yield Change(
                    type=ChangeType.DIRECTIVE_LOCATION_ADDED,
                    message=f"Location '{loc}' was added to directive '{name}'",
                    criticality=safe(),
                    path=path,
                )

        for arg_name in a.args:
            if arg_name not in b.args:
                yield Change(
                    type=ChangeType.DIRECTIVE_ARGUMENT_REMOVED,
                    message=f"Argument '{arg_name}' was removed from directive '{name}'",
                    criticality=breaking(),
                    path=f"{path}.{arg_name}",
                )
        for arg_name, arg in b.args.items():
            if arg_name not in a.args:
                required = is_required_input(arg)
                yield Change(
                    type=ChangeType.DIRECTIVE_ARGUMENT_ADDED,
                    message=f"Argument '{arg_name}' was added to directive '{name}'",
                    criticality=breaking() if required else safe(),
                    path=f"{path}.{arg_name}",
                )


# ---------------------------------------------------------------------
# Type-change safety
# ---------------------------------------------------------------------

def is_safe_output_change(old_type: Any, new_type: Any) -> bool:
    """Output positions may only become stricter (nullable -> non-null)."""
    if is_list_type(old_type):
        return (
            is_list_type(new_type) and is_safe_output_change(old_type.of_type, new_type.of_type)
        ) or (is_non_null_type(new_type) and is_safe_output_change(old_type, new_type.of_type))

    if is_non_null_type(old_type):
        return is_non_null_type(new_type) and is_safe_output_change(old_type.of_type, new_type.of_type)

    return (is_named_type(new_type) and old_type.name == new_type.name) or (
        is_non_null_type(new_type) and is_safe_output_change(old_type, new_type.of_type)
    )


def is_safe_input_change(old_type: Any, new_type: Any) -> bool:
    """Input positions may only become looser (non-null -> nullable)."""
    if is_list_type(old_type):
        return is_list_type(new_type) and is_safe_input_change(old_type.of_type, new_type.of_type)

    if is_non_null_type(old_type):
        return (
            is_non_null_type(new_type) and is_safe_input_change(old_type.of_type, new_type.of_type)
        ) or (not is_non_null_type(new_type) and is_safe_input_change(old_type.of_type, new_type))

    return is_named_type(new_type) and old_type.name == new_type.name


def _default_part(default: Any, key: str, missing: Any) -> Any:
    if isinstance(default, dict):
        return default.get(key, missing)
    return getattr(default, key, missing)


def format_default(item: Any) -> str:
    """
    Printed default value of an argument or input field, ``"undefined"``
    when it has none.

    graphql-core 3.2 exposes the coerced ``default_value``; later releases
    keep SDL defaults in ``default`` as a literal node or a value holder.
    """
    value = getattr(item, "default_value", Undefined)
    if value is Undefined:
        default = getattr(item, "default", None)
        if default is None or default is Undefined:
            return "undefined"
        if isinstance(default, Node):
            return print_ast(default)
        literal = _default_part(default, "literal", None)
        if isinstance(literal, Node):
            return print_ast(literal)
        value = _default_part(default, "value", Undefined)
        if value is Undefined:
            return "undefined"

    node = ast_from_value(value, item.type)
    if node is None:
        return repr(value)
    return print_ast(node)


def has_default(item: Any) -> bool:
    return format_default(item) != "undefined"


def is_required_input(item: Any) -> bool:
    return is_non_null_type(item.type) and not has_default(item)
