from graphql import build_schema

from inspector.core.diff.changes import ChangeType, CriticalityLevel
from inspector.core.diff.engine import diff_schemas, find_changes

from conftest import NEW_SDL, OLD_SDL


def _changes(old, new):
    return find_changes(build_schema(old), build_schema(new))


def _by_type(changes):
    return {(c.type, c.path): c.level for c in changes}


def test_removed_deprecated_field_and_type():
    changes = _changes(OLD_SDL, NEW_SDL)

    assert [(c.type, c.path) for c in changes] == [
        (ChangeType.TYPE_REMOVED, "OldType"),
        (ChangeType.FIELD_REMOVED, "Query.oldQuery"),
    ]
    assert all(c.level == CriticalityLevel.BREAKING for c in changes)
    assert changes[1].meta["is_deprecated"] is True
    assert "(deprecated)" in changes[1].message


def test_identical_schemas_have_no_changes():
    assert _changes(OLD_SDL, OLD_SDL) == []


def test_field_added_is_safe():
    changes = _changes("type Query { a: Int }", "type Query { a: Int b: String }")

    assert _by_type(changes) == {(ChangeType.FIELD_ADDED, "Query.b"): CriticalityLevel.NON_BREAKING}


def test_field_type_nullability():
    stricter = _changes("type Query { a: Int }", "type Query { a: Int! }")
    looser = _changes("type Query { a: Int! }", "type Query { a: Int }")

    assert stricter[0].level == CriticalityLevel.NON_BREAKING
    assert looser[0].level == CriticalityLevel.BREAKING
    assert looser[0].message == "Field 'Query.a' changed type from 'Int!' to 'Int'"


def test_arguments():
    old = "type Query { a(x: Int!, y: Int): Int }"
    new = "type Query { a(x: Int, z: Int!, w: String = \"q\"): Int }"

    assert _by_type(_changes(old, new)) == {
        (ChangeType.FIELD_ARGUMENT_TYPE_CHANGED, "Query.a.x"): CriticalityLevel.NON_BREAKING,
        (ChangeType.FIELD_ARGUMENT_REMOVED, "Query.a.y"): CriticalityLevel.BREAKING,
        (ChangeType.FIELD_ARGUMENT_ADDED, "Query.a.z"): CriticalityLevel.BREAKING,
        (ChangeType.FIELD_ARGUMENT_ADDED, "Query.a.w"): CriticalityLevel.DANGEROUS,
    }


def test_argument_default_change_is_dangerous():
    changes = _changes("type Query { a(x: Int = 1): Int }", "type Query { a(x: Int = 2): Int }")

    assert changes[0].type == ChangeType.FIELD_ARGUMENT_DEFAULT_CHANGED
    assert changes[0].level == CriticalityLevel.DANGEROUS
    assert "from '1' to '2'" in changes[0].message


def test_enum_union_and_input_changes():
    old = """
    type Query { a(i: In): U e: E }
    type A { x: Int } type B { x: Int }
    union U = A | B
    enum E { ONE TWO }
    input In { p: Int q: Int }
    """
    new = """
    type Query { a(i: In): U e: E }
    type A { x: Int } type B { x: Int } type C { x: Int }
    union U = A | C
    enum E { ONE THREE }
    input In { p: Int r: Int! }
    """
    got = _by_type(_changes(old, new))

    assert got[(ChangeType.TYPE_ADDED, "C")] == CriticalityLevel.NON_BREAKING
    assert got[(ChangeType.UNION_MEMBER_REMOVED, "U")] == CriticalityLevel.BREAKING
    assert got[(ChangeType.UNION_MEMBER_ADDED, "U")] == CriticalityLevel.DANGEROUS
    assert got[(ChangeType.ENUM_VALUE_REMOVED, "E.TWO")] == CriticalityLevel.BREAKING
    assert got[(ChangeType.ENUM_VALUE_ADDED, "E.THREE")] == CriticalityLevel.DANGEROUS
    assert got[(ChangeType.INPUT_FIELD_REMOVED, "In.q")] == CriticalityLevel.BREAKING
    assert got[(ChangeType.INPUT_FIELD_ADDED, "In.r")] == CriticalityLevel.BREAKING


def test_type_kind_change_and_interfaces():
    old = "type Query { n: Node t: T } interface Node { id: ID } type T implements Node { id: ID }"
    new = "type Query { n: Node t: T } type Node { id: ID } type T { id: ID }"
    got = _by_type(_changes(old, new))

    assert got[(ChangeType.TYPE_KIND_CHANGED, "Node")] == CriticalityLevel.BREAKING
    assert got[(ChangeType.OBJECT_TYPE_INTERFACE_REMOVED, "T")] == CriticalityLevel.BREAKING


def test_deprecation_and_description_changes():
    old = 'type Query { "old doc" a: Int b: Int @deprecated }'
    new = 'type Query { "new doc" a: Int @deprecated(reason: "gone") b: Int }'
    got = _by_type(_changes(old, new))

    assert got[(ChangeType.FIELD_DESCRIPTION_CHANGED, "Query.a")] == CriticalityLevel.NON_BREAKING
    assert got[(ChangeType.FIELD_DEPRECATION_ADDED, "Query.a")] == CriticalityLevel.NON_BREAKING
    assert got[(ChangeType.FIELD_DEPRECATION_REMOVED, "Query.b")] == CriticalityLevel.DANGEROUS


def test_directives_and_roots():
    old = "directive @auth(role: String) on FIELD_DEFINITION | OBJECT\ntype Query { a: Int }"
    new = "directive @auth on FIELD_DEFINITION\ntype Query { a: Int }\ntype Mutation { b: Int }"
    got = _by_type(_changes(old, new))

    assert got[(ChangeType.DIRECTIVE_LOCATION_REMOVED, "@auth")] == CriticalityLevel.BREAKING
    assert got[(ChangeType.DIRECTIVE_ARGUMENT_REMOVED, "@auth.role")] == CriticalityLevel.BREAKING
    assert got[(ChangeType.SCHEMA_MUTATION_TYPE_CHANGED, None)] == CriticalityLevel.BREAKING


def test_rules_run_in_order():
    seen = []

    def first(*, changes, old_schema, new_schema, config):
        seen.append(("first", len(changes)))
        return changes[:1]

    def second(*, changes, old_schema, new_schema, config):
        seen.append(("second", len(changes)))
        return changes

    out = diff_schemas(build_schema(OLD_SDL), build_schema(NEW_SDL), [first, second])

    assert seen == [("first", 2), ("second", 1)]
    assert len(out) == 1


def test_only_true_removals_are_removals():
    old = 'type Query { a: Int @deprecated b: Int } enum E { X @deprecated Y }'
    new = 'type Query { a: Int } enum E { X }'
    flags = {c.type: c.is_removal for c in _changes(old, new)}

    assert flags[ChangeType.FIELD_DEPRECATION_REMOVED] is False
    assert flags[ChangeType.ENUM_VALUE_DEPRECATION_REMOVED] is False
    assert flags[ChangeType.FIELD_REMOVED] is True
    assert flags[ChangeType.ENUM_VALUE_REMOVED] is True


def test_non_null_argument_with_default_is_not_breaking():
    [change] = _changes("type Query { a: Int }", "type Query { a(x: Int! = 1): Int }")

    assert change.type == ChangeType.FIELD_ARGUMENT_ADDED
    assert change.level == CriticalityLevel.DANGEROUS
    assert "(with default value)" in change.message


def test_input_field_defaults():
    old = "type Query { a(i: In): Int } input In { p: Int = 1 }"
    new = "type Query { a(i: In): Int } input In { p: Int = 2 q: Int! = 0 }"
    got = _by_type(_changes(old, new))

    assert got == {
        (ChangeType.INPUT_FIELD_DEFAULT_VALUE_CHANGED, "In.p"): CriticalityLevel.DANGEROUS,
        (ChangeType.INPUT_FIELD_ADDED, "In.q"): CriticalityLevel.DANGEROUS,
    }


def test_removed_default_is_reported_as_undefined():
    [change] = _changes("type Query { a(x: String = \"q\"): Int }", "type Query { a(x: String): Int }")

    assert change.type == ChangeType.FIELD_ARGUMENT_DEFAULT_CHANGED
    assert "from '\"q\"' to 'undefined'" in change.message


def test_directive_argument_with_default_is_safe():
    old = "directive @d on FIELD\ntype Query { a: Int }"
    new = "directive @d(n: Int! = 1) on FIELD\ntype Query { a: Int }"

    assert _by_type(_changes(old, new)) == {
        (ChangeType.DIRECTIVE_ARGUMENT_ADDED, "@d.n"): CriticalityLevel.NON_BREAKING,
    }


def test_interface_implementing_interfaces():
    old = "type Query { n: Named } interface Node { id: ID } interface Named implements Node { id: ID name: String }"
    new = (
        "type Query { n: Named } interface Node { id: ID } interface Entity { id: ID } "
        "interface Named implements Entity { id: ID name: String }"
    )
    changes = [c for c in _changes(old, new) if c.path == "Named"]

    assert [(c.type, c.level) for c in changes] == [
        (ChangeType.OBJECT_TYPE_INTERFACE_REMOVED, CriticalityLevel.BREAKING),
        (ChangeType.OBJECT_TYPE_INTERFACE_ADDED, CriticalityLevel.DANGEROUS),
    ]
    assert changes[0].message == "'Named' interface no longer implements 'Node' interface"
