import json

import pytest
from graphql import build_schema, introspection_from_schema, print_schema

from inspector.core.errors import BuildError
from inspector.core.schema.builder import build_schemas, is_introspection_path

from conftest import NEW_SDL, OLD_SDL


def _introspection(sdl):
    return json.dumps(introspection_from_schema(build_schema(sdl)))


def test_sdl_sources_are_named_by_side():
    pair = build_schemas(OLD_SDL, NEW_SDL, ref="master", path="schema.graphql")

    assert pair.old_source.name == "master:schema.graphql"
    assert pair.new_source.name == "schema.graphql"
    assert pair.old_source.body == OLD_SDL
    assert "OldType" in pair.old.type_map
    assert "OldType" not in pair.new.type_map


@pytest.mark.parametrize("path", ["schema.json", "api/SCHEMA.JSON"])
def test_introspection_extension_is_case_insensitive(path):
    assert is_introspection_path(path)


def test_graphql_extension_is_sdl():
    assert not is_introspection_path("schema.graphql")


def test_introspection_is_printed_back_to_sdl():
    pair = build_schemas(_introspection(OLD_SDL), _introspection(NEW_SDL), ref="master", path="schema.json")

    assert pair.new_source.body == print_schema(build_schema(NEW_SDL))
    assert pair.old_source.name == "master:schema.json"
    assert pair.old.type_map["Query"].fields["oldQuery"].deprecation_reason == "use newQuery"


def test_introspection_accepts_data_envelope():
    wrapped = json.dumps({"data": json.loads(_introspection(NEW_SDL))})
    pair = build_schemas(wrapped, wrapped, ref="master", path="schema.json")

    assert "Query" in pair.new.type_map


def test_malformed_json_names_old_side():
    with pytest.raises(BuildError) as exc:
        build_schemas("{not json", _introspection(NEW_SDL), ref="master", path="schema.json")

    assert exc.value.side == "old"
    assert "old" in str(exc.value)


def test_invalid_introspection_names_new_side():
    with pytest.raises(BuildError) as exc:
        build_schemas(_introspection(NEW_SDL), json.dumps({"nope": 1}), ref="master", path="schema.json")

    assert exc.value.side == "new"


def test_invalid_sdl_carries_parse_message():
    with pytest.raises(BuildError) as exc:
        build_schemas("type Query {", NEW_SDL, ref="master", path="schema.graphql")

    assert exc.value.side == "old"
    assert "Syntax Error" in exc.value.message
