from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Dict

from graphql import (
    GraphQLError,
    GraphQLSchema,
    Source,
    build_ast_schema,
    build_client_schema,
    parse,
    print_schema,
)

from inspector.core.errors import BuildError

log = logging.getLogger("inspector.schema")

INTROSPECTION_EXTENSIONS = (".json",)


@dataclass(frozen=True)
class SchemaPair:
    old: GraphQLSchema
    new: GraphQLSchema
    old_source: Source
    new_source: Source

    @property
    def schemas(self) -> Dict[str, GraphQLSchema]:
        return {"old": self.old, "new": self.new}

    @property
    def sources(self) -> Dict[str, Source]:
        return {"old": self.old_source, "new": self.new_source}


def is_introspection_path(path: str) -> bool:
    return PurePosixPath(path.lower()).suffix in INTROSPECTION_EXTENSIONS


def produce_schema(source: Source) -> GraphQLSchema:
    return build_ast_schema(parse(source))


def schema_from_introspection(text: str) -> GraphQLSchema:
    data: Any = json.loads(text)
    # tolerate the raw response envelope: {"data": {"__schema": ...}}
    if isinstance(data, dict) and "__schema" not in data and isinstance(data.get("data"), dict):
        data = data["data"]
    return build_client_schema(data)


def _build_side(side: str, fn, *args) -> Any:
    try:
        return fn(*args)
    except (GraphQLError, ValueError, TypeError, KeyError) as e:
        # json.JSONDecodeError is a ValueError
        raise BuildError(side=side, message=str(e)) from e


def build_schemas(old_text: str, new_text: str, *, ref: str, path: str) -> SchemaPair:
    """
    Build the old (``ref:path``) and new (``path``) schema from raw text.

    Introspection JSON is materialized and printed back to SDL so both
    encodings are compared through the same textual form.
    """
    old_name = f"{ref}:{path}"
    new_name = path

    if is_introspection_path(path):
        log.debug("building schemas from introspection json path=%s", path)
        old_schema = _build_side("old", schema_from_introspection, old_text)
        new_schema = _build_side("new", schema_from_introspection, new_text)
        return SchemaPair(
            old=old_schema,
            new=new_schema,
            old_source=Source(print_schema(old_schema), old_name),
            new_source=Source(print_schema(new_schema), new_name),
        )

    old_source = Source(old_text, old_name)
    new_source = Source(new_text, new_name)
    return SchemaPair(
        old=_build_side("old", produce_schema, old_source),
        new=_build_side("new", produce_schema, new_source),
        old_source=old_source,
        new_source=new_source,
    )
