from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from graphql import Source, parse
from graphql.language import Location


@dataclass(frozen=True)
class SourceSpan:
    start_line: int
    end_line: int


def index_source(source: Source) -> Dict[str, Location]:
    """Map schema coordinates (``Type``, ``Type.field``, ``Type.field.arg``, ``@dir``) to AST locations."""
    doc = parse(source)
    index: Dict[str, Location] = {}

    def put(key: str, node) -> None:
        if node.loc is not None and key not in index:
            index[key] = node.loc

    for definition in doc.definitions:
        name_node = getattr(definition, "name", None)
        if name_node is None:
            continue
        is_directive = definition.kind == "directive_definition"
        type_key = f"@{name_node.value}" if is_directive else name_node.value
        put(type_key, definition)

        for arg in getattr(definition, "arguments", None) or ():
            put(f"{type_key}.{arg.name.value}", arg)

        for value in getattr(definition, "values", None) or ():
            put(f"{type_key}.{value.name.value}", value)

        for field in getattr(definition, "fields", None) or ():
            field_key = f"{type_key}.{field.name.value}"
            put(field_key, field)
            for arg in getattr(field, "arguments", None) or ():
                put(f"{field_key}.{arg.name.value}", arg)

    return index


def span_for(path: Optional[str], index: Dict[str, Location]) -> SourceSpan:
    loc = None
    key = path
    while key and loc is None:
        loc = index.get(key)
        if loc is None:
            key = key.rpartition(".")[0]

    if loc is None:
        return SourceSpan(start_line=1, end_line=1)

    # token lines are 1-based and point at the first/last token of the node
    return SourceSpan(start_line=loc.start_token.line, end_line=loc.end_token.line)
