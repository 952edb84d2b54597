from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from graphql import GraphQLSchema

from inspector.core.diff.changes import Change


class Rule(Protocol):
    """
    A rule receives the detected changes and returns the (possibly
    reclassified or filtered) list. Rules run in the configured order.

    Custom rule modules must export: RULE (an object implementing this
    protocol, or a plain function with the same keyword signature).
    """

    def __call__(
        self,
        *,
        changes: List[Change],
        old_schema: GraphQLSchema,
        new_schema: GraphQLSchema,
        config: Dict[str, Any],
    ) -> List[Change]:
        ...


class RuleProvider(Protocol):
    def resolve(self, reference: str) -> Optional[Rule]:
        ...
