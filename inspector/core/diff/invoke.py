from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from graphql import GraphQLSchema, Source

from inspector.core.diff.changes import Change, CriticalityLevel
from inspector.core.diff.engine import diff_schemas
from inspector.core.diff.locate import index_source, span_for
from inspector.core.policy.conclusion import CheckConclusion, raw_conclusion
from inspector.core.rules.loader import load_symbol

log = logging.getLogger("inspector.diff")

USAGE_HOOK_SYMBOLS = ("check_usage", "CHECK_USAGE", "get_usage")

_ANNOTATION_LEVELS = {
    CriticalityLevel.BREAKING: "failure",
    CriticalityLevel.DANGEROUS: "warning",
    CriticalityLevel.NON_BREAKING: "notice",
}


@dataclass(frozen=True)
class Annotation:
    path: str
    start_line: int
    end_line: int
    level: str  # "failure" | "warning" | "notice"
    message: str


@dataclass
class ActionResult:
    conclusion: CheckConclusion
    changes: List[Change] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)


def load_usage_hook(reference: Optional[str], base_dir: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """
    Build the diff config for an optional usage-check hook.

    A hook that cannot be loaded is treated as not configured.
    """
    if not reference:
        return None
    try:
        check_usage = load_symbol(reference, symbols=USAGE_HOOK_SYMBOLS, base_dir=base_dir)
    except Exception as e:
        log.debug("usage hook %s not loaded: %s", reference, e)
        return None
    if not callable(check_usage):
        return None
    return {"check_usage": check_usage}


def annotate(path: str, changes: Sequence[Change], sources: Dict[str, Source]) -> List[Annotation]:
    indexes = {side: index_source(src) for side, src in sources.items()}
    out: List[Annotation] = []
    for change in changes:
        side = "old" if change.is_removal else "new"
        span = span_for(change.path, indexes[side])
        out.append(
            Annotation(
                path=path,
                start_line=span.start_line,
                end_line=span.end_line,
                level=_ANNOTATION_LEVELS[change.level],
                message=change.message,
            )
        )
    return out


def diff(
    *,
    path: str,
    schemas: Dict[str, GraphQLSchema],
    sources: Dict[str, Source],
    rules: Sequence[Callable[..., List[Change]]] = (),
    config: Optional[Dict[str, Any]] = None,
) -> ActionResult:
    changes = diff_schemas(schemas["old"], schemas["new"], rules, config)

    if not changes:
        return ActionResult(conclusion=CheckConclusion.SUCCESS)

    return ActionResult(
        conclusion=raw_conclusion(changes),
        changes=changes,
        annotations=annotate(path, changes, sources),
    )
