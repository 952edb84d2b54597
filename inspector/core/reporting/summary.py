from __future__ import annotations

import re
from typing import List, Sequence

from inspector.core.diff.changes import Change, CriticalityLevel

DEFAULT_SUMMARY_LIMIT = 100

_QUOTED = re.compile(r"'([^']+)'")


def bolderize(message: str) -> str:
    return _QUOTED.sub(r"**\1**", message)


def _by_level(changes: Sequence[Change], level: CriticalityLevel) -> List[Change]:
    return [c for c in changes if c.level == level]


def create_summary(changes: Sequence[Change], summary_limit: int = DEFAULT_SUMMARY_LIMIT, verbose: bool = False) -> str:
    """
    Markdown summary of the detected changes.

    At most ``summary_limit`` changes are listed, breaking first, then
    dangerous, then safe. ``verbose`` adds the criticality reason per change.
    """
    breaking = _by_level(changes, CriticalityLevel.BREAKING)
    dangerous = _by_level(changes, CriticalityLevel.DANGEROUS)
    safe = _by_level(changes, CriticalityLevel.NON_BREAKING)

    lines: List[str] = [
        f"# Found {len(changes)} change{'s' if len(changes) != 1 else ''}",
        "",
        f"Breaking: {len(breaking)}",
        f"Dangerous: {len(dangerous)}",
        f"Safe: {len(safe)}",
    ]

    if len(changes) > summary_limit:
        lines.extend([
            "",
            f"Total amount of changes ({len(changes)}) is over the limit ({summary_limit})",
            "Adjust it using the INSPECTOR_SUMMARY_LIMIT environment variable",
            "",
        ])

    budget = summary_limit
    for title, group in (("Breaking", breaking), ("Dangerous", dangerous), ("Safe", safe)):
        if budget <= 0 or not group:
            continue
        shown = group[:budget]
        budget -= len(shown)
        lines.extend(["", f"## {title} changes"])
        for change in shown:
            lines.append(f" - {bolderize(change.message)}")
            if verbose and change.criticality.reason:
                lines.append(f"   > {change.criticality.reason}")

    return "\n".join(lines)
