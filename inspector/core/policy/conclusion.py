from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from inspector.core.diff.changes import Change
from inspector.core.pointer import PullRequestContext

FORCED_SUCCESS_NOTICE = "FailOnBreaking disabled. Forcing SUCCESS"


class CheckConclusion(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ConclusionDecision:
    conclusion: CheckConclusion
    raw: CheckConclusion
    overridden: bool = False
    notice: Optional[str] = None


def raw_conclusion(changes: Sequence[Change]) -> CheckConclusion:
    if any(c.is_breaking for c in changes):
        return CheckConclusion.FAILURE
    return CheckConclusion.SUCCESS


def has_approval_label(pull_request: Optional[PullRequestContext], approve_label: str) -> bool:
    return pull_request is not None and pull_request.has_label(approve_label)


def apply_overrides(
    raw: CheckConclusion,
    *,
    fail_on_breaking: bool,
    approved: bool,
) -> ConclusionDecision:
    """
    Downgrade FAILURE to SUCCESS when breaking changes are not enforced or
    were explicitly approved. SUCCESS is never raised to FAILURE.
    """
    if raw == CheckConclusion.FAILURE and (not fail_on_breaking or approved):
        return ConclusionDecision(
            conclusion=CheckConclusion.SUCCESS,
            raw=raw,
            overridden=True,
            notice=FORCED_SUCCESS_NOTICE,
        )
    return ConclusionDecision(conclusion=raw, raw=raw)


def decide(
    raw: CheckConclusion,
    *,
    fail_on_breaking: bool,
    pull_request: Optional[PullRequestContext],
    approve_label: str,
) -> ConclusionDecision:
    return apply_overrides(
        raw,
        fail_on_breaking=fail_on_breaking,
        approved=has_approval_label(pull_request, approve_label),
    )
