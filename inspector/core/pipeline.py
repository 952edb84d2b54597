"""
Schema inspection run.

Order of a run:
  1. report start, ref and commit sha; require a workspace and a valid
     schema pointer, before any network call
  2. look up the associated pull request; resolve rules (all-or-nothing)
  3. resolve old/new targets
  4. load both files concurrently, build both schemas
  5. diff, apply conclusion overrides, report
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from inspector.core.config.settings import ActionInputs, RunEnvironment
from inspector.core.diff.changes import Change
from inspector.core.diff.invoke import ActionResult, diff, load_usage_hook
from inspector.core.errors import ConfigurationError
from inspector.core.git_ops.files import FileLoader, load_pair
from inspector.core.pointer import PullRequestContext, Targets, parse_pointer, resolve_targets
from inspector.core.policy.conclusion import CheckConclusion, decide
from inspector.core.reporting.reporter import Reporter
from inspector.core.reporting.summary import create_summary
from inspector.core.rules.registry import resolve_rules
from inspector.core.schema.builder import build_schemas

log = logging.getLogger("inspector.pipeline")

FAILURE_MESSAGE = "Something is wrong with your schema"

PullRequestLookup = Callable[[Optional[str]], Optional[PullRequestContext]]


@dataclass
class RunOutcome:
    conclusion: CheckConclusion
    changes: List[Change] = field(default_factory=list)
    targets: Optional[Targets] = None
    overridden: bool = False
    summary: str = ""


def run(
    inputs: ActionInputs,
    env: RunEnvironment,
    *,
    reporter: Reporter,
    loader: FileLoader,
    find_pull_request: PullRequestLookup,
) -> RunOutcome:
    reporter.info("GraphQL Inspector started")
    reporter.info(f"Ref: {env.sha}")
    reporter.info(f"Commit SHA: {env.commit_sha}")

    workspace = env.require_workspace()
    base_dir = Path(workspace)

    if not inputs.schema_pointer:
        reporter.error("No `schema` variable")
        raise ConfigurationError("Failed to find `schema` variable")
    pointer = parse_pointer(inputs.schema_pointer)

    pull_request = find_pull_request(env.commit_sha)
    reporter.info(f'Creating a job named "{inputs.name}"')

    resolution = resolve_rules(inputs.rules, base_dir=base_dir)
    for ref in resolution.unresolved:
        reporter.error(f"Rule {ref} is invalid. Did you specify the correct path?")
    resolution.raise_if_incomplete()

    config = load_usage_hook(inputs.get_usage, base_dir)

    targets = resolve_targets(
        pointer,
        pull_request,
        merge_enabled=inputs.experimental_merge,
        head_ref=env.sha,
        workspace=workspace,
    )
    if targets.merge_ref_used:
        reporter.info(f"EXPERIMENTAL - Using Pull Request {targets.head_ref}")
    if targets.base_ref_overridden:
        reporter.info(f"EXPERIMENTAL - Using {targets.base_ref} as base schema ref")

    old_text, new_text = load_pair(loader, targets)
    reporter.info("Got both sources")

    pair = build_schemas(old_text, new_text, ref=targets.base_ref, path=targets.path)
    reporter.info("Built both schemas")

    reporter.info("Start comparing schemas")
    result: ActionResult = diff(
        path=targets.path,
        schemas=pair.schemas,
        sources=pair.sources,
        rules=resolution.rules,
        config=config,
    )
    changes = list(result.changes or [])

    reporter.set_output("changes", str(len(changes)))
    reporter.info(f"Changes: {len(changes)}")

    decision = decide(
        result.conclusion,
        fail_on_breaking=inputs.fail_on_breaking,
        pull_request=pull_request,
        approve_label=inputs.approve_label,
    )
    if decision.notice:
        reporter.info(decision.notice)

    summary = create_summary(changes, env.summary_limit, False)

    reporter.info(f"Conclusion: {decision.conclusion.value}")
    log.debug(
        "run finished raw=%s final=%s changes=%s",
        decision.raw.value,
        decision.conclusion.value,
        len(changes),
    )

    if decision.conclusion == CheckConclusion.FAILURE:
        reporter.error(summary)
    else:
        reporter.info(summary)

    for annotation in result.annotations:
        reporter.annotate(annotation)

    if decision.conclusion == CheckConclusion.FAILURE:
        reporter.set_failed(FAILURE_MESSAGE)

    return RunOutcome(
        conclusion=decision.conclusion,
        changes=changes,
        targets=targets,
        overridden=decision.overridden,
        summary=summary,
    )
