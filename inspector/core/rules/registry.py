from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from inspector.core.errors import ConfigurationError
from inspector.core.rules.builtin import BUILTIN_RULES
from inspector.core.rules.loader import load_symbol
from inspector.core.rules.types import Rule, RuleProvider

log = logging.getLogger("inspector.rules")

RULE_SYMBOLS = ("RULE", "rule")


class BuiltinRuleProvider:
    def __init__(self, registry: Optional[Dict[str, Rule]] = None):
        self._registry = dict(BUILTIN_RULES if registry is None else registry)

    def names(self) -> List[str]:
        return sorted(self._registry)

    def resolve(self, reference: str) -> Optional[Rule]:
        return self._registry.get(reference)


class ModuleRuleProvider:
    """
    Loads custom rules from Python files or importable modules.

    Each rule module must expose:
      RULE = <callable(*, changes, old_schema, new_schema, config) -> changes>
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir) if base_dir else None

    def resolve(self, reference: str) -> Optional[Rule]:
        try:
            rule = load_symbol(reference, symbols=RULE_SYMBOLS, base_dir=self.base_dir)
        except Exception as e:
            log.debug("rule %s could not be loaded: %s", reference, e)
            return None

        if not callable(rule):
            log.debug("rule %s is not callable (%s)", reference, type(rule).__name__)
            return None
        return rule


@dataclass
class RuleResolution:
    references: List[str]
    rules: List[Rule] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return len(self.rules) == len(self.references)

    def raise_if_incomplete(self) -> None:
        if not self.complete:
            raise ConfigurationError("Some rules weren't recognised")


def default_providers(base_dir: Optional[Path] = None) -> List[RuleProvider]:
    return [BuiltinRuleProvider(), ModuleRuleProvider(base_dir)]


def resolve_rule(reference: str, providers: Sequence[RuleProvider]) -> Optional[Rule]:
    ref = (reference or "").strip()
    if not ref:
        return None
    for provider in providers:
        rule = provider.resolve(ref)
        if rule is not None:
            return rule
    return None


def resolve_rules(
    references: Sequence[str],
    *,
    providers: Optional[Sequence[RuleProvider]] = None,
    base_dir: Optional[Path] = None,
) -> RuleResolution:
    """
    Resolve rule references in order. Unresolved ones are collected, never
    skipped silently; callers decide whether to fail via
    ``RuleResolution.raise_if_incomplete``.
    """
    providers = list(providers) if providers is not None else default_providers(base_dir)
    resolution = RuleResolution(references=list(references))

    for ref in references:
        rule = resolve_rule(ref, providers)
        if rule is None:
            resolution.unresolved.append(ref)
        else:
            resolution.rules.append(rule)

    log.debug(
        "rules resolved=%s unresolved=%s",
        len(resolution.rules),
        resolution.unresolved,
    )
    return resolution
