from .builtin import BUILTIN_RULES
from .registry import (
    BuiltinRuleProvider,
    ModuleRuleProvider,
    RuleResolution,
    resolve_rule,
    resolve_rules,
)
