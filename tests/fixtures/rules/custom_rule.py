"""Example custom rule: every breaking change is reported as dangerous."""

from inspector.core.diff.changes import CriticalityLevel


def _breaking_to_dangerous(*, changes, old_schema, new_schema, config):
    return [
        c.with_level(CriticalityLevel.DANGEROUS, "Downgraded by custom rule") if c.is_breaking else c
        for c in changes
    ]


RULE = _breaking_to_dangerous
