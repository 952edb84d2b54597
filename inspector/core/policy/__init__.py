from .conclusion import CheckConclusion, ConclusionDecision, apply_overrides, decide, raw_conclusion
