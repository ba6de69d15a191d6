from allocheck.rules.rules import CoRunRule, ExcludeRule, PhaseLimitRule, RuleSet, parse_rule

__all__ = ["CoRunRule", "ExcludeRule", "PhaseLimitRule", "RuleSet", "parse_rule"]
