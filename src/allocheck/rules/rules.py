# src/allocheck/rules/rules.py
"""
@brief
Business rules collected alongside a validated data set.

@details
Three rule types are supported:
    - co-run:      two tasks must run together
    - exclude:     a worker must not be given a task
    - phase-limit: a task may span at most `max_phases` phases
Every rule carries a weight in [0, 1]. Rules are recorded and exported as-is;
they are not evaluated against the tables.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from allocheck.errors import DataError

logger = logging.getLogger(__name__)


class _RuleBase(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    weight: float = Field(1.0, ge=0.0, le=1.0, description="Relative importance (0..1)")


class CoRunRule(_RuleBase):
    type: Literal["co-run"] = "co-run"
    task1: str = Field(..., min_length=1)
    task2: str = Field(..., min_length=1)


class ExcludeRule(_RuleBase):
    type: Literal["exclude"] = "exclude"
    worker: str = Field(..., min_length=1)
    task1: str = Field(..., min_length=1)


class PhaseLimitRule(_RuleBase):
    type: Literal["phase-limit"] = "phase-limit"
    task1: str = Field(..., min_length=1)
    max_phases: int = Field(..., ge=1, alias="maxPhases")


Rule = Annotated[CoRunRule | ExcludeRule | PhaseLimitRule, Field(discriminator="type")]
_RULE_ADAPTER: TypeAdapter[Any] = TypeAdapter(Rule)


def parse_rule(data: dict[str, Any]) -> CoRunRule | ExcludeRule | PhaseLimitRule:
    """
    @brief
    Build a typed rule from a plain mapping.

    @raises
        DataError
            If the mapping does not describe a known, well-formed rule.
    """
    try:
        return _RULE_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise DataError(
            message=f"Invalid rule: {e}",
            source="rules.parse_rule",
            suggested_action="Use type co-run | exclude | phase-limit with its required fields.",
        ) from e


class RuleSet:
    """Ordered collection of rules in the order they were added."""

    def __init__(self) -> None:
        self._rules: list[CoRunRule | ExcludeRule | PhaseLimitRule] = []

    def add(self, rule: CoRunRule | ExcludeRule | PhaseLimitRule | dict[str, Any]):
        if isinstance(rule, dict):
            rule = parse_rule(rule)
        self._rules.append(rule)
        logger.info("Rule added: %s (%d total)", rule.type, len(self._rules))
        return rule

    def remove(self, index: int) -> CoRunRule | ExcludeRule | PhaseLimitRule:
        """
        @brief
        Delete the rule at `index`; later rules move up one position.

        @raises
            DataError
                If no rule exists at `index`.
        """
        if not 0 <= index < len(self._rules):
            raise DataError(
                message=f"No rule at index {index} ({len(self._rules)} rule(s))",
                source="RuleSet.remove",
                suggested_action="Pass the position shown in RuleSet.rules.",
            )
        rule = self._rules.pop(index)
        logger.info("Rule removed: %s (%d left)", rule.type, len(self._rules))
        return rule

    @property
    def rules(self) -> list[CoRunRule | ExcludeRule | PhaseLimitRule]:
        return list(self._rules)

    def dump(self) -> list[dict[str, Any]]:
        """JSON-ready list using the camelCase keys of the rules file."""
        return [r.model_dump(by_alias=True) for r in self._rules]

    def __len__(self) -> int:
        return len(self._rules)


__all__ = ["CoRunRule", "ExcludeRule", "PhaseLimitRule", "Rule", "RuleSet", "parse_rule"]
