"""Configuration scopes and the predicate evaluators they consult.

A reliability module is only active when its configuration scope applies to
the host it is attached to. The scope itself is just a string; deciding
whether it applies is delegated to a `QueryEvaluator`, an injected capability
the host environment provides.

`ConditionQueryEvaluator` is the evaluator used by simulations and tests. It
resolves a scope name through a table of named condition lists evaluated on
the host's flattened attributes.

Operators supported:
- ==, !=, <, <=, >, >=
- contains, not_contains
- any_value, no_value

A scope name absent from the table applies to a host whose part name equals
it, which keeps the default scope (the part name itself) active.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Literal, Optional, Protocol

if TYPE_CHECKING:
    from reliasim.model.host import Host

__all__ = [
    "ScopeCondition",
    "ScopeRule",
    "QueryEvaluator",
    "ConditionQueryEvaluator",
    "ConfigurationScope",
    "evaluate_condition",
    "evaluate_conditions",
]


class QueryEvaluator(Protocol):
    """Decides whether a scope string applies to a host."""

    def evaluate_query(self, scope: str, host: "Host") -> bool: ...


@dataclass
class ScopeCondition:
    """A single condition on a host attribute.

    Args:
        attr: Attribute name to inspect in the host mapping.
        operator: Comparison operator. See module docstring for the list.
        value: Right-hand operand (unused for any_value/no_value).
    """

    attr: str
    operator: str
    value: Any | None = None


@dataclass
class ScopeRule:
    """Named predicate: conditions combined with ``and``/``or`` logic."""

    conditions: List[ScopeCondition] = field(default_factory=list)
    logic: Literal["and", "or"] = "and"


def evaluate_condition(host_attrs: Dict[str, Any], cond: ScopeCondition) -> bool:
    """Evaluate a single condition against a host attribute mapping.

    Raises:
        ValueError: If the operator is unknown.
    """
    has_attr = cond.attr in host_attrs
    derived_value = host_attrs.get(cond.attr, None)
    op = cond.operator

    if op == "==":
        return derived_value == cond.value
    elif op == "!=":
        return derived_value != cond.value
    elif op in ("<", "<=", ">", ">="):
        if derived_value is None:
            return False
        try:
            if op == "<":
                return derived_value < cond.value
            if op == "<=":
                return derived_value <= cond.value
            if op == ">":
                return derived_value > cond.value
            return derived_value >= cond.value
        except TypeError:
            return False
    elif op == "contains":
        if derived_value is None:
            return False
        try:
            return cond.value in derived_value  # type: ignore[operator]
        except TypeError:
            return False
    elif op == "not_contains":
        if derived_value is None:
            return True
        try:
            return cond.value not in derived_value  # type: ignore[operator]
        except TypeError:
            return True
    elif op == "any_value":
        return has_attr and derived_value is not None
    elif op == "no_value":
        return (not has_attr) or (derived_value is None)
    else:
        raise ValueError(f"Unsupported operator: {op}")


def evaluate_conditions(
    host_attrs: Dict[str, Any],
    conditions: Iterable[ScopeCondition],
    logic: str,
) -> bool:
    """Evaluate multiple conditions with AND/OR logic."""
    if logic == "and":
        return all(evaluate_condition(host_attrs, c) for c in conditions)
    if logic == "or":
        return any(evaluate_condition(host_attrs, c) for c in conditions)
    raise ValueError(f"Unsupported logic: {logic}")


class ConditionQueryEvaluator:
    """`QueryEvaluator` backed by a table of named `ScopeRule` objects.

    Args:
        rules: Mapping of scope name to the rule deciding it.
    """

    def __init__(self, rules: Optional[Dict[str, ScopeRule]] = None) -> None:
        self.rules: Dict[str, ScopeRule] = dict(rules or {})

    def evaluate_query(self, scope: str, host: "Host") -> bool:
        rule = self.rules.get(scope)
        if rule is None:
            return scope == host.part_name
        return evaluate_conditions(host.flat_attrs(), rule.conditions, rule.logic)


class ConfigurationScope:
    """Scope string of a module, defaulting to its host's part name.

    The default is resolved on first read and then sticks, so a persisted
    module written after that read carries the resolved name.
    """

    def __init__(self, host: Optional["Host"], configuration: str = "") -> None:
        self.host = host
        self._configuration = configuration or ""

    @property
    def configuration(self) -> str:
        if not self._configuration and self.host is not None:
            self._configuration = self.host.part_name
        return self._configuration

    @configuration.setter
    def configuration(self, value: str) -> None:
        self._configuration = value or ""

    def raw(self) -> str:
        """Configured value without resolving the default."""
        return self._configuration

    def applies_to(self, host: "Host", evaluator: QueryEvaluator) -> bool:
        """Return True if this scope applies to ``host``.

        An empty scope (no configuration and no host name to fall back on)
        always applies.
        """
        scope = self.configuration
        if not scope:
            return True
        return bool(evaluator.evaluate_query(scope, host))
