"""Assertions: the individual definitions that make up a model section."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from rolegate.role_manager import RoleManager


class IllegalArgumentError(ValueError):
    """Raised when a role definition or grouping rule is malformed."""


class PolicyOp(Enum):
    """Kind of incremental change applied to role links."""

    ADD = "add"
    REMOVE = "remove"


@dataclass
class Assertion:
    """An expression in a model section, e.g. ``r = sub, obj, act``."""

    key: str = ""
    value: str = ""
    tokens: list[str] = field(default_factory=list)
    policy: list[list[str]] = field(default_factory=list)
    rm: RoleManager | None = None

    def _arity(self) -> int:
        count = self.value.count("_")
        if count < 2:
            raise IllegalArgumentError(
                'the number of "_" in role definition should be at least 2'
            )
        return count

    @staticmethod
    def _trim_rule(rule: Sequence[str], arity: int) -> list[str]:
        if len(rule) < arity:
            raise IllegalArgumentError("grouping policy elements do not meet role definition")
        return list(rule[:arity])

    def build_incremental_role_links(
        self, rm: RoleManager, op: PolicyOp, rules: Iterable[Sequence[str]]
    ) -> None:
        """Add or remove the role links described by ``rules``."""
        self.rm = rm
        arity = self._arity()
        for raw in rules:
            rule = self._trim_rule(raw, arity)
            domain = rule[2:]
            if op is PolicyOp.ADD:
                rm.add_link(rule[0], rule[1], domain)
            else:
                rm.delete_link(rule[0], rule[1], domain)

    def build_role_links(self, rm: RoleManager) -> None:
        """Add a role link for every rule in this assertion's policy."""
        self.rm = rm
        arity = self._arity()
        for raw in self.policy:
            rule = self._trim_rule(raw, arity)
            rm.add_link(rule[0], rule[1], rule[2:])