"""The access control model: its sections, assertions and policy rules."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from rolegate.assertion import Assertion, PolicyOp
from rolegate.role_manager import RoleManager

SECTION_NAMES: dict[str, str] = {
    "r": "request_definition",
    "p": "policy_definition",
    "g": "role_definition",
    "e": "policy_effect",
    "m": "matchers",
}

REQUIRED_SECTIONS: tuple[str, ...] = ("r", "p", "e", "m")


class MissingRequiredSectionsError(ValueError):
    """Raised when a model lacks one of the sections it must have."""


class ConfigSource(Protocol):
    """Anything that returns a string value for a ``section::key`` lookup."""

    def get_string(self, key: str) -> str: ...


def _remove_comments(text: str) -> str:
    head, sep, _ = text.partition("#")
    return head.strip() if sep else text


def _key_suffix(i: int) -> str:
    return "" if i == 1 else str(i)


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _matches(rule: Sequence[str], field_index: int, field_values: Sequence[str]) -> bool:
    for offset, wanted in enumerate(field_values):
        if not wanted:
            continue
        position = field_index + offset
        if position >= len(rule) or rule[position] != wanted:
            return False
    return True


class Model:
    """The whole access control model, keyed by section then assertion key."""

    def __init__(self) -> None:
        self.m: dict[str, dict[str, Assertion]] = {}

    def __repr__(self) -> str:
        return f"Model(sections={sorted(self.m)!r})"

    def has_section(self, sec: str) -> bool:
        """Return whether the model has section ``sec``."""
        return sec in self.m

    def add_def(self, sec: str, key: str, value: str) -> bool:
        """Add an assertion to the model; return False if ``value`` is empty."""
        if value == "":
            return False
        assertion = Assertion(key=key, value=value)
        if sec in ("r", "p"):
            assertion.tokens = [f"{key}_{token.strip()}" for token in value.split(",")]
        else:
            assertion.value = _remove_comments(value)
        self.m.setdefault(sec, {})[key] = assertion
        return True

    def _load_section(self, cfg: ConfigSource, sec: str) -> None:
        i = 1
        while self.add_def(
            sec, sec + _key_suffix(i), cfg.get_string(f"{SECTION_NAMES[sec]}::{sec}{_key_suffix(i)}")
        ):
            i += 1

    def load_model_from_config(self, cfg: ConfigSource) -> None:
        """Load every section from ``cfg`` and check the required ones exist."""
        for sec in SECTION_NAMES:
            self._load_section(cfg, sec)
        missing = [SECTION_NAMES[sec] for sec in REQUIRED_SECTIONS if not self.has_section(sec)]
        if missing:
            raise MissingRequiredSectionsError("missing required sections: " + ",".join(missing))

    def build_incremental_role_links(
        self,
        rm: RoleManager,
        op: PolicyOp,
        sec: str,
        p_type: str,
        rules: Iterable[Sequence[str]],
    ) -> None:
        """Apply added or removed grouping rules to the role manager."""
        if sec == "g":
            self.m[sec][p_type].build_incremental_role_links(rm, op, rules)

    def build_role_links(self, rm: RoleManager) -> None:
        """Initialise the role manager from every grouping assertion."""
        for assertion in self.m.get("g", {}).values():
            assertion.build_role_links(rm)

    def clear_policy(self) -> None:
        """Remove every policy and grouping rule."""
        for sec in ("p", "g"):
            for assertion in self.m.get(sec, {}).values():
                assertion.policy.clear()

    def _policy(self, sec: str, p_type: str) -> list[list[str]]:
        return self.m[sec][p_type].policy

    def get_policy(self, sec: str, p_type: str) -> list[list[str]]:
        """Return a copy of all rules of a policy."""
        return [list(rule) for rule in self._policy(sec, p_type)]

    def get_filtered_policy(
        self, sec: str, p_type: str, field_index: int, field_values: Sequence[str]
    ) -> list[list[str]]:
        """Return the rules whose fields match ``field_values`` from ``field_index``.

        An empty string in ``field_values`` matches any value.
        """
        return [
            list(rule)
            for rule in self._policy(sec, p_type)
            if _matches(rule, field_index, field_values)
        ]

    def has_policy(self, sec: str, p_type: str, rule: Sequence[str]) -> bool:
        """Return whether the policy contains ``rule``."""
        wanted = list(rule)
        return any(existing == wanted for existing in self._policy(sec, p_type))

    def add_policy(self, sec: str, p_type: str, rule: Sequence[str]) -> bool:
        """Add a rule; return False if it was already present."""
        if self.has_policy(sec, p_type, rule):
            return False
        self._policy(sec, p_type).append(list(rule))
        return True

    def add_policies(self, sec: str, p_type: str, rules: Sequence[Sequence[str]]) -> bool:
        """Add all rules, or none if any of them is already present."""
        if any(self.has_policy(sec, p_type, rule) for rule in rules):
            return False
        self._policy(sec, p_type).extend(list(rule) for rule in rules)
        return True

    def _remove_first(self, sec: str, p_type: str, rule: Sequence[str]) -> bool:
        policy = self._policy(sec, p_type)
        wanted = list(rule)
        try:
            policy.remove(wanted)
        except ValueError:
            return False
        return True

    def update_policy(
        self, sec: str, p_type: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        """Replace ``old_rule`` by ``new_rule``.

        Returns False if ``old_rule`` is absent, or if ``new_rule`` is already
        present, in which case ``old_rule`` stays removed.
        """
        if not self._remove_first(sec, p_type, old_rule):
            return False
        if self.has_policy(sec, p_type, new_rule):
            return False
        self._policy(sec, p_type).append(list(new_rule))
        return True

    def update_policies(
        self,
        sec: str,
        p_type: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> bool:
        """Replace ``old_rules`` by ``new_rules``.

        Old rules are removed one by one; the update stops with False at the
        first old rule that is absent or if any new rule is already present.
        """
        for old_rule in old_rules:
            if not self._remove_first(sec, p_type, old_rule):
                return False
        if any(self.has_policy(sec, p_type, rule) for rule in new_rules):
            return False
        self._policy(sec, p_type).extend(list(rule) for rule in new_rules)
        return True

    def remove_policy(self, sec: str, p_type: str, rule: Sequence[str]) -> bool:
        """Remove a rule; return False if it was not present."""
        return self._remove_first(sec, p_type, rule)

    def remove_policies(self, sec: str, p_type: str, rules: Sequence[Sequence[str]]) -> bool:
        """Remove all rules, or none if any of them is absent."""
        if not all(self.has_policy(sec, p_type, rule) for rule in rules):
            return False
        doomed = [list(rule) for rule in rules]
        assertion = self.m[sec][p_type]
        assertion.policy = [rule for rule in assertion.policy if rule not in doomed]
        return True

    def remove_filtered_policy(
        self, sec: str, p_type: str, field_index: int, field_values: Sequence[str]
    ) -> tuple[bool, list[list[str]]]:
        """Remove matching rules; return whether any went and the removed rules."""
        assertion = self.m[sec][p_type]
        kept: list[list[str]] = []
        removed: list[list[str]] = []
        for rule in assertion.policy:
            (removed if _matches(rule, field_index, field_values) else kept).append(rule)
        assertion.policy = kept
        return bool(removed), removed

    def get_values_for_field_in_policy(self, sec: str, p_type: str, field_index: int) -> list[str]:
        """Return the distinct values of one field, in first-seen order."""
        return _unique(rule[field_index] for rule in self._policy(sec, p_type))

    def get_values_for_field_in_policy_all_types(self, sec: str, field_index: int) -> list[str]:
        """Return the distinct values of one field across every policy type."""
        return _unique(
            value
            for p_type in self.m.get(sec, {})
            for value in self.get_values_for_field_in_policy(sec, p_type, field_index)
        )