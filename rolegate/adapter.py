"""Storage adapter interfaces and the shared policy line loader."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from rolegate.model import Model


class AdapterError(Exception):
    """Raised when an adapter cannot load or save policy."""


class UnsupportedOperationError(AdapterError):
    """Raised when an adapter does not support the requested operation."""


def load_policy_line(line: str, model: Model) -> None:
    """Load one text line such as ``p, alice, data1, read`` into ``model``.

    Empty lines and lines starting with ``#`` are ignored.
    """
    if not line or line.startswith("#"):
        return
    tokens = [token.strip() for token in line.split(",")]
    key = tokens[0]
    sec = key[:1]
    assertion = model.m.get(sec, {}).get(key)
    if assertion is None:
        raise AdapterError(f"unknown policy type: {key!r}")
    assertion.policy.append(tokens[1:])


@dataclass
class Filter:
    """Field values a policy rule must match to be loaded.

    Empty values match anything.
    """

    p: list[str] = field(default_factory=list)
    g: list[str] = field(default_factory=list)


class Adapter(ABC):
    """Interface for loading and saving policy rules."""

    file_path: str
    filtered: bool

    @abstractmethod
    def load_policy(self, model: Model) -> None:
        """Load all policy rules from storage into ``model``."""

    @abstractmethod
    def save_policy(self, model: Model) -> None:
        """Save all policy rules of ``model`` to storage."""

    @abstractmethod
    def add_policy(self, sec: str, p_type: str, rule: Sequence[str]) -> None:
        """Add a single rule to storage."""

    @abstractmethod
    def remove_policy(self, sec: str, p_type: str, rule: Sequence[str]) -> None:
        """Remove a single rule from storage."""

    @abstractmethod
    def remove_filtered_policy(
        self, sec: str, p_type: str, field_index: int, field_values: Sequence[str]
    ) -> None:
        """Remove the rules matching ``field_values`` from ``field_index``."""

    @abstractmethod
    def is_filtered(self) -> bool:
        """Return whether the loaded policy has been filtered."""


class BatchAdapter(Adapter):
    """Adapter that can add and remove several rules at once."""

    @abstractmethod
    def add_policies(self, sec: str, p_type: str, rules: Sequence[Sequence[str]]) -> None:
        """Add several rules to storage."""

    @abstractmethod
    def remove_policies(self, sec: str, p_type: str, rules: Sequence[Sequence[str]]) -> None:
        """Remove several rules from storage."""


class FilteredAdapter(Adapter):
    """Adapter that can load only the rules matching a filter."""

    @abstractmethod
    def load_filtered_policy(self, model: Model, policy_filter: Filter | None) -> None:
        """Load only the policy rules that match ``policy_filter``."""