"""Watchers that keep several enforcer instances' policies in step."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rolegate.model import Model

UpdateCallback = Callable[..., Any]


@dataclass(frozen=True)
class Notification:
    """A change announced through a watcher."""

    kind: str
    payload: tuple[Any, ...] = ()


class Watcher(ABC):
    """Interface for watchers.

    A watcher tells other instances that the stored policy has changed, so
    that they can reload it through their update callback.
    """

    def __init__(self) -> None:
        self._callback: UpdateCallback | None = None
        self._closed = False
        self._notifications: list[Notification] = []

    @property
    def callback(self) -> UpdateCallback | None:
        """The callback run when another instance changes the policy."""
        return self._callback

    @property
    def closed(self) -> bool:
        """Whether the watcher has been closed."""
        return self._closed

    @property
    def notifications(self) -> tuple[Notification, ...]:
        """The changes announced so far while the watcher was open."""
        return tuple(self._notifications)

    def _record(self, kind: str, *payload: Any) -> None:
        if not self._closed:
            self._notifications.append(Notification(kind, payload))

    def set_update_callback(self, func: UpdateCallback) -> None:
        """Set the callback run when the policy is changed by another instance.

        A typical callback reloads the policy of the local enforcer.
        """
        if not callable(func):
            raise TypeError("update callback must be callable")
        self._callback = func

    @abstractmethod
    def update(self) -> None:
        """Ask other instances to synchronise their policy."""

    @abstractmethod
    def close(self) -> None:
        """Stop the watcher; its callback is not run any more."""


class WatcherEx(Watcher):
    """Watcher that reports which kind of change was made."""

    @abstractmethod
    def update_for_add_policy(self, params: Sequence[str]) -> None:
        """Report that a rule was added."""

    @abstractmethod
    def update_for_remove_policy(self, params: Sequence[str]) -> None:
        """Report that a rule was removed."""

    @abstractmethod
    def update_for_remove_filtered_policy(
        self, field_index: int, field_values: Sequence[str]
    ) -> None:
        """Report that rules matching a filter were removed."""

    @abstractmethod
    def update_for_save_policy(self, model: Model) -> None:
        """Report that the whole policy was saved."""


class WatcherUpdatable(Watcher):
    """Watcher that reports rule replacements."""

    @abstractmethod
    def update_for_update_policy(
        self, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> None:
        """Report that ``old_rule`` was replaced by ``new_rule``."""

    @abstractmethod
    def update_for_update_policies(
        self, old_rules: Sequence[Sequence[str]], new_rules: Sequence[Sequence[str]]
    ) -> None:
        """Report that ``old_rules`` were replaced by ``new_rules``."""


class DefaultWatcher(Watcher):
    """Watcher for a single instance: changes are only recorded locally."""

    def set_update_callback(self, func: UpdateCallback) -> None:
        super().set_update_callback(func)

    def update(self) -> None:
        """Record the change; no other instance is watching."""
        self._record("update")

    def close(self) -> None:
        self._callback = None
        self._closed = True


class DefaultWatcherEx(WatcherEx):
    """Extended watcher for a single instance: changes are only recorded locally."""

    def update(self) -> None:
        """Record the change; no other instance is watching."""
        self._record("update")

    def close(self) -> None:
        self._callback = None
        self._closed = True

    def update_for_add_policy(self, params: Sequence[str]) -> None:
        """Record the added rule."""
        self._record("add_policy", tuple(params))

    def update_for_remove_policy(self, params: Sequence[str]) -> None:
        """Record the removed rule."""
        self._record("remove_policy", tuple(params))

    def update_for_remove_filtered_policy(
        self, field_index: int, field_values: Sequence[str]
    ) -> None:
        """Record the filter of the removed rules."""
        self._record("remove_filtered_policy", field_index, tuple(field_values))

    def update_for_save_policy(self, model: Model) -> None:
        """Record that the policy of ``model`` was saved."""
        self._record("save_policy", model)