"""Role hierarchy management for role-based access control."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

MatchingFunc = Callable[[str, str], bool]


class RBACError(Exception):
    """Raised when a role operation cannot be carried out."""


class RoleManager(ABC):
    """Interface for managing links between users and roles."""

    @abstractmethod
    def clear(self) -> None:
        """Clear all stored data and reset to the initial state."""

    @abstractmethod
    def add_link(self, name1: str, name2: str, domain: Sequence[str] = ()) -> None:
        """Make ``name1`` inherit ``name2``."""

    @abstractmethod
    def delete_link(self, name1: str, name2: str, domain: Sequence[str] = ()) -> None:
        """Remove the inheritance of ``name2`` by ``name1``."""

    @abstractmethod
    def has_link(self, name1: str, name2: str, domain: Sequence[str] = ()) -> bool:
        """Return whether ``name1`` inherits ``name2``."""

    @abstractmethod
    def get_roles(self, name: str, domain: Sequence[str] = ()) -> list[str]:
        """Return the roles that ``name`` directly inherits."""

    @abstractmethod
    def get_users(self, name: str, domain: Sequence[str] = ()) -> list[str]:
        """Return the users that directly inherit ``name``."""

    @abstractmethod
    def print_roles(self) -> str:
        """Log all roles and return the text that was logged."""


class Role:
    """A node in the role graph, holding the roles it directly inherits."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._roles: list[Role] = []

    def __repr__(self) -> str:
        return f"Role({self.name!r})"

    def add_role(self, role: Role) -> None:
        """Add a directly inherited role unless one of that name is present."""
        if any(existing.name == role.name for existing in self._roles):
            return
        self._roles.append(role)

    def delete_role(self, role: Role) -> None:
        """Drop the directly inherited role of the same name."""
        self._roles = [existing for existing in self._roles if existing.name != role.name]

    def has_role(self, name: str, hierarchy_level: int) -> bool:
        """Return whether this role is or inherits ``name`` within the given depth."""
        if self.name == name:
            return True
        if hierarchy_level <= 0:
            return False
        return any(role.has_role(name, hierarchy_level - 1) for role in self._roles)

    def has_direct_role(self, name: str) -> bool:
        """Return whether ``name`` is directly inherited."""
        return any(role.name == name for role in self._roles)

    def get_roles(self) -> list[str]:
        """Return the names of the directly inherited roles."""
        return [role.name for role in self._roles]

    def __str__(self) -> str:
        if not self._roles:
            return ""
        names = ", ".join(role.name for role in self._roles)
        if len(self._roles) != 1:
            names = f"({names})"
        return f"{self.name} < {names}"


def _with_domain(name: str, domain: Sequence[str]) -> str:
    if len(domain) == 1:
        return f"{domain[0]}::{name}"
    if len(domain) > 1:
        raise RBACError("error: domain should be 1 parameter")
    return name


def _strip_domain(names: list[str], domain: Sequence[str]) -> list[str]:
    if len(domain) != 1:
        return names
    prefix_length = len(domain[0]) + 2
    return [name[prefix_length:] for name in names]


class DefaultRoleManager(RoleManager):
    """In-memory role manager with an optional pattern matching function."""

    def __init__(self, max_hierarchy_level: int) -> None:
        self.max_hierarchy_level = max_hierarchy_level
        self._all_roles: dict[str, Role] = {}
        self._matching_func: MatchingFunc | None = None

    @property
    def has_pattern(self) -> bool:
        return self._matching_func is not None

    def add_matching_func(self, fn: MatchingFunc) -> None:
        """Set the function used to match role names against stored patterns.

        Role links must be built after this is called.
        """
        self._matching_func = fn

    def _has_role(self, name: str) -> bool:
        if self._matching_func is not None:
            return any(self._matching_func(name, key) for key in self._all_roles)
        return name in self._all_roles

    def _create_role(self, name: str) -> Role:
        role = self._all_roles.setdefault(name, Role(name))
        if self._matching_func is not None:
            for key, other in list(self._all_roles.items()):
                if key != name and self._matching_func(name, key):
                    role.add_role(other)
        return role

    def clear(self) -> None:
        self._all_roles.clear()

    def add_link(self, name1: str, name2: str, domain: Sequence[str] = ()) -> None:
        name1 = _with_domain(name1, domain)
        name2 = _with_domain(name2, domain)
        role1 = self._create_role(name1)
        role2 = self._create_role(name2)
        role1.add_role(role2)

    def delete_link(self, name1: str, name2: str, domain: Sequence[str] = ()) -> None:
        name1 = _with_domain(name1, domain)
        name2 = _with_domain(name2, domain)
        if not self._has_role(name1) or not self._has_role(name2):
            raise RBACError("error: name1 or name2 does not exist")
        role1 = self._create_role(name1)
        role2 = self._create_role(name2)
        role1.delete_role(role2)

    def has_link(self, name1: str, name2: str, domain: Sequence[str] = ()) -> bool:
        name1 = _with_domain(name1, domain)
        name2 = _with_domain(name2, domain)
        if name1 == name2:
            return True
        if not self._has_role(name1) or not self._has_role(name2):
            return False
        return self._create_role(name1).has_role(name2, self.max_hierarchy_level)

    def get_roles(self, name: str, domain: Sequence[str] = ()) -> list[str]:
        name = _with_domain(name, domain)
        if not self._has_role(name):
            return []
        return _strip_domain(self._create_role(name).get_roles(), domain)

    def get_users(self, name: str, domain: Sequence[str] = ()) -> list[str]:
        name = _with_domain(name, domain)
        if not self._has_role(name):
            raise RBACError("error: name does not exist")
        names = [role.name for role in self._all_roles.values() if role.has_direct_role(name)]
        return _strip_domain(names, domain)

    def print_roles(self) -> str:
        text = ", ".join(str(role) for role in self._all_roles.values())
        logger.info("%s", text)
        return text