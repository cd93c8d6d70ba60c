"""Per-instance extension points: handlers, hijacks and polymorphism groups."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional

from .schema import Schema
from .type_description import TypeDescription

logger = logging.getLogger(__name__)

type Handler = Callable[[], Schema]
type Hijack = Callable[[Schema], None]


class PolymorphismGroup:
    """An interface type and the concrete types that implement it."""

    def __init__(self, interface: TypeDescription) -> None:
        self.interface = interface
        self._implementations: dict[str, TypeDescription] = {}

    def add(self, implementation: TypeDescription) -> None:
        self._implementations[implementation.key] = implementation

    def implementations(self) -> list[TypeDescription]:
        """Implementations ordered by their registration key."""
        return [self._implementations[key] for key in sorted(self._implementations)]

    def __len__(self) -> int:
        return len(self._implementations)


class Interfaces:
    """Polymorphism groups keyed by interface type.

    A collection can be built once and handed to several schema sets; nothing
    is registered globally.
    """

    def __init__(self) -> None:
        self._groups: dict[str, PolymorphismGroup] = {}

    def group(self, interface: TypeDescription) -> PolymorphismGroup:
        """Return the group for ``interface``, creating it when missing."""
        group = self._groups.get(interface.key)
        if group is None:
            group = PolymorphismGroup(interface)
            self._groups[interface.key] = group
        return group

    def add(self, interface: TypeDescription, *implementations: TypeDescription) -> None:
        group = self.group(interface)
        for implementation in implementations:
            logger.debug("Registering %s as an implementation of %s", implementation.key, interface.key)
            group.add(implementation)

    def get(self, interface: TypeDescription) -> Optional[PolymorphismGroup]:
        return self._groups.get(interface.key)


class Registry:
    """Override functions and polymorphism groups consulted during derivation."""

    def __init__(self, interfaces: Optional[Interfaces] = None) -> None:
        self.interfaces = interfaces if interfaces is not None else Interfaces()
        self._handlers: dict[str, Handler] = {}
        self._hijacks: dict[str, Hijack] = {}

    def set_handler(self, description: TypeDescription, handler: Handler) -> None:
        self._handlers[description.key] = handler

    def set_hijack(self, description: TypeDescription, hijack: Hijack) -> None:
        self._hijacks[description.key] = hijack

    def handler(self, description: TypeDescription) -> Optional[Handler]:
        return self._handlers.get(description.key)

    def hijack(self, description: TypeDescription) -> Optional[Hijack]:
        return self._hijacks.get(description.key)

    def group(self, description: TypeDescription) -> Optional[PolymorphismGroup]:
        """Return the polymorphism group registered for an interface, if any."""
        group = self.interfaces.get(description)
        if group is None or not len(group):
            return None
        return group
