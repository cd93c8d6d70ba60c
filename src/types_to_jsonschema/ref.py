"""Stable identifiers and reference paths for described types."""

from __future__ import annotations

import dataclasses
import hashlib
import logging
import re
from dataclasses import dataclass

from .type_description import Kind, TypeDescription

logger = logging.getLogger(__name__)

DEFAULT_REF_PREFIX = "#/$defs"

_TRIM_GENERIC_RE = re.compile(r"\[.+\]$")


@dataclass(frozen=True)
class Ref:
    """Identifier of one named type inside a schema set."""

    defs: str
    package: str
    name: str
    qualname: str
    hash: str
    id: str

    @property
    def path(self) -> str:
        """The ``$ref`` value."""
        return f"{self.defs}/{self.id}"

    @property
    def unique(self) -> bool:
        """Whether the type gets its own definition entry."""
        return bool(self.package and self.name)

    def with_defs(self, defs: str) -> Ref:
        return dataclasses.replace(self, defs=defs)

    def __str__(self) -> str:
        return f"{self.package}.{self.qualname}"


class Resolver:
    """Assign collision-free identifiers to type descriptions.

    Identifiers are the bare type name with any generic argument list removed.
    The first distinct type seen under a name keeps the bare name; each later
    distinct type gets the next integer suffix (``Node``, ``Node1``, ...).
    """

    def __init__(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> None:
        self.ref_prefix = ref_prefix or DEFAULT_REF_PREFIX
        self._names: dict[str, dict[str, int]] = {}
        self._owners: dict[str, str] = {}
        self._assigned: dict[str, str] = {}

    def resolve(self, description: TypeDescription, *, indirect: bool = False) -> Ref:
        """Return the identifier of a type description.

        Args:
            description (TypeDescription): Type to identify.
            indirect (bool): Resolve a pointer to an interface as the interface itself.

        Returns:
            Ref: Identifier, stable for the lifetime of this resolver.
        """
        if (
            indirect
            and description.kind is Kind.POINTER
            and description.elem().kind is Kind.INTERFACE
        ):
            description = description.elem()

        namespace = description.namespace
        digest = hashlib.md5(f"{namespace}{description.qualname}".encode("utf-8")).hexdigest()
        return Ref(
            defs=self.ref_prefix,
            package=namespace,
            name=description.name,
            qualname=description.qualname,
            hash=digest,
            id=self._identify(description.name, digest),
        )

    def _identify(self, name: str, digest: str) -> str:
        assigned = self._assigned.get(digest)
        if assigned is not None:
            return assigned

        base = _TRIM_GENERIC_RE.sub("", name)
        hashes = self._names.setdefault(base, {})
        if digest not in hashes:
            hashes[digest] = len(hashes)
        index = hashes[digest]

        identifier = f"{base}{index}" if index else base
        # A suffixed name can clash with a type that is literally called that.
        while self._owners.get(identifier, digest) != digest:
            index += 1
            identifier = f"{base}{index}"

        if index:
            logger.debug("Name %r is already taken; using %r", base, identifier)
        self._owners[identifier] = digest
        self._assigned[digest] = identifier
        return identifier
