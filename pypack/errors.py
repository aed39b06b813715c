"""Error taxonomy raised by the bundling pipeline."""

from __future__ import annotations


class PackError(RuntimeError):
    """Base class for failures that abort a bundling run."""


class NotFoundError(PackError, LookupError):
    """Raised when a library, manifest, or manifest entry cannot be located."""


class ConflictingDefinitionError(PackError):
    """Raised when one qualified name resolves to two different modules."""

    def __init__(self, name: str) -> None:
        super().__init__(f"two different definitions detected for {name}")
        self.name = name


class InvalidIdentifierError(PackError, ValueError):
    """Raised when a library, product, or entry name is not a valid module path."""


class UnsupportedDialectError(PackError, ValueError):
    """Raised when the requested code generation dialect is unknown."""


class MalformedManifestError(PackError):
    """Raised when a pack.list violates the manifest conventions."""


class CircularReferenceError(MalformedManifestError):
    """Raised when libraries reference each other in a cycle."""

    def __init__(self, chain: list[str]) -> None:
        super().__init__("circular library reference: " + " -> ".join(chain))
        self.chain = chain


__all__ = [
    "CircularReferenceError",
    "ConflictingDefinitionError",
    "InvalidIdentifierError",
    "MalformedManifestError",
    "NotFoundError",
    "PackError",
    "UnsupportedDialectError",
]
