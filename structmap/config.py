"""Per-call construction settings."""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ServiceContainer(Protocol):
    """Minimal dependency container consulted for nested object fields."""

    def has(self, key: Any) -> bool: ...

    def get(self, key: Any) -> Any: ...


@dataclass(frozen=True)
class ConstructionConfig:
    """Options for one construction, inherited by nested structs.

    Attributes:
        strict: Reject input keys that are neither a field name nor an alias.
        container: Optional service container for nested non-struct types.
    """

    strict: bool = False
    container: Optional[ServiceContainer] = None


DEFAULT_CONFIG = ConstructionConfig()
