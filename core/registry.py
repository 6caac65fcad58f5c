# =============================================================================
# core/registry.py - Capability Registry
# =============================================================================
# Holds every configured service instance the application needs at request
# time (persistence contexts, caches, mappers, policies...).
#
# The registry is written only while the bootstrap sequence runs. Once the
# listener is about to start it is frozen, after which it is safe to read
# from any number of concurrent requests without locking.
#
# Usage:
#   registry = CapabilityRegistry()
#   registry.register(MemoryCache, MemoryCache(ttl_seconds=30))
#   cache = registry.get(MemoryCache)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Hashable, Iterator, TypeVar, overload

logger = logging.getLogger(__name__)

T = TypeVar("T")

CapabilityKey = Hashable


def describe_key(key: CapabilityKey) -> str:
    """Human-readable name for a capability key (class name or string)."""
    return getattr(key, "__name__", None) or str(key)


class StartupError(Exception):
    """
    Base error for anything that prevents the service from starting.

    Startup errors are fatal: the process must exit without ever
    accepting a connection.
    """

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        self.message = message
        self.step = step


class MissingCapabilityError(StartupError):
    """Raised when a capability is requested before it has been registered."""

    def __init__(self, key: CapabilityKey, step: str | None = None):
        name = describe_key(key)
        if step:
            message = (
                f"Bootstrap step '{step}' requires capability '{name}' "
                f"which has not been registered by an earlier step"
            )
        else:
            message = f"Capability '{name}' has not been registered"
        super().__init__(message, step=step)
        self.key = key


class RegistryFrozenError(StartupError):
    """Raised when something tries to register after the registry is frozen."""

    def __init__(self, key: CapabilityKey):
        super().__init__(
            f"Cannot register '{describe_key(key)}': the capability registry "
            f"is frozen once the server starts accepting connections"
        )
        self.key = key


class CapabilityRegistry:
    """
    Mapping from capability key to configured instance.

    Keys are usually classes (so lookups are typed) but plain strings are
    accepted for named capabilities such as policies.
    """

    def __init__(self) -> None:
        self._entries: dict[CapabilityKey, Any] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, key: CapabilityKey, instance: Any) -> None:
        """
        Register a capability.

        Raises:
            RegistryFrozenError: if the registry has been frozen
            StartupError: if the key is already registered
        """
        if self._frozen:
            raise RegistryFrozenError(key)
        if key in self._entries:
            raise StartupError(
                f"Capability '{describe_key(key)}' is already registered"
            )
        self._entries[key] = instance
        logger.debug(f"Registered capability {describe_key(key)}")

    @overload
    def get(self, key: type[T]) -> T: ...

    @overload
    def get(self, key: str) -> Any: ...

    def get(self, key):
        """
        Look up a capability.

        Raises:
            MissingCapabilityError: if nothing is registered under the key
        """
        try:
            return self._entries[key]
        except KeyError:
            raise MissingCapabilityError(key) from None

    def freeze(self) -> None:
        if not self._frozen:
            self._frozen = True
            logger.info(f"Capability registry frozen with {len(self._entries)} entries")

    def keys(self) -> list[CapabilityKey]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[CapabilityKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
