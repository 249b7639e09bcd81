"""Ordered lookup over definition sources."""

from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Optional, Protocol

from ..errors import MissingDefinitionError

HEADER_DEFINITION = """\
# Standard metadata for higher-level stamped data types.
uint32 seq
time stamp
string frame_id
"""

BUILTIN_DEFINITIONS = {
    "std_msgs/Header": HEADER_DEFINITION,
}


class DefinitionProvider(Protocol):
    """Anything that can return raw definition text for a full type name."""

    def lookup(self, full_name: str) -> Optional[str]:
        """Return the raw text for ``full_name`` or None when unknown."""


class StaticDefinitionProvider:
    """In-memory provider for definitions that do not live on disk."""

    def __init__(self, definitions: Mapping[str, str]) -> None:
        self._definitions = MappingProxyType(dict(definitions))

    def lookup(self, full_name: str) -> Optional[str]:
        return self._definitions.get(full_name)


def builtin_provider() -> StaticDefinitionProvider:
    """Return a provider preloaded with built-in compound types."""
    return StaticDefinitionProvider(BUILTIN_DEFINITIONS)


class DefinitionProviderChain:
    """Queries providers in registration order; the first hit wins."""

    def __init__(self) -> None:
        self._providers: List[DefinitionProvider] = []

    def add_provider(self, provider: DefinitionProvider) -> None:
        self._providers.append(provider)

    def get(self, full_name: str) -> str:
        for provider in self._providers:
            text = provider.lookup(full_name)
            if text is not None:
                return text
        raise MissingDefinitionError(full_name)

    def has(self, full_name: str) -> bool:
        return any(provider.lookup(full_name) is not None for provider in self._providers)


__all__ = [
    "BUILTIN_DEFINITIONS",
    "DefinitionProvider",
    "DefinitionProviderChain",
    "StaticDefinitionProvider",
    "builtin_provider",
]
