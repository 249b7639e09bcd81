"""Definition discovery, lookup and closure resolution."""

from .chain import DefinitionProvider, DefinitionProviderChain, StaticDefinitionProvider, builtin_provider
from .index import DefinitionFileIndex, DefinitionIndex
from .markers import ClosureBlock, ClosureMarkers, split_closure
from .resolver import DeclarationResolver
from .splitter import REQUEST_SUFFIX, RESPONSE_SUFFIX, ServiceHalves, split, split_service

__all__ = [
    "ClosureBlock",
    "ClosureMarkers",
    "DeclarationResolver",
    "DefinitionFileIndex",
    "DefinitionIndex",
    "DefinitionProvider",
    "DefinitionProviderChain",
    "REQUEST_SUFFIX",
    "RESPONSE_SUFFIX",
    "ServiceHalves",
    "StaticDefinitionProvider",
    "builtin_provider",
    "split",
    "split_closure",
    "split_service",
]
