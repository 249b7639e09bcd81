"""Assembles the transitive definition closure for a root type."""

from __future__ import annotations

from typing import List, Set

from ..errors import MalformedDefinitionError, MissingDefinitionError
from ..logging import get_logger
from ..models import ResolvedDeclaration, TypeIdentifier
from .chain import DefinitionProviderChain
from .markers import ClosureMarkers, ensure_newline
from .parser import iter_references


class DeclarationResolver:
    """Builds depth-first, marker-delimited closures through a provider chain.

    Dependencies are appended in first-seen order and each one is expanded
    before its next sibling, so the marker order of the output is stable for a
    given set of definitions. A type already in the closure (including the
    root) is never appended again, which also terminates reference cycles.
    """

    def __init__(self, chain: DefinitionProviderChain, markers: ClosureMarkers | None = None) -> None:
        self.chain = chain
        self.markers = markers or ClosureMarkers()
        self.logger = get_logger("definitions.resolver")

    def resolve(self, root: TypeIdentifier, *, is_message: bool = True) -> ResolvedDeclaration:
        """Resolve a type registered with the chain."""
        text = self._lookup(root.full_name, root)
        return self.resolve_text(root, text, is_message=is_message)

    def resolve_service(self, identifier: TypeIdentifier) -> ResolvedDeclaration:
        """Resolve a service container; both halves contribute dependencies."""
        text = self._lookup(identifier.full_name, identifier)
        return self.resolve_text(identifier, text, is_message=False, allow_separator=True)

    def resolve_text(
        self,
        identifier: TypeIdentifier,
        text: str,
        *,
        is_message: bool = True,
        allow_separator: bool = False,
    ) -> ResolvedDeclaration:
        """Resolve definition text that is not registered under ``identifier``."""
        closure: Set[str] = {identifier.full_name}
        order: List[TypeIdentifier] = []
        blocks: List[str] = []
        self._expand(identifier, identifier, text, allow_separator, closure, order, blocks)

        full_text = ensure_newline(text) + "".join(blocks) if blocks else text
        self.logger.debug(
            "Resolved %s with %d dependencies", identifier.full_name, len(order)
        )
        return ResolvedDeclaration(
            identifier=identifier,
            text=full_text,
            is_message=is_message,
            definition=text,
            dependencies=tuple(order),
        )

    def _expand(
        self,
        root: TypeIdentifier,
        current: TypeIdentifier,
        text: str,
        allow_separator: bool,
        closure: Set[str],
        order: List[TypeIdentifier],
        blocks: List[str],
    ) -> None:
        try:
            references = list(
                iter_references(text, current.package, allow_separator=allow_separator)
            )
        except MalformedDefinitionError as exc:
            raise MalformedDefinitionError(f"{current.full_name}: {exc}") from exc

        for full_name in references:
            if full_name in closure:
                continue
            dependency = TypeIdentifier.parse(full_name)
            dependency_text = self._lookup(full_name, root)
            closure.add(full_name)
            order.append(dependency)
            blocks.append(self.markers.wrap(full_name, dependency_text))
            self._expand(root, dependency, dependency_text, False, closure, order, blocks)

    def _lookup(self, full_name: str, root: TypeIdentifier) -> str:
        try:
            return self.chain.get(full_name)
        except MissingDefinitionError as exc:
            raise MissingDefinitionError(full_name, root=root.full_name) from exc


__all__ = ["DeclarationResolver"]
