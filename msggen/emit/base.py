"""Base class for emitters that render resolved declarations."""

from abc import ABC, abstractmethod

from ..models import ResolvedDeclaration


class Emitter(ABC):
    """Contract for turning a resolved declaration into target source text."""

    extension: str = "txt"

    @abstractmethod
    def emit(self, declaration: ResolvedDeclaration, is_message: bool) -> str:
        """Return generated source; raise EmitterError for unsupported input."""
