"""Core data models shared across msggen components."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import MalformedDefinitionError


@dataclass(frozen=True, eq=False)
class TypeIdentifier:
    """Package-qualified name of a message or service type."""

    package: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.package}/{self.name}"

    @classmethod
    def parse(cls, full_name: str) -> "TypeIdentifier":
        """Build an identifier from ``package/Name`` text."""
        package, sep, name = full_name.strip().partition("/")
        if not sep or not package or not name or "/" in name:
            raise MalformedDefinitionError(
                f"Type name must look like 'package/Name', got {full_name!r}"
            )
        return cls(package=package, name=name)

    def with_suffix(self, suffix: str) -> "TypeIdentifier":
        return TypeIdentifier(package=self.package, name=f"{self.name}{suffix}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeIdentifier):
            return NotImplemented
        return self.full_name == other.full_name

    def __hash__(self) -> int:
        return hash(self.full_name)

    def __lt__(self, other: "TypeIdentifier") -> bool:
        return self.full_name < other.full_name

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class DefinitionKind:
    """Category of definition file, keyed by directory name and suffix."""

    name: str
    directory: str
    suffix: str


MESSAGE_KIND = DefinitionKind(name="message", directory="msg", suffix=".msg")
SERVICE_KIND = DefinitionKind(name="service", directory="srv", suffix=".srv")


@dataclass(frozen=True)
class RawDefinition:
    """Unresolved definition text exactly as read from disk."""

    identifier: TypeIdentifier
    text: str
    kind: DefinitionKind
    source: Optional[Path] = None


@dataclass(frozen=True)
class ResolvedDeclaration:
    """A type's own definition followed by every type it transitively references."""

    identifier: TypeIdentifier
    text: str
    is_message: bool
    definition: str
    dependencies: Tuple[TypeIdentifier, ...] = ()

    @property
    def package(self) -> str:
        return self.identifier.package

    @property
    def name(self) -> str:
        return self.identifier.name

    @property
    def full_name(self) -> str:
        return self.identifier.full_name


@dataclass(frozen=True)
class GenerationUnit:
    """One declaration submitted to the emitter."""

    declaration: ResolvedDeclaration
    is_message: bool


@dataclass(frozen=True)
class UnitFailure:
    """A generation unit that could not be produced."""

    full_name: str
    error: str


@dataclass
class GenerationReport:
    """Outcome of a generation run: every unit attempted, some possibly failed."""

    attempted: List[str] = field(default_factory=list)
    generated: List[Path] = field(default_factory=list)
    failures: List[UnitFailure] = field(default_factory=list)
    empty_packages: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures
