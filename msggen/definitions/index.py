"""Definition file discovery and per-kind indexing."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Set

from ..errors import MalformedDefinitionError
from ..logging import get_logger
from ..models import DefinitionKind, RawDefinition, TypeIdentifier

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
}

_logger = get_logger("definitions.index")


@dataclass(frozen=True)
class UnreadableDefinition:
    """A qualifying file whose contents could not be decoded or read."""

    identifier: TypeIdentifier
    source: Path
    error: str

    def as_error(self) -> MalformedDefinitionError:
        return MalformedDefinitionError(
            f"{self.identifier.full_name}: cannot read {self.source}: {self.error}"
        )


class DefinitionIndex:
    """Immutable snapshot mapping ``package/Name`` to raw definitions of one kind."""

    def __init__(
        self,
        kind: DefinitionKind,
        definitions: Iterable[RawDefinition] = (),
        unreadable: Iterable[UnreadableDefinition] = (),
    ) -> None:
        self.kind = kind
        by_name: Dict[str, RawDefinition] = {}
        by_package: Dict[str, Set[TypeIdentifier]] = {}
        for definition in definitions:
            by_name[definition.identifier.full_name] = definition
        for definition in by_name.values():
            by_package.setdefault(definition.identifier.package, set()).add(definition.identifier)
        self._definitions: Mapping[str, RawDefinition] = MappingProxyType(by_name)
        self._packages: Mapping[str, FrozenSet[TypeIdentifier]] = MappingProxyType(
            {package: frozenset(ids) for package, ids in by_package.items()}
        )
        self._unreadable: Mapping[str, UnreadableDefinition] = MappingProxyType(
            {entry.identifier.full_name: entry for entry in unreadable}
        )

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, full_name: object) -> bool:
        return full_name in self._definitions

    def packages(self) -> FrozenSet[str]:
        unreadable = {entry.identifier.package for entry in self._unreadable.values()}
        return frozenset(self._packages) | unreadable

    def identifiers(self, package: str) -> FrozenSet[TypeIdentifier]:
        return self._packages.get(package, frozenset())

    def unreadable(self, package: str) -> List[UnreadableDefinition]:
        entries = [e for e in self._unreadable.values() if e.identifier.package == package]
        return sorted(entries, key=lambda entry: entry.identifier)

    def get(self, full_name: str) -> Optional[RawDefinition]:
        return self._definitions.get(full_name)

    def get_unreadable(self, full_name: str) -> Optional[UnreadableDefinition]:
        return self._unreadable.get(full_name)


@dataclass(frozen=True)
class _ScannedFile:
    identifier: TypeIdentifier
    source: Path
    # True when the kind directory is the root itself or sits directly under it.
    at_root: bool
    text: Optional[str]
    error: Optional[str] = None


class DefinitionFileIndex:
    """Scans registered directories for one definition kind."""

    def __init__(self, kind: DefinitionKind) -> None:
        self.kind = kind
        self._directories: List[Path] = []
        self._current = DefinitionIndex(kind)

    @property
    def directories(self) -> List[Path]:
        return list(self._directories)

    @property
    def current(self) -> DefinitionIndex:
        return self._current

    def add_directory(self, path: Path | str) -> bool:
        """Register a root to scan; missing directories are skipped.

        Returns True when the directory exists and is registered.
        """
        directory = Path(path).expanduser()
        if not directory.is_dir():
            _logger.debug("Skipping missing %s directory %s", self.kind.name, directory)
            return False
        directory = directory.resolve()
        if directory not in self._directories:
            self._directories.append(directory)
        return True

    def clear_directories(self) -> None:
        """Forget every registered root; the current index is left in place."""
        self._directories.clear()

    def update(self) -> DefinitionIndex:
        """Rescan every registered root and install a fresh index."""
        self._current = self._build(self._scan())
        _logger.debug(
            "Indexed %d %s definitions across %d packages",
            len(self._current),
            self.kind.name,
            len(self._current.packages()),
        )
        return self._current

    def update_one_package(self, package: str) -> DefinitionIndex:
        """Rescan, keeping only ``package`` and forcing that name onto retained entries."""
        retained: List[_ScannedFile] = []
        for scanned in self._scan():
            identifier = scanned.identifier
            if identifier.package != package and not scanned.at_root:
                continue
            if identifier.package != package:
                _logger.debug(
                    "Re-keying %s from %s to package %s",
                    identifier.full_name,
                    scanned.source,
                    package,
                )
            retained.append(
                replace(scanned, identifier=TypeIdentifier(package=package, name=identifier.name))
            )
        self._current = self._build(retained)
        _logger.debug(
            "Indexed %d %s definitions for package %s", len(self._current), self.kind.name, package
        )
        return self._current

    def get_packages(self) -> FrozenSet[str]:
        return self._current.packages()

    def get_message_identifiers_by_package(self, package: str) -> FrozenSet[TypeIdentifier]:
        return self._current.identifiers(package)

    def get(self, full_name: str) -> Optional[RawDefinition]:
        return self._current.get(full_name)

    def lookup(self, full_name: str) -> Optional[str]:
        definition = self._current.get(full_name)
        if definition is not None:
            return definition.text
        unreadable = self._current.get_unreadable(full_name)
        if unreadable is not None:
            raise unreadable.as_error()
        return None

    def _build(self, scanned_files: Iterable[_ScannedFile]) -> DefinitionIndex:
        seen: Dict[str, _ScannedFile] = {}
        for scanned in scanned_files:
            key = scanned.identifier.full_name
            previous = seen.get(key)
            if previous is not None:
                _logger.warning(
                    "%s definition %s from %s shadows %s",
                    self.kind.name.capitalize(),
                    key,
                    scanned.source,
                    previous.source,
                )
            seen[key] = scanned
        definitions = [
            RawDefinition(identifier=s.identifier, text=s.text, kind=self.kind, source=s.source)
            for s in seen.values()
            if s.text is not None
        ]
        unreadable = [
            UnreadableDefinition(identifier=s.identifier, source=s.source, error=s.error or "")
            for s in seen.values()
            if s.text is None
        ]
        return DefinitionIndex(self.kind, definitions, unreadable)

    def _scan(self) -> Iterator[_ScannedFile]:
        for root in self._directories:
            for path in _iter_definition_files(root, self.kind):
                kind_dir = path.parent
                at_root = kind_dir == root or kind_dir.parent == root
                if kind_dir == root:
                    package = root.parent.name
                else:
                    package = kind_dir.parent.name
                identifier = TypeIdentifier(package=package, name=path.stem)
                try:
                    text = path.read_text(encoding="utf-8")
                except (UnicodeDecodeError, OSError) as exc:
                    _logger.warning("Cannot read %s definition %s: %s", self.kind.name, path, exc)
                    yield _ScannedFile(identifier, path, at_root, None, str(exc))
                    continue
                yield _ScannedFile(identifier, path, at_root, text)


def _iter_definition_files(root: Path, kind: DefinitionKind) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        current_dir = Path(dirpath)
        if current_dir.name != kind.directory:
            continue
        for filename in sorted(filenames):
            path = current_dir / filename
            if path.suffix == kind.suffix and path.is_file():
                yield path


__all__ = ["DefinitionFileIndex", "DefinitionIndex", "UnreadableDefinition"]
