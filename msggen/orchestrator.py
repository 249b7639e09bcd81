"""Pipeline orchestration: scan, resolve and emit generation units."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Set

from .definitions import (
    REQUEST_SUFFIX,
    RESPONSE_SUFFIX,
    DeclarationResolver,
    DefinitionFileIndex,
    DefinitionProvider,
    DefinitionProviderChain,
    builtin_provider,
    split_service,
)
from .emit import Emitter, JavaInterfaceEmitter
from .errors import ConfigError, GenerationRunError, MalformedDefinitionError, MsggenError
from .logging import get_logger, unit_logger
from .models import (
    MESSAGE_KIND,
    SERVICE_KIND,
    GenerationReport,
    GenerationUnit,
    ResolvedDeclaration,
    TypeIdentifier,
    UnitFailure,
)


class Orchestrator:
    """Coordinates definition indexing, closure resolution and emission."""

    def __init__(
        self,
        emitter: Emitter | None = None,
        *,
        message_index: DefinitionFileIndex | None = None,
        service_index: DefinitionFileIndex | None = None,
        extra_providers: Iterable[DefinitionProvider] = (),
    ) -> None:
        self.emitter = emitter or JavaInterfaceEmitter()
        self.message_index = message_index or DefinitionFileIndex(MESSAGE_KIND)
        self.service_index = service_index or DefinitionFileIndex(SERVICE_KIND)
        self.chain = DefinitionProviderChain()
        self.chain.add_provider(self.message_index)
        self.chain.add_provider(self.service_index)
        for provider in extra_providers:
            self.chain.add_provider(provider)
        self.chain.add_provider(builtin_provider())
        self.resolver = DeclarationResolver(self.chain)
        self.logger = get_logger("orchestrator")

    def generate(
        self,
        output_dir: Path | str,
        requested_packages: Sequence[str],
        package_roots: Sequence[Path | str],
        source_roots: Sequence[Path | str],
    ) -> GenerationReport:
        """Generate every message and service of the requested packages.

        Per-type failures are logged and recorded in the returned report; only
        configuration errors and directory-level I/O failures abort the run.
        """
        packages = list(dict.fromkeys(requested_packages))
        package_roots = list(package_roots)
        source_roots = list(source_roots)
        if not package_roots:
            raise ConfigError("No package path supplied")
        if not source_roots:
            raise ConfigError("No source path supplied")

        self._index(packages, package_roots, source_roots)
        report = GenerationReport()

        selected = packages or sorted(self._discovered_packages())
        for package in selected:
            empty = not self.message_index.get_message_identifiers_by_package(package)
            empty &= not self.service_index.get_message_identifiers_by_package(package)
            empty &= not self.message_index.current.unreadable(package)
            empty &= not self.service_index.current.unreadable(package)
            if empty:
                self.logger.warning("No interfaces found for package %s", package)
                report.empty_packages.append(package)

        output_path = Path(output_dir)
        self._ensure_directory(output_path)

        if not packages:
            self.logger.info("No package given; generating all discovered packages")
        self._record_unreadable(selected, report)
        for identifier in self._identifiers(self.message_index, packages):
            self._submit(
                identifier,
                lambda: self.resolver.resolve(identifier),
                True,
                output_path,
                report,
            )
        for identifier in self._identifiers(self.service_index, packages):
            self._generate_service(identifier, output_path, report)

        self.logger.info(
            "Generation finished: %d units attempted, %d written, %d failed",
            len(report.attempted),
            len(report.generated),
            len(report.failures),
        )
        return report

    def resolve(
        self,
        full_name: str,
        package_roots: Sequence[Path | str],
        source_roots: Sequence[Path | str] = (),
    ) -> ResolvedDeclaration:
        """Index the given roots and resolve a single type by full name."""
        identifier = TypeIdentifier.parse(full_name)
        roots = [*package_roots, *source_roots]
        if not roots:
            raise ConfigError("No package path supplied")
        self._index([], roots, [])
        if identifier.full_name not in self.message_index.current:
            service = self.service_index.get(identifier.full_name)
            if service is not None:
                return self.resolver.resolve_text(
                    identifier, service.text, is_message=False, allow_separator=True
                )
        return self.resolver.resolve(identifier)

    def _index(
        self,
        packages: Sequence[str],
        package_roots: Sequence[Path | str],
        source_roots: Sequence[Path | str],
    ) -> None:
        # Each call scans only the roots it is given.
        self.message_index.clear_directories()
        self.service_index.clear_directories()
        existing_package_roots: List[Path | str] = []
        for directory in package_roots:
            registered = self.message_index.add_directory(directory)
            self.service_index.add_directory(directory)
            if registered:
                existing_package_roots.append(directory)
        for directory in source_roots:
            self.message_index.add_directory(directory)
            self.service_index.add_directory(directory)

        if len(packages) == 1 and len(existing_package_roots) == 1:
            package = packages[0]
            self.logger.info(
                "Single package generation, forcing package %s with path %s",
                package,
                existing_package_roots[0],
            )
            self.message_index.update_one_package(package)
            self.service_index.update_one_package(package)
        else:
            self.message_index.update()
            self.service_index.update()

    def _discovered_packages(self) -> Set[str]:
        return set(self.message_index.get_packages()) | set(self.service_index.get_packages())

    @staticmethod
    def _identifiers(index: DefinitionFileIndex, packages: Sequence[str]) -> List[TypeIdentifier]:
        selected = packages or sorted(index.get_packages())
        identifiers: Set[TypeIdentifier] = set()
        for package in selected:
            identifiers.update(index.get_message_identifiers_by_package(package))
        return sorted(identifiers)

    def _record_unreadable(self, packages: Sequence[str], report: GenerationReport) -> None:
        for package in packages:
            for entry in self.message_index.current.unreadable(package):
                report.attempted.append(entry.identifier.full_name)
                self._record_failure(entry.identifier.full_name, entry.as_error(), report)
            for entry in self.service_index.current.unreadable(package):
                for unit in (
                    entry.identifier,
                    entry.identifier.with_suffix(REQUEST_SUFFIX),
                    entry.identifier.with_suffix(RESPONSE_SUFFIX),
                ):
                    report.attempted.append(unit.full_name)
                    self._record_failure(unit.full_name, entry.as_error(), report)

    def _generate_service(
        self, identifier: TypeIdentifier, output_dir: Path, report: GenerationReport
    ) -> None:
        raw = self.service_index.get(identifier.full_name)
        if raw is None:  # pragma: no cover - identifiers come from the same index
            return
        try:
            halves = split_service(identifier, raw.text)
        except MalformedDefinitionError as exc:
            for unit in (
                identifier,
                identifier.with_suffix(REQUEST_SUFFIX),
                identifier.with_suffix(RESPONSE_SUFFIX),
            ):
                report.attempted.append(unit.full_name)
                self._record_failure(unit.full_name, exc, report)
            return

        self._submit(
            identifier,
            lambda: self.resolver.resolve_text(
                identifier, raw.text, is_message=False, allow_separator=True
            ),
            False,
            output_dir,
            report,
        )

        self._submit(
            halves.request,
            lambda: self.resolver.resolve_text(halves.request, halves.request_text),
            True,
            output_dir,
            report,
        )
        self._submit(
            halves.response,
            lambda: self.resolver.resolve_text(halves.response, halves.response_text),
            True,
            output_dir,
            report,
        )

    def _submit(
        self,
        identifier: TypeIdentifier,
        resolve: Callable[[], ResolvedDeclaration],
        is_message: bool,
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        full_name = identifier.full_name
        report.attempted.append(full_name)
        try:
            unit = GenerationUnit(declaration=resolve(), is_message=is_message)
        except MsggenError as exc:
            self._record_failure(full_name, exc, report)
            return

        try:
            content = self.emitter.emit(unit.declaration, unit.is_message)
        except Exception as exc:  # emitters are pluggable; failures stay with this unit
            self._record_failure(full_name, exc, report)
            return

        path = self._write(unit.declaration, content, output_dir, report)
        if path is not None:
            report.generated.append(path)
            unit_logger(self.logger, full_name).info("Generated interface for %s", full_name)

    def _write(
        self,
        declaration: ResolvedDeclaration,
        content: str,
        output_dir: Path,
        report: GenerationReport,
    ) -> Optional[Path]:
        package_dir = output_dir / declaration.package
        self._ensure_directory(package_dir)
        path = package_dir / f"{declaration.name}.{self.emitter.extension}"
        try:
            with path.open("w", encoding="utf-8", newline="\n") as handle:
                handle.write(content)
        except OSError as exc:
            self._record_failure(declaration.full_name, exc, report)
            return None
        return path

    @staticmethod
    def _ensure_directory(path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise GenerationRunError(f"Cannot create output directory {path}: {exc}") from exc

    def _record_failure(self, full_name: str, exc: Exception, report: GenerationReport) -> None:
        report.failures.append(UnitFailure(full_name=full_name, error=str(exc)))
        self._log_exception(f"Failed to generate interface for {full_name}", exc, unit=full_name)

    def _log_exception(self, message: str, exc: Exception, *, unit: str | None = None) -> None:
        logger = unit_logger(self.logger, unit) if unit else self.logger
        if self.logger.isEnabledFor(logging.DEBUG):
            logger.exception("%s: %s", message, exc)
        else:
            logger.error("%s: %s", message, exc)


__all__ = ["Orchestrator"]
