"""Exception hierarchy shared by the msggen pipeline."""

from __future__ import annotations


class MsggenError(RuntimeError):
    """Base class for every error raised by msggen."""


class ConfigError(MsggenError):
    """Raised when generation inputs or .msggen.yml are unusable."""


class MissingDefinitionError(MsggenError):
    """Raised when no definition provider knows a type."""

    def __init__(self, full_name: str, *, root: str | None = None) -> None:
        self.full_name = full_name
        self.root = root
        if root and root != full_name:
            message = f"No definition found for {full_name} (required by {root})"
        else:
            message = f"No definition found for {full_name}"
        super().__init__(message)


class MalformedDefinitionError(MsggenError):
    """Raised when definition text cannot be parsed."""


class EmitterError(MsggenError):
    """Raised when an emitter cannot render a declaration."""


class GenerationRunError(MsggenError):
    """Raised for directory-level I/O failures that abort a generation run."""


__all__ = [
    "ConfigError",
    "EmitterError",
    "GenerationRunError",
    "MalformedDefinitionError",
    "MissingDefinitionError",
    "MsggenError",
]
