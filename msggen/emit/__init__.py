"""Emitters that turn resolved declarations into target source text."""

from .base import Emitter
from .java import DEFAULT_BASE_INTERFACE, JavaInterfaceEmitter

__all__ = ["DEFAULT_BASE_INTERFACE", "Emitter", "JavaInterfaceEmitter"]
