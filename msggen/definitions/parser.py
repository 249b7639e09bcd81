"""Line parser for message and service definition text."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ..errors import MalformedDefinitionError

PRIMITIVE_TYPES = frozenset(
    {
        "bool",
        "byte",
        "char",
        "int8",
        "uint8",
        "int16",
        "uint16",
        "int32",
        "uint32",
        "int64",
        "uint64",
        "float32",
        "float64",
        "string",
        "time",
        "duration",
    }
)

# Compound types that live in a fixed package regardless of the declaring type.
BUILTIN_PACKAGES = {
    "Header": "std_msgs",
}

SERVICE_SEPARATOR = "---"

_TYPE_PATTERN = re.compile(
    r"^(?P<base>[A-Za-z][A-Za-z0-9_]*(?:/[A-Za-z][A-Za-z0-9_]*)?)"
    r"(?P<array>\[(?P<length>\d*)\])?$"
)
_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class FieldType:
    """Type portion of a field line, with its package resolved."""

    base: str
    is_array: bool = False
    array_length: Optional[int] = None
    package: Optional[str] = None

    @property
    def is_primitive(self) -> bool:
        return self.package is None

    @property
    def full_name(self) -> str:
        if self.package is None:
            return self.base
        return f"{self.package}/{self.base}"


@dataclass(frozen=True)
class FieldSpec:
    type: FieldType
    name: str


@dataclass(frozen=True)
class ConstantSpec:
    type: FieldType
    name: str
    value: str


@dataclass
class ParsedDefinition:
    """Fields and constants declared by one definition, in source order."""

    fields: List[FieldSpec] = field(default_factory=list)
    constants: List[ConstantSpec] = field(default_factory=list)


def parse_type(token: str, package: str) -> FieldType:
    """Parse a type token such as ``float64``, ``Point[]`` or ``geometry_msgs/Pose[4]``."""
    match = _TYPE_PATTERN.match(token)
    if not match:
        raise MalformedDefinitionError(f"Invalid field type {token!r}")
    base = match.group("base")
    is_array = match.group("array") is not None
    length_text = match.group("length")
    array_length = int(length_text) if length_text else None

    if "/" in base:
        type_package, base = base.split("/", 1)
        return FieldType(base=base, is_array=is_array, array_length=array_length, package=type_package)
    if base in PRIMITIVE_TYPES:
        return FieldType(base=base, is_array=is_array, array_length=array_length)
    type_package = BUILTIN_PACKAGES.get(base, package)
    return FieldType(base=base, is_array=is_array, array_length=array_length, package=type_package)


def parse_line(line: str, package: str) -> FieldSpec | ConstantSpec | None:
    """Parse a single line; blank and comment-only lines return None."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    parts = stripped.split(None, 1)
    if len(parts) != 2:
        raise MalformedDefinitionError(f"Expected '<type> <name>' but found {stripped!r}")
    type_token, rest = parts
    field_type = parse_type(type_token, package)

    # String constants keep everything after '=' verbatim, including '#'.
    if field_type.base == "string" and not field_type.is_array and "=" in rest:
        name, value = rest.split("=", 1)
        return _constant(field_type, name.strip(), value.strip(), stripped)

    rest = rest.split("#", 1)[0].strip()
    if "=" in rest:
        name, value = rest.split("=", 1)
        return _constant(field_type, name.strip(), value.strip(), stripped)

    if not _NAME_PATTERN.match(rest):
        raise MalformedDefinitionError(f"Invalid field name in {stripped!r}")
    return FieldSpec(type=field_type, name=rest)


def _constant(field_type: FieldType, name: str, value: str, line: str) -> ConstantSpec:
    if not field_type.is_primitive or field_type.is_array:
        raise MalformedDefinitionError(f"Constants must use a primitive scalar type: {line!r}")
    if not _NAME_PATTERN.match(name) or not value:
        raise MalformedDefinitionError(f"Invalid constant declaration {line!r}")
    return ConstantSpec(type=field_type, name=name, value=value)


def parse_definition(
    text: str, package: str, *, allow_separator: bool = False
) -> ParsedDefinition:
    """Parse definition text into its fields and constants."""
    parsed = ParsedDefinition()
    separators = 0
    for number, line in enumerate(text.splitlines(), start=1):
        if allow_separator and line.strip() == SERVICE_SEPARATOR:
            separators += 1
            if separators > 1:
                raise MalformedDefinitionError(
                    f"line {number}: more than one '{SERVICE_SEPARATOR}' separator"
                )
            continue
        try:
            spec = parse_line(line, package)
        except MalformedDefinitionError as exc:
            raise MalformedDefinitionError(f"line {number}: {exc}") from exc
        if isinstance(spec, ConstantSpec):
            parsed.constants.append(spec)
        elif isinstance(spec, FieldSpec):
            parsed.fields.append(spec)
    return parsed


def iter_references(
    text: str, package: str, *, allow_separator: bool = False
) -> Iterator[str]:
    """Yield referenced compound type names in first-seen order, once each."""
    seen: set[str] = set()
    parsed = parse_definition(text, package, allow_separator=allow_separator)
    for spec in parsed.fields:
        if spec.type.is_primitive:
            continue
        full_name = spec.type.full_name
        if full_name in seen:
            continue
        seen.add(full_name)
        yield full_name


__all__ = [
    "BUILTIN_PACKAGES",
    "ConstantSpec",
    "FieldSpec",
    "FieldType",
    "PRIMITIVE_TYPES",
    "ParsedDefinition",
    "SERVICE_SEPARATOR",
    "iter_references",
    "parse_definition",
    "parse_line",
    "parse_type",
]
