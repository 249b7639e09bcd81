"""Primitive type mapping for generated Java interfaces."""

from __future__ import annotations

import json

from ..errors import EmitterError
from ..definitions.parser import ConstantSpec, FieldType

_SCALAR_TYPES = {
    "bool": "boolean",
    "byte": "byte",
    "char": "byte",
    "int8": "byte",
    "uint8": "byte",
    "int16": "short",
    "uint16": "short",
    "int32": "int",
    "uint32": "int",
    "int64": "long",
    "uint64": "long",
    "float32": "float",
    "float64": "double",
    "string": "java.lang.String",
    "time": "org.ros.message.Time",
    "duration": "org.ros.message.Duration",
}

_BUFFER_TYPE = "org.jboss.netty.buffer.ChannelBuffer"

_ARRAY_TYPES = {
    "bool": "boolean[]",
    "byte": _BUFFER_TYPE,
    "char": _BUFFER_TYPE,
    "int8": _BUFFER_TYPE,
    "uint8": _BUFFER_TYPE,
    "int16": "short[]",
    "uint16": "short[]",
    "int32": "int[]",
    "uint32": "int[]",
    "int64": "long[]",
    "uint64": "long[]",
    "float32": "float[]",
    "float64": "double[]",
}

_CONSTANT_TYPES = {
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
}


def java_type(field_type: FieldType) -> str:
    """Return the Java type used for a field's getter and setter."""
    if field_type.is_primitive:
        if field_type.base not in _SCALAR_TYPES:
            raise EmitterError(f"Unsupported field type {field_type.base!r}")
        if field_type.is_array:
            return _ARRAY_TYPES.get(
                field_type.base, f"java.util.List<{_SCALAR_TYPES[field_type.base]}>"
            )
        return _SCALAR_TYPES[field_type.base]
    compound = f"{field_type.package}.{field_type.base}"
    if field_type.is_array:
        return f"java.util.List<{compound}>"
    return compound


def java_constant(constant: ConstantSpec) -> tuple[str, str]:
    """Return ``(java_type, literal)`` for a constant declaration."""
    base = constant.type.base
    if base not in _CONSTANT_TYPES:
        raise EmitterError(f"Unsupported constant type {base!r} for {constant.name}")
    value = constant.value
    if base == "string":
        return _SCALAR_TYPES[base], java_string(value)
    if base == "bool":
        lowered = value.lower()
        if lowered in {"1", "true"}:
            return "boolean", "true"
        if lowered in {"0", "false"}:
            return "boolean", "false"
        raise EmitterError(f"Invalid bool constant {constant.name}={value}")
    target = _SCALAR_TYPES[base]
    try:
        number = float(value) if base.startswith("float") else int(value, 0)
    except ValueError as exc:
        raise EmitterError(f"Invalid {base} constant {constant.name}={value}") from exc
    if target in {"byte", "short"}:
        return target, f"({target}) {number}"
    if target == "long":
        return target, f"{number}L"
    if target == "float":
        return target, f"{number}f"
    return target, str(number)


def java_string(text: str) -> str:
    # JSON string escaping is a valid Java string literal for these inputs.
    return json.dumps(text, ensure_ascii=True)


def accessor_suffix(field_name: str) -> str:
    """Return ``FrameId`` for ``frame_id``."""
    parts = [part for part in field_name.split("_") if part]
    return "".join(part[:1].upper() + part[1:] for part in parts)


__all__ = ["accessor_suffix", "java_constant", "java_string", "java_type"]
