"""Splits service definitions into request and response halves."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from ..errors import MalformedDefinitionError
from ..models import TypeIdentifier
from .parser import SERVICE_SEPARATOR

REQUEST_SUFFIX = "Request"
RESPONSE_SUFFIX = "Response"


@dataclass(frozen=True)
class ServiceHalves:
    """Request and response definitions synthesized from one service."""

    request: TypeIdentifier
    request_text: str
    response: TypeIdentifier
    response_text: str


def split(text: str) -> Tuple[str, str]:
    """Return ``(request, response)`` text divided at the ``---`` line.

    Without a separator the whole text is the request and the response is
    empty. More than one separator is ambiguous and rejected.
    """
    request: List[str] = []
    response: List[str] = []
    separators = 0
    for line in text.splitlines(keepends=True):
        if line.rstrip("\r\n") == SERVICE_SEPARATOR:
            separators += 1
            if separators > 1:
                raise MalformedDefinitionError(
                    f"Service definition contains more than one '{SERVICE_SEPARATOR}' separator"
                )
            continue
        (response if separators else request).append(line)
    return "".join(request), "".join(response)


def split_service(identifier: TypeIdentifier, text: str) -> ServiceHalves:
    """Split a service and name its halves ``<Name>Request`` and ``<Name>Response``."""
    try:
        request_text, response_text = split(text)
    except MalformedDefinitionError as exc:
        raise MalformedDefinitionError(f"{identifier.full_name}: {exc}") from exc
    return ServiceHalves(
        request=identifier.with_suffix(REQUEST_SUFFIX),
        request_text=request_text,
        response=identifier.with_suffix(RESPONSE_SUFFIX),
        response_text=response_text,
    )


__all__ = ["REQUEST_SUFFIX", "RESPONSE_SUFFIX", "ServiceHalves", "split", "split_service"]
