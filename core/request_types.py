"""Shared request data types."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from uuid import uuid4


@dataclass(frozen=True)
class InboundRequest:
    """The parts of a client request the proxy looks at."""

    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    api: str
    method: str
    target_url: str
    headers: dict[str, str]
    body: bytes | None
    request_id: str = field(default_factory=lambda: uuid4().hex[:8])


@dataclass(frozen=True)
class RedirectState:
    """Where the next upstream hop goes, and with what."""

    url: str
    method: str
    body: bytes | None
    hops: int = 0

    @classmethod
    def initial(cls, prepared: PreparedRequest) -> "RedirectState":
        return cls(url=prepared.target_url, method=prepared.method, body=prepared.body)
