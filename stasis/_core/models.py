from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from stasis._core._headers import Headers
from stasis._utils import canonical_path, split_target


@dataclass(frozen=True)
class CacheKey:
    """
    Identity of a cached response: the served root plus the request target,
    normalized.

    The path is percent-decoded and re-encoded canonically so that `/a%20b`
    and `/a b` share one entry. The query string is kept verbatim. Handlers
    with different roots sharing one store never see each other's entries.
    """

    value: str
    root: str = ""

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Cache key must not be empty")

    @classmethod
    def from_target(cls, target: Union[str, "CacheKey"], root: str = "") -> "CacheKey":
        if isinstance(target, CacheKey):
            return target
        if not target:
            raise ValueError("Cache key must not be empty")
        path, query = split_target(target)
        path = canonical_path(path)
        return cls(f"{path}?{query}" if query else path, root=root)

    def __str__(self) -> str:
        return self.value


@dataclass
class Request:
    method: str
    target: str
    """Raw (undecoded) request path, including the query string."""
    headers: Headers = field(default_factory=Headers)


@dataclass
class Response:
    status_code: int
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""


@dataclass(frozen=True)
class CacheEntry:
    headers: Headers
    body: bytes


@dataclass(frozen=True)
class RequestValidators:
    if_modified_since: Optional[str] = None
    if_none_match: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Headers) -> "RequestValidators":
        return cls(
            if_modified_since=headers.get("if-modified-since") or None,
            if_none_match=headers.get("if-none-match") or None,
        )


@dataclass(frozen=True)
class FileMetadata:
    path: str
    size: int
    mtime: float
    mtime_ms: int
    is_directory: bool = False
