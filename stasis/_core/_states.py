from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, Sequence, Tuple, Union

from stasis._core._headers import Headers
from stasis._core._resolver import ResolvedPath, resolve_path
from stasis._core.models import (
    CacheEntry,
    CacheKey,
    FileMetadata,
    Request,
    RequestValidators,
    Response,
)
from stasis._exceptions import ConfigurationError, ForbiddenPath
from stasis._utils import DEFAULT_CONTENT_TYPE, format_http_date, guess_content_type, parse_date

SUPPORTED_METHODS = ("GET", "HEAD")
FORBIDDEN_BODY = b"Forbidden"

logger = logging.getLogger("stasis.core.states")


@dataclass
class StaticOptions:
    """
    Configuration of a static file handler.

    Attributes:
    ----------
    root : str
        Directory whose subtree is served. Required.

    max_age : int
        Browser cache lifetime in milliseconds. Emitted as
        `Cache-Control: public, max-age=<max_age // 1000>`.

        Default: 0

    enable_cache : bool
        Keep full responses in memory, keyed by root and request target, until they are
        evicted with `clear_cache` or overwritten by a fresh read.

        Default: False

    index_files : tuple[str, ...]
        File names tried, in order, for request paths ending with `/`.

        Default: ("index.html",)

    content_type_lookup : Callable[[str], str | None]
        Maps a file path to its media type. `None` falls back to
        `application/octet-stream`.

        Default: `mimetypes.guess_type`
    """

    root: str
    max_age: int = 0
    enable_cache: bool = False
    index_files: Tuple[str, ...] = ("index.html",)
    content_type_lookup: Callable[[str], Optional[str]] = guess_content_type

    def __post_init__(self) -> None:
        if not self.root:
            raise ConfigurationError("A root directory is required to serve static files")
        self.root = os.path.abspath(os.fspath(self.root))

        if isinstance(self.max_age, bool) or not isinstance(self.max_age, int):
            raise ConfigurationError(f"max_age must be an integer number of milliseconds, got {self.max_age!r}")
        if self.max_age < 0:
            raise ConfigurationError(f"max_age must not be negative, got {self.max_age}")

        if isinstance(self.index_files, str):
            self.index_files = (self.index_files,)
        self.index_files = tuple(self.index_files)
        for index_file in self.index_files:
            if not index_file or "/" in index_file or "\\" in index_file or index_file in (".", ".."):
                raise ConfigurationError(f"Index files must be plain file names, got {index_file!r}")

    @classmethod
    def from_options(
        cls,
        root: str,
        max_age: Optional[int] = None,
        cache: Union[bool, int, None] = None,
        **kwargs: Any,
    ) -> "StaticOptions":
        """
        Build options from the loose `max_age` / `cache` pair.

        Caching is enabled when `cache` is truthy. When `max_age` is not given
        and `cache` is an integer, it doubles as the max age. Both values are
        milliseconds.
        """
        enable_cache = bool(cache)
        if not max_age and enable_cache and not isinstance(cache, bool):
            max_age = cache
        return cls(root=root, max_age=max_age or 0, enable_cache=enable_cache, **kwargs)


def make_etag(size: int, mtime_ms: int) -> str:
    """
    Weak validator built from the file size and its modification time in
    milliseconds, e.g. `"1024-1704067200000"`. Content changes that keep both
    the size and the timestamp are not detected.
    """
    return f"{size}-{mtime_ms}"


def is_conditional(validators: RequestValidators) -> bool:
    return bool(validators.if_modified_since or validators.if_none_match)


def is_modified(validators: RequestValidators, headers: Headers) -> bool:
    """
    Decide whether the client's copy is stale.

    `If-None-Match` wins when it matches the ETag exactly. Otherwise
    `If-Modified-Since` is compared against `Last-Modified` with second
    precision; a file modified exactly at that instant counts as unmodified.
    Unparsable dates are ignored.
    """
    etag = headers.get("etag")
    if validators.if_none_match and etag and validators.if_none_match == etag:
        return False

    last_modified = headers.get("last-modified")
    if validators.if_modified_since and last_modified:
        modified_since = parse_date(validators.if_modified_since)
        last_modified_timestamp = parse_date(last_modified)
        if modified_since is not None and last_modified_timestamp is not None:
            if last_modified_timestamp <= modified_since:
                return False

    return True


def build_headers(
    file_path: str,
    metadata: FileMetadata,
    max_age: int,
    content_type_lookup: Callable[[str], Optional[str]] = guess_content_type,
) -> Headers:
    return Headers(
        {
            "Content-Type": content_type_lookup(file_path) or DEFAULT_CONTENT_TYPE,
            "Content-Length": str(metadata.size),
            "Last-Modified": format_http_date(metadata.mtime),
            "Cache-Control": f"public, max-age={max_age // 1000}",
            "ETag": make_etag(metadata.size, metadata.mtime_ms),
        }
    )


def strip_content_headers(headers: Headers) -> Headers:
    """A 304 must not describe a body, so every `Content-*` field goes."""
    return Headers({key: value for key, value in headers.items() if not key.startswith("content")})


def forbidden_response(head: bool = False) -> Response:
    return Response(
        status_code=403,
        headers=Headers({"Content-Type": "text/plain", "Content-Length": str(len(FORBIDDEN_BODY))}),
        body=b"" if head else FORBIDDEN_BODY,
    )


def is_head(request: Request) -> bool:
    return request.method.upper() == "HEAD"


## States


@dataclass
class State(ABC):
    options: StaticOptions

    @abstractmethod
    def next(self, *args: Any, **kwargs: Any) -> Union["State", None]:
        raise NotImplementedError("Subclasses must implement this method")


@dataclass
class Idle(State):
    """
    Entry point of the request state machine.

    State Transitions:
    -----------------
    - Declined: the method is neither GET nor HEAD
    - Forbidden: the path tries to escape the root directory
    - PathResolved: the path maps onto one or more candidate files
    """

    def next(self, request: Request) -> Union["Declined", "Forbidden", "PathResolved"]:
        if request.method.upper() not in SUPPORTED_METHODS:
            logger.debug("Declining request with unsupported method: method=%s", request.method)
            return Declined(options=self.options, reason="method")

        try:
            resolved = resolve_path(self.options.root, request.target, self.options.index_files)
        except ForbiddenPath as exc:
            logger.debug("Rejecting path traversal attempt: path=%r", exc.path)
            return Forbidden(options=self.options, request=request)

        return PathResolved(
            options=self.options,
            request=request,
            resolved=resolved,
            key=CacheKey.from_target(request.target or "/", root=self.options.root),
            validators=RequestValidators.from_headers(request.headers),
        )


@dataclass
class PathResolved(State):
    request: Request
    resolved: ResolvedPath
    key: CacheKey
    validators: RequestValidators

    @property
    def use_cache(self) -> bool:
        """Conditional requests always go to the filesystem."""
        return self.options.enable_cache and not is_conditional(self.validators)

    def next(self, entry: Optional[CacheEntry] = None) -> Union["FromCache", "NeedsStat"]:
        if entry is not None and self.use_cache:
            return FromCache(options=self.options, request=self.request, entry=entry)
        return NeedsStat(
            options=self.options,
            request=self.request,
            candidates=self.resolved.candidates,
            key=self.key,
            validators=self.validators,
        )


@dataclass
class NeedsStat(State):
    request: Request
    candidates: Sequence[str]
    key: CacheKey
    validators: RequestValidators

    def next(self, metadata: Optional[FileMetadata]) -> Union["Declined", "NotModified", "NeedsBody"]:
        if metadata is None:
            logger.debug("No file found, passing through: candidates=%s", list(self.candidates))
            return Declined(options=self.options, reason="not_found")
        if metadata.is_directory:
            logger.debug("Path is a directory, passing through: path=%s", metadata.path)
            return Declined(options=self.options, reason="directory")

        headers = build_headers(
            metadata.path,
            metadata,
            self.options.max_age,
            self.options.content_type_lookup,
        )

        if not is_modified(self.validators, headers):
            return NotModified(options=self.options, headers=strip_content_headers(headers))

        return NeedsBody(
            options=self.options,
            request=self.request,
            key=self.key,
            metadata=metadata,
            headers=headers,
        )


@dataclass
class NeedsBody(State):
    request: Request
    key: CacheKey
    metadata: FileMetadata
    headers: Headers

    def next(self, body: bytes) -> Union["StoreAndUse", "FullBody"]:
        """
        A body whose length differs from the stat result means the file
        changed in between. The size-dependent headers are then rebuilt from
        the bytes actually read and the response is not cached.
        """
        if len(body) != self.metadata.size:
            logger.debug(
                "File changed while reading, not caching: path=%s stat_size=%d read_size=%d",
                self.metadata.path,
                self.metadata.size,
                len(body),
            )
            metadata = replace(self.metadata, size=len(body))
            headers = build_headers(metadata.path, metadata, self.options.max_age, self.options.content_type_lookup)
            return FullBody(
                options=self.options,
                request=self.request,
                entry=CacheEntry(headers=headers, body=bytes(body)),
            )

        entry = CacheEntry(headers=self.headers, body=bytes(body))
        if self.options.enable_cache:
            return StoreAndUse(options=self.options, request=self.request, key=self.key, entry=entry)
        return FullBody(options=self.options, request=self.request, entry=entry)


## Terminal states


@dataclass
class Declined(State):
    """The request is not ours to answer; the next application handles it."""

    reason: str = "not_found"

    @property
    def response(self) -> None:
        return None

    def next(self) -> None:
        return None


@dataclass
class Forbidden(State):
    request: Request

    @property
    def response(self) -> Response:
        return forbidden_response(head=is_head(self.request))

    def next(self) -> None:
        return None


@dataclass
class NotModified(State):
    headers: Headers = field(default_factory=Headers)

    @property
    def response(self) -> Response:
        return Response(status_code=304, headers=self.headers.copy())

    def next(self) -> None:
        return None


@dataclass
class FullBody(State):
    request: Request
    entry: CacheEntry

    @property
    def response(self) -> Response:
        return Response(
            status_code=200,
            headers=self.entry.headers.copy(),
            body=b"" if is_head(self.request) else self.entry.body,
        )

    def next(self) -> None:
        return None


@dataclass
class FromCache(FullBody):
    pass


@dataclass
class StoreAndUse(FullBody):
    key: CacheKey


AnyState = Union[
    Idle,
    PathResolved,
    NeedsStat,
    NeedsBody,
    Declined,
    Forbidden,
    NotModified,
    FromCache,
    StoreAndUse,
    FullBody,
]
