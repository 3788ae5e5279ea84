from stasis._core._headers import Headers as Headers
from stasis._core._resolver import ResolvedPath as ResolvedPath, resolve_path as resolve_path
from stasis._core._states import (
    AnyState as AnyState,
    Declined as Declined,
    Forbidden as Forbidden,
    FromCache as FromCache,
    FullBody as FullBody,
    Idle as Idle,
    NeedsBody as NeedsBody,
    NeedsStat as NeedsStat,
    NotModified as NotModified,
    PathResolved as PathResolved,
    State as State,
    StaticOptions as StaticOptions,
    StoreAndUse as StoreAndUse,
    build_headers as build_headers,
    is_conditional as is_conditional,
    is_modified as is_modified,
    make_etag as make_etag,
)
from stasis._core.models import (
    CacheEntry as CacheEntry,
    CacheKey as CacheKey,
    FileMetadata as FileMetadata,
    Request as Request,
    RequestValidators as RequestValidators,
    Response as Response,
)
from stasis._exceptions import (
    ConfigurationError as ConfigurationError,
    ForbiddenPath as ForbiddenPath,
    StaticError as StaticError,
)
from stasis._files import (
    AsyncBaseFileSystem as AsyncBaseFileSystem,
    AsyncFileSystem as AsyncFileSystem,
    BaseFileSystem as BaseFileSystem,
    FileSystem as FileSystem,
)
from stasis._store import CacheStore as CacheStore
from stasis._async._handler import AsyncStaticHandler as AsyncStaticHandler
from stasis._sync._handler import SyncStaticHandler as SyncStaticHandler

__version__ = "0.1.0"

__all__ = (
    ## States
    "AnyState",
    "Idle",
    "PathResolved",
    "NeedsStat",
    "NeedsBody",
    "Declined",
    "Forbidden",
    "NotModified",
    "FullBody",
    "FromCache",
    "StoreAndUse",
    "State",
    ## Configuration
    "StaticOptions",
    ## Validation and headers
    "build_headers",
    "is_conditional",
    "is_modified",
    "make_etag",
    "resolve_path",
    "ResolvedPath",
    ## Models
    "Request",
    "Response",
    "CacheEntry",
    "CacheKey",
    "FileMetadata",
    "RequestValidators",
    "Headers",
    ## Errors
    "StaticError",
    "ConfigurationError",
    "ForbiddenPath",
    ## Filesystem
    "AsyncBaseFileSystem",
    "AsyncFileSystem",
    "BaseFileSystem",
    "FileSystem",
    ## Cache store
    "CacheStore",
    ## Handlers
    "AsyncStaticHandler",
    "SyncStaticHandler",
)
