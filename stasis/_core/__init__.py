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
    ## Headers
    "Headers",
)
