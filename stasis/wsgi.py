from __future__ import annotations

import logging
import typing as t
from http import HTTPStatus

from stasis._core._headers import Headers
from stasis._core._states import StaticOptions
from stasis._core.models import CacheKey, Request
from stasis._files import BaseFileSystem
from stasis._store import CacheStore
from stasis._sync._handler import SyncStaticHandler
from stasis._utils import HEADERS_ENCODING, encode_path

logger = logging.getLogger(__name__)

_Environ = t.Dict[str, t.Any]
_StartResponse = t.Callable[..., t.Any]
_WSGIApp = t.Callable[[_Environ, _StartResponse], t.Iterable[bytes]]


def _status_line(status_code: int) -> str:
    try:
        return f"{status_code} {HTTPStatus(status_code).phrase}"
    except ValueError:
        return str(status_code)


class WSGIStaticMiddleware:
    """
    WSGI counterpart of `stasis.asgi.ASGIStaticMiddleware`.

    Example:
        ```python
        from stasis.wsgi import WSGIStaticMiddleware

        application = WSGIStaticMiddleware(app=flask_app, root="./public", cache=True)
        ```
    """

    def __init__(
        self,
        app: _WSGIApp,
        root: str,
        *,
        max_age: int | None = None,
        cache: bool | int | None = None,
        index_files: t.Sequence[str] = ("index.html",),
        content_type_lookup: t.Callable[[str], t.Optional[str]] | None = None,
        store: CacheStore | None = None,
        file_system: BaseFileSystem | None = None,
    ) -> None:
        self.app = app

        extra: t.Dict[str, t.Any] = {}
        if content_type_lookup is not None:
            extra["content_type_lookup"] = content_type_lookup
        options = StaticOptions.from_options(
            root,
            max_age=max_age,
            cache=cache,
            index_files=tuple(index_files),
            **extra,
        )
        self.handler = SyncStaticHandler(options, store=store, file_system=file_system)

        logger.info(
            "Initialized WSGIStaticMiddleware with root=%s, max_age=%d, cache=%s",
            options.root,
            options.max_age,
            options.enable_cache,
        )

    @property
    def store(self) -> CacheStore:
        return self.handler.store

    def __call__(self, environ: _Environ, start_response: _StartResponse) -> t.Iterable[bytes]:
        request = self._environ_to_internal_request(environ)
        logger.debug("Incoming HTTP request: method=%s target=%s", request.method, request.target)

        try:
            response = self.handler.handle_request(request)
        except Exception as e:
            logger.error(
                "Error serving static file: method=%s target=%s error=%s",
                request.method,
                request.target,
                str(e),
                exc_info=True,
            )
            raise

        if response is None:
            logger.debug("Passing request to wrapped application: target=%s", request.target)
            return self.app(environ, start_response)

        start_response(_status_line(response.status_code), response.headers.raw_items())
        logger.info(
            "Request processed: method=%s target=%s status=%d",
            request.method,
            request.target,
            response.status_code,
        )
        return [response.body]

    def clear_cache(self, key: t.Union[str, CacheKey, None] = None) -> None:
        """Evict the response cached for `key`, or every response cached for this root."""
        self.handler.clear_cache(key)

    def _environ_to_internal_request(self, environ: _Environ) -> Request:
        # PATH_INFO holds the decoded path as latin-1 characters
        path = environ.get("PATH_INFO", "") or "/"
        target = encode_path(path.encode(HEADERS_ENCODING))
        query_string = environ.get("QUERY_STRING", "")
        if query_string:
            target = f"{target}?{query_string}"

        headers = Headers.from_raw(
            (key[5:].replace("_", "-"), value) for key, value in environ.items() if key.startswith("HTTP_")
        )
        return Request(method=environ.get("REQUEST_METHOD", "GET"), target=target, headers=headers)
