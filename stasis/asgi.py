from __future__ import annotations

import logging
import typing as t

from stasis._async._handler import AsyncStaticHandler
from stasis._core._headers import Headers
from stasis._core._states import StaticOptions
from stasis._core.models import CacheKey, Request, Response
from stasis._files import AsyncBaseFileSystem
from stasis._store import CacheStore
from stasis._utils import HEADERS_ENCODING, encode_path

logger = logging.getLogger(__name__)


class _ASGIScope(t.TypedDict, total=False):
    """ASGI HTTP scope type."""

    type: str
    asgi: dict[str, str]
    http_version: str
    method: str
    scheme: str
    path: str
    raw_path: bytes
    query_string: bytes
    root_path: str
    headers: list[tuple[bytes, bytes]]
    server: tuple[str, int | None] | None
    client: tuple[str, int] | None
    state: dict[str, t.Any]
    extensions: dict[str, t.Any]


_Scope = _ASGIScope
_Receive = t.Callable[[], t.Awaitable[t.Dict[str, t.Any]]]
_Send = t.Callable[[t.Dict[str, t.Any]], t.Awaitable[None]]
_ASGIApp = t.Callable[[_Scope, _Receive, _Send], t.Awaitable[None]]


class ASGIStaticMiddleware:
    """
    ASGI middleware that serves files from `root` and hands everything else
    to the wrapped application.

    GET and HEAD requests for existing files are answered directly, with
    `Cache-Control`, `Last-Modified` and `ETag` headers, and conditional
    requests are answered with 304 when the client copy is current. Other
    methods, missing files and directories fall through to `app`. Paths
    containing `..` get a plain 403.

    Args:
        app: The ASGI application to wrap.
        root: Directory to serve.
        max_age: Browser cache lifetime in milliseconds.
        cache: Keep responses in memory. An integer also sets `max_age`
            when `max_age` is not given.
        index_files: File names tried for paths ending with `/`.
        content_type_lookup: Maps a file path to a media type.
        store: Memory cache to use, e.g. one shared by several middlewares.
        file_system: Filesystem access, replaceable for tests.

    Example:
        ```python
        from stasis.asgi import ASGIStaticMiddleware

        app = ASGIStaticMiddleware(app=my_asgi_app, root="./public", cache=True, max_age=86_400_000)

        # on deployment
        app.clear_cache()
        ```
    """

    def __init__(
        self,
        app: _ASGIApp,
        root: str,
        *,
        max_age: int | None = None,
        cache: bool | int | None = None,
        index_files: t.Sequence[str] = ("index.html",),
        content_type_lookup: t.Callable[[str], t.Optional[str]] | None = None,
        store: CacheStore | None = None,
        file_system: AsyncBaseFileSystem | None = None,
    ) -> None:
        self.app = app

        extra: dict[str, t.Any] = {}
        if content_type_lookup is not None:
            extra["content_type_lookup"] = content_type_lookup
        options = StaticOptions.from_options(
            root,
            max_age=max_age,
            cache=cache,
            index_files=tuple(index_files),
            **extra,
        )
        self.handler = AsyncStaticHandler(options, store=store, file_system=file_system)

        logger.info(
            "Initialized ASGIStaticMiddleware with root=%s, max_age=%d, cache=%s",
            options.root,
            options.max_age,
            options.enable_cache,
        )

    @property
    def store(self) -> CacheStore:
        return self.handler.store

    async def __call__(self, scope: _Scope, receive: _Receive, send: _Send) -> None:
        """
        Handle an ASGI request.

        Args:
            scope: The ASGI scope dictionary.
            receive: The ASGI receive callable.
            send: The ASGI send callable.
        """
        if scope["type"] != "http":
            logger.debug("Skipping non-HTTP request: type=%s", scope["type"])
            await self.app(scope, receive, send)
            return

        request = self._asgi_to_internal_request(scope)
        logger.debug("Incoming HTTP request: method=%s target=%s", request.method, request.target)

        try:
            response = await self.handler.handle_request(request)
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
            await self.app(scope, receive, send)
            return

        await self._send_internal_response(response, send)
        logger.info(
            "Request processed: method=%s target=%s status=%d",
            request.method,
            request.target,
            response.status_code,
        )

    def clear_cache(self, key: t.Union[str, CacheKey, None] = None) -> None:
        """Evict the response cached for `key`, or every response cached for this root."""
        self.handler.clear_cache(key)

    def _asgi_to_internal_request(self, scope: _Scope) -> Request:
        """
        Convert an ASGI HTTP scope to an internal Request object.

        The scope path is already percent-decoded, so it is quoted again to
        recover a raw target.
        """
        target = encode_path(scope.get("path", "/"))
        query_string = scope.get("query_string", b"")
        if query_string:
            target = f"{target}?{query_string.decode(HEADERS_ENCODING)}"

        return Request(
            method=scope.get("method", "GET"),
            target=target,
            headers=Headers.from_raw(
                (key.decode(HEADERS_ENCODING), value.decode(HEADERS_ENCODING))
                for key, value in scope.get("headers", [])
            ),
        )

    async def _send_internal_response(self, response: Response, send: _Send) -> None:
        headers: list[tuple[bytes, bytes]] = [
            (key.encode(HEADERS_ENCODING), value.encode(HEADERS_ENCODING)) for key, value in response.headers.raw_items()
        ]

        await send(
            {
                "type": "http.response.start",
                "status": response.status_code,
                "headers": headers,
            }
        )
        await send(
            {
                "type": "http.response.body",
                "body": response.body,
                "more_body": False,
            }
        )
        logger.debug(
            "Response sent: status=%d headers_count=%d total_bytes=%d",
            response.status_code,
            len(headers),
            len(response.body),
        )
