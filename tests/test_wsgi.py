from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import httpx
import pytest

from stasis import CacheStore, FileSystem
from stasis.wsgi import WSGIStaticMiddleware
from tests.conftest import LAST_MODIFIED


def fallback_wsgi_app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
    body = f"fallback {environ['REQUEST_METHOD']} {environ['PATH_INFO']}".encode()
    start_response("404 Not Found", [("Content-Type", "text/plain"), ("Content-Length", str(len(body)))])
    return [body]


class DeniedFileSystem(FileSystem):
    def read(self, path: str) -> bytes:
        raise PermissionError(13, "Permission denied", path)


def create_client(middleware: WSGIStaticMiddleware) -> httpx.Client:
    return httpx.Client(transport=httpx.WSGITransport(app=middleware), base_url="http://testserver")


def create_environ(method: str = "GET", path: str = "/", **extra: Any) -> dict[str, Any]:
    environ = {
        "REQUEST_METHOD": method,
        "SCRIPT_NAME": "",
        "PATH_INFO": path,
        "QUERY_STRING": "",
        "SERVER_NAME": "testserver",
        "SERVER_PORT": "80",
        "SERVER_PROTOCOL": "HTTP/1.1",
        "wsgi.url_scheme": "http",
    }
    environ.update(extra)
    return environ


class StartResponse:
    def __init__(self) -> None:
        self.status = ""
        self.headers: list[tuple[str, str]] = []

    def __call__(self, status: str, headers: list[tuple[str, str]], exc_info: Any = None) -> None:
        self.status = status
        self.headers = headers


def test_serves_file(static_root: Path) -> None:
    middleware = WSGIStaticMiddleware(app=fallback_wsgi_app, root=str(static_root), max_age=86_400_000)

    with create_client(middleware) as client:
        response = client.get("/css/site.css")

    assert response.status_code == 200
    assert response.content == b"body { margin: 0; }"
    assert response.headers["content-type"] == "text/css"
    assert response.headers["cache-control"] == "public, max-age=86400"
    assert response.headers["last-modified"] == LAST_MODIFIED
    assert response.headers["etag"] == "19-1704067200123"


def test_status_lines(static_root: Path) -> None:
    middleware = WSGIStaticMiddleware(app=fallback_wsgi_app, root=str(static_root))

    ok = StartResponse()
    body = middleware(create_environ(path="/hello.txt"), ok)
    not_modified = StartResponse()
    middleware(create_environ(path="/hello.txt", HTTP_IF_NONE_MATCH="13-1704067200123"), not_modified)
    forbidden = StartResponse()
    middleware(create_environ(path="/../secret.txt"), forbidden)

    assert ok.status == "200 OK"
    assert list(body) == [b"Hello, World!"]
    assert not_modified.status == "304 Not Modified"
    assert forbidden.status == "403 Forbidden"


def test_conditional_get(static_root: Path) -> None:
    middleware = WSGIStaticMiddleware(app=fallback_wsgi_app, root=str(static_root))

    with create_client(middleware) as client:
        first = client.get("/hello.txt")
        second = client.get("/hello.txt", headers={"If-None-Match": first.headers["etag"]})
        third = client.get("/hello.txt", headers={"If-Modified-Since": "Sun, 31 Dec 2023 00:00:00 GMT"})

    assert second.status_code == 304
    assert second.content == b""
    assert "content-length" not in second.headers
    assert third.status_code == 200


def test_head(static_root: Path) -> None:
    middleware = WSGIStaticMiddleware(app=fallback_wsgi_app, root=str(static_root))

    with create_client(middleware) as client:
        response = client.head("/")

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["content-type"] == "text/html"


@pytest.mark.parametrize(
    "method, path",
    [
        pytest.param("GET", "/missing.txt", id="missing_file"),
        pytest.param("GET", "/css", id="directory"),
        pytest.param("PUT", "/hello.txt", id="unsupported_method"),
    ],
)
def test_passes_through_to_app(static_root: Path, method: str, path: str) -> None:
    middleware = WSGIStaticMiddleware(app=fallback_wsgi_app, root=str(static_root))

    with create_client(middleware) as client:
        response = client.request(method, path)

    assert response.status_code == 404
    assert response.text == f"fallback {method} {path}"


def test_query_string_is_part_of_cache_key(static_root: Path) -> None:
    store = CacheStore()
    middleware = WSGIStaticMiddleware(app=fallback_wsgi_app, root=str(static_root), cache=True, store=store)

    with create_client(middleware) as client:
        client.get("/hello.txt?v=1")
        client.get("/hello.txt?v=2")
        client.get("/with space.txt")

    assert sorted(str(key) for key in store.keys()) == [
        "/hello.txt?v=1",
        "/hello.txt?v=2",
        "/with%20space.txt",
    ]


def test_clear_cache(static_root: Path) -> None:
    middleware = WSGIStaticMiddleware(app=fallback_wsgi_app, root=str(static_root), cache=True)

    with create_client(middleware) as client:
        client.get("/hello.txt")
        client.get("/docs/readme.txt")
        (static_root / "hello.txt").write_bytes(b"Goodbye!")

        middleware.clear_cache()
        response = client.get("/hello.txt")

    assert response.content == b"Goodbye!"
    assert len(middleware.store) == 1


def test_filesystem_errors_propagate(static_root: Path, caplog: pytest.LogCaptureFixture) -> None:
    middleware = WSGIStaticMiddleware(
        app=fallback_wsgi_app,
        root=str(static_root),
        file_system=DeniedFileSystem(),
    )

    with caplog.at_level("ERROR", logger="stasis"):
        with pytest.raises(PermissionError):
            middleware(create_environ(path="/hello.txt"), StartResponse())

    assert caplog.records[0].name == "stasis.wsgi"
    assert caplog.records[0].exc_info is not None
