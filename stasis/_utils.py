from __future__ import annotations

import calendar
import mimetypes
import typing as tp
from email.utils import formatdate, parsedate_tz
from urllib.parse import quote, unquote

HEADERS_ENCODING = "iso-8859-1"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# RFC 3986 pchar minus "%", plus the path separator
_PATH_SAFE = "/:@!$&'()*+,;=-._~"


def parse_date(date: str) -> tp.Optional[int]:
    parsed = parsedate_tz(date)
    if parsed is None:
        return None
    # dates without a zone (asctime) are GMT
    timestamp = calendar.timegm(parsed[:6]) - (parsed[9] or 0)
    return timestamp


def format_http_date(timestamp: float) -> str:
    """
    Format a POSIX timestamp as an HTTP-date (RFC 7231 IMF-fixdate).

    Example output: 'Sun, 26 Oct 2025 12:34:56 GMT'
    """
    return formatdate(timeval=timestamp, localtime=False, usegmt=True)


def split_target(target: str) -> tp.Tuple[str, str]:
    """
    Split a raw request target into its path and query string.

    Example:
        ```
        split_target("/a/b.txt?v=1")  # ("/a/b.txt", "v=1")
        split_target("/a/b.txt")      # ("/a/b.txt", "")
        ```
    """
    path, _, query = target.partition("?")
    return path, query


def decode_path(path: str) -> str:
    return unquote(path, encoding="utf-8", errors="replace")


def encode_path(path: tp.Union[str, bytes]) -> str:
    return quote(path, safe=_PATH_SAFE)


def canonical_path(path: str) -> str:
    """
    Re-encode a request path so that differently-encoded spellings of the
    same decoded path compare equal.

    Example:
        ```
        canonical_path("/a%20b")  # "/a%20b"
        canonical_path("/a b")    # "/a%20b"
        canonical_path("/%61")    # "/a"
        ```
    """
    return encode_path(decode_path(path))


def guess_content_type(path: str) -> tp.Optional[str]:
    content_type, _ = mimetypes.guess_type(path, strict=False)
    return content_type
