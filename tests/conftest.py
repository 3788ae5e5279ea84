import os
from pathlib import Path
from typing import Dict

import pytest

# 2024-01-01 00:00:00.123 UTC
MTIME_NS = 1_704_067_200_123_000_000
MTIME_MS = 1_704_067_200_123
LAST_MODIFIED = "Mon, 01 Jan 2024 00:00:00 GMT"

FILES: Dict[str, bytes] = {
    "hello.txt": b"Hello, World!",
    "index.html": b"<h1>home</h1>",
    "css/site.css": b"body { margin: 0; }",
    "docs/index.html": b"<h1>docs</h1>",
    "docs/readme.txt": b"read me",
    "blob.unknownext": b"\x00\x01\x02",
    "with space.txt": b"spaced",
}


def set_mtime(path: Path, mtime_ns: int = MTIME_NS) -> None:
    os.utime(path, ns=(mtime_ns, mtime_ns))


@pytest.fixture()
def static_root(tmp_path: Path) -> Path:
    """
    A served directory with a handful of files, all modified at `MTIME_NS`,
    and a `secret.txt` next to it that must never be reachable.
    """
    root = tmp_path / "public"

    for name, content in FILES.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        set_mtime(path)

    (root / "empty").mkdir()
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    return root
