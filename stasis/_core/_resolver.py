from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Sequence, Tuple

from stasis._exceptions import ForbiddenPath
from stasis._utils import decode_path, split_target

__all__ = ("ResolvedPath", "resolve_path")


@dataclass(frozen=True)
class ResolvedPath:
    candidates: Tuple[str, ...]
    is_directory_request: bool = False


def resolve_path(root: str, request_path: str, index_files: Sequence[str] = ("index.html",)) -> ResolvedPath:
    """
    Map a raw request path onto the filesystem below `root`.

    The path is percent-decoded once and then rejected if it contains `..`
    anywhere or a NUL byte. A path ending with `/` resolves to the configured
    index files of that directory, tried in order. Nothing here touches the
    filesystem.

    Raises:
        ForbiddenPath: the decoded path tries to escape `root`.
    """
    path, _ = split_target(request_path)
    decoded = decode_path(path)

    if ".." in decoded or "\x00" in decoded:
        raise ForbiddenPath(decoded)

    filename = os.path.join(root, decoded.lstrip("/"))

    if decoded.endswith("/") or not decoded:
        return ResolvedPath(
            candidates=tuple(os.path.join(filename, index_file) for index_file in index_files),
            is_directory_request=True,
        )
    return ResolvedPath(candidates=(filename,))
