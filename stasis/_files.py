from __future__ import annotations

import os
import stat as stat_module

import anyio

from stasis._core.models import FileMetadata


def metadata_from_stat(path: str, stat_result: os.stat_result) -> FileMetadata:
    return FileMetadata(
        path=path,
        size=stat_result.st_size,
        mtime=stat_result.st_mtime,
        mtime_ms=stat_result.st_mtime_ns // 1_000_000,
        is_directory=stat_module.S_ISDIR(stat_result.st_mode),
    )


class AsyncBaseFileSystem:
    async def stat(self, path: str) -> FileMetadata:
        raise NotImplementedError()

    async def read(self, path: str) -> bytes:
        raise NotImplementedError()


class AsyncFileSystem(AsyncBaseFileSystem):
    async def stat(self, path: str) -> FileMetadata:
        return metadata_from_stat(path, await anyio.Path(path).stat())

    async def read(self, path: str) -> bytes:
        async with await anyio.open_file(path, "rb") as f:
            return await f.read()


class BaseFileSystem:
    def stat(self, path: str) -> FileMetadata:
        raise NotImplementedError()

    def read(self, path: str) -> bytes:
        raise NotImplementedError()


class FileSystem(BaseFileSystem):
    def stat(self, path: str) -> FileMetadata:
        return metadata_from_stat(path, os.stat(path))

    def read(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()
