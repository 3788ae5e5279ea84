from __future__ import annotations

import logging
import typing as tp

from typing_extensions import assert_never

from stasis._core._states import (
    AnyState,
    Declined,
    Forbidden,
    FromCache,
    FullBody,
    Idle,
    NeedsBody,
    NeedsStat,
    NotModified,
    PathResolved,
    StaticOptions,
    StoreAndUse,
)
from stasis._core.models import CacheKey, FileMetadata, Request, Response
from stasis._files import AsyncBaseFileSystem, AsyncFileSystem
from stasis._store import CacheStore

logger = logging.getLogger("stasis.handler")

__all__ = ("AsyncStaticHandler",)


class AsyncStaticHandler:
    """
    Serves files below `options.root`, independent of any web framework.

    `handle_request` returns the response to send, or `None` when the request
    should go to the next application (unsupported method, missing file,
    directory). Filesystem errors other than "not found" propagate.

    Args:
        options: Handler configuration.
        store: Memory cache shared with other handlers, if any. A private store
            is created when omitted.
        file_system: Filesystem access, replaceable for tests.
    """

    def __init__(
        self,
        options: StaticOptions,
        store: CacheStore | None = None,
        file_system: AsyncBaseFileSystem | None = None,
    ) -> None:
        self.options = options
        self.store = store if store is not None else CacheStore()
        self.file_system = file_system if file_system is not None else AsyncFileSystem()

    async def handle_request(self, request: Request) -> tp.Optional[Response]:
        state: AnyState = Idle(options=self.options)

        while state:
            logger.debug("Handling state: %s", state.__class__.__name__)
            if isinstance(state, Idle):
                state = state.next(request)
            elif isinstance(state, PathResolved):
                state = self._handle_path_resolved(state)
            elif isinstance(state, NeedsStat):
                state = state.next(await self._stat_candidates(state.candidates))
            elif isinstance(state, NeedsBody):
                state = state.next(await self.file_system.read(state.metadata.path))
            elif isinstance(state, StoreAndUse):
                self.store.insert(state.key, state.entry)
                return state.response
            elif isinstance(state, (FromCache, FullBody, NotModified, Forbidden)):
                return state.response
            elif isinstance(state, Declined):
                logger.debug("Passing request through: reason=%s target=%s", state.reason, request.target)
                return None
            else:
                assert_never(state)

        raise RuntimeError("Unreachable")

    def clear_cache(self, key: tp.Union[str, CacheKey, None] = None) -> None:
        """
        Evict the response cached for `key`, or every response cached for this
        handler's root when no key is given. Entries of other roots sharing the
        store are left alone.
        """
        if key:
            self.store.evict(CacheKey.from_target(str(key), root=self.options.root))
        else:
            self.store.clear(root=self.options.root)

    def _handle_path_resolved(self, state: PathResolved) -> AnyState:
        if not state.use_cache:
            return state.next(None)

        entry = self.store.lookup(state.key)
        logger.debug("Memory cache %s: key=%s", "hit" if entry is not None else "miss", state.key)
        return state.next(entry)

    async def _stat_candidates(self, candidates: tp.Sequence[str]) -> tp.Optional[FileMetadata]:
        directory: tp.Optional[FileMetadata] = None

        for candidate in candidates:
            try:
                metadata = await self.file_system.stat(candidate)
            except (FileNotFoundError, NotADirectoryError):
                continue
            if not metadata.is_directory:
                return metadata
            directory = directory or metadata

        return directory
