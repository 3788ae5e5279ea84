from stasis._sync._handler import SyncStaticHandler as SyncStaticHandler

__all__ = ("SyncStaticHandler",)
