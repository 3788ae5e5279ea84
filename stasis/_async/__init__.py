from stasis._async._handler import AsyncStaticHandler as AsyncStaticHandler

__all__ = ("AsyncStaticHandler",)
