__all__ = ("StaticError", "ConfigurationError", "ForbiddenPath")


class StaticError(Exception): ...


class ConfigurationError(StaticError, ValueError): ...


class ForbiddenPath(StaticError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Refusing to serve {path!r}")
        self.path = path
