"""Exceptions raised by metadata adapters."""


class AdapterError(Exception):
    """Base exception for metadata adapter failures."""

    def __init__(self, message: str, engine: str | None = None) -> None:
        self.message = message
        self.engine = engine
        super().__init__(message)


class AdapterConnectionError(AdapterError):
    """Raised when the database cannot be reached."""

    pass


class AdapterAuthenticationError(AdapterError):
    """Raised when the database rejects the supplied credentials."""

    pass


class AdapterConfigurationError(AdapterError):
    """Raised when connection settings are incomplete or inconsistent."""

    pass


class AdapterQueryError(AdapterError):
    """Raised when a catalog query fails."""

    def __init__(
        self,
        message: str,
        query: str | None = None,
        engine: str | None = None,
    ) -> None:
        super().__init__(message, engine)
        self.query = query


class AdapterNotFoundError(AdapterError):
    """Raised when no adapter is registered for an engine name."""

    def __init__(self, engine: str) -> None:
        super().__init__(f"Unsupported database type: {engine!r}", engine=engine)
