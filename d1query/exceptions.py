"""D1 client exceptions."""


class D1Error(Exception):
    """Base exception for D1 errors."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ConnectionError(D1Error):
    """Failed to reach the D1 HTTP API."""

    pass


class QueryError(D1Error):
    """Statement rejected by D1, or the response could not be understood."""

    pass


class ValidationError(D1Error):
    """Caller input rejected before any request was made."""

    pass
