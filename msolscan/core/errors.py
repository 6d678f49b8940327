"""Exception hierarchy for the vault scan."""


class ScanError(Exception):
    """Base class for every failure raised by the scan pipeline."""


class NetworkError(ScanError):
    """Endpoint unreachable or answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SolanaRpcError(NetworkError):
    """JSON-RPC response carried an error object."""

    def __init__(self, code: int, message: str, data: dict | None = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"RPC Error {code}: {message}")


class ParseError(ScanError):
    """Response body is not JSON or does not have the expected shape."""


class DeserializationError(ScanError):
    """Account data does not match the expected on-chain layout."""
