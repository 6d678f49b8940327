"""Retry policy shared by the HTTP clients."""

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)


def build_retrying(max_attempts: int) -> AsyncRetrying:
    """Retry transport failures only; HTTP status and payload errors surface at once.

    ``max_attempts=1`` runs the call exactly once.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
