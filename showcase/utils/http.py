"""HTTP utilities translating transport and status failures into one error type."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

import httpx


class SupabaseError(Exception):
    """Raised when a backend call fails at the transport or service level."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        network: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.network = network

    def __repr__(self) -> str:
        return (
            f"SupabaseError(message={self.message!r}, status_code={self.status_code!r}, "
            f"code={self.code!r}, network={self.network!r})"
        )


def decode_error(response: httpx.Response) -> SupabaseError:
    """Build an error from a failed response, preferring the service's own message."""
    message: Optional[str] = None
    code: Optional[str] = None
    try:
        payload: Any = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                message = value
                break
        for key in ("code", "error_code", "error"):
            value = payload.get(key)
            if value is not None and value != "":
                code = str(value)
                break

    if not message:
        message = response.text.strip() or response.reason_phrase or "Unknown error"
    return SupabaseError(message, status_code=response.status_code, code=code)


def decode_json(response: httpx.Response, action: str) -> Any:
    """Return the JSON body of a successful response."""
    try:
        return response.json()
    except ValueError as exc:
        raise SupabaseError(
            f"{action} returned an invalid response format.",
            status_code=response.status_code,
        ) from exc


async def send_request(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    **kwargs,
) -> httpx.Response:
    """Issue a single request; never retries."""
    try:
        response = await func(*args, **kwargs)
    except httpx.TimeoutException as exc:
        raise SupabaseError(f"Request timed out: {exc}", network=True) from exc
    except httpx.TransportError as exc:
        raise SupabaseError(f"Network error: {exc}", network=True) from exc

    if response.is_error:
        raise decode_error(response)
    return response


__all__ = ["SupabaseError", "decode_error", "decode_json", "send_request"]
