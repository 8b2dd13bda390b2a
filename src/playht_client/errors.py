"""Error envelope decoding and exception types for the Play.ht client."""

from dataclasses import dataclass
from typing import Any, ClassVar, Union


class PlayHTError(Exception):
    """Base error for everything raised by this library."""

    pass


class ConfigError(PlayHTError):
    """Client configuration never reached a valid state."""

    pass


class HeaderError(PlayHTError):
    """Header name or value contains characters illegal in HTTP."""

    def __init__(self, message: str, name: str, value: str | None = None):
        super().__init__(message)
        self.name = name
        self.value = value


class UrlError(PlayHTError):
    """A URL did not parse as an absolute URL."""

    def __init__(self, message: str, url: str):
        super().__init__(message)
        self.url = url


class TransportError(PlayHTError):
    """Connection-level failure talking to the API."""

    pass


class DecodeError(PlayHTError):
    """A response body did not match the shape we expected.

    Attributes:
        payload: The raw payload (bytes, text or decoded JSON) that failed
            to decode, kept so callers can see what the service sent.
    """

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


# -----------------------------------------------------------------------------
# Error envelope variants
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class GenericAPIError:
    """Error body shaped ``{"error_message": ..., "error_id": ...}``."""

    message: str
    id: str

    kind: ClassVar[str] = "generic"


@dataclass(frozen=True)
class InternalAPIError:
    """Error body shaped ``{"message": ..., "error": ...}``."""

    message: str
    error: str

    kind: ClassVar[str] = "internal"


@dataclass(frozen=True)
class RateLimitAPIError:
    """Error body that is a bare JSON string."""

    message: str

    kind: ClassVar[str] = "rate_limit"


APIError = Union[GenericAPIError, InternalAPIError, RateLimitAPIError]


def _has_str_fields(value: Any, *names: str) -> bool:
    return isinstance(value, dict) and all(isinstance(value.get(n), str) for n in names)


def decode_api_error(value: Any) -> APIError:
    """Pick the error envelope variant matching the shape of ``value``.

    The service does not tag its error bodies, so variants are tried in a
    fixed order and the first structural match wins. Object shapes are tried
    before the bare-string fallback.

    Args:
        value: A decoded JSON value.

    Returns:
        The matching error variant.

    Raises:
        DecodeError: If ``value`` matches none of the known shapes.
    """
    if _has_str_fields(value, "error_message", "error_id"):
        return GenericAPIError(message=value["error_message"], id=value["error_id"])
    if _has_str_fields(value, "message", "error"):
        return InternalAPIError(message=value["message"], error=value["error"])
    if isinstance(value, str):
        return RateLimitAPIError(message=value)
    raise DecodeError("unknown API error format", payload=value)


class RemoteError(PlayHTError):
    """The API reported a failure.

    Attributes:
        status_code: HTTP status of the failed response.
        error: The decoded error envelope.
    """

    def __init__(self, status_code: int, error: APIError):
        super().__init__(f"Play.ht API error {status_code} ({error.kind}): {error.message}")
        self.status_code = status_code
        self.error = error

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def kind(self) -> str:
        return self.error.kind
