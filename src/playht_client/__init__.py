"""Play.ht Client - async client for the Play.ht text-to-speech API."""

__version__ = "0.2.0"

from .api import PlayHTClient
from .client import Client, FilePart, TextPart
from .config import ClientBuilder, ClientConfig
from .errors import (
    APIError,
    ConfigError,
    DecodeError,
    GenericAPIError,
    HeaderError,
    InternalAPIError,
    PlayHTError,
    RateLimitAPIError,
    RemoteError,
    TransportError,
    UrlError,
    decode_api_error,
)
from .streaming import ByteSink, ChunkStream, RelayResult

__all__ = [
    # Clients
    "Client",
    "PlayHTClient",
    "ClientBuilder",
    "ClientConfig",
    # Request bodies
    "TextPart",
    "FilePart",
    # Streaming
    "ByteSink",
    "ChunkStream",
    "RelayResult",
    # Errors
    "PlayHTError",
    "ConfigError",
    "HeaderError",
    "UrlError",
    "TransportError",
    "DecodeError",
    "RemoteError",
    "APIError",
    "GenericAPIError",
    "InternalAPIError",
    "RateLimitAPIError",
    "decode_api_error",
]
