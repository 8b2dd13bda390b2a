"""Client configuration and its builder."""

import logging
import os
import re
from dataclasses import dataclass
from typing import Mapping

import httpx

from . import __version__
from .errors import ConfigError, HeaderError, UrlError

logger = logging.getLogger(__name__)

PLAYHT_API_URL = "https://api.play.ht/api"
V2_PATH = "/v2"

SECRET_KEY_ENV = "PLAYHT_SECRET_KEY"
USER_ID_ENV = "PLAYHT_USER_ID"

USER_ID_HEADER = "X-USER-ID"
CLIENT_USER_AGENT = f"playht-client/{__version__}"

DEFAULT_TIMEOUT = 30.0

APPLICATION_JSON = "application/json"
MULTIPART_FORM = "multipart/form-data"
TEXT_PLAIN = "text/plain"
TEXT_EVENT_STREAM = "text/event-stream"
AUDIO_MPEG = "audio/mpeg"

# RFC 9110 token and field-value grammars
_HEADER_NAME_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_HEADER_VALUE_BAD_RE = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")


def _check_header(name: str, value: str) -> None:
    if not _HEADER_NAME_RE.fullmatch(name):
        raise HeaderError(f"Invalid header name: {name!r}", name, value)
    if _HEADER_VALUE_BAD_RE.search(value):
        raise HeaderError(f"Invalid value for header {name}", name, value)
    # httpx.Headers encodes str values as ASCII
    if not value.isascii():
        raise HeaderError(f"Header {name} value must be ASCII", name, value)


def _parse_absolute_url(raw: str) -> httpx.URL:
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise UrlError(f"Invalid URL {raw!r}: {e}", raw) from e
    if not url.scheme or not url.host:
        raise UrlError(f"Not an absolute URL: {raw!r}", raw)
    return url


@dataclass(frozen=True)
class ClientConfig:
    """Finalized connection parameters shared by every request of a Client.

    Attributes:
        url: Absolute base endpoint; request paths are appended to it.
        header_items: Default headers as (name, value) pairs, names unique
            ignoring case.
        http_client: Caller-owned httpx client shared by every Client built
            from this config. When None, each Client opens (and closes) its
            own pool from ``transport`` and ``timeout``.
        transport: Transport for Client-created pools.
        timeout: Timeout for Client-created pools.
    """

    url: httpx.URL
    header_items: tuple[tuple[str, str], ...]
    http_client: httpx.AsyncClient | None = None
    transport: httpx.AsyncBaseTransport | None = None
    timeout: float | httpx.Timeout | None = DEFAULT_TIMEOUT

    @property
    def headers(self) -> httpx.Headers:
        """A fresh copy of the default headers."""
        return httpx.Headers(list(self.header_items))


class ClientBuilder:
    """Accumulates client settings and validates them in finalize().

    Example:
        config = (
            ClientBuilder()
            .url("https://api.play.ht/api")
            .path("/v2")
            .header("Authorization", "Bearer secret")
            .finalize()
        )
    """

    def __init__(self) -> None:
        self._url: httpx.URL | None = None
        self._headers = httpx.Headers({"User-Agent": CLIENT_USER_AGENT})
        self._http_client: httpx.AsyncClient | None = None
        self._transport: httpx.AsyncBaseTransport | None = None
        self._timeout: float | httpx.Timeout | None = DEFAULT_TIMEOUT

    @classmethod
    def default(cls, environ: Mapping[str, str] | None = None) -> "ClientBuilder":
        """Builder pointed at the Play.ht v2 API with credentials from the environment.

        Reads PLAYHT_SECRET_KEY and PLAYHT_USER_ID. Missing variables are not
        an error: the client is still built and the API answers 401/403.

        Args:
            environ: Mapping to read instead of os.environ.
        """
        env = os.environ if environ is None else environ
        builder = cls().url(PLAYHT_API_URL).path(V2_PATH)

        secret_key = env.get(SECRET_KEY_ENV)
        if secret_key:
            if not secret_key.startswith("Bearer "):
                secret_key = f"Bearer {secret_key}"
            builder.header("Authorization", secret_key)
        user_id = env.get(USER_ID_ENV)
        if user_id:
            builder.header(USER_ID_HEADER, user_id)

        if not (secret_key and user_id):
            logger.debug("Play.ht credentials not found in environment")
        return builder

    def header(self, name: str, value: str) -> "ClientBuilder":
        """Set a default header, replacing any existing value for ``name``.

        Raises:
            HeaderError: If name or value contains illegal characters.
        """
        _check_header(name, value)
        self._headers[name] = value
        return self

    set_header = header

    def url(self, base: str | httpx.URL) -> "ClientBuilder":
        """Set the base endpoint.

        Raises:
            UrlError: If ``base`` is not an absolute URL.
        """
        self._url = _parse_absolute_url(str(base))
        return self

    def path(self, segment: str) -> "ClientBuilder":
        """Append ``segment`` to the base endpoint.

        Raises:
            UrlError: If no base is set or the result is not an absolute URL.
        """
        base = str(self._url) if self._url is not None else ""
        self._url = _parse_absolute_url(f"{base}{segment}")
        return self

    append_path = path

    def http_client(self, client: httpx.AsyncClient) -> "ClientBuilder":
        """Use a caller-owned httpx client instead of creating one."""
        self._http_client = client
        return self

    def transport(self, transport: httpx.AsyncBaseTransport) -> "ClientBuilder":
        """Transport for the httpx client this builder creates."""
        self._transport = transport
        return self

    def timeout(self, timeout: float | httpx.Timeout | None) -> "ClientBuilder":
        self._timeout = timeout
        return self

    def finalize(self) -> ClientConfig:
        """Validate the settings and produce an immutable ClientConfig.

        Raises:
            ConfigError: If no base endpoint was set.
        """
        if self._url is None:
            raise ConfigError("endpoint not set")

        return ClientConfig(
            url=self._url,
            header_items=tuple(self._headers.items()),
            http_client=self._http_client,
            transport=self._transport,
            timeout=self._timeout,
        )

    build = finalize
