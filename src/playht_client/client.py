"""Async Play.ht API client: request dispatch and streaming relay."""

import asyncio
import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, TypeVar, Union

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from .config import TEXT_PLAIN, ClientBuilder, ClientConfig
from .errors import DecodeError, RemoteError, TransportError, decode_api_error
from .streaming import ByteSink, ChunkStream, RelayResult, relay_response

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TextPart:
    """Named text field of a multipart body."""

    value: str
    content_type: str = TEXT_PLAIN


@dataclass(frozen=True)
class FilePart:
    """Named file field of a multipart body, read fully into memory before sending."""

    path: str | Path
    content_type: str
    filename: str | None = None


MultipartPart = Union[TextPart, FilePart]


async def encode_multipart(parts: Mapping[str, MultipartPart]) -> list[tuple[str, tuple]]:
    """Turn named parts into the ``files`` argument httpx expects.

    Each part keeps its own media type; httpx generates the boundary.
    """
    files: list[tuple[str, tuple]] = []
    for name, part in parts.items():
        if isinstance(part, FilePart):
            path = Path(part.path)
            content = await asyncio.to_thread(path.read_bytes)
            files.append((name, (part.filename or path.name, content, part.content_type)))
        else:
            files.append((name, (None, part.value.encode("utf-8"), part.content_type)))
    return files


def encode_json(body: Any) -> Any:
    """JSON-ready form of a request body with unset (None) fields dropped."""
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", exclude_none=True, by_alias=True)
    if isinstance(body, dict):
        return {k: v for k, v in body.items() if v is not None}
    return body


@lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def decode_body(response: httpx.Response, response_type: type[T]) -> T:
    """Decode a successful response body into ``response_type``.

    Raises:
        DecodeError: If the body does not match the expected type.
    """
    try:
        return _adapter(response_type).validate_json(response.content)
    except ValidationError as e:
        raise DecodeError(
            f"Unexpected response body for {response.request.method} "
            f"{response.request.url.path}: {e.error_count()} validation error(s)",
            payload=response.text,
        ) from e


async def raise_for_api_error(response: httpx.Response) -> None:
    """Classify a response by status before its body is touched.

    2xx returns without reading anything. Any other status reads the (small)
    error body, decodes the error envelope and raises RemoteError. Streaming
    responses are closed on that path.

    Raises:
        RemoteError: For non-2xx responses with a recognised error body.
        DecodeError: For non-2xx responses whose body matches no known shape.
    """
    if response.is_success:
        return

    try:
        body = await response.aread()
    except httpx.HTTPError as e:
        raise TransportError(f"Failed reading error body ({response.status_code}): {e}") from e
    finally:
        await response.aclose()

    try:
        value = json.loads(body)
    except ValueError as e:
        raise DecodeError(
            f"API error {response.status_code} with non-JSON body", payload=body
        ) from e

    error = decode_api_error(value)
    logger.debug(f"API error {response.status_code} ({error.kind}): {error.message}")
    raise RemoteError(response.status_code, error)


class Client:
    """Async client for the Play.ht API.

    A Client is bound to one immutable ClientConfig and reuses one httpx
    connection pool across calls: the config's caller-owned http_client if it
    has one, otherwise a pool the Client opens itself and closes in aclose().
    One config can back any number of Clients. Calls are independent and may
    run concurrently.

    Usage:
        async with Client() as client:
            voices = await client.send("GET", "/voices", list[Voice])
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        """
        Args:
            config: Finalized configuration. Defaults to
                ``ClientBuilder.default().finalize()``, which reads credentials
                from PLAYHT_SECRET_KEY and PLAYHT_USER_ID.
        """
        self.config = config if config is not None else ClientBuilder.default().finalize()
        if self.config.http_client is not None:
            self._http = self.config.http_client
            self._owns_http = False
        else:
            self._http = httpx.AsyncClient(
                transport=self.config.transport, timeout=self.config.timeout
            )
            self._owns_http = True

    @property
    def url(self) -> httpx.URL:
        return self.config.url

    @property
    def headers(self) -> httpx.Headers:
        return self.config.headers

    def remote_address(self) -> str:
        """Remote endpoint as ``host:port``."""
        port = self.url.port or (443 if self.url.scheme == "https" else 80)
        return f"{self.url.host}:{port}"

    def url_for(self, path: str) -> httpx.URL:
        """Base URL joined with ``path``. Absolute URLs are used as given."""
        if path.startswith(("http://", "https://")):
            return httpx.URL(path)
        return httpx.URL(f"{self.url}{path}")

    def build_request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        files: list[tuple[str, tuple]] | None = None,
    ) -> httpx.Request:
        """Build a request against the configured endpoint.

        Config headers are applied first and ``headers`` override them by name.
        Useful for endpoints this library does not wrap yet; pass the result
        to send_request().
        """
        merged = self.config.headers
        if headers:
            merged.update(headers)
        return self._http.build_request(
            method,
            self.url_for(path),
            headers=merged,
            params=params,
            json=encode_json(json) if json is not None else None,
            files=files,
        )

    async def send_request(self, request: httpx.Request, stream: bool = False) -> httpx.Response:
        """Send a prebuilt request. No retries.

        Raises:
            TransportError: On any connection-level failure.
        """
        logger.debug(f"{request.method} {request.url}")
        try:
            response = await self._http.send(request, stream=stream)
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error during {request.method} {request.url}: {e}") from e
        logger.debug(f"{request.method} {request.url} -> {response.status_code}")
        return response

    async def send(
        self,
        method: str,
        path: str,
        response_type: type[T],
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        multipart: Mapping[str, MultipartPart] | None = None,
    ) -> T:
        """Send one request and decode the successful response.

        Args:
            method: HTTP method.
            path: Path appended to the base URL.
            response_type: Type the 2xx body decodes into (pydantic model,
                ``list[Model]``, ``dict``...).
            headers: Per-call headers, overriding the configured ones.
            params: Query parameters.
            json: JSON body; pydantic models are dumped without unset fields.
            multipart: Named text/file parts for a multipart body.

        Returns:
            The decoded body.

        Raises:
            RemoteError: The API answered with a non-2xx status.
            DecodeError: The body did not match the expected shape.
            TransportError: The request could not be completed.
        """
        files = await encode_multipart(multipart) if multipart else None
        request = self.build_request(
            method, path, headers=headers, params=params, json=json, files=files
        )
        response = await self.send_request(request)
        await raise_for_api_error(response)
        return decode_body(response, response_type)

    async def relay(
        self,
        method: str,
        path: str,
        sink: ByteSink,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> RelayResult:
        """Push every chunk of the response body into ``sink`` as it arrives.

        Returns once the body ends. Error responses are decoded and raised
        instead of being written to the sink.

        Raises:
            RemoteError: The API answered with a non-2xx status.
            TransportError: The connection failed; chunks already written
                to ``sink`` are left in place.
        """
        request = self.build_request(method, path, headers=headers, params=params, json=json)
        response = await self.send_request(request, stream=True)
        try:
            await raise_for_api_error(response)
            result = await relay_response(response, sink)
        finally:
            await response.aclose()

        logger.debug(
            f"Relayed {result.bytes_written} bytes in {result.chunks} chunks "
            f"from {request.method} {request.url}"
        )
        return result

    def stream(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> ChunkStream:
        """Lazy, single-pass iterator over the response body.

        Nothing is sent until the first chunk is requested. Use as an async
        context manager so the connection is released on early exit.
        """
        request = self.build_request(method, path, headers=headers, params=params, json=json)

        async def open_response() -> httpx.Response:
            response = await self.send_request(request, stream=True)
            await raise_for_api_error(response)
            return response

        return ChunkStream(open_response)

    async def aclose(self) -> None:
        """Close the connection pool if this client created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
