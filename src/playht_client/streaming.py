"""Push and pull interfaces for streamed response bodies.

Push mode hands every chunk to a ByteSink as it arrives. Pull mode returns a
ChunkStream the caller iterates at its own pace. Both read chunks through
``httpx.Response.aiter_bytes`` so they yield identical bytes for the same
response.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Protocol, runtime_checkable

import httpx

from .errors import TransportError

logger = logging.getLogger(__name__)


@runtime_checkable
class ByteSink(Protocol):
    """Anything accepting sequential byte writes.

    ``write`` may be a plain method (files, BytesIO) or return an awaitable
    (async writers). Sinks with a ``drain`` coroutine, such as
    ``asyncio.StreamWriter``, are drained after each chunk.
    """

    def write(self, chunk: bytes) -> Any:
        ...


async def write_chunk(sink: ByteSink, chunk: bytes) -> None:
    """Write one chunk to a sync or async sink."""
    result = sink.write(chunk)
    if inspect.isawaitable(result):
        await result
    drain = getattr(sink, "drain", None)
    if drain is not None and inspect.iscoroutinefunction(drain):
        await drain()


@dataclass
class RelayResult:
    """Outcome of a completed push-mode relay."""

    status_code: int
    headers: httpx.Headers
    chunks: int = 0
    bytes_written: int = 0


async def relay_response(response: httpx.Response, sink: ByteSink) -> RelayResult:
    """Copy an already classified streaming response into ``sink``.

    Chunks written before a transport failure stay written; the failure is
    raised as TransportError.
    """
    result = RelayResult(status_code=response.status_code, headers=response.headers)
    try:
        async for chunk in response.aiter_bytes():
            await write_chunk(sink, chunk)
            result.chunks += 1
            result.bytes_written += len(chunk)
    except httpx.HTTPError as e:
        raise TransportError(
            f"Stream interrupted after {result.bytes_written} bytes: {e}"
        ) from e
    return result


class ChunkStream(AsyncIterator[bytes]):
    """Lazy, single-pass async iterator over a streamed response body.

    The request is sent on the first ``__anext__``. Once the body is exhausted,
    closed or failed the stream yields nothing more and cannot be restarted.

    Usage:
        async with client.stream("POST", "/tts/stream", json=req) as chunks:
            async for chunk in chunks:
                decoder.feed(chunk)

    Leaving the ``async with`` block (including by cancellation) releases the
    connection even if the body was not fully read.
    """

    def __init__(self, open_response: Callable[[], Awaitable[httpx.Response]]) -> None:
        """
        Args:
            open_response: Coroutine factory that sends the request and returns
                a classified, still unread streaming response.
        """
        self._open_response = open_response
        self._response: httpx.Response | None = None
        self._chunks: AsyncIterator[bytes] | None = None
        self._done = False

    @property
    def response(self) -> httpx.Response | None:
        """The underlying response once the stream has been opened."""
        return self._response

    @property
    def done(self) -> bool:
        return self._done

    async def __anext__(self) -> bytes:
        if self._done:
            raise StopAsyncIteration

        try:
            if self._chunks is None:
                self._response = await self._open_response()
                self._chunks = self._response.aiter_bytes()
            return await self._chunks.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise
        except httpx.HTTPError as e:
            await self.aclose()
            raise TransportError(f"Stream interrupted: {e}") from e
        except BaseException:
            await self.aclose()
            raise

    async def aclose(self) -> None:
        """Release the connection. Safe to call more than once."""
        self._done = True
        if self._response is not None and not self._response.is_closed:
            await self._response.aclose()
            logger.debug(f"Closed stream for {self._response.request.url}")

    async def __aenter__(self) -> "ChunkStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
