"""Tests for push-mode relay and pull-mode chunk streams."""

import io

import httpx
import pytest

from playht_client.errors import RateLimitAPIError, RemoteError, TransportError
from playht_client.streaming import ChunkStream, RelayResult, write_chunk

from .conftest import chunked

CHUNKS = (b"ID3", b"\xff\xfb\x90\x00" * 4, b"frame-2", b"tail")
BODY = b"".join(CHUNKS)


def audio_response(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, headers={"Content-Type": "audio/mpeg"}, content=chunked(*CHUNKS))


class AsyncSink:
    """Sink whose write is a coroutine, recording chunk boundaries."""

    def __init__(self) -> None:
        self.chunks: list[bytes] = []

    async def write(self, chunk: bytes) -> None:
        self.chunks.append(chunk)


class DrainingSink:
    """StreamWriter-like sink: sync write plus async drain."""

    def __init__(self) -> None:
        self.buffer = bytearray()
        self.drains = 0

    def write(self, chunk: bytes) -> None:
        self.buffer.extend(chunk)

    async def drain(self) -> None:
        self.drains += 1


class TestWriteChunk:
    """Tests for write_chunk sink adaptation."""

    @pytest.mark.asyncio
    async def test_sync_sink(self):
        sink = io.BytesIO()
        await write_chunk(sink, b"abc")
        assert sink.getvalue() == b"abc"

    @pytest.mark.asyncio
    async def test_async_sink(self):
        sink = AsyncSink()
        await write_chunk(sink, b"abc")
        assert sink.chunks == [b"abc"]

    @pytest.mark.asyncio
    async def test_drains_after_write(self):
        sink = DrainingSink()
        await write_chunk(sink, b"a")
        await write_chunk(sink, b"b")
        assert bytes(sink.buffer) == b"ab"
        assert sink.drains == 2


class TestRelay:
    """Tests for Client.relay() push mode."""

    @pytest.mark.asyncio
    async def test_sink_receives_all_chunks_in_order(self, make_client):
        client, _ = make_client(audio_response)
        sink = AsyncSink()
        async with client:
            result = await client.relay("POST", "/tts/stream", sink)

        assert sink.chunks == list(CHUNKS)
        assert isinstance(result, RelayResult)
        assert result.chunks == len(CHUNKS)
        assert result.bytes_written == len(BODY)
        assert result.status_code == 200

    @pytest.mark.asyncio
    async def test_file_like_sink(self, make_client, tmp_path):
        client, _ = make_client(audio_response)
        out = tmp_path / "speech.mp3"
        async with client:
            with out.open("wb") as f:
                await client.relay("POST", "/tts/stream", f)
        assert out.read_bytes() == BODY

    @pytest.mark.asyncio
    async def test_error_status_not_written_to_sink(self, make_client):
        """Error bodies are decoded and raised, never relayed."""
        client, _ = make_client(
            lambda r: httpx.Response(429, content=chunked(b'"rate limit', b' exceeded"'))
        )
        sink = io.BytesIO()
        async with client:
            with pytest.raises(RemoteError) as exc_info:
                await client.relay("POST", "/tts/stream", sink)
        assert exc_info.value.error == RateLimitAPIError("rate limit exceeded")
        assert sink.getvalue() == b""

    @pytest.mark.asyncio
    async def test_failure_mid_stream_keeps_delivered_chunks(self, make_client):
        client, _ = make_client(
            lambda r: httpx.Response(
                200, content=chunked(b"part-1", b"part-2", error=httpx.ReadError("reset"))
            )
        )
        sink = io.BytesIO()
        async with client:
            with pytest.raises(TransportError, match="12 bytes"):
                await client.relay("GET", "/tts/job-1", sink)
        assert sink.getvalue() == b"part-1part-2"

    @pytest.mark.asyncio
    async def test_returns_response_headers(self, make_client):
        client, _ = make_client(
            lambda r: httpx.Response(
                201, headers={"Content-Location": "https://api/tts/j1"}, content=b"event: x\n\n"
            )
        )
        async with client:
            result = await client.relay("POST", "/tts", io.BytesIO())
        assert result.headers["content-location"] == "https://api/tts/j1"


class TestStream:
    """Tests for Client.stream() pull mode."""

    @pytest.mark.asyncio
    async def test_matches_push_mode(self, make_client):
        """Concatenated pull output equals what push mode writes."""
        client, _ = make_client(audio_response)
        pushed = io.BytesIO()
        async with client:
            await client.relay("POST", "/tts/stream", pushed)
            async with client.stream("POST", "/tts/stream") as chunks:
                pulled = [chunk async for chunk in chunks]

        assert pulled == list(CHUNKS)
        assert b"".join(pulled) == pushed.getvalue()

    @pytest.mark.asyncio
    async def test_lazy_until_iterated(self, make_client):
        client, handler = make_client(audio_response)
        async with client:
            chunks = client.stream("POST", "/tts/stream")
            assert isinstance(chunks, ChunkStream)
            assert handler.requests == []
            first = await chunks.__anext__()
            assert first == CHUNKS[0]
            assert len(handler.requests) == 1
            await chunks.aclose()

    @pytest.mark.asyncio
    async def test_single_pass(self, make_client):
        """An exhausted stream yields nothing and is not re-sent."""
        client, handler = make_client(audio_response)
        async with client:
            chunks = client.stream("GET", "/tts/job-1")
            first_pass = [chunk async for chunk in chunks]
            second_pass = [chunk async for chunk in chunks]

        assert b"".join(first_pass) == BODY
        assert second_pass == []
        assert chunks.done
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_early_exit_releases_connection(self, make_client):
        client, _ = make_client(audio_response)
        async with client:
            async with client.stream("POST", "/tts/stream") as chunks:
                async for _ in chunks:
                    break
            assert chunks.response is not None
            assert chunks.response.is_closed
            assert [chunk async for chunk in chunks] == []

    @pytest.mark.asyncio
    async def test_error_status_raises_before_any_chunk(self, make_client):
        body = {"message": "voice not found", "error": "not_found"}
        client, _ = make_client(lambda r: httpx.Response(404, json=body))
        async with client:
            chunks = client.stream("POST", "/tts/stream")
            with pytest.raises(RemoteError) as exc_info:
                await chunks.__anext__()
            assert exc_info.value.status_code == 404
            assert chunks.done

    @pytest.mark.asyncio
    async def test_failure_mid_stream(self, make_client):
        client, _ = make_client(
            lambda r: httpx.Response(200, content=chunked(b"ok", error=httpx.ReadError("reset")))
        )
        received = []
        async with client:
            with pytest.raises(TransportError):
                async for chunk in client.stream("GET", "/tts/job-1"):
                    received.append(chunk)
        assert received == [b"ok"]
