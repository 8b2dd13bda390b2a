"""Shared fixtures: clients wired to an in-process mock of the Play.ht API."""

from collections.abc import AsyncIterator, Callable

import httpx
import pytest

from playht_client import ClientBuilder, PlayHTClient

BASE_URL = "https://api.playht.test/api/v2"


def chunked(*chunks: bytes, error: Exception | None = None) -> AsyncIterator[bytes]:
    """Async body that yields ``chunks`` one by one, then optionally fails."""

    async def body() -> AsyncIterator[bytes]:
        for chunk in chunks:
            yield chunk
        if error is not None:
            raise error

    return body()


class RecordingHandler:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_client() -> Callable[..., tuple[PlayHTClient, RecordingHandler]]:
    """Factory for a PlayHTClient backed by a RecordingHandler."""

    def _make(
        respond: Callable[[httpx.Request], httpx.Response],
        headers: dict[str, str] | None = None,
    ) -> tuple[PlayHTClient, RecordingHandler]:
        handler = RecordingHandler(respond)
        builder = ClientBuilder().url(BASE_URL).transport(httpx.MockTransport(handler))
        for name, value in (headers or {}).items():
            builder.header(name, value)
        return PlayHTClient(builder.finalize()), handler

    return _make
