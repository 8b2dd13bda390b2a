"""Play.ht v2 endpoints on top of the core Client.

Each PlayHTClient method maps one API operation onto Client.send, relay or
stream with the right path and Accept header. The module-level functions of
the same names are one-off conveniences: they build a default client from the
environment, run the call and close the client.
"""

import logging
from typing import AsyncIterator

import httpx
from httpx_sse import ServerSentEvent, aconnect_sse

from .client import Client, FilePart, TextPart, raise_for_api_error
from .config import APPLICATION_JSON, AUDIO_MPEG, TEXT_EVENT_STREAM
from .errors import TransportError
from .models import (
    CloneVoiceFileRequest,
    CloneVoiceURLRequest,
    ClonedVoice,
    DeleteClonedVoiceRequest,
    DeleteClonedVoiceResponse,
    TTSJob,
    TTSJobRequest,
    TTSStreamRequest,
    TTSStreamURL,
    Voice,
)
from .streaming import ByteSink, ChunkStream

logger = logging.getLogger(__name__)

VOICES_PATH = "/voices"
CLONED_VOICES_PATH = "/cloned-voices"
CLONED_VOICES_INSTANT_PATH = "/cloned-voices/instant"
TTS_JOB_PATH = "/tts"
TTS_STREAM_PATH = "/tts/stream"

_JSON = {"Accept": APPLICATION_JSON}
_SSE = {"Accept": TEXT_EVENT_STREAM}
_AUDIO = {"Accept": AUDIO_MPEG}


class PlayHTClient(Client):
    """Client with one method per Play.ht API operation."""

    # -------------------------------------------------------------------------
    # Voices
    # -------------------------------------------------------------------------

    async def get_stock_voices(self) -> list[Voice]:
        """List all stock voices."""
        return await self.send("GET", VOICES_PATH, list[Voice], headers=_JSON)

    async def get_cloned_voices(self) -> list[ClonedVoice]:
        """List the account's cloned voices."""
        return await self.send("GET", CLONED_VOICES_PATH, list[ClonedVoice], headers=_JSON)

    async def clone_voice_from_file(self, req: CloneVoiceFileRequest) -> ClonedVoice:
        """Create an instant voice clone from a local audio sample.

        The sample is read into memory and uploaded as multipart form data.
        """
        return await self.send(
            "POST",
            CLONED_VOICES_INSTANT_PATH,
            ClonedVoice,
            headers=_JSON,
            multipart={
                "voice_name": TextPart(req.voice_name),
                "sample_file": FilePart(req.sample_file, req.mime_type),
            },
        )

    async def clone_voice_from_url(self, req: CloneVoiceURLRequest) -> ClonedVoice:
        """Create an instant voice clone from a sample the API downloads."""
        return await self.send(
            "POST", CLONED_VOICES_INSTANT_PATH, ClonedVoice, headers=_JSON, json=req
        )

    async def delete_cloned_voice(self, req: DeleteClonedVoiceRequest) -> DeleteClonedVoiceResponse:
        """Delete a cloned voice."""
        return await self.send(
            "DELETE", f"{CLONED_VOICES_PATH}/", DeleteClonedVoiceResponse, headers=_JSON, json=req
        )

    # -------------------------------------------------------------------------
    # Async TTS jobs
    # -------------------------------------------------------------------------

    async def create_tts_job(self, req: TTSJobRequest) -> TTSJob:
        """Create an async TTS job and return its metadata."""
        return await self.send("POST", TTS_JOB_PATH, TTSJob, headers=_JSON, json=req)

    async def create_tts_job_with_progress_stream(
        self, sink: ByteSink, req: TTSJobRequest
    ) -> str | None:
        """Create a TTS job and relay its progress events into ``sink``.

        The SSE bytes are written verbatim.

        Returns:
            The job's progress stream URL (Content-Location), if the API sent one.
        """
        result = await self.relay("POST", TTS_JOB_PATH, sink, headers=_SSE, json=req)
        return result.headers.get("Content-Location")

    async def get_tts_job(self, job_id: str) -> TTSJob:
        """Fetch the current state of a TTS job."""
        return await self.send("GET", f"{TTS_JOB_PATH}/{job_id}", TTSJob, headers=_JSON)

    async def stream_tts_job_progress(self, sink: ByteSink, job_id: str) -> None:
        """Relay the progress events of an existing job into ``sink`` verbatim."""
        await self.relay("GET", f"{TTS_JOB_PATH}/{job_id}", sink, headers=_SSE)

    async def iter_tts_job_progress(self, job_id: str) -> AsyncIterator[ServerSentEvent]:
        """Yield the parsed progress events of an existing job.

        Yields:
            ServerSentEvent objects (event, data, id) in arrival order.

        Raises:
            RemoteError: If the API rejects the request.
            TransportError: If the connection fails or the body is not SSE.
        """
        url = self.url_for(f"{TTS_JOB_PATH}/{job_id}")
        try:
            async with aconnect_sse(
                self._http, "GET", url, headers=dict(self.headers)
            ) as event_source:
                await raise_for_api_error(event_source.response)
                async for event in event_source.aiter_sse():
                    logger.debug(f"Job {job_id} event: {event.event}")
                    yield event
        except httpx.HTTPError as e:
            raise TransportError(f"Progress stream for job {job_id} failed: {e}") from e

    async def stream_tts_job_audio(self, sink: ByteSink, job_id: str) -> None:
        """Relay the audio of an existing job into ``sink`` as it is generated."""
        await self.relay("GET", f"{TTS_JOB_PATH}/{job_id}", sink, headers=_AUDIO)

    # -------------------------------------------------------------------------
    # Real-time audio streams
    # -------------------------------------------------------------------------

    async def stream_audio(self, sink: ByteSink, req: TTSStreamRequest) -> None:
        """Synthesize ``req`` and write the audio into ``sink`` as it arrives."""
        await self.relay("POST", TTS_STREAM_PATH, sink, headers=_AUDIO, json=req)

    def iter_audio(self, req: TTSStreamRequest) -> ChunkStream:
        """Pull-mode variant of stream_audio.

        Usage:
            async with client.iter_audio(req) as chunks:
                async for chunk in chunks:
                    ...
        """
        return self.stream("POST", TTS_STREAM_PATH, headers=_AUDIO, json=req)

    async def get_audio_stream_url(self, req: TTSStreamRequest) -> TTSStreamURL:
        """Get a URL to fetch the audio stream from instead of the audio itself."""
        return await self.send("POST", TTS_STREAM_PATH, TTSStreamURL, headers=_JSON, json=req)


# =============================================================================
# One-off helpers
# =============================================================================


async def get_stock_voices() -> list[Voice]:
    async with PlayHTClient() as client:
        return await client.get_stock_voices()


async def get_cloned_voices() -> list[ClonedVoice]:
    async with PlayHTClient() as client:
        return await client.get_cloned_voices()


async def clone_voice_from_file(req: CloneVoiceFileRequest) -> ClonedVoice:
    async with PlayHTClient() as client:
        return await client.clone_voice_from_file(req)


async def clone_voice_from_url(req: CloneVoiceURLRequest) -> ClonedVoice:
    async with PlayHTClient() as client:
        return await client.clone_voice_from_url(req)


async def delete_cloned_voice(req: DeleteClonedVoiceRequest) -> DeleteClonedVoiceResponse:
    async with PlayHTClient() as client:
        return await client.delete_cloned_voice(req)


async def create_tts_job(req: TTSJobRequest) -> TTSJob:
    async with PlayHTClient() as client:
        return await client.create_tts_job(req)


async def create_tts_job_with_progress_stream(sink: ByteSink, req: TTSJobRequest) -> str | None:
    async with PlayHTClient() as client:
        return await client.create_tts_job_with_progress_stream(sink, req)


async def get_tts_job(job_id: str) -> TTSJob:
    async with PlayHTClient() as client:
        return await client.get_tts_job(job_id)


async def stream_tts_job_progress(sink: ByteSink, job_id: str) -> None:
    async with PlayHTClient() as client:
        await client.stream_tts_job_progress(sink, job_id)


async def stream_tts_job_audio(sink: ByteSink, job_id: str) -> None:
    async with PlayHTClient() as client:
        await client.stream_tts_job_audio(sink, job_id)


async def stream_audio(sink: ByteSink, req: TTSStreamRequest) -> None:
    async with PlayHTClient() as client:
        await client.stream_audio(sink, req)


async def get_audio_stream_url(req: TTSStreamRequest) -> TTSStreamURL:
    async with PlayHTClient() as client:
        return await client.get_audio_stream_url(req)
