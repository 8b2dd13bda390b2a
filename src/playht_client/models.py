"""Request and response schemas for the Play.ht v2 API."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# TTS options
# =============================================================================


class VoiceEngine(str, Enum):
    """Voice engine. PlayHT2.0 is the recommended default."""

    PLAYHT_V1 = "PlayHT1.0"
    PLAYHT_V2 = "PlayHT2.0"
    PLAYHT_V2_TURBO = "PlayHT2.0-turbo"


class OutputFormat(str, Enum):
    MP3 = "mp3"
    WAV = "wav"
    OGG = "ogg"
    FLAC = "flac"
    MULAW = "mulaw"


class Quality(str, Enum):
    DRAFT = "draft"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    PREMIUM = "premium"


class Emotion(str, Enum):
    FEMALE_HAPPY = "female_happy"
    FEMALE_SAD = "female_sad"
    FEMALE_ANGRY = "female_angry"
    FEMALE_FEARFUL = "female_fearful"
    FEMALE_DISGUST = "female_disgust"
    FEMALE_SURPRISED = "female_surprised"
    MALE_HAPPY = "male_happy"
    MALE_SAD = "male_sad"
    MALE_ANGRY = "male_angry"
    MALE_FEARFUL = "male_fearful"
    MALE_DISGUST = "male_disgust"
    MALE_SURPRISED = "male_surprised"


# =============================================================================
# Async TTS jobs
# =============================================================================


class TTSJobRequest(BaseModel):
    """Request to create an async TTS job.

    Fields left as None are omitted from the request body.
    """

    text: str | None = None
    voice: str | None = None
    quality: Quality | None = Quality.DRAFT
    output_format: OutputFormat | None = OutputFormat.MP3
    voice_engine: VoiceEngine | None = VoiceEngine.PLAYHT_V2
    emotion: Emotion | None = Emotion.FEMALE_HAPPY
    speed: float | None = None
    temperature: float | None = None
    sample_rate: int | None = None
    seed: int | None = Field(default=None, ge=0)
    voice_guidance: float | None = None
    style_guidance: float | None = None


class JobOutput(BaseModel):
    """Audio produced by a finished job."""

    duration: float
    size: int
    url: str


class Link(BaseModel):
    """Hypermedia link attached to a job (progress stream, audio, ...)."""

    model_config = ConfigDict(populate_by_name=True)

    content_type: str | None = Field(default=None, alias="contentType")
    description: str | None = None
    href: str | None = None
    method: str | None = None
    rel: str | None = None


class TTSJob(BaseModel):
    """Async TTS job metadata."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    created: str
    input: TTSJobRequest
    output: JobOutput | None = None
    # Opaque: the set of values the service reports is not documented
    status: str | None = None
    links: list[Link] | None = Field(default=None, alias="_links")


# =============================================================================
# Real-time audio streams
# =============================================================================


class TTSStreamRequest(TTSJobRequest):
    """Request to synthesize audio and stream it back immediately."""

    text_guidance: float | None = None


class TTSStreamURL(BaseModel):
    """Location of an audio stream to fetch later."""

    model_config = ConfigDict(populate_by_name=True)

    href: str
    method: str
    content_type: str = Field(alias="contentType")
    rel: str
    description: str


# =============================================================================
# Voices
# =============================================================================


class Voice(BaseModel):
    """Stock voice metadata."""

    id: str
    name: str
    sample: str | None = None
    accent: str | None = None
    age: str | None = None
    gender: str | None = None
    language: str | None = None
    language_code: str | None = None
    loudness: str | None = None
    style: str | None = None
    tempo: str | None = None
    texture: str | None = None
    voice_engine: str | None = None


class ClonedVoice(BaseModel):
    """Cloned voice metadata."""

    id: str
    name: str
    type: str | None = None
    voice_engine: str | None = None


class CloneVoiceFileRequest(BaseModel):
    """Clone a voice from a local audio sample.

    The file is uploaded as a multipart part with ``mime_type`` as its
    media type.
    """

    sample_file: str
    voice_name: str
    mime_type: str


class CloneVoiceURLRequest(BaseModel):
    """Clone a voice from an audio sample the service can download."""

    sample_file_url: str
    voice_name: str


class DeleteClonedVoiceRequest(BaseModel):
    voice_id: str


class DeleteClonedVoiceResponse(BaseModel):
    message: str
    deleted: ClonedVoice
