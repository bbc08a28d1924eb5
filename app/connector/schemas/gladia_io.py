from __future__ import annotations

"""Pydantic models for the host <-> connector contract and Gladia value objects."""

import base64
import binascii
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.text import split_csv


# --- Audio reference (what we know about the audio of one item) ---


@dataclass(frozen=True)
class AudioUrl:
    url: str


@dataclass(frozen=True)
class AudioUpload:
    data: bytes
    filename: str
    mime_type: str


AudioReference = Union[AudioUrl, AudioUpload]


# --- Per-item parameters supplied by the workflow host ---


class UrlSource(BaseModel):
    source: Literal["url"] = "url"
    audio_url: str = Field(min_length=1, alias="audioUrl")

    model_config = ConfigDict(populate_by_name=True)


class BinarySource(BaseModel):
    source: Literal["binaryData"]
    binary_property_name: str = Field(default="data", min_length=1, alias="binaryPropertyName")

    model_config = ConfigDict(populate_by_name=True)


AudioSource = Annotated[Union[UrlSource, BinarySource], Field(discriminator="source")]


class FeatureOptions(BaseModel):
    """Optional transcription knobs. `None` means "leave the service default"."""

    context_prompt: Optional[str] = None
    custom_vocabulary: Optional[list[str]] = None
    detect_language: Optional[bool] = None
    language: Optional[str] = None
    enable_code_switching: Optional[bool] = None
    diarization: Optional[bool] = None
    diarization_min_speakers: Optional[int] = Field(default=None, ge=0)
    diarization_max_speakers: Optional[int] = Field(default=None, ge=0)
    subtitles: Optional[bool] = None
    subtitles_formats: Optional[list[Literal["srt", "vtt"]]] = None
    translation: Optional[bool] = None
    translation_target_languages: Optional[list[str]] = None
    summarization: Optional[bool] = None
    sentiment_analysis: Optional[bool] = None
    named_entity_recognition: Optional[bool] = None
    # Seconds, as the host shows them; only used when waiting for completion
    polling_interval: Optional[float] = Field(default=None, gt=0, alias="pollingInterval")
    polling_timeout: Optional[float] = Field(default=None, gt=0, alias="pollingTimeout")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("custom_vocabulary", "translation_target_languages", mode="before")
    @classmethod
    def _parse_csv(cls, v: Any) -> Any:
        if isinstance(v, str):
            return split_csv(v)
        if isinstance(v, (list, tuple)) and all(isinstance(p, str) for p in v):
            return split_csv(v)
        return v

    @field_validator("subtitles_formats")
    @classmethod
    def _dedupe_formats(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        return list(dict.fromkeys(v))


class TranscribeParameters(BaseModel):
    audio: AudioSource
    wait_for_completion: bool = Field(default=True, alias="waitForCompletion")
    options: FeatureOptions = Field(default_factory=FeatureOptions)

    model_config = ConfigDict(populate_by_name=True)


class BinaryData(BaseModel):
    data: str  # base64
    mime_type: str = Field(default="application/octet-stream", alias="mimeType")
    file_name: Optional[str] = Field(default=None, alias="fileName")

    model_config = ConfigDict(populate_by_name=True)

    def decode(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("binary data is not valid base64") from exc


class InputItem(BaseModel):
    json_: dict[str, Any] = Field(default_factory=dict, alias="json")
    binary: dict[str, BinaryData] = Field(default_factory=dict)
    parameters: TranscribeParameters

    model_config = ConfigDict(populate_by_name=True)


class BatchRequest(BaseModel):
    resource: Literal["transcription"] = "transcription"
    operation: Literal["transcribe"] = "transcribe"
    continue_on_fail: bool = Field(default=False, alias="continueOnFail")
    items: list[InputItem] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ItemResult(BaseModel):
    json_: dict[str, Any] = Field(alias="json")
    paired_item: dict[str, int] = Field(alias="pairedItem")

    model_config = ConfigDict(populate_by_name=True)


class BatchResponse(BaseModel):
    results: list[ItemResult]


# --- Job lifecycle value objects ---


@dataclass(frozen=True)
class JobHandle:
    id: Optional[str]
    result_url: Optional[str]

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "JobHandle":
        return cls(
            id=response.get("id") or None,
            result_url=response.get("result_url") or None,
        )


@dataclass(frozen=True)
class PollTarget:
    url: str
    absolute: bool  # True: service-provided result_url; False: endpoint on base URL


@dataclass(frozen=True)
class PollPolicy:
    interval_ms: int = 5000
    timeout_ms: int = 600000

    @classmethod
    def from_seconds(cls, interval: float, timeout: float) -> "PollPolicy":
        return cls(interval_ms=int(interval * 1000), timeout_ms=int(timeout * 1000))


@dataclass(frozen=True)
class Processing:
    status: Optional[str]


@dataclass(frozen=True)
class Done:
    payload: dict[str, Any]


@dataclass(frozen=True)
class Failed:
    message: object


PollOutcome = Union[Processing, Done, Failed]
