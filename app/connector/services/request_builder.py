from __future__ import annotations

"""Build the Gladia job-submission body from an audio URL and feature options.

Absent options stay absent: a missing key means "service default", which is
not the same as sending `false` or an empty list.
"""

from typing import Any

from app.connector.schemas.gladia_io import FeatureOptions
from app.utils.text import split_csv


# Plain booleans copied through whenever they are set (False included)
_FLAGS = (
    "detect_language",
    "enable_code_switching",
    "summarization",
    "sentiment_analysis",
    "named_entity_recognition",
)


def _diarization_config(options: FeatureOptions) -> dict[str, int]:
    config: dict[str, int] = {}
    if options.diarization_min_speakers and options.diarization_min_speakers > 0:
        config["min_speakers"] = options.diarization_min_speakers
    if options.diarization_max_speakers and options.diarization_max_speakers > 0:
        config["max_speakers"] = options.diarization_max_speakers
    return config


def build_payload(audio_url: str, options: FeatureOptions) -> dict[str, Any]:
    """Return the submission payload for `POST /v2/transcription`."""

    body: dict[str, Any] = {"audio_url": audio_url}

    if options.context_prompt:
        body["context_prompt"] = options.context_prompt

    vocabulary = split_csv(options.custom_vocabulary)
    if vocabulary:
        body["custom_vocabulary"] = vocabulary

    if options.language:
        body["language"] = options.language

    for name in _FLAGS:
        value = getattr(options, name)
        if value is not None:
            body[name] = value

    if options.diarization is not None:
        body["diarization"] = options.diarization
        config = _diarization_config(options) if options.diarization else {}
        if config:
            body["diarization_config"] = config

    if options.subtitles is not None:
        body["subtitles"] = options.subtitles
        if options.subtitles and options.subtitles_formats:
            body["subtitles_config"] = {"formats": list(options.subtitles_formats)}

    if options.translation is not None:
        body["translation"] = options.translation
        targets = split_csv(options.translation_target_languages)
        if options.translation and targets:
            body["translation_config"] = {"target_languages": targets}

    return body
