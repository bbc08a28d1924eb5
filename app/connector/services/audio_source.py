from __future__ import annotations

"""Resolve an item's audio into the single `audio_url` Gladia expects."""

from app.connector.schemas.gladia_io import (
    AudioReference,
    AudioUpload,
    AudioUrl,
    BinarySource,
    TranscribeParameters,
    UrlSource,
)
from app.connector.services.binary_store import BinaryStore
from app.connector.services.errors import UploadError
from app.connector.services.gladia_client import GladiaClient
from app.connector.services.logging import get_logger


def reference_for(parameters: TranscribeParameters, binaries: BinaryStore, index: int) -> AudioReference:
    """Turn the item's audio parameter into an AudioReference."""

    source = parameters.audio
    if isinstance(source, UrlSource):
        return AudioUrl(url=source.audio_url)
    if isinstance(source, BinarySource):
        data, filename, mime_type = binaries.get(index, source.binary_property_name)
        return AudioUpload(data=data, filename=filename, mime_type=mime_type)
    raise TypeError(f"unsupported audio source: {type(source).__name__}")


async def resolve_audio_url(reference: AudioReference, client: GladiaClient) -> str:
    """Return a URL Gladia can fetch; binaries are uploaded first (one call, no retry)."""

    if isinstance(reference, AudioUrl):
        return reference.url
    if isinstance(reference, AudioUpload):
        response = await client.upload(reference.data, reference.filename, reference.mime_type)
        audio_url = response.get("audio_url")
        if not audio_url or not isinstance(audio_url, str):
            raise UploadError("Upload succeeded but no audio_url returned")
        get_logger().info("gladia_upload_ok", filename=reference.filename, size=len(reference.data))
        return audio_url
    raise TypeError(f"unsupported audio reference: {type(reference).__name__}")
