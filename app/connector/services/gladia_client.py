from __future__ import annotations

"""HTTP client for the Gladia API (authenticated requests, result reads, uploads)."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx
import orjson

from app.config.settings import Settings
from app.connector.services.credentials import AUTH_HEADER, CREDENTIAL_NAME, CredentialStore
from app.connector.services.errors import TransportError, UploadError
from app.connector.services.logging import get_logger
from app.connector.services.metrics import metrics


UPLOAD_ENDPOINT = "/v2/upload"
TRANSCRIPTION_ENDPOINT = "/v2/transcription"


def _parse_body(text: str) -> dict[str, Any] | None:
    """Decode a JSON object body; a JSON string holding JSON is decoded twice.

    Returns None when the body is not a JSON object.
    """

    try:
        data: Any = orjson.loads(text)
        if isinstance(data, str):
            data = orjson.loads(data)
    except orjson.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _error_message(resp: httpx.Response) -> str:
    body = _parse_body(resp.text) or {}
    detail = body.get("message") or body.get("error") or resp.text[:200]
    return f"Gladia API error {resp.status_code}: {detail}"


class GladiaClient:
    def __init__(self, http: httpx.AsyncClient, credentials: CredentialStore, *, base_url: str) -> None:
        self._http = http
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")

    async def _send(self, kind: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger = get_logger(kind=kind, method=method)
        with metrics.timed("gladia_request_seconds", labels={"kind": kind}):
            try:
                resp = await self._http.request(method, url, **kwargs)
                resp.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.warning("gladia_http_status", status=exc.response.status_code, url=url)
                raise TransportError(_error_message(exc.response), status_code=exc.response.status_code) from exc
            except httpx.HTTPError as exc:
                logger.warning("gladia_http_error", error=str(exc), url=url)
                raise TransportError(f"Gladia request failed: {exc}") from exc
        logger.debug("gladia_http_ok", status=resp.status_code, url=url)
        return resp

    async def request(self, method: str, endpoint: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        """Authenticated JSON call against `base_url + endpoint`.

        The body is omitted for GET and for empty bodies.
        """

        kwargs: dict[str, Any] = {"headers": self._credentials.get(CREDENTIAL_NAME).headers()}
        if method.upper() != "GET" and body:
            kwargs["json"] = body
        kind = "submit" if method.upper() == "POST" else "status"
        resp = await self._send(kind, method.upper(), f"{self._base_url}{endpoint}", **kwargs)
        data = _parse_body(resp.text)
        if data is None:
            raise TransportError(f"Unexpected response: {resp.text}", status_code=resp.status_code)
        return data

    async def get_url(self, url: str) -> dict[str, Any]:
        """Authenticated GET of an absolute URL handed out by the service (result_url)."""

        headers = self._credentials.get(CREDENTIAL_NAME).headers()
        resp = await self._send("result", "GET", url, headers=headers)
        data = _parse_body(resp.text)
        if data is None:
            raise TransportError(f"Unexpected response: {resp.text}", status_code=resp.status_code)
        return data

    async def upload(self, data: bytes, filename: str, mime_type: str) -> dict[str, Any]:
        """Multipart upload of raw audio; returns the parsed service response."""

        # The upload call sets the key header itself instead of going through request()
        credentials = self._credentials.get(CREDENTIAL_NAME)
        files = {"audio": (filename, data, mime_type)}
        resp = await self._send(
            "upload",
            "POST",
            f"{self._base_url}{UPLOAD_ENDPOINT}",
            files=files,
            headers={AUTH_HEADER: credentials.api_key},
        )
        parsed = _parse_body(resp.text)
        if parsed is None:
            raise UploadError(f"Upload failed: {resp.text}")
        return parsed

    async def test_credentials(self) -> dict[str, str]:
        """Cheap authenticated read used to validate the stored API key."""

        try:
            await self.request("GET", TRANSCRIPTION_ENDPOINT)
        except TransportError as exc:
            return {"status": "Error", "message": exc.message}
        return {"status": "OK", "message": "Connection successful"}


@asynccontextmanager
async def open_client(settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> AsyncIterator[GladiaClient]:
    """Yield a GladiaClient over one pooled httpx client, closed on exit."""

    timeout = httpx.Timeout(settings.http_timeout_seconds)
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as http:
        yield GladiaClient(http, CredentialStore(settings), base_url=settings.base_url)
