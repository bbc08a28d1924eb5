from __future__ import annotations

"""Endpoints the workflow host calls to run the Gladia transcription node."""

import httpx
from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.config.settings import Settings, get_settings
from app.connector.schemas.gladia_io import BatchRequest, BatchResponse
from app.connector.services.batch import run_batch
from app.connector.services.errors import ConnectorError, TransportError
from app.connector.services.gladia_client import open_client


router = APIRouter(prefix="/gladia")


def get_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for outgoing Gladia calls; None means the real network."""

    return None


def _check_secret(secret: str | None, settings: Settings) -> None:
    if settings.connector_secret and secret != settings.connector_secret:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="invalid secret")


@router.post("/execute", response_model=BatchResponse)
async def execute(
    batch: BatchRequest,
    x_connector_secret: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_transport),
) -> BatchResponse:
    _check_secret(x_connector_secret, settings)
    try:
        async with open_client(settings, transport=transport) as client:
            results = await run_batch(batch, client=client, settings=settings)
    except TransportError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": exc.message, "item_index": exc.item_index, "status_code": exc.status_code},
        ) from exc
    except ConnectorError as exc:
        raise HTTPException(
            status_code=422,
            detail={"message": exc.message, "item_index": exc.item_index},
        ) from exc
    return BatchResponse(results=results)


@router.get("/credentials/test")
async def check_credentials(
    x_connector_secret: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_transport),
) -> dict:
    _check_secret(x_connector_secret, settings)
    async with open_client(settings, transport=transport) as client:
        return await client.test_credentials()
