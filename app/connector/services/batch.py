from __future__ import annotations

"""Per-item execution loop for one host invocation."""

import asyncio

from app.config.settings import Settings
from app.connector.schemas.gladia_io import BatchRequest, FeatureOptions, InputItem, ItemResult, PollPolicy
from app.connector.services.audio_source import reference_for, resolve_audio_url
from app.connector.services.binary_store import BinaryStore
from app.connector.services.errors import ConnectorError
from app.connector.services.gladia_client import GladiaClient
from app.connector.services.logging import get_logger
from app.connector.services.metrics import metrics
from app.connector.services.orchestrator import Clock, Sleep, submit_and_maybe_wait
from app.connector.services.request_builder import build_payload
from app.utils.time import epoch_ms


def poll_policy_for(options: FeatureOptions, settings: Settings) -> PollPolicy:
    interval = options.polling_interval if options.polling_interval is not None else settings.polling.interval_seconds
    timeout = options.polling_timeout if options.polling_timeout is not None else settings.polling.timeout_seconds
    return PollPolicy.from_seconds(interval, timeout)


async def run_item(
    item: InputItem,
    index: int,
    *,
    client: GladiaClient,
    binaries: BinaryStore,
    settings: Settings,
    sleep: Sleep = asyncio.sleep,
    clock: Clock = epoch_ms,
) -> ItemResult:
    params = item.parameters
    reference = reference_for(params, binaries, index)
    audio_url = await resolve_audio_url(reference, client)
    payload = build_payload(audio_url, params.options)
    result = await submit_and_maybe_wait(
        client,
        payload,
        wait_for_completion=params.wait_for_completion,
        policy=poll_policy_for(params.options, settings),
        sleep=sleep,
        clock=clock,
    )
    return ItemResult(json=result, pairedItem={"item": index})


async def run_batch(
    request: BatchRequest,
    *,
    client: GladiaClient,
    settings: Settings,
    sleep: Sleep = asyncio.sleep,
    clock: Clock = epoch_ms,
) -> list[ItemResult]:
    """Process items one after another.

    With `continue_on_fail` a failing item becomes `{"error": message}` tagged
    with its index; otherwise the first failure aborts the batch.
    """

    binaries = BinaryStore(request.items)
    results: list[ItemResult] = []
    for index, item in enumerate(request.items):
        logger = get_logger(item=index)
        try:
            results.append(
                await run_item(item, index, client=client, binaries=binaries, settings=settings, sleep=sleep, clock=clock)
            )
        except Exception as exc:
            metrics.inc("gladia_items_failed_total", labels={"error": type(exc).__name__})
            if isinstance(exc, ConnectorError) and exc.item_index is None:
                exc.item_index = index
            if not request.continue_on_fail:
                logger.error("batch_item_failed", error=str(exc), aborting=True)
                raise
            logger.warning("batch_item_failed", error=str(exc), aborting=False)
            results.append(ItemResult(json={"error": str(exc)}, pairedItem={"item": index}))
    return results
