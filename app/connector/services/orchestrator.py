from __future__ import annotations

"""Submit a transcription job and optionally poll it to a terminal state.

States: submitted -> polling -> done | failed | timed out. The poll target is
picked once per job: the service-provided `result_url` wins over the
id-based endpoint, even when both are present.

The timeout is checked once per iteration, right after waking up, so the
real wait may exceed `timeout_ms` by up to one interval.
"""

import asyncio
from typing import Any, Awaitable, Callable

import orjson

from app.connector.schemas.gladia_io import (
    Done,
    Failed,
    JobHandle,
    PollOutcome,
    PollPolicy,
    PollTarget,
    Processing,
)
from app.connector.services.errors import (
    MalformedSubmissionError,
    TranscriptionFailedError,
    TranscriptionTimeoutError,
)
from app.connector.services.gladia_client import TRANSCRIPTION_ENDPOINT, GladiaClient
from app.connector.services.logging import get_logger
from app.connector.services.metrics import metrics
from app.utils.time import epoch_ms, ms_to_seconds


Sleep = Callable[[float], Awaitable[Any]]
Clock = Callable[[], float]


def choose_poll_target(handle: JobHandle) -> PollTarget:
    if handle.result_url:
        return PollTarget(url=handle.result_url, absolute=True)
    if handle.id:
        return PollTarget(url=f"{TRANSCRIPTION_ENDPOINT}/{handle.id}", absolute=False)
    raise MalformedSubmissionError("No result_url or id returned from transcription initiation")


def interpret(response: dict[str, Any]) -> PollOutcome:
    status = response.get("status")
    if status == "done":
        return Done(payload=response)
    if status == "error":
        message = response.get("error_message")
        if message is None:
            message = response.get("error")
        return Failed(message="Unknown error" if message is None else message)
    return Processing(status=status if isinstance(status, str) else None)


async def _read_status(client: GladiaClient, target: PollTarget) -> dict[str, Any]:
    if target.absolute:
        return await client.get_url(target.url)
    return await client.request("GET", target.url)


async def wait_for_result(
    client: GladiaClient,
    handle: JobHandle,
    policy: PollPolicy,
    *,
    sleep: Sleep = asyncio.sleep,
    clock: Clock = epoch_ms,
) -> dict[str, Any]:
    """Poll until done; raise on error status or when the time budget runs out."""

    target = choose_poll_target(handle)
    logger = get_logger(job_id=handle.id, poll_url=target.url)
    logger.info("gladia_poll_start", interval_ms=policy.interval_ms, timeout_ms=policy.timeout_ms)

    start = clock()
    attempts = 0
    while clock() - start < policy.timeout_ms:
        await sleep(ms_to_seconds(policy.interval_ms))
        attempts += 1
        response = await _read_status(client, target)
        outcome = interpret(response)

        if isinstance(outcome, Done):
            metrics.inc("gladia_polls_total", labels={"status": "done"})
            logger.info("gladia_poll_done", attempts=attempts)
            return outcome.payload
        if isinstance(outcome, Failed):
            metrics.inc("gladia_polls_total", labels={"status": "error"})
            logger.warning("gladia_poll_failed", attempts=attempts, error=outcome.message)
            raise TranscriptionFailedError(
                f"Transcription failed: {orjson.dumps(outcome.message).decode()}",
                service_message=outcome.message,
            )
        metrics.inc("gladia_polls_total", labels={"status": outcome.status or "unknown"})
        logger.debug("gladia_poll_status", attempts=attempts, status=outcome.status)

    logger.warning("gladia_poll_timeout", attempts=attempts)
    raise TranscriptionTimeoutError(policy.timeout_ms)


async def submit_and_maybe_wait(
    client: GladiaClient,
    payload: dict[str, Any],
    *,
    wait_for_completion: bool,
    policy: PollPolicy,
    sleep: Sleep = asyncio.sleep,
    clock: Clock = epoch_ms,
) -> dict[str, Any]:
    """Submit once; return the receipt, or the finished job when waiting."""

    response = await client.request("POST", TRANSCRIPTION_ENDPOINT, payload)
    handle = JobHandle.from_response(response)
    get_logger().info("gladia_submit_ok", job_id=handle.id, has_result_url=bool(handle.result_url))

    if not wait_for_completion:
        metrics.inc("gladia_jobs_total", labels={"outcome": "returned"})
        return response

    try:
        result = await wait_for_result(client, handle, policy, sleep=sleep, clock=clock)
    except TranscriptionFailedError:
        metrics.inc("gladia_jobs_total", labels={"outcome": "failed"})
        raise
    except TranscriptionTimeoutError:
        metrics.inc("gladia_jobs_total", labels={"outcome": "timeout"})
        raise
    metrics.inc("gladia_jobs_total", labels={"outcome": "done"})
    return result
