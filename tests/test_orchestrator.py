from __future__ import annotations

import orjson
import pytest

from app.connector.schemas.gladia_io import Done, Failed, JobHandle, PollPolicy, PollTarget, Processing
from app.connector.services.errors import (
    MalformedSubmissionError,
    TranscriptionFailedError,
    TranscriptionTimeoutError,
)
from app.connector.services.metrics import metrics
from app.connector.services.orchestrator import choose_poll_target, interpret, submit_and_maybe_wait


BASE = "https://api.gladia.io"
SUBMIT = f"{BASE}/v2/transcription"
RESULT_URL = f"{BASE}/v2/pre-recorded/txn-123"
PAYLOAD = {"audio_url": "https://example.com/audio.mp3"}
FAST = PollPolicy(interval_ms=1000, timeout_ms=30000)


@pytest.mark.asyncio
async def test_no_wait_returns_receipt(client, fake, clock):
    receipt = {"id": "txn-123", "result_url": RESULT_URL}
    fake.reply("POST", SUBMIT, receipt)

    result = await submit_and_maybe_wait(
        client, PAYLOAD, wait_for_completion=False, policy=FAST, sleep=clock.sleep, clock=clock
    )

    assert result == receipt
    assert len(fake.requests) == 1
    assert orjson.loads(fake.requests[0].content) == PAYLOAD
    assert fake.requests[0].headers["x-gladia-key"] == "test-key"
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_no_wait_passes_through_malformed_receipt(client, fake, clock):
    fake.reply("POST", SUBMIT, {})
    result = await submit_and_maybe_wait(
        client, PAYLOAD, wait_for_completion=False, policy=FAST, sleep=clock.sleep, clock=clock
    )
    assert result == {}


@pytest.mark.asyncio
async def test_polls_result_url_until_done(client, fake, clock):
    done = {"status": "done", "result": {"transcription": {"full_transcript": "Hello world"}}}
    fake.reply("POST", SUBMIT, {"id": "txn-123", "result_url": RESULT_URL})
    fake.reply("GET", RESULT_URL, {"status": "processing"}, done)

    result = await submit_and_maybe_wait(
        client, PAYLOAD, wait_for_completion=True, policy=FAST, sleep=clock.sleep, clock=clock
    )

    assert result == done
    polls = fake.calls("GET", RESULT_URL)
    assert len(polls) == 2
    assert all(p.headers["x-gladia-key"] == "test-key" for p in polls)
    assert all(p.content == b"" for p in polls)
    # id endpoint never touched although an id was returned
    assert fake.calls("GET", f"{SUBMIT}/txn-123") == []
    assert clock.sleeps == [1.0, 1.0]
    assert metrics.counter_value("gladia_polls_total", labels={"status": "processing"}) == 1
    assert metrics.counter_value("gladia_polls_total", labels={"status": "done"}) == 1
    assert metrics.counter_value("gladia_jobs_total", labels={"outcome": "done"}) == 1


@pytest.mark.asyncio
async def test_polls_id_endpoint_without_result_url(client, fake, clock):
    fake.reply("POST", SUBMIT, {"id": "txn-456"})
    fake.reply("GET", f"{SUBMIT}/txn-456", {"status": "queued"}, {"status": "done", "result": {}})

    result = await submit_and_maybe_wait(
        client, PAYLOAD, wait_for_completion=True, policy=FAST, sleep=clock.sleep, clock=clock
    )

    assert result["status"] == "done"
    assert len(fake.calls("GET", f"{SUBMIT}/txn-456")) == 2


@pytest.mark.asyncio
async def test_error_status_raises_with_service_message(client, fake, clock):
    fake.reply("POST", SUBMIT, {"id": "txn-err", "result_url": RESULT_URL})
    fake.reply("GET", RESULT_URL, {"status": "error", "error_message": "Invalid audio format"})

    with pytest.raises(TranscriptionFailedError, match="Invalid audio format") as info:
        await submit_and_maybe_wait(
            client, PAYLOAD, wait_for_completion=True, policy=FAST, sleep=clock.sleep, clock=clock
        )

    assert str(info.value) == 'Transcription failed: "Invalid audio format"'
    assert info.value.service_message == "Invalid audio format"


@pytest.mark.asyncio
async def test_timeout_after_budget(client, fake, clock):
    fake.reply("POST", SUBMIT, {"id": "txn-slow"})
    fake.reply("GET", f"{SUBMIT}/txn-slow", *[{"status": "processing"}] * 5)
    policy = PollPolicy.from_seconds(1, 2)

    with pytest.raises(TranscriptionTimeoutError) as info:
        await submit_and_maybe_wait(
            client, PAYLOAD, wait_for_completion=True, policy=policy, sleep=clock.sleep, clock=clock
        )

    assert info.value.timeout_ms == 2000
    assert str(info.value) == "Transcription timed out after 2 seconds"
    assert clock.now == 2000
    assert len(fake.calls("GET", f"{SUBMIT}/txn-slow")) == 2
    assert metrics.counter_value("gladia_jobs_total", labels={"outcome": "timeout"}) == 1
    assert metrics.counter_value("gladia_jobs_total", labels={"outcome": "done"}) == 0


def test_timeout_message_prints_seconds_exactly():
    assert str(TranscriptionTimeoutError(PollPolicy.from_seconds(5, 1234567).timeout_ms)) == (
        "Transcription timed out after 1234567 seconds"
    )
    assert str(TranscriptionTimeoutError(1500)) == "Transcription timed out after 1.5 seconds"
    assert str(TranscriptionTimeoutError(600000)) == "Transcription timed out after 600 seconds"


@pytest.mark.asyncio
async def test_missing_id_and_result_url_is_malformed(client, fake, clock):
    fake.reply("POST", SUBMIT, {"status": "queued"})

    with pytest.raises(MalformedSubmissionError, match="No result_url or id"):
        await submit_and_maybe_wait(
            client, PAYLOAD, wait_for_completion=True, policy=FAST, sleep=clock.sleep, clock=clock
        )

    assert len(fake.requests) == 1
    assert clock.sleeps == []


def test_choose_poll_target_prefers_result_url():
    handle = JobHandle(id="txn-1", result_url="https://x/result")
    assert choose_poll_target(handle) == PollTarget(url="https://x/result", absolute=True)
    assert choose_poll_target(JobHandle(id="txn-1", result_url=None)) == PollTarget(
        url="/v2/transcription/txn-1", absolute=False
    )


def test_interpret_statuses():
    assert interpret({"status": "done", "x": 1}) == Done(payload={"status": "done", "x": 1})
    assert interpret({"status": "processing"}) == Processing(status="processing")
    assert interpret({}) == Processing(status=None)
    assert interpret({"status": "error", "error_message": "bad", "error": "worse"}) == Failed(message="bad")
    assert interpret({"status": "error", "error": "worse"}) == Failed(message="worse")
    assert interpret({"status": "error"}) == Failed(message="Unknown error")
