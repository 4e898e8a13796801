"""
Task Lifecycle Tests

Verifies:
✔ Creation body shape
✔ No polling without wait, or with a webhook
✔ Missing task id is fatal when polling
✔ Polling stops on the first terminal status (any case)
✔ Deadline returns the creation payload, not the last poll
✔ No retries on failure
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from generation.tasks import (
    CompletionStrategy,
    PollSettings,
    TaskLifecycleController,
    TaskState,
)
from transport.metis import MissingRequiredField, ModelRef, UpstreamFailure, WebhookSpec


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────


class FakeClock:
    """Monotonic clock that only moves when the controller sleeps."""

    def __init__(self):
        self.now = 1000.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


CREATED = {"id": "task-1", "status": "PENDING", "note": "creation"}
MODEL = ModelRef(name="openai", model="gpt-image-1")


def make_controller(responses):
    client = MagicMock()
    client.request = AsyncMock(side_effect=responses)
    clock = FakeClock()
    controller = TaskLifecycleController(client, clock=clock, sleep=clock.sleep)
    return controller, client, clock


def poll_calls(client):
    return [c for c in client.request.call_args_list if c.args[0] == "GET"]


# ─────────────────────────────────────────────────────
# Submission
# ─────────────────────────────────────────────────────


class TestSubmission:
    @pytest.mark.asyncio
    async def test_creation_body(self):
        controller, client, _ = make_controller([CREATED])

        await controller.run(MODEL, "IMAGE_GENERATION", {"prompt": "x"}, poll=PollSettings(wait_for_completion=False))

        client.request.assert_awaited_once_with(
            "POST",
            "/api/v2/generate",
            {
                "model": {"name": "openai", "model": "gpt-image-1"},
                "operation": "IMAGE_GENERATION",
                "args": {"prompt": "x"},
            },
        )

    @pytest.mark.asyncio
    async def test_webhook_in_body_without_absent_headers(self):
        controller, client, _ = make_controller([CREATED])

        await controller.run(
            MODEL,
            "IMAGE_GENERATION",
            {},
            strategy=CompletionStrategy.WEBHOOK,
            webhook=WebhookSpec(url="https://hooks.example.com"),
        )

        body = client.request.call_args.args[2]
        assert body["webhook"] == {"url": "https://hooks.example.com", "method": "POST"}

    @pytest.mark.asyncio
    async def test_no_wait_returns_creation_response(self):
        controller, client, _ = make_controller([CREATED])

        outcome = await controller.run(MODEL, "OP", {}, poll=PollSettings(wait_for_completion=False))

        assert outcome.state == TaskState.SUBMITTED
        assert outcome.task == CREATED
        assert poll_calls(client) == []

    @pytest.mark.asyncio
    async def test_webhook_strategy_never_polls(self):
        controller, client, _ = make_controller([CREATED])

        outcome = await controller.run(
            MODEL,
            "OP",
            {},
            strategy=CompletionStrategy.WEBHOOK,
            webhook=WebhookSpec(url="https://h"),
            poll=PollSettings(wait_for_completion=True),
        )

        assert outcome.state == TaskState.SUBMITTED
        assert client.request.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_id_when_polling_is_fatal(self):
        controller, client, _ = make_controller([{"status": "PENDING"}])

        with pytest.raises(MissingRequiredField, match="no task id"):
            await controller.run(MODEL, "OP", {})

        assert client.request.await_count == 1

    @pytest.mark.asyncio
    async def test_creation_failure_not_retried(self):
        controller, client, _ = make_controller([UpstreamFailure("HTTP request failed: boom")])

        with pytest.raises(UpstreamFailure):
            await controller.run(MODEL, "OP", {})

        assert client.request.await_count == 1


# ─────────────────────────────────────────────────────
# Polling
# ─────────────────────────────────────────────────────


class TestPolling:
    @pytest.mark.asyncio
    async def test_three_polls_until_completed(self):
        completed = {"id": "task-1", "status": "COMPLETED", "output": ["https://cdn/x.png"]}
        controller, client, clock = make_controller([
            CREATED,
            {"id": "task-1", "status": "PENDING"},
            {"id": "task-1", "status": "PENDING"},
            completed,
        ])

        outcome = await controller.run(MODEL, "OP", {}, poll=PollSettings(poll_interval=5, timeout_minutes=30))

        assert outcome.state == TaskState.TERMINAL
        assert outcome.task == completed
        assert outcome.polls == 3
        assert len(poll_calls(client)) == 3
        assert poll_calls(client)[0].args == ("GET", "/api/v2/generate/task-1")
        assert clock.sleeps == [5, 5]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["ERROR", "cancelled", "Completed"])
    async def test_terminal_statuses_case_insensitive(self, status):
        final = {"id": "task-1", "status": status}
        controller, _, _ = make_controller([CREATED, final])

        outcome = await controller.run(MODEL, "OP", {})

        assert outcome.state == TaskState.TERMINAL
        assert outcome.task == final

    @pytest.mark.asyncio
    async def test_deadline_returns_creation_payload(self):
        pending = [{"id": "task-1", "status": "RUNNING", "progress": i} for i in range(20)]
        controller, client, clock = make_controller([CREATED] + pending)

        outcome = await controller.run(MODEL, "OP", {}, poll=PollSettings(poll_interval=30, timeout_minutes=1))

        assert outcome.state == TaskState.TIMED_OUT
        assert outcome.task == CREATED
        # t=0 and t=30 fall inside the 60s window
        assert len(poll_calls(client)) == 2

    @pytest.mark.asyncio
    async def test_zero_settings_fall_back_to_defaults(self):
        settings = PollSettings(poll_interval=0, timeout_minutes=0)
        assert settings.interval_s == 5
        assert settings.timeout_s == 30 * 60

    @pytest.mark.asyncio
    async def test_poll_failure_aborts(self):
        controller, client, _ = make_controller([
            CREATED,
            UpstreamFailure("Metis API returned 503: unavailable", status_code=503),
        ])

        with pytest.raises(UpstreamFailure):
            await controller.run(MODEL, "OP", {})

        assert len(poll_calls(client)) == 1

    @pytest.mark.asyncio
    async def test_task_id_is_path_encoded(self):
        controller, client, _ = make_controller([
            {"id": "a/b"},
            {"status": "COMPLETED"},
        ])

        await controller.run(MODEL, "OP", {})

        assert poll_calls(client)[0].args[1] == "/api/v2/generate/a%2Fb"
