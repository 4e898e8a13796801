"""
Generation Task Lifecycle

Submits a generation task and resolves its completion.

States:
  SUBMITTED  -> creation response returned as-is (no wait, or webhook)
  POLLING    -> GET /api/v2/generate/{id} every poll_interval seconds
  TERMINAL   -> COMPLETED / ERROR / CANCELLED observed, that poll returned
  TIMED_OUT  -> deadline passed, the creation response is returned

Only the polling loop is bounded by the deadline; the remote job keeps
running. Nothing is retried: a failed creation or poll call aborts.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, Field

from config import Config
from transport.metis import (
    GenerationRequest,
    MetisClient,
    MissingRequiredField,
    ModelRef,
    WebhookSpec,
    encode_path_segment,
    is_terminal_status,
)

from .arguments import ArgumentSet

logger = logging.getLogger(__name__)


class CompletionStrategy(str, Enum):
    POLLING = "polling"
    WEBHOOK = "webhook"


class TaskState(str, Enum):
    SUBMITTED = "SUBMITTED"
    TERMINAL = "TERMINAL"
    TIMED_OUT = "TIMED_OUT"


class PollSettings(BaseModel):
    """How long and how often to poll. Zero falls back to the defaults."""

    wait_for_completion: bool = True
    poll_interval: int = Field(default=Config.DEFAULT_POLL_INTERVAL_S, ge=0)
    timeout_minutes: int = Field(default=Config.DEFAULT_TIMEOUT_MINUTES, ge=0)

    @property
    def interval_s(self) -> int:
        return self.poll_interval or Config.DEFAULT_POLL_INTERVAL_S

    @property
    def timeout_s(self) -> int:
        return (self.timeout_minutes or Config.DEFAULT_TIMEOUT_MINUTES) * 60


@dataclass
class TaskOutcome:
    """
    Result of one submission.

    `task` is the payload handed back to the caller: the creation response
    for SUBMITTED and TIMED_OUT, the terminal poll response for TERMINAL.
    """

    state: TaskState
    task: dict[str, Any]
    polls: int = 0


class TaskLifecycleController:
    """
    Drives one generation task from submission to a returned payload.

    clock and sleep are injectable so polling can be exercised without
    real waiting.
    """

    def __init__(
        self,
        client: MetisClient,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self._clock = clock
        self._sleep = sleep

    async def create(self, request: GenerationRequest) -> dict[str, Any]:
        body = {
            "model": request.model.model_dump(),
            "operation": request.operation,
            "args": request.args,
        }
        if request.webhook is not None:
            body["webhook"] = request.webhook.model_dump(exclude_none=True)

        logger.info(
            f"Submitting generation {request.model.name}/{request.model.model}",
            extra={
                "operation": request.operation,
                "arg_names": sorted(request.args),
                "webhook": request.webhook is not None,
            }
        )
        return await self.client.request("POST", "/api/v2/generate", body)

    async def fetch(self, task_id: str) -> dict[str, Any]:
        return await self.client.request("GET", f"/api/v2/generate/{encode_path_segment(task_id)}")

    async def run(
        self,
        model: ModelRef,
        operation: str,
        args: ArgumentSet,
        strategy: CompletionStrategy = CompletionStrategy.POLLING,
        webhook: Optional[WebhookSpec] = None,
        poll: Optional[PollSettings] = None,
    ) -> TaskOutcome:
        """
        Submit a task and resolve it according to strategy and poll settings.

        Raises:
            MissingRequiredField: Polling requested but no task id returned
            UpstreamFailure: Any gateway call failed
        """
        poll = poll or PollSettings()
        request = GenerationRequest(
            model=model,
            operation=operation,
            args=args,
            webhook=webhook,
        )
        created = await self.create(request)

        if not poll.wait_for_completion or strategy == CompletionStrategy.WEBHOOK:
            return TaskOutcome(state=TaskState.SUBMITTED, task=created)

        task_id = (created or {}).get("id") or ""
        if not task_id:
            raise MissingRequiredField("Generation created but no task id returned")

        return await self.poll_until_done(task_id, created, poll)

    async def poll_until_done(
        self,
        task_id: str,
        created: dict[str, Any],
        poll: PollSettings,
    ) -> TaskOutcome:
        deadline = self._clock() + poll.timeout_s
        polls = 0

        while self._clock() < deadline:
            task = await self.fetch(task_id)
            polls += 1
            status = (task or {}).get("status")
            if is_terminal_status(status):
                logger.info(
                    f"Generation {task_id} finished with status {status}",
                    extra={"task_id": task_id, "polls": polls},
                )
                return TaskOutcome(state=TaskState.TERMINAL, task=task, polls=polls)

            logger.debug(f"Generation {task_id} status {status}, next poll in {poll.interval_s}s")
            await self._sleep(poll.interval_s)

        # Intermediate poll responses are discarded; callers get the creation payload
        logger.warning(
            f"Generation {task_id} still running after {poll.timeout_s}s, returning creation response",
            extra={"task_id": task_id, "polls": polls},
        )
        return TaskOutcome(state=TaskState.TIMED_OUT, task=created, polls=polls)
