"""
Workflow Items

Per-item parameters as the host supplies them, and the handlers that
turn one item into one output payload. The args mode is a tagged
variant resolved once per item.
"""

from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field

from chat import ChatDispatcher
from config import Config
from generation import (
    ArgsInput,
    CompletionStrategy,
    PollSettings,
    SchemaArgs,
    TaskLifecycleController,
    WebhookInput,
    build_args,
    build_webhook,
    decode_selection,
)
from transport.metis import MessageType, MetisClient

from .batch import run_batch


class GenerationItem(BaseModel):
    """One generation submission."""

    provider_model: str = Field(..., min_length=1, description="Selection key, '{name}:::{model}'")
    operation: str = Field(..., min_length=1)
    args: ArgsInput = Field(default_factory=SchemaArgs)
    completion_strategy: CompletionStrategy = CompletionStrategy.POLLING
    webhook: Optional[WebhookInput] = None
    wait_for_completion: bool = True
    poll_interval: int = Field(default=Config.DEFAULT_POLL_INTERVAL_S, ge=0)
    timeout_minutes: int = Field(default=Config.DEFAULT_TIMEOUT_MINUTES, ge=0)


class ChatItem(BaseModel):
    """One chat message."""

    bot_id: str = Field(..., min_length=1)
    session_id: str = Field("", description="Empty -> a new session is created")
    message_type: MessageType = MessageType.USER
    content: str = ""


async def execute_generation_item(
    controller: TaskLifecycleController,
    item: GenerationItem,
) -> dict[str, Any]:
    """Normalize arguments, build the webhook, submit and resolve one task."""
    model = decode_selection(item.provider_model)
    # Arguments first: malformed input must fail before anything is submitted
    args = build_args(item.args)

    webhook = None
    if item.completion_strategy == CompletionStrategy.WEBHOOK:
        webhook = build_webhook(item.webhook)

    outcome = await controller.run(
        model=model,
        operation=item.operation,
        args=args,
        strategy=item.completion_strategy,
        webhook=webhook,
        poll=PollSettings(
            wait_for_completion=item.wait_for_completion,
            poll_interval=item.poll_interval,
            timeout_minutes=item.timeout_minutes,
        ),
    )
    return outcome.task


async def run_generation_batch(
    client: MetisClient,
    items: Sequence[GenerationItem],
    controller: Optional[TaskLifecycleController] = None,
) -> list[dict[str, Any]]:
    controller = controller or TaskLifecycleController(client)

    async def handle(item: GenerationItem) -> dict[str, Any]:
        return await execute_generation_item(controller, item)

    return await run_batch(items, handle, label="generation")


async def run_chat_batch(
    client: MetisClient,
    items: Sequence[ChatItem],
) -> list[Any]:
    dispatcher = ChatDispatcher(client)

    async def handle(item: ChatItem) -> Any:
        return await dispatcher.send_message(
            item.bot_id,
            item.session_id,
            item.message_type,
            item.content,
        )

    return await run_batch(items, handle, label="chat")
