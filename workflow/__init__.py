"""
Workflow layer - batch execution of host items.

Items run one at a time in input order; the first failure aborts the batch.
"""

from .batch import BatchExecutionError, run_batch
from .items import (
    ChatItem,
    GenerationItem,
    execute_generation_item,
    run_chat_batch,
    run_generation_batch,
)

__all__ = [
    "BatchExecutionError",
    "run_batch",
    "GenerationItem",
    "ChatItem",
    "execute_generation_item",
    "run_generation_batch",
    "run_chat_batch",
]
