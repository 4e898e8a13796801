"""
Batch Execution

Runs a handler over a batch of independent items, strictly one at a
time in input order. The first failure aborts the whole batch: its
message is surfaced and no output is returned for any item.
"""

import logging
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from transport.metis import MetisError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BatchExecutionError(MetisError):
    """An item failed; the batch produced no output."""

    def __init__(self, message: str, item_index: int, cause: Exception):
        self.item_index = item_index
        self.cause = cause
        super().__init__(message)


async def run_batch(
    items: Sequence[T],
    handler: Callable[[T], Awaitable[Any]],
    label: str = "batch",
) -> list[Any]:
    """
    Process items sequentially.

    Raises:
        BatchExecutionError: Carrying the first failing item's message
    """
    results: list[Any] = []
    for index, item in enumerate(items):
        try:
            results.append(await handler(item))
        except Exception as e:
            logger.error(
                f"{label} item {index} failed: {e}",
                extra={"item_index": index, "error_type": type(e).__name__},
            )
            raise BatchExecutionError(str(e), item_index=index, cause=e) from e

    logger.info(f"{label} completed", extra={"items": len(results)})
    return results
