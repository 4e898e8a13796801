"""
Metis Host Routes

FastAPI router exposing selection lists and batch operations to a
workflow host. No business logic here: requests are mapped onto the
generation/chat layers and errors onto HTTP status codes.

Error mapping:
  MalformedInput / MissingRequiredField -> 400
  UpstreamFailure                       -> 502
  Request validation                    -> 422 (FastAPI)
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from generation import GROUP_KINDS, ArgumentSchemaResolver, ProviderCatalog
from transport.metis import (
    MalformedInput,
    MetisClient,
    MissingRequiredField,
    SelectionOption,
    UpstreamFailure,
)
from workflow import (
    BatchExecutionError,
    ChatItem,
    GenerationItem,
    run_chat_batch,
    run_generation_batch,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/metis", tags=["Metis Gateway"])


class GenerationBatch(BaseModel):
    items: list[GenerationItem] = Field(..., min_length=1)


class ChatBatch(BaseModel):
    items: list[ChatItem] = Field(..., min_length=1)


class BatchResult(BaseModel):
    items: list[Any]


def get_metis_client() -> MetisClient:
    """Client dependency; overridden in tests."""
    return MetisClient()


def _to_http_error(error: Exception) -> HTTPException:
    cause = error.cause if isinstance(error, BatchExecutionError) else error
    if isinstance(cause, (MalformedInput, MissingRequiredField)):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(cause, UpstreamFailure):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(error))


# ============================================================================
# SELECTION LISTS
# ============================================================================

@router.get("/providers", response_model=list[SelectionOption])
async def list_providers(client: MetisClient = Depends(get_metis_client)):
    """Selectable provider/model pairs."""
    try:
        return await ProviderCatalog(client).list_providers()
    except UpstreamFailure as e:
        raise _to_http_error(e)


@router.get("/operations", response_model=list[str])
async def list_operations(
    provider_model: str = Query(""),
    client: MetisClient = Depends(get_metis_client),
):
    """Operations supported by the selected provider/model."""
    try:
        return await ProviderCatalog(client).list_operations(provider_model)
    except UpstreamFailure as e:
        raise _to_http_error(e)


@router.get("/arguments/enum-values", response_model=list[SelectionOption])
async def list_enum_values(
    provider_model: str = Query(""),
    name: str = Query(""),
    client: MetisClient = Depends(get_metis_client),
):
    """Allowed values of one ENUM argument."""
    try:
        return await ArgumentSchemaResolver(client).enum_options(provider_model, name)
    except UpstreamFailure as e:
        raise _to_http_error(e)


@router.get("/arguments/{group}", response_model=list[SelectionOption])
async def list_argument_names(
    group: str,
    provider_model: str = Query(""),
    client: MetisClient = Depends(get_metis_client),
):
    """Argument names offered for one schema-mode group."""
    if group not in GROUP_KINDS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown argument group: {group}",
        )
    try:
        return await ArgumentSchemaResolver(client).group_options(provider_model, group)
    except UpstreamFailure as e:
        raise _to_http_error(e)


# ============================================================================
# BATCH OPERATIONS
# ============================================================================

@router.post("/generations", response_model=BatchResult)
async def create_generations(
    batch: GenerationBatch,
    client: MetisClient = Depends(get_metis_client),
):
    """
    Submit generation tasks, one item at a time.

    The first failing item aborts the batch and nothing is returned.
    """
    try:
        results = await run_generation_batch(client, batch.items)
    except BatchExecutionError as e:
        raise _to_http_error(e)
    return BatchResult(items=results)


@router.post("/chat/messages", response_model=BatchResult)
async def send_chat_messages(
    batch: ChatBatch,
    client: MetisClient = Depends(get_metis_client),
):
    """Send chat messages, creating sessions where none is given."""
    try:
        results = await run_chat_batch(client, batch.items)
    except BatchExecutionError as e:
        raise _to_http_error(e)
    return BatchResult(items=results)


@router.get("/credentials/verify")
async def verify_credentials(client: MetisClient = Depends(get_metis_client)):
    """Credential test against the account endpoint."""
    try:
        account = await client.verify_credentials()
    except UpstreamFailure as e:
        logger.warning(f"Credential verification failed: {e}")
        raise _to_http_error(e)
    return {"status": "ok", "account": account}
