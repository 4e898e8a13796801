"""Metis Transport Layer - Module Exports"""

from .client import MetisClient, encode_path_segment
from .errors import (
    MalformedInput,
    MetisError,
    MissingRequiredField,
    UpstreamFailure,
)
from .schemas import (
    ArgumentDefinition,
    ArgumentKind,
    ChatSession,
    GenerationRequest,
    MessageType,
    ModelRef,
    ProviderEntry,
    SelectionOption,
    TERMINAL_STATUSES,
    ValidationRules,
    WebhookSpec,
    is_terminal_status,
)

__all__ = [
    # Client
    "MetisClient",
    "encode_path_segment",
    # Errors
    "MetisError",
    "MalformedInput",
    "MissingRequiredField",
    "UpstreamFailure",
    # Schemas
    "ProviderEntry",
    "SelectionOption",
    "ArgumentKind",
    "ValidationRules",
    "ArgumentDefinition",
    "ModelRef",
    "WebhookSpec",
    "GenerationRequest",
    "TERMINAL_STATUSES",
    "is_terminal_status",
    "MessageType",
    "ChatSession",
]
