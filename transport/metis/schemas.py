"""
Metis Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Defines the contract between the Metis gateway and this client.
Field aliases follow the gateway's camelCase wire format.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


# ============================================================================
# CATALOG (GET /api/v1/meta)
# ============================================================================

class ProviderEntry(BaseModel):
    """One (provider, model) pair from the generation catalog."""

    name: str
    model: str
    tags: list[str] = Field(
        default_factory=list,
        description="Capability tags; doubles as the list of supported operations",
    )

    @property
    def selectable(self) -> bool:
        return "disabled" not in self.tags


class SelectionOption(BaseModel):
    """One entry of a host selection list."""

    label: str
    value: Any
    description: Optional[str] = None


# ============================================================================
# ARGUMENT SCHEMA (GET /api/v1/meta/models-argument-schema/...)
# ============================================================================

class ArgumentKind(str, Enum):
    """Argument types the gateway declares."""

    STRING = "STRING"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    ARRAY = "ARRAY"
    OBJECT = "OBJECT"
    ENUM = "ENUM"


class ValidationRules(BaseModel):
    """Declared rules. Carried for display only; never enforced client-side."""

    allowed_values: Optional[list[Any]] = Field(None, alias="allowedValues")
    min_value: Optional[float] = Field(None, alias="minValue")
    max_value: Optional[float] = Field(None, alias="maxValue")
    min_length: Optional[int] = Field(None, alias="minLength")
    max_length: Optional[int] = Field(None, alias="maxLength")
    pattern: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "allow"


class ArgumentDefinition(BaseModel):
    """A single typed argument of a provider/model generation call."""

    name: str
    kind: ArgumentKind = Field(..., alias="type")
    required: bool = False
    default_value: Any = Field(None, alias="defaultValue")
    description: str = ""
    is_link: bool = Field(False, alias="isLink")
    validation_rules: Optional[ValidationRules] = Field(None, alias="validationRules")

    class Config:
        populate_by_name = True
        frozen = True


# ============================================================================
# GENERATION (POST /api/v2/generate)
# ============================================================================

WebhookMethod = Literal["POST", "GET", "PUT", "PATCH"]

TERMINAL_STATUSES = frozenset({"COMPLETED", "ERROR", "CANCELLED"})


class ModelRef(BaseModel):
    """Provider/model pair as the gateway expects it in a request body."""

    name: str
    model: str


class WebhookSpec(BaseModel):
    """Callback the gateway invokes on completion. Never called by this client."""

    url: str = Field(..., min_length=1)
    method: WebhookMethod = "POST"
    headers: Optional[dict[str, str]] = None


class GenerationRequest(BaseModel):
    """Body of the task creation call."""

    model: ModelRef
    operation: str
    args: dict[str, Any] = Field(default_factory=dict)
    webhook: Optional[WebhookSpec] = None


def is_terminal_status(status: Any) -> bool:
    """COMPLETED, ERROR and CANCELLED end polling, in any letter case."""
    return str(status or "").upper() in TERMINAL_STATUSES


# ============================================================================
# CHAT (POST /api/v1/chat/sessions, POST /api/v2/chat/sessions/{id}/message)
# ============================================================================

class MessageType(str, Enum):
    """Who a chat message is from."""

    USER = "USER"
    TOOL = "TOOL"


class ChatSession(BaseModel):
    """Remote chat session. Only the id is consumed."""

    id: str
    bot_id: Optional[str] = Field(None, alias="botId")

    class Config:
        populate_by_name = True
        extra = "allow"
