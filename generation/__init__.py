"""
Generation layer for the Metis gateway.

Provides:
- ProviderCatalog: selectable provider/model pairs and their operations
- ArgumentSchemaResolver: typed argument schema per provider/model
- build_args: schema / guided / json input -> ArgumentSet
- TaskLifecycleController: submit, then hand off to a webhook or poll

Example usage:
    from generation import TaskLifecycleController, JsonArgs, build_args

    controller = TaskLifecycleController(MetisClient())
    outcome = await controller.run(
        ModelRef(name="openai", model="gpt-image-1"),
        "IMAGE_GENERATION",
        build_args(JsonArgs(raw='{"prompt": "a lighthouse"}')),
    )
"""

from .argument_schema import (
    GROUP_KINDS,
    ArgumentSchemaResolver,
    enum_values,
    names_of_kind,
    pick_schema,
)
from .arguments import (
    ArgEntry,
    ArgsInput,
    ArgumentSet,
    GuidedArgs,
    JsonArgs,
    SchemaArgs,
    build_args,
)
from .catalog import (
    ProviderCatalog,
    decode_selection,
    encode_selection,
    flatten_generation_providers,
)
from .tasks import (
    CompletionStrategy,
    PollSettings,
    TaskLifecycleController,
    TaskOutcome,
    TaskState,
)
from .webhook import HeaderEntry, WebhookInput, build_webhook, parse_headers

__all__ = [
    # Catalog
    "ProviderCatalog",
    "encode_selection",
    "decode_selection",
    "flatten_generation_providers",
    # Argument schema
    "ArgumentSchemaResolver",
    "GROUP_KINDS",
    "pick_schema",
    "names_of_kind",
    "enum_values",
    # Arguments
    "ArgEntry",
    "ArgsInput",
    "ArgumentSet",
    "SchemaArgs",
    "GuidedArgs",
    "JsonArgs",
    "build_args",
    # Webhook
    "HeaderEntry",
    "WebhookInput",
    "build_webhook",
    "parse_headers",
    # Tasks
    "CompletionStrategy",
    "PollSettings",
    "TaskLifecycleController",
    "TaskOutcome",
    "TaskState",
]
