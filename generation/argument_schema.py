"""
Argument Schema Resolver

Fetches the typed argument list of one provider/model and derives the
selection lists used by schema-mode argument entry. Nothing is cached:
each call re-fetches the schema for the provider/model it is given.
"""

import logging
from typing import Any, Optional

from transport.metis import (
    ArgumentDefinition,
    ArgumentKind,
    MetisClient,
    SelectionOption,
    encode_path_segment,
)

from .catalog import decode_selection

logger = logging.getLogger(__name__)

SCHEMA_SCOPE = "generation"

KNOWN_KINDS = frozenset(k.value for k in ArgumentKind)

# Schema-mode group -> (argument kind, link filter)
GROUP_KINDS: dict[str, tuple[ArgumentKind, Optional[bool]]] = {
    "strings": (ArgumentKind.STRING, False),
    "links": (ArgumentKind.STRING, True),
    "integers": (ArgumentKind.INTEGER, None),
    "floats": (ArgumentKind.FLOAT, None),
    "booleans": (ArgumentKind.BOOLEAN, None),
    "objects": (ArgumentKind.OBJECT, None),
    "arrays": (ArgumentKind.ARRAY, None),
    "enums": (ArgumentKind.ENUM, None),
}


def pick_schema(response: dict[str, Any], name: str, model: str) -> list[ArgumentDefinition]:
    """
    Select the "{name}/{model}" entry of an argumentSchemaMap; missing -> [].

    Arguments of a kind no group can offer are left out.
    """
    schema_map = (response or {}).get("argumentSchemaMap") or {}
    raw = schema_map.get(f"{name}/{model}") or []
    schema = []
    for d in raw:
        if d.get("type") not in KNOWN_KINDS:
            logger.debug(f"Skipping argument {d.get('name')} of unknown type {d.get('type')}")
            continue
        schema.append(ArgumentDefinition(
            name=str(d.get("name")),
            kind=ArgumentKind(d["type"]),
            required=bool(d.get("required")),
            default_value=d.get("defaultValue"),
            description=str(d.get("description") or ""),
            is_link=bool(d.get("isLink")),
            validation_rules=d.get("validationRules") or None,
        ))
    return schema


def names_of_kind(
    schema: list[ArgumentDefinition],
    kind: ArgumentKind | str,
    is_link: Optional[bool] = None,
) -> list[SelectionOption]:
    """
    Argument names of one kind, labelled for selection.

    Required arguments are labelled "{name} *". For STRING, is_link
    narrows to plain strings (False) or link strings (True).
    """
    options = []
    for arg in schema:
        if arg.kind != kind:
            continue
        if is_link is not None and arg.kind == ArgumentKind.STRING and arg.is_link != is_link:
            continue
        options.append(SelectionOption(
            label=f"{arg.name}{' *' if arg.required else ''}",
            value=arg.name,
            description=arg.description or None,
        ))
    options.sort(key=lambda o: o.label.lower())
    return options


def enum_values(schema: list[ArgumentDefinition], argument_name: str) -> list[Any]:
    """Allowed values of the ENUM argument with that name, else []."""
    for arg in schema:
        if arg.name == argument_name and arg.kind == ArgumentKind.ENUM:
            rules = arg.validation_rules
            return list(rules.allowed_values or []) if rules else []
    return []


class ArgumentSchemaResolver:
    """Schema lookups keyed by an explicit provider/model."""

    def __init__(self, client: MetisClient):
        self.client = client

    async def resolve_schema(self, name: str, model: str) -> list[ArgumentDefinition]:
        path = (
            f"/api/v1/meta/models-argument-schema/"
            f"{encode_path_segment(name)}/{encode_path_segment(model)}"
        )
        response = await self.client.request("GET", path, params={"scope": SCHEMA_SCOPE})
        schema = pick_schema(response, name, model)
        logger.debug(f"Resolved {len(schema)} arguments for {name}/{model}")
        return schema

    async def resolve_selection(self, selection_key: str) -> list[ArgumentDefinition]:
        ref = decode_selection(selection_key)
        return await self.resolve_schema(ref.name, ref.model)

    async def group_options(self, selection_key: str, group: str) -> list[SelectionOption]:
        """
        Argument names offered for one schema-mode group.

        Raises:
            KeyError: Unknown group name
        """
        kind, is_link = GROUP_KINDS[group]
        if not selection_key:
            return []
        schema = await self.resolve_selection(selection_key)
        return names_of_kind(schema, kind, is_link)

    async def enum_options(self, selection_key: str, argument_name: str) -> list[SelectionOption]:
        if not selection_key or not argument_name:
            return []
        schema = await self.resolve_selection(selection_key)
        return [
            SelectionOption(label=str(v), value=v)
            for v in enum_values(schema, argument_name)
        ]
