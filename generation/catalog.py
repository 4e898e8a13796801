"""
Provider Catalog Resolver

Flattens the gateway's generation catalog into a selection list.

Selection keys have the form "{name}:::{model}". The delimiter is assumed
never to appear in a provider or model name; only keys produced by
encode_selection() should be decoded.
"""

import logging
from typing import Any

from transport.metis import MetisClient, ModelRef, ProviderEntry, SelectionOption

logger = logging.getLogger(__name__)

SELECTION_DELIMITER = ":::"


def encode_selection(name: str, model: str) -> str:
    return f"{name}{SELECTION_DELIMITER}{model}"


def decode_selection(selection_key: str) -> ModelRef:
    """Split a selection key on the first delimiter."""
    name, _, model = selection_key.partition(SELECTION_DELIMITER)
    return ModelRef(name=name, model=model)


def flatten_generation_providers(meta: dict[str, Any]) -> list[ProviderEntry]:
    """
    Flatten every catalog category into one list, dropping disabled entries.

    Args:
        meta: Body of GET /api/v1/meta

    Returns:
        Selectable ProviderEntry list in catalog order
    """
    categories = (meta or {}).get("generationProviders") or {}
    flat: list[ProviderEntry] = []
    for entries in categories.values():
        for entry in entries or []:
            flat.append(ProviderEntry(
                name=entry["name"],
                model=entry["model"],
                tags=entry.get("tags") or [],
            ))
    return [p for p in flat if p.selectable]


class ProviderCatalog:
    """Selection data derived from the catalog. Re-fetched on every call."""

    def __init__(self, client: MetisClient):
        self.client = client

    async def fetch_providers(self) -> list[ProviderEntry]:
        meta = await self.client.request("GET", "/api/v1/meta")
        return flatten_generation_providers(meta)

    async def list_providers(self) -> list[SelectionOption]:
        """Selectable providers labelled "{name}/{model}", sorted case-insensitively."""
        providers = await self.fetch_providers()
        options = [
            SelectionOption(
                label=f"{p.name}/{p.model}",
                value=encode_selection(p.name, p.model),
            )
            for p in providers
        ]
        options.sort(key=lambda o: o.label.lower())
        logger.debug(f"Resolved {len(options)} generation providers")
        return options

    async def list_operations(self, selection_key: str) -> list[str]:
        """Tags of the selected provider/model, in catalog order."""
        if not selection_key:
            return []
        ref = decode_selection(selection_key)
        for p in await self.fetch_providers():
            if p.name == ref.name and p.model == ref.model:
                return list(p.tags)
        return []
