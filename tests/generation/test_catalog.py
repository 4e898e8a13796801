"""
Provider Catalog Tests

Catalog flattening, disabled filtering, selection keys and operations.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from generation.catalog import (
    ProviderCatalog,
    decode_selection,
    encode_selection,
    flatten_generation_providers,
)


META = {
    "generationProviders": {
        "image": [
            {"name": "openai", "model": "gpt-image-1", "tags": ["IMAGE_GENERATION", "IMAGE_EDIT"]},
            {"name": "Stability", "model": "sd3", "tags": ["IMAGE_GENERATION", "disabled"]},
            {"name": "midjourney", "model": "v6"},
        ],
        "video": [
            {"name": "kling", "model": "v1", "tags": ["VIDEO_GENERATION"]},
            {"name": "Alibaba", "model": "wan", "tags": ["VIDEO_GENERATION"]},
        ],
        "audio": None,
    }
}


def make_client(meta=META):
    client = MagicMock()
    client.request = AsyncMock(return_value=meta)
    return client


class TestFlatten:
    """Flattening the category map."""

    def test_disabled_entries_removed(self):
        providers = flatten_generation_providers(META)
        assert all("disabled" not in p.tags for p in providers)
        assert ("Stability", "sd3") not in {(p.name, p.model) for p in providers}

    def test_all_categories_flattened_in_order(self):
        providers = flatten_generation_providers(META)
        assert [p.name for p in providers] == ["openai", "midjourney", "kling", "Alibaba"]

    def test_missing_tags_become_empty(self):
        providers = flatten_generation_providers(META)
        midjourney = next(p for p in providers if p.name == "midjourney")
        assert midjourney.tags == []

    def test_empty_meta(self):
        assert flatten_generation_providers({}) == []
        assert flatten_generation_providers({"generationProviders": None}) == []


class TestSelectionKeys:
    """encode/decode of '{name}:::{model}'."""

    @pytest.mark.parametrize("name,model", [
        ("openai", "gpt-image-1"),
        ("black-forest-labs", "flux/dev"),
        ("a b", ""),
    ])
    def test_decode_inverts_encode(self, name, model):
        ref = decode_selection(encode_selection(name, model))
        assert (ref.name, ref.model) == (name, model)

    def test_decode_splits_on_first_delimiter(self):
        ref = decode_selection("a:::b:::c")
        assert ref.name == "a"
        assert ref.model == "b:::c"


class TestListProviders:
    @pytest.mark.asyncio
    async def test_labels_keys_and_sorting(self):
        client = make_client()
        options = await ProviderCatalog(client).list_providers()

        assert [o.label for o in options] == [
            "Alibaba/wan",
            "kling/v1",
            "midjourney/v6",
            "openai/gpt-image-1",
        ]
        assert options[-1].value == "openai:::gpt-image-1"
        client.request.assert_awaited_once_with("GET", "/api/v1/meta")

    @pytest.mark.asyncio
    async def test_never_returns_disabled(self):
        options = await ProviderCatalog(make_client()).list_providers()
        assert "Stability/sd3" not in [o.label for o in options]


class TestListOperations:
    @pytest.mark.asyncio
    async def test_tags_in_catalog_order(self):
        ops = await ProviderCatalog(make_client()).list_operations("openai:::gpt-image-1")
        assert ops == ["IMAGE_GENERATION", "IMAGE_EDIT"]

    @pytest.mark.asyncio
    async def test_unknown_key_returns_empty(self):
        ops = await ProviderCatalog(make_client()).list_operations("nobody:::nothing")
        assert ops == []

    @pytest.mark.asyncio
    async def test_disabled_provider_has_no_operations(self):
        ops = await ProviderCatalog(make_client()).list_operations("Stability:::sd3")
        assert ops == []

    @pytest.mark.asyncio
    async def test_empty_key_makes_no_call(self):
        client = make_client()
        assert await ProviderCatalog(client).list_operations("") == []
        client.request.assert_not_awaited()
