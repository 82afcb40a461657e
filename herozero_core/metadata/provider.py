"""HeroZero Metadata - Item Descriptions From an External Provider.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from herozero_core.errors import MetadataError
from herozero_core.models.item import ItemMetadata

logger = logging.getLogger(__name__)


@dataclass
class MetadataConfig:
    """Metadata provider configuration.

    Attributes:
        base_url: Provider API root
        contract: Collection contract address
        chain: Chain name used in API paths
        api_key: API key sent as X-API-KEY
        timeout: HTTP timeout in seconds
        name_prefix: Prefix for generated display names
    """

    base_url: str = "https://api.opensea.io/api/v2"
    contract: str = "0x6dc6001535e15b9def7b0f6a20a2111dfa9454e2"
    chain: str = "ethereum"
    api_key: Optional[str] = None
    timeout: float = 8.0
    name_prefix: str = "MetaHero"


def placeholder_metadata(item_id: str, name_prefix: str = "MetaHero") -> ItemMetadata:
    """Stand-in metadata used when the provider is unavailable."""
    return ItemMetadata(
        display_name=f"{name_prefix} #{item_id}",
        image_ref=None,
        external_ref=None,
        traits=[],
        description="",
        placeholder=True,
    )


class MetadataProvider(ABC):
    """Abstract source of item descriptions."""

    @abstractmethod
    def fetch_metadata(self, item_id: str) -> ItemMetadata:
        """Fetch metadata for one item.

        Args:
            item_id: External item id

        Returns:
            ItemMetadata

        Raises:
            MetadataError: If the provider cannot answer
        """
        pass

    def safe_fetch(self, item_id: str) -> ItemMetadata:
        """Fetch metadata, degrading to a placeholder on any failure.

        Never raises.
        """
        try:
            return self.fetch_metadata(item_id)
        except Exception as e:
            logger.warning(f"Metadata fetch failed for item {item_id}, using placeholder: {e}")
            return self.placeholder(item_id)

    def placeholder(self, item_id: str) -> ItemMetadata:
        """Stand-in metadata for an item."""
        return placeholder_metadata(item_id)

    def close(self) -> None:
        """Release resources."""


class OpenSeaMetadataProvider(MetadataProvider):
    """Metadata from the OpenSea v2 NFT API.

    Example:
        provider = OpenSeaMetadataProvider(MetadataConfig(api_key="..."))
        meta = provider.fetch_metadata("42")
    """

    def __init__(self, config: Optional[MetadataConfig] = None, session: Optional[requests.Session] = None):
        """Initialize provider.

        Args:
            config: Provider configuration
            session: HTTP session (one is created when omitted)
        """
        self.config = config or MetadataConfig()
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if self.config.api_key:
            self._session.headers["X-API-KEY"] = self.config.api_key

    def _nft_url(self, item_id: str) -> str:
        base = self.config.base_url.rstrip("/")
        return f"{base}/chain/{self.config.chain}/contract/{self.config.contract}/nfts/{item_id}"

    def _marketplace_url(self, item_id: str) -> str:
        return f"https://opensea.io/assets/{self.config.chain}/{self.config.contract}/{item_id}"

    def fetch_metadata(self, item_id: str) -> ItemMetadata:
        try:
            response = self._session.get(self._nft_url(item_id), timeout=self.config.timeout)
            response.raise_for_status()
            payload: Dict[str, Any] = response.json()
        except (requests.RequestException, ValueError) as e:
            raise MetadataError(f"OpenSea lookup failed for {item_id}: {e}") from e

        nft = payload.get("nft")
        if not isinstance(nft, dict):
            raise MetadataError(f"OpenSea returned no nft for {item_id}")

        return ItemMetadata(
            display_name=nft.get("name") or f"{self.config.name_prefix} #{item_id}",
            image_ref=nft.get("image_url") or nft.get("display_image_url"),
            external_ref=self._marketplace_url(item_id),
            traits=list(nft.get("traits") or []),
            description=nft.get("description") or "",
        )

    def placeholder(self, item_id: str) -> ItemMetadata:
        return placeholder_metadata(item_id, self.config.name_prefix)

    def close(self) -> None:
        self._session.close()

    def __repr__(self) -> str:
        return f"OpenSeaMetadataProvider(contract={self.config.contract})"


class StaticMetadataProvider(MetadataProvider):
    """Metadata from a fixed mapping, for offline use and tests.

    Unknown ids get generated metadata unless ``strict`` is set, in which
    case they raise ``MetadataError``.
    """

    def __init__(
        self,
        entries: Optional[Dict[str, ItemMetadata]] = None,
        name_prefix: str = "MetaHero",
        strict: bool = False,
    ):
        self.entries = dict(entries or {})
        self.name_prefix = name_prefix
        self.strict = strict
        self.calls = 0

    def fetch_metadata(self, item_id: str) -> ItemMetadata:
        self.calls += 1
        item_id = str(item_id)
        if item_id in self.entries:
            return self.entries[item_id]
        if self.strict:
            raise MetadataError(f"No metadata for item {item_id}")
        return ItemMetadata(display_name=f"{self.name_prefix} #{item_id}")


__all__ = [
    "MetadataConfig",
    "MetadataProvider",
    "OpenSeaMetadataProvider",
    "StaticMetadataProvider",
    "placeholder_metadata",
]
