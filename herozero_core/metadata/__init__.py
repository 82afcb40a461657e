"""Metadata module - Item descriptions from external providers."""

from herozero_core.metadata.provider import (
    MetadataConfig,
    MetadataProvider,
    OpenSeaMetadataProvider,
    StaticMetadataProvider,
    placeholder_metadata,
)

__all__ = [
    "MetadataConfig",
    "MetadataProvider",
    "OpenSeaMetadataProvider",
    "StaticMetadataProvider",
    "placeholder_metadata",
]
