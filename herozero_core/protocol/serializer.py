"""HeroZero Serializer - Record and Cache Value Serialization.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
import pickle
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class Serializer(ABC):
    """Abstract serializer.

    The entity store keeps records as JSON so other clients can read them;
    the persistent cache pickles whole model objects.
    """

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get format name."""
        pass

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes.

        Args:
            value: Value to serialize

        Returns:
            Serialized bytes
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to value.

        Args:
            data: Serialized bytes

        Returns:
            Deserialized value
        """
        pass


class JSONSerializer(Serializer):
    """Compact JSON serializer for entity store records."""

    @property
    def format_name(self) -> str:
        return "json"

    def serialize(self, value: Any) -> bytes:
        return json.dumps(value, separators=(",", ":"), default=str).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)


class PickleSerializer(Serializer):
    """Pickle serializer.

    Supports any Python object. Only used for the local cache directory,
    never for data from the network.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        """Initialize pickle serializer.

        Args:
            protocol: Pickle protocol version
        """
        self.protocol = protocol

    @property
    def format_name(self) -> str:
        return "pickle"

    def serialize(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self.protocol)

    def deserialize(self, data: bytes) -> Any:
        return pickle.loads(data)


class SerializerRegistry:
    """Registry of serializers."""

    def __init__(self):
        self._serializers: Dict[str, Serializer] = {}
        self._default: str = "pickle"

        self.register(JSONSerializer())
        self.register(PickleSerializer())

    def register(self, serializer: Serializer) -> None:
        """Register a serializer."""
        self._serializers[serializer.format_name] = serializer

    def get(self, format_name: str) -> Serializer:
        """Get serializer by format.

        Raises:
            KeyError: If format not found
        """
        if format_name not in self._serializers:
            raise KeyError(f"Unknown serializer format: {format_name}")
        return self._serializers[format_name]

    def get_default(self) -> Serializer:
        """Get default serializer."""
        return self._serializers[self._default]

    def list_formats(self) -> List[str]:
        """List available formats."""
        return list(self._serializers.keys())


_registry = SerializerRegistry()


def get_serializer(format_name: Optional[str] = None) -> Serializer:
    """Get serializer by format.

    Args:
        format_name: Format name or None for default

    Returns:
        Serializer instance
    """
    if format_name is None:
        return _registry.get_default()
    return _registry.get(format_name)


__all__ = [
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "SerializerRegistry",
    "get_serializer",
]
