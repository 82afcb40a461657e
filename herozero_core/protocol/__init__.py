"""Protocol module - Serialization."""

from herozero_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    PickleSerializer,
    get_serializer,
)

__all__ = [
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "get_serializer",
]
