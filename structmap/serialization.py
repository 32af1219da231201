"""Serializer front-ends over the construction pipeline."""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Protocol, Type, TypeVar, runtime_checkable

from .codec import JsonCodec, default_codec
from .config import DEFAULT_CONFIG, ConstructionConfig
from .core import Struct, construct
from .errors import MalformedTextError

logger = logging.getLogger("structmap.serialization")

S = TypeVar("S", bound=Struct)


@runtime_checkable
class Serializer(Protocol):
    def serialize(self, struct: Struct) -> Dict[str, Any]: ...

    def deserialize(self, data: Mapping, struct_cls: Type[S]) -> S: ...


class JsonSerializer:
    """Struct <-> plain data <-> JSON text.

    Every struct goes through ``construct``; there is no shortcut that
    skips validation.
    """

    def __init__(
        self,
        config: ConstructionConfig = DEFAULT_CONFIG,
        codec: Optional[JsonCodec] = None,
    ) -> None:
        self.config = config
        self.codec = codec or default_codec

    def serialize(self, struct: Struct) -> Dict[str, Any]:
        return struct.to_dict()

    def deserialize(self, data: Mapping, struct_cls: Type[S]) -> S:
        return construct(struct_cls, data, self.config)

    def to_json(self, struct: Struct, pretty: bool = False) -> str:
        return self.codec.encode(self.serialize(struct), pretty=pretty)

    def from_json(self, text: str, struct_cls: Type[S]) -> S:
        data = self.codec.decode(text)
        if not isinstance(data, Mapping):
            logger.debug("Rejected JSON array for %s", struct_cls.__name__)
            raise MalformedTextError("JSON must decode to an object")
        return self.deserialize(data, struct_cls)
