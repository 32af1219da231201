from collections.abc import Mapping
from typing import Iterable, List, Optional, Type, TypeVar

from .codec import JsonCodec, default_codec
from .config import DEFAULT_CONFIG, ConstructionConfig
from .core import Struct, construct
from .errors import MalformedTextError

S = TypeVar("S", bound=Struct)


class StructFactory:
    """Creates structs with a fixed construction config."""

    def __init__(
        self,
        config: ConstructionConfig = DEFAULT_CONFIG,
        codec: Optional[JsonCodec] = None,
    ) -> None:
        self.config = config
        self.codec = codec or default_codec

    def create(self, struct_cls: Type[S], data: Mapping) -> S:
        return construct(struct_cls, data, self.config)

    def create_from_json(self, struct_cls: Type[S], text: str) -> S:
        data = self.codec.decode(text)
        if not isinstance(data, Mapping):
            raise MalformedTextError("JSON must decode to an object")
        return self.create(struct_cls, data)

    def create_many(self, struct_cls: Type[S], items: Iterable[Mapping]) -> List[S]:
        """Create one struct per mapping; the first failure aborts the batch."""
        return [self.create(struct_cls, item) for item in items]
