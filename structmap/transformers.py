"""Value transformers applied to raw input before type coercion."""

from abc import ABC, abstractmethod
from typing import Any


class Transformer(ABC):
    """Maps a raw value to a new value.

    Transformers run before coercion, so they may see any input type. They
    must be total: a value they do not apply to is returned unchanged.
    """

    @abstractmethod
    def transform(self, value: Any) -> Any:
        """Return the transformed value."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class StringToLowerTransformer(Transformer):
    def transform(self, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class StringToUpperTransformer(Transformer):
    def transform(self, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class StripTransformer(Transformer):
    """Trim surrounding whitespace from strings."""

    def transform(self, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value
