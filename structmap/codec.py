"""JSON text codec backed by orjson."""

from typing import Any, Optional, Union

import orjson

from .errors import MalformedTextError


class JsonCodec:
    """Encode plain data to JSON text and decode it back.

    Enum members are written as their values and date/time values in
    ISO 8601; non-ASCII characters are left unescaped.
    """

    __slots__ = ("pretty",)

    def __init__(self, pretty: bool = False) -> None:
        self.pretty = pretty

    def encode(self, data: Any, pretty: Optional[bool] = None) -> str:
        if pretty is None:
            pretty = self.pretty
        option = orjson.OPT_NON_STR_KEYS
        if pretty:
            option |= orjson.OPT_INDENT_2
        return orjson.dumps(data, option=option).decode("utf-8")

    def decode(self, text: Union[str, bytes]) -> Any:
        """Decode ``text``; the top level must be an object or an array."""
        try:
            data = orjson.loads(text)
        except orjson.JSONDecodeError as e:
            raise MalformedTextError(f"Malformed JSON: {e}") from e
        if not isinstance(data, (dict, list)):
            raise MalformedTextError("JSON must decode to an object or an array")
        return data

    def __repr__(self) -> str:
        return f"JsonCodec(pretty={self.pretty})"


default_codec = JsonCodec()
