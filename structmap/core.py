import logging
from collections.abc import Mapping
from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from .codec import default_codec
from .coercion import coerce, debug_type
from .config import DEFAULT_CONFIG, ConstructionConfig, ServiceContainer
from .errors import (
    FieldNotFoundError,
    MalformedTextError,
    SchemaError,
    UnknownFieldError,
    ValidationError,
)
from .schema import FieldDescriptor, StructSchema, default_registry
from .validation import FieldValidator

logger = logging.getLogger("structmap.core")

S = TypeVar("S", bound="Struct")

_field_validator = FieldValidator()


# --- Construction Pipeline ---
def construct(
    struct_cls: Type[S],
    data: Mapping,
    config: ConstructionConfig = DEFAULT_CONFIG,
) -> S:
    """Build a validated ``struct_cls`` instance from raw ``data``.

    Fields are resolved in schema order; the first error aborts the whole
    construction so no partially built instance ever escapes.
    """
    if not (isinstance(struct_cls, type) and issubclass(struct_cls, Struct)):
        raise SchemaError(f"{struct_cls!r} is not a Struct subclass")
    instance = struct_cls.__new__(struct_cls)
    instance._populate(data, config)
    return instance


def _resolve_field(
    field: FieldDescriptor, data: Mapping, config: ConstructionConfig
) -> Any:
    name = field.name

    # Alias wins over the canonical name when both are present.
    if field.alias is not None and field.alias in data:
        value = data[field.alias]
    elif name in data:
        value = data[name]
    else:
        if field.has_default:
            return field.get_default()
        if field.nullable:
            return None
        raise FieldNotFoundError(name, field.alias)

    if value is None:
        if field.nullable:
            return None
        raise ValidationError(f"Field {name} cannot be null", name, None)

    for t in field.transformers:
        value = t.transform(value)

    if field.is_array:
        if not isinstance(value, (list, tuple)):
            raise ValidationError(
                f"Field {name} must be an array of {field.type_name}", name, value
            )
        items = []
        for index, item in enumerate(value):
            coerced = coerce(field.type_spec, item, name, config, index=index)
            _field_validator.validate_field(field, coerced, index=index)
            items.append(coerced)
        return tuple(items)

    coerced = coerce(field.type_spec, value, name, config)
    _field_validator.validate_field(field, coerced)
    return coerced


def _reject_unknown(schema: StructSchema, data: Mapping) -> None:
    for key in data:
        if not schema.is_allowed(key):
            logger.debug(
                "Strict mode rejected key %r for %s", key, schema.struct_cls.__name__
            )
            raise UnknownFieldError(key)


def _freeze(value: Any) -> Any:
    """Normalize sequences so list and tuple field values compare equal."""
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, Mapping):
        return {k: _freeze(v) for k, v in value.items()}
    return value


def _hash_key(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_hash_key(v) for v in value)
    if isinstance(value, Mapping):
        return frozenset((k, _hash_key(v)) for k, v in value.items())
    if isinstance(value, (set, frozenset)):
        return frozenset(_hash_key(v) for v in value)
    return value


# --- Main Struct Class ---
class Struct:
    """Immutable, validated record built from a mapping of raw values.

    Subclasses declare fields with ``Annotated[type, Field(...)]``; see
    ``structmap.schema.Field``. Construction runs the full pipeline
    (aliases, defaults, null checks, transformers, coercion, rules) and
    optionally rejects unknown keys::

        class User(Struct):
            id: Annotated[str, Field(alias="user_id")]
            age: Annotated[Optional[int], Field()]

        user = User({"user_id": "u1", "age": None}, strict=True)
    """

    _config: ConstructionConfig = DEFAULT_CONFIG

    def __init__(
        self,
        data: Optional[Mapping] = None,
        *,
        strict: bool = False,
        container: Optional[ServiceContainer] = None,
    ) -> None:
        """Initialize a new struct instance from ``data``."""
        config = ConstructionConfig(strict=strict, container=container)
        self._populate({} if data is None else data, config)

    def _populate(self, data: Mapping, config: ConstructionConfig) -> None:
        cls = self.__class__
        if not isinstance(data, Mapping):
            raise ValidationError(
                f"{cls.__name__} expects a mapping, got {debug_type(data)}",
                cls.__name__,
                data,
            )

        schema = default_registry.get_schema(cls)
        values = {field.name: _resolve_field(field, data, config) for field in schema.fields}

        if config.strict:
            _reject_unknown(schema, data)

        for name, value in values.items():
            object.__setattr__(self, name, value)
        object.__setattr__(self, "_config", config)

    # --- Immutability ---
    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Cannot modify frozen '{self.__class__.__name__}' instance")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Cannot modify frozen '{self.__class__.__name__}' instance")

    # --- Keyed Access ---
    def __getitem__(self, name: str) -> Any:
        if name not in self:
            raise KeyError(name)
        return getattr(self, name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and type(self).schema().field_by_name(name) is not None

    def __setitem__(self, name: str, value: Any) -> None:
        raise TypeError("Cannot modify readonly struct fields via item access")

    def __delitem__(self, name: str) -> None:
        raise TypeError("Cannot unset readonly struct fields")

    def __iter__(self) -> Iterator[str]:
        return iter(type(self).get_field_names())

    def get(self, name: str, default: Any = None) -> Any:
        """Return the value of field ``name``, or ``default`` if there is no such field."""
        if name not in self:
            return default
        return getattr(self, name)

    # --- Equality ---
    def __eq__(self, other: object) -> bool:
        """Check equality by comparing all field values."""
        if type(other) is not type(self):
            return NotImplemented
        return all(
            _freeze(getattr(self, f)) == _freeze(getattr(other, f))
            for f in type(self).get_field_names()
        )

    def __hash__(self) -> int:
        return hash(tuple(_hash_key(getattr(self, f)) for f in type(self).get_field_names()))

    # --- Serialization ---
    def to_dict(self, recursive: bool = True) -> Dict[str, Any]:
        """Convert the struct to a plain dictionary.

        Nested structs become dictionaries and sequences become lists;
        scalars, enum members and date/time values are left as they are.
        """
        d = {}
        for name in type(self).get_field_names():
            value = getattr(self, name)
            if recursive:
                value = _to_plain(value)
            d[name] = value
        return d

    @classmethod
    def from_dict(
        cls: Type[S],
        data: Mapping,
        *,
        strict: bool = False,
        container: Optional[ServiceContainer] = None,
    ) -> S:
        """Create a struct instance from a dictionary."""
        return construct(cls, data, ConstructionConfig(strict=strict, container=container))

    def to_json(self, pretty: bool = False) -> str:
        return default_codec.encode(type(self).to_dict(self), pretty=pretty)

    @classmethod
    def from_json(
        cls: Type[S],
        text: str,
        *,
        strict: bool = False,
        container: Optional[ServiceContainer] = None,
    ) -> S:
        """Create a struct instance from a JSON object."""
        data = default_codec.decode(text)
        if not isinstance(data, Mapping):
            raise MalformedTextError("JSON must decode to an object")
        return cls.from_dict(data, strict=strict, container=container)

    # --- Copying ---
    def with_changes(self: S, changes: Optional[Mapping] = None, **kwargs: Any) -> S:
        """Return a new, fully re-validated instance with ``changes`` applied.

        The original instance is never modified. The new instance is built
        with the same strict/container settings as this one.
        """
        data = type(self).to_dict(self)
        data.update(changes or {})
        data.update(kwargs)
        return construct(self.__class__, data, self._config)

    def replace(self: S, **changes: Any) -> S:
        """Create a new instance with specified field changes (alias for with_changes)."""
        return type(self).with_changes(self, changes)

    # --- String Representation ---
    def __repr__(self) -> str:
        """Return a detailed string representation of the struct."""
        fields_str = ", ".join(f"{f}={getattr(self, f)!r}" for f in type(self).get_field_names())
        return f"{self.__class__.__name__}({fields_str})"

    # --- Metadata Access ---
    @classmethod
    def schema(cls) -> StructSchema:
        return default_registry.get_schema(cls)

    @classmethod
    def get_field_metadata(cls, field_name: str) -> Optional[FieldDescriptor]:
        """Get the descriptor for a specific field."""
        return cls.schema().field_by_name(field_name)

    @classmethod
    def get_all_field_metadata(cls) -> Dict[str, FieldDescriptor]:
        return {f.name: f for f in cls.schema().fields}

    # --- Additional Utility Methods ---
    @classmethod
    def get_field_names(cls) -> List[str]:
        """Get list of all field names for this struct."""
        return cls.schema().field_names()

    def get_field_values(self) -> List[Any]:
        """Get list of all field values for this struct."""
        return [getattr(self, f) for f in type(self).get_field_names()]

    def get_field_items(self) -> List[Tuple[str, Any]]:
        """Get list of (field_name, value) tuples."""
        return [(f, getattr(self, f)) for f in type(self).get_field_names()]


def _to_plain(value: Any) -> Any:
    if isinstance(value, Struct):
        return type(value).to_dict(value, recursive=True)
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    return value
