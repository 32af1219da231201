"""Field declarations, schema discovery and the per-class schema cache."""

import collections.abc
import logging
import threading
import types
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    FrozenSet,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .errors import SchemaError
from .transformers import Transformer
from .validation import LegacyValidatorRule, ValidationRule

logger = logging.getLogger("structmap.schema")


class _Missing:
    """Sentinel for 'no default declared'."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


# --- Declaration Marker ---
class Field:
    """Marks an annotated attribute as a schema field.

    Used as metadata inside ``typing.Annotated``::

        class User(Struct):
            id: Annotated[str, Field(alias="user_id")]
            email: Annotated[str, Field(validation_rules=[EmailRule()])]

    Attributes without a ``Field`` marker are not part of the schema.
    """

    __slots__ = (
        "alias",
        "default",
        "default_factory",
        "nullable",
        "validation_rules",
        "transformers",
        "validator",
    )

    def __init__(
        self,
        *,
        alias: Optional[str] = None,
        default: Any = MISSING,
        default_factory: Optional[Callable[[], Any]] = None,
        nullable: bool = False,
        validation_rules: Sequence[ValidationRule] = (),
        transformers: Sequence[Transformer] = (),
        validator: Optional[type] = None,
    ) -> None:
        if default is not MISSING and default_factory is not None:
            raise SchemaError("Field cannot declare both default and default_factory")
        self.alias = alias
        self.default = default
        self.default_factory = default_factory
        self.nullable = nullable
        self.validation_rules = tuple(validation_rules)
        self.transformers = tuple(transformers)
        self.validator = validator

    def __repr__(self) -> str:
        parts = []
        if self.alias:
            parts.append(f"alias={self.alias!r}")
        if self.default is not MISSING:
            parts.append(f"default={self.default!r}")
        if self.nullable:
            parts.append("nullable=True")
        return f"Field({', '.join(parts)})"


# --- Type Specs ---
_SCALAR_KINDS: Dict[Any, str] = {str: "string", int: "int", float: "float", bool: "bool"}


@dataclass(frozen=True)
class ScalarType:
    kind: str

    @property
    def type_name(self) -> str:
        return self.kind


@dataclass(frozen=True)
class EnumType:
    enum_cls: type

    @property
    def type_name(self) -> str:
        return self.enum_cls.__name__

    @property
    def value_backed(self) -> bool:
        """True when every member has a ``str`` or ``int`` value."""
        members = list(self.enum_cls)  # type: ignore[call-overload]
        return bool(members) and all(
            isinstance(m.value, (str, int)) and not isinstance(m.value, bool)
            for m in members
        )


@dataclass(frozen=True)
class TemporalType:
    temporal_cls: type

    @property
    def type_name(self) -> str:
        return self.temporal_cls.__name__


@dataclass(frozen=True)
class NestedType:
    target: type

    @property
    def type_name(self) -> str:
        return self.target.__name__


@dataclass(frozen=True)
class UnionType:
    members: Tuple[Any, ...]

    @property
    def type_name(self) -> str:
        return "|".join(m.type_name for m in self.members)


TypeSpec = Union[ScalarType, EnumType, TemporalType, NestedType, UnionType]


# --- Field Descriptor ---
@dataclass(frozen=True)
class FieldDescriptor:
    """Static description of one field, built once per struct class."""

    name: str
    type_spec: TypeSpec
    nullable: bool = False
    is_array: bool = False
    default: Any = MISSING
    default_factory: Optional[Callable[[], Any]] = None
    alias: Optional[str] = None
    validation_rules: Tuple[ValidationRule, ...] = ()
    transformers: Tuple[Transformer, ...] = ()

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not None

    def get_default(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default

    @property
    def type_name(self) -> str:
        return self.type_spec.type_name

    def input_keys(self) -> Tuple[str, ...]:
        """Keys this field may be supplied under, alias first."""
        if self.alias:
            return (self.alias, self.name)
        return (self.name,)


class StructSchema:
    """The ordered fields of one struct class plus lookups over them."""

    __slots__ = ("struct_cls", "fields", "_by_name", "_by_alias", "_allowed")

    def __init__(self, struct_cls: type, fields: List[FieldDescriptor]) -> None:
        self.struct_cls = struct_cls
        self.fields = fields
        self._by_name = {f.name: f for f in fields}
        self._by_alias = {f.alias: f for f in fields if f.alias}
        self._allowed: FrozenSet[str] = frozenset(self.allowed_keys())

    def field_by_name(self, name: str) -> Optional[FieldDescriptor]:
        return self._by_name.get(name)

    def field_by_alias(self, alias: str) -> Optional[FieldDescriptor]:
        return self._by_alias.get(alias)

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def allowed_keys(self) -> List[str]:
        """Every canonical name and alias, in field order."""
        keys: List[str] = []
        for f in self.fields:
            keys.append(f.name)
            if f.alias:
                keys.append(f.alias)
        return keys

    def is_allowed(self, key: str) -> bool:
        return key in self._allowed

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"StructSchema({self.struct_cls.__name__}, fields={self.field_names()})"


# --- Discovery ---
_UNION_ORIGINS = (Union, types.UnionType)
_ARRAY_ORIGINS = (list, tuple, collections.abc.Sequence)
# Instance attributes the Struct base class keeps for itself.
_RESERVED_NAMES = frozenset({"_config"})


def discover_fields(struct_cls: type) -> List[FieldDescriptor]:
    """Build descriptors for every ``Field``-marked attribute of ``struct_cls``.

    Base class fields come first, followed by the class's own in definition
    order.
    """
    try:
        hints = get_type_hints(struct_cls, include_extras=True)
    except (NameError, TypeError) as e:
        raise SchemaError(
            f"Cannot resolve type hints of {struct_cls.__name__}: {e}"
        ) from e

    descriptors: List[FieldDescriptor] = []
    for name, hint in hints.items():
        if get_origin(hint) is not Annotated:
            continue
        args = get_args(hint)
        marker = next((m for m in args[1:] if isinstance(m, Field)), None)
        if marker is None:
            continue
        descriptors.append(_build_descriptor(struct_cls, name, args[0], marker))
    return descriptors


def _build_descriptor(
    struct_cls: type, name: str, hint: Any, marker: Field
) -> FieldDescriptor:
    where = f"{struct_cls.__name__}.{name}"
    if name in _RESERVED_NAMES or name.startswith("__"):
        raise SchemaError(f"Field name {name!r} on {struct_cls.__name__} is reserved")
    members, optional = _split_union(hint)
    is_array = False

    if len(members) == 1 and _is_array_hint(members[0]):
        is_array = True
        members, element_optional = _split_union(_array_element(members[0], where))
        if element_optional:
            raise SchemaError(f"Array elements of {where} cannot be nullable")

    if len(members) == 1:
        type_spec: TypeSpec = _resolve_single(members[0], where)
    else:
        type_spec = UnionType(tuple(_resolve_single(m, where) for m in members))

    for rule in marker.validation_rules:
        if not isinstance(rule, ValidationRule):
            raise SchemaError(f"{rule!r} on {where} is not a ValidationRule")
    for t in marker.transformers:
        if not callable(getattr(t, "transform", None)):
            raise SchemaError(f"{t!r} on {where} has no transform() method")

    rules: Tuple[ValidationRule, ...] = marker.validation_rules
    if marker.validator is not None:
        rules = (LegacyValidatorRule(marker.validator),) + rules

    return FieldDescriptor(
        name=name,
        type_spec=type_spec,
        nullable=optional or marker.nullable,
        is_array=is_array,
        default=marker.default,
        default_factory=marker.default_factory,
        alias=marker.alias,
        validation_rules=rules,
        transformers=marker.transformers,
    )


def _split_union(hint: Any) -> Tuple[List[Any], bool]:
    """Split a hint into its non-None members and whether None was allowed."""
    if get_origin(hint) in _UNION_ORIGINS:
        args = get_args(hint)
        members = [a for a in args if a is not type(None)]
        return members, len(members) != len(args)
    return [hint], False


def _is_array_hint(hint: Any) -> bool:
    return hint in (list, tuple) or get_origin(hint) in _ARRAY_ORIGINS


def _array_element(hint: Any, where: str) -> Any:
    args = get_args(hint)
    if not args:
        return Any
    if get_origin(hint) is tuple:
        if len(args) != 2 or args[1] is not Ellipsis:
            raise SchemaError(f"{where}: only homogeneous Tuple[X, ...] is supported")
    return args[0]


def _resolve_single(hint: Any, where: str) -> TypeSpec:
    if hint is Any or hint is object:
        return ScalarType("mixed")
    if hint in _SCALAR_KINDS:
        return ScalarType(_SCALAR_KINDS[hint])
    if hint in (datetime, date, time):
        return TemporalType(hint)
    if isinstance(hint, type) and issubclass(hint, Enum):
        return EnumType(hint)
    if _is_array_hint(hint):
        raise SchemaError(f"{where}: arrays are only supported at the top level")
    origin = get_origin(hint)
    if isinstance(origin, type):
        # Parameterized containers such as Dict[str, int] check the origin only.
        return NestedType(origin)
    if isinstance(hint, type):
        return NestedType(hint)
    raise SchemaError(f"{where}: unsupported type {hint!r}")


# --- Registry ---
class SchemaRegistry:
    """Memoizes discovered schemas per class.

    Lookups are lock-free. Entries are append-only: when two threads discover
    the same class concurrently, the first stored schema wins and both
    callers get that object.
    """

    def __init__(
        self, discover: Callable[[type], List[FieldDescriptor]] = discover_fields
    ) -> None:
        self._discover = discover
        self._cache: Dict[type, StructSchema] = {}
        self._lock = threading.Lock()

    def get_schema(self, struct_cls: type) -> StructSchema:
        schema = self._cache.get(struct_cls)
        if schema is not None:
            return schema

        discovered = StructSchema(struct_cls, list(self._discover(struct_cls)))
        with self._lock:
            schema = self._cache.setdefault(struct_cls, discovered)
        if schema is discovered:
            logger.debug(
                "Discovered schema for %s with %d field(s)",
                struct_cls.__qualname__,
                len(schema),
            )
        return schema

    def get_fields(self, struct_cls: type) -> List[FieldDescriptor]:
        return self.get_schema(struct_cls).fields

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
        logger.debug("Schema cache cleared")

    def __contains__(self, struct_cls: type) -> bool:
        return struct_cls in self._cache

    def __len__(self) -> int:
        return len(self._cache)


default_registry = SchemaRegistry()


def get_fields(struct_cls: type) -> List[FieldDescriptor]:
    return default_registry.get_fields(struct_cls)


def clear_cache() -> None:
    default_registry.clear()
