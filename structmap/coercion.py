"""Converts raw input values into a field's declared type.

``coerce_single`` never raises for a type mismatch; it returns a
``CoercionResult`` so that union resolution can move on to the next member
type by inspecting the result. ``coerce`` is the raising entry point used by
the construction pipeline.
"""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, NamedTuple, Optional

from .config import DEFAULT_CONFIG, ConstructionConfig
from .errors import SchemaError, StructInputError, ValidationError
from .schema import (
    EnumType,
    NestedType,
    ScalarType,
    TemporalType,
    TypeSpec,
    UnionType,
)

logger = logging.getLogger("structmap.coercion")

_SCALAR_PYTHON_TYPES = {"string": str, "int": int, "float": float, "bool": bool}


class CoercionResult(NamedTuple):
    ok: bool
    value: Any = None
    message: str = ""

    @classmethod
    def success(cls, value: Any) -> "CoercionResult":
        return cls(True, value)

    @classmethod
    def failure(cls, message: str) -> "CoercionResult":
        return cls(False, None, message)


def debug_type(value: Any) -> str:
    """Name of a value's runtime type, using the scalar kind names."""
    if value is None:
        return "null"
    for kind, python_type in _SCALAR_PYTHON_TYPES.items():
        if type(value) is python_type:
            return kind
    return type(value).__name__


def coerce(
    type_spec: TypeSpec,
    value: Any,
    field_name: str,
    config: ConstructionConfig = DEFAULT_CONFIG,
    index: Optional[int] = None,
) -> Any:
    """Coerce ``value`` to ``type_spec`` or raise ``ValidationError``."""
    if isinstance(type_spec, UnionType):
        for member in type_spec.members:
            result = coerce_single(member, value, field_name, config, propagate=False)
            if result.ok:
                return result.value
        raise ValidationError(
            f"Field {field_name} must be one of: {type_spec.type_name}",
            field_name,
            value,
            index=index,
        )

    result = coerce_single(type_spec, value, field_name, config)
    if not result.ok:
        raise ValidationError(result.message, field_name, value, index=index)
    return result.value


def coerce_single(
    type_spec: TypeSpec,
    value: Any,
    field_name: str,
    config: ConstructionConfig = DEFAULT_CONFIG,
    propagate: bool = True,
) -> CoercionResult:
    """Coerce to one non-union type.

    With ``propagate`` set, input errors raised while building a nested
    struct escape as-is; otherwise they are reported as a failed result.
    """
    if isinstance(type_spec, ScalarType):
        return _coerce_scalar(type_spec, value, field_name)
    if isinstance(type_spec, EnumType):
        return _coerce_enum(type_spec, value, field_name)
    if isinstance(type_spec, TemporalType):
        return _coerce_temporal(type_spec, value, field_name)
    if isinstance(type_spec, NestedType):
        return _coerce_nested(type_spec, value, field_name, config, propagate)
    raise SchemaError(f"Unsupported type {type_spec!r} for field {field_name}")


def _coerce_scalar(spec: ScalarType, value: Any, field_name: str) -> CoercionResult:
    if spec.kind == "mixed":
        return CoercionResult.success(value)
    # Exact type match: no bool-as-int, no int-as-float, no numeric strings.
    if type(value) is not _SCALAR_PYTHON_TYPES[spec.kind]:
        return CoercionResult.failure(
            f"Field {field_name} must be of type {spec.kind}, got {debug_type(value)}"
        )
    return CoercionResult.success(value)


def _coerce_enum(spec: EnumType, value: Any, field_name: str) -> CoercionResult:
    enum_cls = spec.enum_cls
    if isinstance(value, enum_cls):
        return CoercionResult.success(value)

    is_lookup_key = isinstance(value, (str, int)) and not isinstance(value, bool)
    if is_lookup_key and spec.value_backed:
        try:
            return CoercionResult.success(enum_cls(value))
        except ValueError:
            return CoercionResult.failure(
                f"Invalid value '{value}' for enum {enum_cls.__name__}"
            )

    return CoercionResult.failure(
        f"Field {field_name} must be instance of enum {enum_cls.__name__}"
    )


def _coerce_temporal(
    spec: TemporalType, value: Any, field_name: str
) -> CoercionResult:
    temporal_cls = spec.temporal_cls
    if isinstance(value, temporal_cls):
        return CoercionResult.success(value)
    if isinstance(value, str):
        # fromisoformat only learned the "Z" designator in 3.11.
        if value[-1:] in ("Z", "z") and temporal_cls is not date:
            value = value[:-1] + "+00:00"
        try:
            return CoercionResult.success(temporal_cls.fromisoformat(value))  # type: ignore[attr-defined]
        except ValueError as e:
            return CoercionResult.failure(
                f"Field {field_name}: invalid datetime string: {e}"
            )
    return CoercionResult.failure(
        f"Field {field_name} must be {temporal_cls.__name__} or string"
    )


def _coerce_nested(
    spec: NestedType,
    value: Any,
    field_name: str,
    config: ConstructionConfig,
    propagate: bool,
) -> CoercionResult:
    from .core import Struct, construct

    target = spec.target
    if isinstance(value, target):
        return CoercionResult.success(value)
    if not isinstance(value, Mapping):
        return CoercionResult.failure(
            f"Field {field_name} must be instance of {target.__name__} or mapping"
        )

    container = config.container
    if container is not None and container.has(target):
        service = container.get(target)
        if not isinstance(service, Struct):
            logger.debug(
                "Field %s resolved %s from container", field_name, target.__name__
            )
            return CoercionResult.success(service)

    if isinstance(target, type) and issubclass(target, Struct):
        if propagate:
            return CoercionResult.success(construct(target, value, config))
        # Inside a union a nested input error only rules this member out.
        try:
            return CoercionResult.success(construct(target, value, config))
        except StructInputError as e:
            return CoercionResult.failure(str(e))

    try:
        return CoercionResult.success(target(**value))
    except (TypeError, ValueError) as e:
        return CoercionResult.failure(
            f"Field {field_name} could not build {target.__name__}: {e}"
        )
