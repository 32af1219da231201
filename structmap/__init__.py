"""
structmap - Typed, validated, immutable structs from untyped mappings

Declare fields with ``typing.Annotated`` and a ``Field`` marker; structmap
resolves aliases and defaults, coerces values to the declared types
(scalars, enums, date/time values, nested structs, arrays and unions),
runs transformers and validation rules, and can reject unknown keys.

Example:
    from typing import Annotated, List, Optional
    from structmap import EmailRule, Field, StringToLowerTransformer, Struct

    class User(Struct):
        id: Annotated[str, Field(alias="user_id")]
        email: Annotated[str, Field(
            transformers=[StringToLowerTransformer()],
            validation_rules=[EmailRule()],
        )]
        age: Annotated[Optional[int], Field()]
        tags: Annotated[List[str], Field(default=[])]

    user = User({"user_id": "u1", "email": "ALICE@EXAMPLE.COM", "age": None})
    # user.email == "alice@example.com", user.tags == []
    user.to_json()
"""

__version__ = "1.0.0"
__author__ = "Your Name"
__email__ = "your.email@example.com"
__license__ = "MIT"

from .codec import JsonCodec
from .config import ConstructionConfig, ServiceContainer
from .core import Struct, construct
from .errors import (
    FieldNotFoundError,
    MalformedTextError,
    SchemaError,
    StructError,
    StructInputError,
    UnknownFieldError,
    ValidationError,
)
from .factory import StructFactory
from .schema import (
    MISSING,
    Field,
    FieldDescriptor,
    SchemaRegistry,
    StructSchema,
    clear_cache,
    default_registry,
    discover_fields,
    get_fields,
)
from .serialization import JsonSerializer, Serializer
from .transformers import (
    StringToLowerTransformer,
    StringToUpperTransformer,
    StripTransformer,
    Transformer,
)
from .validation import (
    EmailRule,
    FieldValidator,
    LegacyValidatorRule,
    RangeRule,
    RequiredRule,
    ValidationResult,
    ValidationRule,
)

__all__ = [
    "Struct",
    "construct",
    "Field",
    "FieldDescriptor",
    "MISSING",
    "StructSchema",
    "SchemaRegistry",
    "default_registry",
    "discover_fields",
    "get_fields",
    "clear_cache",
    "ConstructionConfig",
    "ServiceContainer",
    "ValidationRule",
    "ValidationResult",
    "FieldValidator",
    "EmailRule",
    "RangeRule",
    "RequiredRule",
    "LegacyValidatorRule",
    "Transformer",
    "StringToLowerTransformer",
    "StringToUpperTransformer",
    "StripTransformer",
    "JsonCodec",
    "Serializer",
    "JsonSerializer",
    "StructFactory",
    "StructError",
    "StructInputError",
    "FieldNotFoundError",
    "ValidationError",
    "UnknownFieldError",
    "MalformedTextError",
    "SchemaError",
]
