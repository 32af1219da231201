#!/usr/bin/env python3
"""
Walkthrough of structmap basics: fields, aliases, defaults, validation
"""

from typing import Annotated, List, Optional

from structmap import (
    EmailRule,
    Field,
    FieldNotFoundError,
    RangeRule,
    StringToLowerTransformer,
    Struct,
    UnknownFieldError,
    ValidationError,
)


def demo_basic_functionality():
    """Build a struct from a plain dict"""
    print("=== Basic Functionality ===")

    class Point(Struct):
        x: Annotated[int, Field()]
        y: Annotated[int, Field(default=0)]

    p1 = Point({"x": 10, "y": 20})
    p2 = Point({"x": 30})  # Using default for y

    print(f"p1: {p1}")
    print(f"p2: {p2}")
    assert p2.y == 0

    try:
        p1.x = 100
    except AttributeError as e:
        print(f"✓ Structs are immutable: {e}")

    print("✓ Basic functionality works\n")


def demo_aliases_and_nulls():
    """Input keys that differ from field names, and nullable fields"""
    print("=== Aliases and Nulls ===")

    class User(Struct):
        id: Annotated[str, Field(alias="user_id")]
        age: Annotated[Optional[int], Field()]

    user = User({"user_id": "u1", "age": None})
    print(f"From alias: {user}")

    try:
        User({})
    except FieldNotFoundError as e:
        print(f"✓ Caught expected error: {e}")

    print("✓ Aliases work\n")


def demo_validation():
    """Transformers run first, then coercion, then rules"""
    print("=== Validation ===")

    class Signup(Struct):
        email: Annotated[str, Field(
            transformers=[StringToLowerTransformer()],
            validation_rules=[EmailRule()],
        )]
        age: Annotated[int, Field(validation_rules=[RangeRule(13, 120)])]
        interests: Annotated[List[str], Field(default=[])]

    signup = Signup({"email": "John@Example.COM", "age": 30})
    print(f"Created: {signup}")
    assert signup.email == "john@example.com"

    for bad in ({"email": "nope", "age": 30}, {"email": "a@b.co", "age": "30"}):
        try:
            Signup(bad)
        except ValidationError as e:
            print(f"✓ Caught expected error on '{e.field_name}': {e}")

    print("✓ Validation works\n")


def demo_strict_mode():
    """Reject keys the schema does not know"""
    print("=== Strict Mode ===")

    class Named(Struct):
        name: Annotated[str, Field()]

    print(f"Lenient: {Named({'name': 'x', 'extra': 'y'})}")
    try:
        Named({"name": "x", "extra": "y"}, strict=True)
    except UnknownFieldError as e:
        print(f"✓ Caught expected error: {e}")

    print("✓ Strict mode works\n")


if __name__ == "__main__":
    demo_basic_functionality()
    demo_aliases_and_nulls()
    demo_validation()
    demo_strict_mode()
    print("All demos completed.")
