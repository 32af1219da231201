#!/usr/bin/env python3
"""
Advanced example: nested API payloads, unions, enums, dates and JSON
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional, Union

from structmap import (
    ConstructionConfig,
    Field,
    JsonSerializer,
    RequiredRule,
    StringToUpperTransformer,
    StripTransformer,
    Struct,
    StructFactory,
    StructInputError,
)


# Example 1: Nested structures with aliases and enums
class Status(Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Address(Struct):
    street: Annotated[str, Field()]
    city: Annotated[str, Field()]
    country: Annotated[str, Field(default="US", transformers=[StringToUpperTransformer()])]
    zip_code: Annotated[str, Field(alias="zip")]


class Customer(Struct):
    id: Annotated[Union[str, int], Field(alias="customer_id")]
    name: Annotated[str, Field(transformers=[StripTransformer()], validation_rules=[RequiredRule()])]
    status: Annotated[Status, Field()]
    signed_up: Annotated[datetime, Field(alias="signedUp")]
    billing: Annotated[Address, Field()]
    shipping: Annotated[List[Address], Field(default=[])]
    notes: Annotated[Optional[str], Field()]


PAYLOAD = """
{
    "customer_id": 1042,
    "name": "  Ada Lovelace ",
    "status": "active",
    "signedUp": "2024-03-01T09:30:00+00:00",
    "billing": {"street": "1 Main St", "city": "Springfield", "country": "us", "zip": "12345"},
    "shipping": [
        {"street": "9 Side Rd", "city": "Shelbyville", "zip": "54321"}
    ]
}
"""


def main():
    serializer = JsonSerializer(ConstructionConfig(strict=True))
    customer = serializer.from_json(PAYLOAD, Customer)

    print(f"Customer: {customer}")
    print(f"Billing country: {customer.billing.country}")
    print(f"Status: {customer.status}")

    # Modified copies are re-validated from scratch
    suspended = customer.with_changes(status="suspended")
    print(f"Suspended copy: {suspended.status} (original: {customer.status})")

    print(serializer.to_json(suspended, pretty=True))

    factory = StructFactory()
    try:
        factory.create(Customer, {"customer_id": 1.5})
    except StructInputError as e:
        print(f"Rejected: {e.to_dict()}")


if __name__ == "__main__":
    main()
