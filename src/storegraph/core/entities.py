"""
Entity enums and pydantic models for mutation inputs.

Create models carry the required/optional split of each entity. Update models
make every field optional; only the fields a caller actually sets are written
(see ``changes()``).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class ProductStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Role(str, Enum):
    ADMIN = "ADMIN"
    CUSTOMER = "CUSTOMER"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# --- Mutation inputs ---

class MutationInput(BaseModel):
    """Base for create/update inputs. Unknown fields (including ``id``) are rejected."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    def document(self) -> dict[str, Any]:
        """Full document for insertion."""
        return self.model_dump()


class PartialInput(MutationInput):
    """
    Base for update inputs.

    Fields listed in ``required_fields`` may be omitted but not set to null,
    since the stored entity must keep a value for them.
    """

    required_fields: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_null_required(self) -> "PartialInput":
        nulled = [
            name for name in self.required_fields
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulled:
            raise ValueError(f"fields cannot be null: {', '.join(nulled)}")
        return self

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller supplied."""
        return self.model_dump(exclude_unset=True)


class ProductCreate(MutationInput):
    name: str
    price: int
    category: Optional[str] = None
    status: ProductStatus = ProductStatus.ACTIVE


class ProductUpdate(PartialInput):
    required_fields: ClassVar[tuple[str, ...]] = ("name", "price", "status")

    name: Optional[str] = None
    price: Optional[int] = None
    category: Optional[str] = None
    status: Optional[ProductStatus] = None


class UserCreate(MutationInput):
    username: str
    email: str
    role: Role


class UserUpdate(PartialInput):
    required_fields: ClassVar[tuple[str, ...]] = ("username", "email", "role")

    username: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None


class OrderCreate(MutationInput):
    products: list[str]
    user: str
    total: int
    status: OrderStatus


class OrderUpdate(PartialInput):
    required_fields: ClassVar[tuple[str, ...]] = ("products", "user", "total", "status")

    products: Optional[list[str]] = None
    user: Optional[str] = None
    total: Optional[int] = None
    status: Optional[OrderStatus] = None
