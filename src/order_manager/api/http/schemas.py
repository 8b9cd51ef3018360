"""Request bodies and the response envelope of the orders API."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

T = TypeVar("T")

MAX_DESCRIPTION_LENGTH = 100

# Upper bound of the INTEGER id columns
MAX_ID = 2**31 - 1


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _check_product_ids(product_ids: list[int]) -> list[int]:
    if any(not 1 <= product_id <= MAX_ID for product_id in product_ids):
        raise ValueError("Product IDs must be positive integers")
    return product_ids


class CreateOrderRequest(BaseModel):
    """Body of POST /orders."""

    model_config = ConfigDict(populate_by_name=True)

    order_description: str = Field(alias="orderDescription")
    product_ids: list[int] = Field(alias="productIds")

    @field_validator("order_description", mode="before")
    @classmethod
    def strip_description(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("order_description")
    @classmethod
    def check_description(cls, value: str) -> str:
        if not value:
            raise ValueError("Order description is required")
        if len(value) > MAX_DESCRIPTION_LENGTH:
            raise ValueError("Order description must not exceed 100 characters")
        return value

    @field_validator("product_ids")
    @classmethod
    def check_products(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("At least one product must be selected")
        return _check_product_ids(value)


class UpdateOrderRequest(BaseModel):
    """Body of PUT /orders/{id}. Every field is optional.

    Whether a field was sent is read from `model_fields_set`, so an omitted
    `productIds` leaves the products alone while `"productIds": []` clears them.
    """

    model_config = ConfigDict(populate_by_name=True)

    order_description: str | None = Field(default=None, alias="orderDescription")
    product_ids: list[int] | None = Field(default=None, alias="productIds")

    @field_validator("order_description", mode="before")
    @classmethod
    def strip_description(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("order_description")
    @classmethod
    def check_description(cls, value: str | None) -> str:
        if not value:
            raise ValueError("Order description cannot be empty")
        if len(value) > MAX_DESCRIPTION_LENGTH:
            raise ValueError("Order description must not exceed 100 characters")
        return value

    @field_validator("product_ids")
    @classmethod
    def check_products(cls, value: list[int] | None) -> list[int]:
        if value is None:
            raise ValueError("Product IDs must be an array")
        return _check_product_ids(value)

    def provided_fields(self) -> dict[str, Any]:
        """Keyword arguments for `OrderService.update_order` with only the sent fields."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: `{success, data, message?}`."""

    success: bool = True
    data: T
    message: str | None = None

    @model_serializer(mode="wrap")
    def omit_empty_message(self, handler):
        serialized = handler(self)
        if serialized.get("message") is None:
            serialized.pop("message", None)
        return serialized


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope: `{success: false, message, errors?}`."""

    success: bool = False
    message: str
    errors: list[FieldError] | None = None
