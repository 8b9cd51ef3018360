"""Orders API router: CRUD over orders plus the product catalogue."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from src.order_manager.api.http.deps import get_order_service
from src.order_manager.api.http.schemas import (
    MAX_ID,
    ApiResponse,
    CreateOrderRequest,
    UpdateOrderRequest,
)
from src.order_manager.core.services import OrderService
from src.order_manager.entities.service.order import Order
from src.order_manager.entities.service.product import Product

router = APIRouter(tags=["orders"])

OrderId = Annotated[int, Path(gt=0, le=MAX_ID, description="Positive integer order id")]


@router.get("/products/all", response_model=ApiResponse[list[Product]])
def list_products(
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[list[Product]]:
    """List the product catalogue."""
    return ApiResponse(data=service.list_products())


@router.get("", response_model=ApiResponse[list[Order]])
def list_orders(
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[list[Order]]:
    """List all orders with their products, newest first."""
    return ApiResponse(data=service.list_orders())


@router.get("/{order_id}", response_model=ApiResponse[Order])
def get_order(
    order_id: OrderId,
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[Order]:
    """Get an order by ID."""
    return ApiResponse(data=service.get_order(order_id))


@router.post(
    "",
    response_model=ApiResponse[Order],
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: CreateOrderRequest,
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[Order]:
    """Create an order with its products."""
    order = service.create_order(payload.order_description, payload.product_ids)
    return ApiResponse(data=order, message="Order created successfully")


@router.put("/{order_id}", response_model=ApiResponse[Order])
def update_order(
    order_id: OrderId,
    payload: UpdateOrderRequest,
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[Order]:
    """Update the description and/or replace the product set of an order."""
    order = service.update_order(order_id, **payload.provided_fields())
    return ApiResponse(data=order, message="Order updated successfully")


@router.delete("/{order_id}", response_model=ApiResponse[None])
def delete_order(
    order_id: OrderId,
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[None]:
    """Delete an order and its product associations."""
    service.delete_order(order_id)
    return ApiResponse(data=None, message="Order deleted successfully")
