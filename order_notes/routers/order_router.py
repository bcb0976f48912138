"""订单 API 路由"""

import logging
from typing import List

from fastapi import APIRouter, Path, Response, status

from order_notes.core.dependencies import CurrentUserDep, OrderServiceDep
from order_notes.core.exceptions import NotFound
from order_notes.core.security import CurrentUser
from order_notes.schemas.order import CreateOrderRequest, CreateOrderResponse, OrderView
from order_notes.services.order_service import OrderService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/orders",
    tags=["订单"],
    responses={
        400: {"description": "订单明细不合法"},
        401: {"description": "未登录"},
        404: {"description": "订单或商品不存在"},
        422: {"description": "请求验证失败"},
    }
)


@router.post(
    "",
    response_model=CreateOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="下单",
    description="""按商品目录解析订单明细并保存为订单。

    **特点：**
    - 名称和单价取自商品目录，不信任客户端
    - 任一商品不存在或已下架则整单失败，不会保存部分订单
    - 金额保留两位小数，四舍五入
    """,
)
def create_order(
    payload: CreateOrderRequest,
    user: CurrentUser = CurrentUserDep,
    service: OrderService = OrderServiceDep,
):
    order_id = service.create_order(user.id, payload.items)
    order = service.get_order_by_id(order_id, user.id)
    return CreateOrderResponse(
        order_id=order_id,
        total_amount=order.total_amount,
        order=order,
    )


@router.get("", response_model=List[OrderView], summary="查询我的订单")
def list_orders(
    user: CurrentUser = CurrentUserDep,
    service: OrderService = OrderServiceDep,
):
    return service.get_all_orders(user.id)


@router.get("/{order_id}", response_model=OrderView, summary="查询订单详情")
def get_order(
    order_id: int = Path(..., gt=0, description="订单ID"),
    user: CurrentUser = CurrentUserDep,
    service: OrderService = OrderServiceDep,
):
    order = service.get_order_by_id(order_id, user.id)
    if order is None:
        raise NotFound("订单不存在")
    return order


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="删除订单",
)
def delete_order(
    order_id: int = Path(..., gt=0, description="订单ID"),
    user: CurrentUser = CurrentUserDep,
    service: OrderService = OrderServiceDep,
):
    service.delete_order(order_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
