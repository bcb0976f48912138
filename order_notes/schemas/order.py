from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

MONEY_PLACES = Decimal("0.01")


def round_money(value) -> Decimal:
    """金额保留两位小数，统一采用四舍五入（ROUND_HALF_UP）"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


class OrderStatus(str, Enum):
    """订单状态（大小写敏感）"""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


ORDER_STATUSES = tuple(status.value for status in OrderStatus)


# ==================== 请求模型 ====================

class OrderLineInput(BaseModel):
    """客户端提交的订单明细，只信任商品ID和数量"""
    model_config = ConfigDict(populate_by_name=True)

    # 严格整数，布尔值和数字字符串都不接受
    product_id: int = Field(..., gt=0, strict=True, alias="productId", description="商品ID")
    quantity: int = Field(..., ge=1, strict=True, description="购买数量")


class CreateOrderRequest(BaseModel):
    items: List[OrderLineInput] = Field(..., min_length=1, description="订单明细")


class OrderStatusUpdateRequest(BaseModel):
    # 枚举校验在服务层完成，非法值返回 400 而不是 422
    status: str = Field(..., description="新状态", examples=["READY"])


# ==================== 订单内容 ====================

class ResolvedOrderLine(BaseModel):
    """按商品目录解析后的订单明细（名称、单价为下单时快照）"""
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., gt=0, alias="productId")
    name: str
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    line_total: Decimal = Field(
        ...,
        ge=0,
        alias="lineTotal",
        validation_alias=AliasChoices("lineTotal", "total", "line_total"),
    )

    @field_validator("price", "line_total")
    @classmethod
    def round_money_fields(cls, value: Decimal) -> Decimal:
        return round_money(value)

    @field_serializer("price", "line_total")
    def serialize_money(self, value: Decimal) -> float:
        return float(value)


class OrderRecord(BaseModel):
    """序列化进笔记 content 字段的订单结构"""
    model_config = ConfigDict(populate_by_name=True)

    order_items: List[ResolvedOrderLine] = Field(..., min_length=1)
    total_amount: Decimal = Field(..., ge=0)
    status: OrderStatus = OrderStatus.PENDING
    order_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("total_amount")
    @classmethod
    def round_money_fields(cls, value: Decimal) -> Decimal:
        return round_money(value)

    @field_serializer("total_amount")
    def serialize_money(self, value: Decimal) -> float:
        return float(value)


# ==================== 响应模型 ====================

class OrderView(OrderRecord):
    """读取时由笔记还原出的订单视图"""
    order_id: int = Field(..., alias="orderId")
    title: str
    owner_id: int

    @classmethod
    def from_note(cls, note, record: OrderRecord) -> "OrderView":
        return cls(
            order_id=note.id,
            title=note.title,
            owner_id=note.owner_id,
            order_items=record.order_items,
            total_amount=record.total_amount,
            status=record.status,
            order_date=record.order_date,
            updated_at=record.updated_at,
        )


class CreateOrderResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "订单创建成功"
    order_id: int = Field(..., alias="orderId")
    total_amount: Decimal = Field(..., alias="totalAmount")
    order: Optional[OrderView] = None

    @field_serializer("total_amount")
    def serialize_money(self, value: Decimal) -> float:
        return float(value)


class OrderStatusUpdateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    order_id: int = Field(..., alias="orderId")
    new_status: OrderStatus = Field(..., alias="newStatus")


class OrderPage(BaseModel):
    """管理员订单分页结果"""
    orders: List[OrderView]
    total: int = Field(..., description="标记为订单的笔记数，包含内容已损坏、不会出现在列表中的记录")
    page: int
    limit: int
