from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from order_notes.schemas.base import BaseSchema


class ProductSnapshot(BaseModel):
    """下单时需要的商品信息"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: Decimal
    is_active: bool


class ProductOut(BaseSchema):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=255, description="商品名称")
    description: Optional[str] = None
    price: Decimal = Field(..., ge=Decimal("0.01"), decimal_places=2, description="商品单价")
    category: Optional[str] = Field(None, max_length=64)
    image_url: Optional[str] = Field(None, max_length=512)
    is_active: bool = True


class ProductUpdate(BaseModel):
    """只更新传入的字段"""
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=Decimal("0.01"), decimal_places=2)
    category: Optional[str] = Field(None, max_length=64)
    image_url: Optional[str] = Field(None, max_length=512)
    is_active: Optional[bool] = None
