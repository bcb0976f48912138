"""商品 API 路由（公开）"""

from typing import List

from fastapi import APIRouter

from order_notes.core.dependencies import ProductServiceDep
from order_notes.schemas.product import ProductOut
from order_notes.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["商品"])


@router.get("", response_model=List[ProductOut], summary="查询上架商品")
def list_products(service: ProductService = ProductServiceDep):
    return service.list_active_products()
