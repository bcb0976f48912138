"""商品服务实现"""

import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from order_notes.core.config import settings
from order_notes.core.exceptions import NotFound, StorageError, ValidationError
from order_notes.models.product import Product
from order_notes.schemas.product import ProductCreate, ProductSnapshot, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """商品目录服务（下单查询带缓存）"""

    def __init__(self, db: Session, redis: Redis = None, cache_ttl: int = None):
        self.db = db
        self.redis = redis
        self.cache_ttl = cache_ttl or settings.PRODUCT_CACHE_TTL

    @staticmethod
    def cache_key(product_id: int) -> str:
        return f"product:{product_id}"

    def get_product_by_id(self, product_id: int) -> Optional[ProductSnapshot]:
        """按ID查询商品（带缓存），不存在返回 None

        下架商品同样返回，由调用方根据 is_active 判断是否可售。
        """
        cache_key = self.cache_key(product_id)

        # 先查缓存
        cached = self._cache_get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for product {product_id}")
            return cached

        # 缓存未命中，查询数据库
        try:
            product = self.db.execute(
                select(Product).where(Product.id == product_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Product lookup failed for {product_id}: {e}")
            raise StorageError() from e

        if product is None:
            return None

        snapshot = ProductSnapshot.model_validate(product)
        self._cache_set(cache_key, snapshot)
        return snapshot

    def list_active_products(self) -> List[Product]:
        """查询上架商品，按名称排序"""
        stmt = select(Product).where(Product.is_active.is_(True)).order_by(Product.name)
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Listing products failed: {e}")
            raise StorageError() from e

    def create_product(self, data: ProductCreate) -> Product:
        """新建商品（管理员）"""
        product = Product(**data.model_dump())
        try:
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError(f"商品名称已存在: {data.name}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Creating product failed: {e}")
            raise StorageError() from e

        logger.info(f"Product {product.id} created: {product.name}")
        return product

    def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        """更新商品（管理员），只写入传入的字段并使缓存失效

        已下的订单保存的是下单时的价格快照，不受影响。
        """
        changes = data.model_dump(exclude_unset=True)
        try:
            product = self.db.get(Product, product_id)
            if product is None:
                raise NotFound("商品不存在")
            for field, value in changes.items():
                setattr(product, field, value)
            self.db.commit()
            self.db.refresh(product)
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError(f"商品名称已存在: {changes.get('name')}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Updating product {product_id} failed: {e}")
            raise StorageError() from e

        self._cache_delete(self.cache_key(product_id))
        logger.info(f"Product {product_id} updated: {sorted(changes)}")
        return product

    # ==================== 缓存 ====================
    # Redis 不可用时降级为直接查库

    def _cache_get(self, key: str) -> Optional[ProductSnapshot]:
        if not self.redis:
            return None
        try:
            cached = self.redis.get(key)
        except RedisError as e:
            logger.warning(f"Redis get failed for {key}: {e}")
            return None
        if cached is None:
            return None
        try:
            return ProductSnapshot.model_validate_json(cached)
        except PydanticValidationError:
            logger.warning(f"Discarding malformed cache entry {key}")
            return None

    def _cache_set(self, key: str, snapshot: ProductSnapshot):
        if not self.redis:
            return
        try:
            self.redis.setex(key, self.cache_ttl, snapshot.model_dump_json())
            logger.debug(f"Cache set for {key}")
        except RedisError as e:
            logger.warning(f"Redis set failed for {key}: {e}")

    def _cache_delete(self, key: str):
        if not self.redis:
            return
        try:
            self.redis.delete(key)
        except RedisError as e:
            logger.warning(f"Redis delete failed for {key}: {e}")
