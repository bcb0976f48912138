from sqlalchemy import (
    Column,
    Boolean,
    Numeric,
    String,
    Text,
    TIMESTAMP,
    func,
    Index,
)
from order_notes.db.base import Base
from order_notes.models.note import IdType


class Product(Base):
    __tablename__ = "products"

    id = Column(
        IdType,
        primary_key=True,
        autoincrement=True,
    )

    name = Column(
        String(255),
        nullable=False,
        unique=True,
        comment="商品名称",
    )

    description = Column(
        Text,
        nullable=True,
        comment="商品描述",
    )

    price = Column(
        Numeric(10, 2),
        nullable=False,
        comment="商品单价",
    )

    category = Column(
        String(64),
        nullable=True,
        comment="商品分类",
    )

    image_url = Column(
        String(512),
        nullable=True,
    )

    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default="1",
        comment="是否上架",
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
        onupdate=func.now(),
    )


# -----------------------------
# 上架商品按名称排序展示
# -----------------------------
Index(
    "idx_products_active_name",
    Product.is_active,
    Product.name,
)
