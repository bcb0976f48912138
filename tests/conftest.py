"""测试配置和 fixtures"""
import os

# 在导入应用模块之前切换到内存数据库并关闭 Redis 缓存
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_ENABLED", "false")

import pytest
from decimal import Decimal
from unittest.mock import Mock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from redis import Redis

from order_notes.db.base import Base
from order_notes.models import Product
from order_notes.services.note_service import NoteService
from order_notes.services.note_store import NoteStore
from order_notes.services.order_service import OrderService
from order_notes.services.product_service import ProductService


@pytest.fixture
def db_session():
    """创建内存 SQLite 数据库会话"""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    db = SessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def mock_redis():
    """创建模拟 Redis 客户端"""
    redis_mock = Mock(spec=Redis)
    redis_mock.get.return_value = None
    redis_mock.setex.return_value = True
    redis_mock.delete.return_value = 1
    return redis_mock


@pytest.fixture
def sample_products(db_session):
    """示例商品：两个上架，一个下架"""
    products = [
        Product(id=101, name="Pizza", price=Decimal("15.00"), is_active=True),
        Product(id=102, name="Cola", price=Decimal("3.00"), is_active=True),
        Product(id=103, name="Out of Stock", price=Decimal("10.00"), is_active=False),
    ]
    db_session.add_all(products)
    db_session.commit()
    return products


@pytest.fixture
def note_store(db_session):
    return NoteStore(db_session)


@pytest.fixture
def product_service(db_session, mock_redis):
    return ProductService(db_session, mock_redis)


@pytest.fixture
def order_service(note_store, product_service):
    return OrderService(note_store, product_service)


@pytest.fixture
def note_service(note_store):
    return NoteService(note_store)


@pytest.fixture
def sample_order_lines():
    """示例下单明细：15.00 * 2 + 3.00 * 1 = 33.00"""
    return [
        {"productId": 101, "quantity": 2},
        {"productId": 102, "quantity": 1},
    ]
