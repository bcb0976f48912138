from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from order_notes.core.config import settings


def _engine_options(url: str) -> dict:
    # SQLite 不支持连接池参数
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 1800,
    }


engine = create_engine(
    settings.database_url,
    **_engine_options(settings.database_url),
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def init_db():
    """按模型建表（已存在的表不会重建）"""
    from order_notes.db.base import Base
    import order_notes.models  # noqa: F401  注册全部模型

    Base.metadata.create_all(bind=engine)
