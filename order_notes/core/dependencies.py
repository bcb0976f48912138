"""依赖注入配置模块"""

from typing import Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# 数据库会话依赖
from order_notes.db.session import SessionLocal
from sqlalchemy.orm import Session

# Redis 依赖
from order_notes.core.config import settings
from order_notes.core.redis import redis_client
from order_notes.core.security import CurrentUser, decode_access_token

from order_notes.services.note_service import NoteService
from order_notes.services.note_store import NoteStore
from order_notes.services.order_service import OrderService
from order_notes.services.product_service import ProductService

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_redis():
    """获取同步 Redis 客户端，关闭缓存时返回 None"""
    return redis_client if settings.REDIS_ENABLED else None


def get_note_store(db: Session = Depends(get_db)) -> NoteStore:
    return NoteStore(db)


def get_product_service(
    db: Session = Depends(get_db),
    redis = Depends(get_redis),
) -> ProductService:
    """获取商品服务实例（依赖注入）"""
    return ProductService(db=db, redis=redis)


def get_note_service(store: NoteStore = Depends(get_note_store)) -> NoteService:
    """获取笔记服务实例（依赖注入）"""
    return NoteService(store)


def get_order_service(
    store: NoteStore = Depends(get_note_store),
    products: ProductService = Depends(get_product_service),
) -> OrderService:
    """获取订单服务实例（依赖注入）"""
    return OrderService(note_store=store, product_lookup=products)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """从 Authorization: Bearer <token> 中解析当前用户"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="未登录或令牌格式错误",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = decode_access_token(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="令牌无效或已过期",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """要求管理员角色"""
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="需要管理员权限")
    return user


# 常用的依赖注入别名
DatabaseDep = Depends(get_db)
CurrentUserDep = Depends(get_current_user)
AdminDep = Depends(require_admin)
NoteServiceDep = Depends(get_note_service)
OrderServiceDep = Depends(get_order_service)
ProductServiceDep = Depends(get_product_service)
