"""Bearer 令牌校验

令牌签发属于认证服务，这里只负责校验并取出用户身份；create_access_token
供运维脚本和测试使用。
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from order_notes.core.config import settings


class CurrentUser(BaseModel):
    """令牌中携带的用户身份"""
    id: int
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_access_token(user_id: int, role: str = "user", expires_minutes: int = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.JWT_EXPIRE_MINUTES
    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[CurrentUser]:
    """校验令牌，无效或过期返回 None"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return CurrentUser(id=int(payload["sub"]), role=payload.get("role") or "user")
    except (JWTError, KeyError, TypeError, ValueError):
        return None
