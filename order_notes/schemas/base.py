from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class BaseSchema(BaseModel):
    """基础响应字段"""
    model_config = ConfigDict(from_attributes=True)  # 支持从 ORM 对象直接生成 Schema

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
