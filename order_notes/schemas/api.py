"""通用响应模型"""

from pydantic import BaseModel, Field
from typing import Optional


class BaseResponse(BaseModel):
    """操作类接口的统一响应"""
    success: bool = Field(..., description="请求是否成功")
    message: Optional[str] = Field(None, description="响应消息")


class ReconcileResponse(BaseResponse):
    fixed_count: int = Field(..., ge=0, description="标记与内容不一致的笔记数量")


class CeleryTaskResponse(BaseResponse):
    task_id: str = Field(..., description="Celery 任务ID，用于查询执行状态")


class TaskStatusResponse(BaseModel):
    task_id: str
    status: str = Field(..., description="任务状态描述")
    state: str = Field(..., description="Celery 任务状态码")


class HealthCheckResponse(BaseModel):
    status: str = "healthy"
    service: str = "order-notes-service"
    version: str = "1.0.0"


class APIInfoResponse(BaseModel):
    message: str = "欢迎使用笔记订单服务"
    docs: str = "/docs"
    health: str = "/health"
