from pydantic import BaseModel, Field
from typing import List, Optional

from order_notes.core.config import settings
from order_notes.schemas.base import BaseSchema


class NoteCreate(BaseModel):
    """创建/更新笔记请求"""
    title: str = Field(
        ...,
        min_length=1,
        max_length=settings.NOTE_TITLE_MAX_LENGTH,
        description="笔记标题",
    )
    content: Optional[str] = Field(
        None,
        max_length=settings.NOTE_CONTENT_MAX_LENGTH,
        description="笔记内容",
    )


class NoteUpdate(NoteCreate):
    pass


class NoteOut(BaseSchema):
    id: int
    title: str
    content: Optional[str] = None
    owner_id: int
    is_order: bool = False


class NotePage(BaseModel):
    """管理员笔记分页结果"""
    notes: List[NoteOut]
    total: int
    page: int
    limit: int
