"""笔记 API 路由"""

import logging
from typing import List

from fastapi import APIRouter, Path, Response, status

from order_notes.core.dependencies import CurrentUserDep, NoteServiceDep
from order_notes.core.security import CurrentUser
from order_notes.schemas.api import BaseResponse
from order_notes.schemas.note import NoteCreate, NoteOut, NoteUpdate
from order_notes.services.note_service import NoteService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/notes",
    tags=["笔记"],
    responses={
        401: {"description": "未登录"},
        403: {"description": "订单不能通过笔记接口修改或删除"},
        404: {"description": "笔记不存在"},
        422: {"description": "请求验证失败"},
    }
)


@router.get("", response_model=List[NoteOut], summary="查询我的笔记")
def list_notes(
    user: CurrentUser = CurrentUserDep,
    service: NoteService = NoteServiceDep,
):
    """返回当前用户的全部笔记（包括订单原始内容）"""
    return service.list_notes(user.id)


@router.get("/{note_id}", response_model=NoteOut, summary="查询单条笔记")
def get_note(
    note_id: int = Path(..., gt=0, description="笔记ID"),
    user: CurrentUser = CurrentUserDep,
    service: NoteService = NoteServiceDep,
):
    return service.get_note(note_id, user.id)


@router.post(
    "",
    response_model=NoteOut,
    status_code=status.HTTP_201_CREATED,
    summary="创建笔记",
)
def create_note(
    payload: NoteCreate,
    user: CurrentUser = CurrentUserDep,
    service: NoteService = NoteServiceDep,
):
    """创建普通笔记，订单请使用 POST /orders"""
    return service.create_note(user.id, payload.title, payload.content)


@router.put(
    "/{note_id}",
    response_model=BaseResponse,
    summary="更新笔记",
    description="""更新自己的普通笔记。

    **注意：** 内容为订单的笔记会被拒绝（403），订单只能通过订单接口变更。
    """,
)
def update_note(
    payload: NoteUpdate,
    note_id: int = Path(..., gt=0, description="笔记ID"),
    user: CurrentUser = CurrentUserDep,
    service: NoteService = NoteServiceDep,
):
    service.update_note(note_id, user.id, payload.title, payload.content)
    return {"success": True, "message": "笔记更新成功"}


@router.delete(
    "/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="删除笔记",
)
def delete_note(
    note_id: int = Path(..., gt=0, description="笔记ID"),
    user: CurrentUser = CurrentUserDep,
    service: NoteService = NoteServiceDep,
):
    """删除自己的普通笔记，订单请使用 DELETE /orders/{id}"""
    service.delete_note(note_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
