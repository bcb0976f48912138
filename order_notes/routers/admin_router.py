"""管理员 API 路由"""

import logging

from fastapi import APIRouter, HTTPException, Path, Query, Response, status

from order_notes.core.config import settings
from order_notes.core.dependencies import (
    AdminDep,
    NoteServiceDep,
    OrderServiceDep,
    ProductServiceDep,
)
from order_notes.core.exceptions import NotFound
from order_notes.schemas.api import CeleryTaskResponse, ReconcileResponse, TaskStatusResponse
from order_notes.schemas.note import NoteOut, NotePage
from order_notes.schemas.order import (
    OrderPage,
    OrderStatusUpdateRequest,
    OrderStatusUpdateResponse,
    OrderView,
)
from order_notes.schemas.product import ProductCreate, ProductOut, ProductUpdate
from order_notes.services.note_service import NoteService
from order_notes.services.order_service import OrderService
from order_notes.services.product_service import ProductService
from tasks.note_tasks import reconcile_order_flags as celery_reconcile_task

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/admin",
    tags=["管理员"],
    dependencies=[AdminDep],
    responses={
        400: {"description": "请求参数错误或目标不是订单"},
        401: {"description": "未登录"},
        403: {"description": "需要管理员权限"},
        404: {"description": "资源未找到"},
        500: {"description": "服务器内部错误"}
    }
)


def _page_params(page: int, limit: int):
    return limit, (page - 1) * limit


# ==================== 笔记 ====================

@router.get("/notes", response_model=NotePage, summary="查询全部笔记")
def list_all_notes(
    page: int = Query(1, ge=1, description="页码"),
    limit: int = Query(settings.ADMIN_PAGE_SIZE, ge=1, le=100, description="每页数量"),
    service: NoteService = NoteServiceDep,
):
    notes, total = service.admin_list_notes(*_page_params(page, limit))
    return NotePage(
        notes=[NoteOut.model_validate(note) for note in notes],
        total=total,
        page=page,
        limit=limit,
    )


@router.delete(
    "/notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="删除任意笔记",
)
def delete_note(
    note_id: int = Path(..., gt=0, description="笔记ID"),
    service: NoteService = NoteServiceDep,
):
    """管理员删除笔记，订单同样可以删除"""
    service.admin_delete_note(note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== 订单 ====================

@router.get("/orders", response_model=OrderPage, summary="查询全部订单")
def list_all_orders(
    page: int = Query(1, ge=1, description="页码"),
    limit: int = Query(settings.ADMIN_PAGE_SIZE, ge=1, le=100, description="每页数量"),
    service: OrderService = OrderServiceDep,
):
    orders, total = service.admin_get_all_orders(*_page_params(page, limit))
    return OrderPage(orders=orders, total=total, page=page, limit=limit)


@router.get("/orders/{order_id}", response_model=OrderView, summary="查询任意订单")
def get_order(
    order_id: int = Path(..., gt=0, description="订单ID"),
    service: OrderService = OrderServiceDep,
):
    order = service.admin_get_order_by_id(order_id)
    if order is None:
        raise NotFound("订单不存在")
    return order


@router.put(
    "/orders/{order_id}/status",
    response_model=OrderStatusUpdateResponse,
    summary="修改订单状态",
    description="""修改订单状态，可选值：PENDING、IN_PROGRESS、READY、DELIVERED、CANCELLED（区分大小写）。

    - 状态不合法返回 400
    - 笔记不存在返回 404
    - 笔记不是订单返回 400
    """,
)
def update_order_status(
    payload: OrderStatusUpdateRequest,
    order_id: int = Path(..., gt=0, description="订单ID"),
    service: OrderService = OrderServiceDep,
):
    result = service.admin_update_order_status(order_id, payload.status)
    return OrderStatusUpdateResponse(
        message=f"订单 #{order_id} 状态已更新为 {result['new_status'].value}",
        order_id=result["order_id"],
        new_status=result["new_status"],
    )


# ==================== 商品 ====================

@router.post(
    "/products",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    summary="新建商品",
)
def create_product(payload: ProductCreate, service: ProductService = ProductServiceDep):
    return service.create_product(payload)


@router.patch("/products/{product_id}", response_model=ProductOut, summary="更新商品")
def update_product(
    payload: ProductUpdate,
    product_id: int = Path(..., gt=0, description="商品ID"),
    service: ProductService = ProductServiceDep,
):
    return service.update_product(product_id, payload)


# ==================== 维护 ====================

@router.post(
    "/maintenance/reconcile",
    response_model=ReconcileResponse,
    summary="校正订单标记",
)
def reconcile_order_flags(
    batch_size: int = Query(settings.RECONCILE_BATCH_SIZE, ge=1, le=10000, description="批处理大小"),
    dry_run: bool = Query(False, description="只统计不修改"),
    service: NoteService = NoteServiceDep,
):
    """直接在请求中执行校正（方式一：API 直接调用 Service）"""
    count = service.reconcile_order_flags(batch_size, dry_run=dry_run)
    return {
        "success": True,
        "message": "试运行完成" if dry_run else "校正完成",
        "fixed_count": count,
    }


@router.post(
    "/maintenance/reconcile/async",
    response_model=CeleryTaskResponse,
    summary="异步校正订单标记",
)
def reconcile_order_flags_async(
    batch_size: int = Query(settings.RECONCILE_BATCH_SIZE, ge=1, le=10000, description="批处理大小"),
):
    """提交 Celery 异步任务（方式二：Celery 调用）"""
    try:
        task = celery_reconcile_task.delay(batch_size)
    except Exception as e:
        logger.error(f"Celery 任务提交失败: {str(e)}")
        raise HTTPException(status_code=503, detail="任务队列不可用")
    return {
        "success": True,
        "message": "已提交异步校正任务",
        "task_id": task.id,
    }


@router.get(
    "/maintenance/tasks/{task_id}",
    response_model=TaskStatusResponse,
    summary="查询异步任务状态",
)
def get_task_status(task_id: str):
    task = celery_reconcile_task.AsyncResult(task_id)

    if task.state == 'PENDING':
        description = "任务等待中"
    elif task.state == 'SUCCESS':
        description = f"任务完成: {task.result}"
    elif task.state == 'FAILURE':
        description = f"任务失败: {str(task.info)}"
    else:
        description = f"任务状态: {task.state}"

    return {
        "task_id": task_id,
        "status": description,
        "state": task.state,
    }
