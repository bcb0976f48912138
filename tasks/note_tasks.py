"""笔记维护相关的 Celery 任务"""

from celery_app import app
from order_notes.db.session import SessionLocal
from order_notes.services.note_service import NoteService
from order_notes.services.note_store import NoteStore
import logging

logger = logging.getLogger(__name__)


@app.task(name='tasks.notes.reconcile_order_flags')
def reconcile_order_flags(batch_size: int = 500):
    """按内容识别结果校正 is_order 冗余字段

    Args:
        batch_size: 每批扫描的笔记数量
    """
    db = SessionLocal()
    try:
        service = NoteService(NoteStore(db))
        count = service.reconcile_order_flags(batch_size)
        logger.info(f"订单标记校正完成: {count} 条")
        return f"校正了 {count} 条笔记的订单标记"
    except Exception as e:
        logger.error(f"订单标记校正失败: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()


# 导出任务
__all__ = [
    'reconcile_order_flags',
]
