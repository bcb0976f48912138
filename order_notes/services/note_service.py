"""笔记服务实现

普通笔记的增删改查。订单同样保存在笔记中，因此修改和删除前必须先识别内容：
订单只能走订单专用接口（状态流转、按ID删除），不能通过笔记接口改写或删除。
"""

import logging
from typing import List, Optional, Tuple

from order_notes.core.config import settings
from order_notes.core.exceptions import Forbidden, NotFound, ValidationError
from order_notes.models.note import Note
from order_notes.services.note_store import NoteStore
from order_notes.services.order_detector import is_order

logger = logging.getLogger(__name__)


class NoteService:
    """笔记服务类"""

    def __init__(self, note_store: NoteStore):
        self.store = note_store

    @staticmethod
    def _reject_order_content(content: Optional[str]):
        # 订单只能由下单流程生成，防止通过笔记接口伪造金额
        if is_order(content):
            raise ValidationError("笔记内容不能是订单格式，请使用下单接口")

    def list_notes(self, user_id: int) -> List[Note]:
        return self.store.list_by_owner(user_id)

    def get_note(self, note_id: int, user_id: int) -> Note:
        note = self.store.get_by_id(note_id, user_id)
        if note is None:
            raise NotFound("笔记不存在")
        return note

    def create_note(self, user_id: int, title: str, content: Optional[str] = None) -> Note:
        self._reject_order_content(content)
        note_id = self.store.create(user_id, title, content)
        logger.info(f"Note {note_id} created for user {user_id}")
        return self.store.get_by_id(note_id, user_id)

    def update_note(self, note_id: int, user_id: int, title: str, content: Optional[str] = None):
        """更新笔记，订单拒绝修改"""
        existing = self.get_note(note_id, user_id)
        if is_order(existing.content):
            logger.warning(f"User {user_id} tried to update order {note_id} via note endpoint")
            raise Forbidden()
        self._reject_order_content(content)

        if self.store.update(note_id, user_id, title, content) == 0:
            raise NotFound("笔记不存在")

    def delete_note(self, note_id: int, user_id: int):
        """删除笔记，订单拒绝删除"""
        existing = self.get_note(note_id, user_id)
        if is_order(existing.content):
            logger.warning(f"User {user_id} tried to delete order {note_id} via note endpoint")
            raise Forbidden()

        if self.store.delete(note_id, user_id) == 0:
            raise NotFound("笔记不存在")
        logger.info(f"Note {note_id} deleted by user {user_id}")

    # ==================== 管理员 ====================

    def admin_list_notes(self, limit: int, offset: int) -> Tuple[List[Note], int]:
        return self.store.list_all(limit, offset)

    def admin_delete_note(self, note_id: int):
        """管理员删除任意笔记（包括订单）"""
        if self.store.delete_unchecked(note_id) == 0:
            raise NotFound("笔记不存在")
        logger.info(f"Note {note_id} deleted by admin")

    def reconcile_order_flags(self, batch_size: int = None, dry_run: bool = False) -> int:
        """按内容识别结果校正 is_order 冗余字段

        Args:
            batch_size: 每批扫描的笔记数量
            dry_run: 只统计不修改

        Returns:
            标记与内容不一致的笔记数量
        """
        batch_size = batch_size or settings.RECONCILE_BATCH_SIZE
        mismatched = 0
        last_id = 0

        while True:
            notes = self.store.list_batch(last_id, batch_size)
            if not notes:
                break

            stale = {}
            for note in notes:
                detected = is_order(note.content)
                if bool(note.is_order) != detected:
                    stale[note.id] = detected
            last_id = notes[-1].id

            if stale:
                logger.info(f"Found {len(stale)} notes with stale order flag: {sorted(stale)}")
                if not dry_run:
                    self.store.set_order_flags(stale)
                mismatched += len(stale)

            if len(notes) < batch_size:
                break

        return mismatched
