"""笔记存储层

notes 表的通用读写。除 *_unchecked 和 list_all 这类管理员方法外，所有读写都按
owner_id 过滤，查不到和不属于当前用户在这里不做区分。写入 content 时同步维护
is_order 冗余字段，其取值始终以内容识别结果为准。
"""

import logging
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from order_notes.core.exceptions import StorageError
from order_notes.models.note import Note
from order_notes.services.order_detector import is_order

logger = logging.getLogger(__name__)


class NoteStore:
    """笔记持久化"""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _transaction(self, action: str, commit: bool = True):
        """数据库异常统一回滚并转换为 StorageError"""
        try:
            yield
            if commit:
                self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Note store {action} failed: {e}")
            raise StorageError() from e

    def create(self, owner_id: int, title: str, content: Optional[str]) -> int:
        """新建笔记，返回笔记ID"""
        note = Note(
            title=title,
            content=content,
            owner_id=owner_id,
            is_order=is_order(content),
        )
        with self._transaction("create"):
            self.db.add(note)
            self.db.flush()
        return note.id

    def get_by_id(self, note_id: int, owner_id: int) -> Optional[Note]:
        stmt = select(Note).where(Note.id == note_id, Note.owner_id == owner_id)
        with self._transaction("get", commit=False):
            return self.db.execute(stmt).scalar_one_or_none()

    def get_by_id_unchecked(self, note_id: int) -> Optional[Note]:
        """管理员读取，不校验归属"""
        with self._transaction("get", commit=False):
            return self.db.get(Note, note_id)

    def list_by_owner(self, owner_id: int) -> List[Note]:
        """按存储顺序（ID 升序）返回用户全部笔记"""
        stmt = select(Note).where(Note.owner_id == owner_id).order_by(Note.id)
        with self._transaction("list", commit=False):
            return list(self.db.execute(stmt).scalars().all())

    def list_all(
        self, limit: int, offset: int, orders_only: bool = False
    ) -> Tuple[List[Note], int]:
        """管理员分页查询全部用户的笔记，按创建时间倒序

        orders_only 只按 is_order 索引字段筛选和计数，调用方仍需解析内容确认，
        返回的 total 因此是标记为订单的行数，而不是可解码订单的数量。
        """
        count_stmt = select(func.count(Note.id))
        page_stmt = select(Note).order_by(Note.created_at.desc(), Note.id.desc())
        if orders_only:
            count_stmt = count_stmt.where(Note.is_order.is_(True))
            page_stmt = page_stmt.where(Note.is_order.is_(True))

        with self._transaction("list_all", commit=False):
            total = self.db.execute(count_stmt).scalar_one()
            notes = self.db.execute(page_stmt.limit(limit).offset(offset)).scalars().all()
        return list(notes), total

    def list_batch(self, after_id: int, limit: int) -> List[Note]:
        """按 ID 顺序分批扫描全部笔记"""
        stmt = select(Note).where(Note.id > after_id).order_by(Note.id).limit(limit)
        with self._transaction("list_batch", commit=False):
            return list(self.db.execute(stmt).scalars().all())

    def update(self, note_id: int, owner_id: int, title: str, content: Optional[str]) -> int:
        """更新用户自己的笔记，返回受影响行数"""
        with self._transaction("update"):
            note = self.db.execute(
                select(Note).where(Note.id == note_id, Note.owner_id == owner_id)
            ).scalar_one_or_none()
            if note is None:
                return 0
            note.title = title
            note.content = content
            note.is_order = is_order(content)
            note.updated_at = func.now()
        return 1

    def update_content_unchecked(self, note_id: int, content: str) -> int:
        """管理员改写笔记内容（订单状态流转使用），返回受影响行数"""
        with self._transaction("update_content"):
            note = self.db.get(Note, note_id)
            if note is None:
                return 0
            note.content = content
            note.is_order = is_order(content)
            note.updated_at = func.now()
        return 1

    def delete(self, note_id: int, owner_id: int) -> int:
        """删除用户自己的笔记，返回受影响行数"""
        with self._transaction("delete"):
            note = self.db.execute(
                select(Note).where(Note.id == note_id, Note.owner_id == owner_id)
            ).scalar_one_or_none()
            if note is None:
                return 0
            self.db.delete(note)
        return 1

    def delete_unchecked(self, note_id: int) -> int:
        """管理员删除任意笔记，返回受影响行数"""
        with self._transaction("delete"):
            note = self.db.get(Note, note_id)
            if note is None:
                return 0
            self.db.delete(note)
        return 1

    def set_order_flags(self, flags: Dict[int, bool]) -> int:
        """批量校正 is_order 索引字段，不改动 updated_at"""
        affected = 0
        with self._transaction("set_order_flags"):
            for flag in (True, False):
                ids = [note_id for note_id, value in flags.items() if value is flag]
                if not ids:
                    continue
                result = self.db.execute(
                    update(Note)
                    .where(Note.id.in_(ids))
                    .values(is_order=flag, updated_at=Note.updated_at)
                    .execution_options(synchronize_session=False)
                )
                affected += result.rowcount
        self.db.expire_all()
        return affected
