from sqlalchemy import (
    Column,
    BigInteger,
    Integer,
    Boolean,
    String,
    Text,
    TIMESTAMP,
    func,
    Index,
)
from order_notes.db.base import Base

# SQLite 只对 INTEGER PRIMARY KEY 自增
IdType = BigInteger().with_variant(Integer, "sqlite")


class Note(Base):
    __tablename__ = "notes"

    id = Column(
        IdType,
        primary_key=True,
        autoincrement=True,
    )

    title = Column(
        String(255),
        nullable=False,
        comment="笔记标题",
    )

    # 普通文本，或序列化后的订单 JSON
    content = Column(
        Text,
        nullable=True,
        comment="笔记内容",
    )

    owner_id = Column(
        BigInteger,
        nullable=False,
        index=True,
        comment="所属用户ID",
    )

    # 冗余索引字段，以内容识别结果为准
    is_order = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default="0",
        comment="是否为订单",
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Note id={self.id} owner_id={self.owner_id} is_order={self.is_order}>"


# -----------------------------
# 用户订单列表查询
# -----------------------------
Index(
    "idx_notes_owner_is_order",
    Note.owner_id,
    Note.is_order,
)
