"""订单服务实现

订单没有独立的表：下单时按商品目录解析明细、计算金额，编码后作为一条笔记保存；
读取时再从笔记内容解码还原。批量读取时无法解码的笔记被静默跳过，针对单个订单
的操作则严格报错。
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from order_notes.core.exceptions import (
    NotAnOrder,
    NotFound,
    ProductUnavailable,
    StorageError,
    ValidationError,
)
from order_notes.models.note import Note
from order_notes.schemas.order import (
    ORDER_STATUSES,
    OrderLineInput,
    OrderStatus,
    OrderView,
    ResolvedOrderLine,
    round_money,
)
from order_notes.services import order_codec
from order_notes.services.note_store import NoteStore
from order_notes.services.order_detector import is_order
from order_notes.services.product_service import ProductService

logger = logging.getLogger(__name__)


class OrderService:
    """订单核心服务类"""

    def __init__(self, note_store: NoteStore, product_lookup: ProductService):
        self.notes = note_store
        self.products = product_lookup

    # ==================== 下单 ====================

    @staticmethod
    def validate_lines(lines: Iterable[Union[OrderLineInput, dict]]) -> List[OrderLineInput]:
        """校验订单明细，至少一条"""
        lines = list(lines or [])
        if not lines:
            raise ValidationError("订单至少需要包含一个商品")
        try:
            return [
                line if isinstance(line, OrderLineInput) else OrderLineInput.model_validate(line)
                for line in lines
            ]
        except PydanticValidationError as e:
            errors = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
            raise ValidationError("订单明细不合法", errors=errors) from e

    def resolve_lines(self, lines: List[OrderLineInput]) -> Tuple[List[ResolvedOrderLine], Decimal]:
        """按输入顺序逐条查询商品，计算小计和合计

        名称和单价只取商品目录中的当前值。遇到第一个不存在或已下架的商品立即中止，
        后面的明细不再查询。
        """
        resolved = []
        total = Decimal("0.00")

        for line in lines:
            product = self.products.get_product_by_id(line.product_id)
            if product is None or not product.is_active:
                logger.warning(f"Product {line.product_id} unavailable, order aborted")
                raise ProductUnavailable(line.product_id)

            price = round_money(product.price)
            line_total = round_money(price * line.quantity)
            resolved.append(
                ResolvedOrderLine(
                    product_id=line.product_id,
                    name=product.name,
                    price=price,
                    quantity=line.quantity,
                    line_total=line_total,
                )
            )
            total += line_total

        return resolved, round_money(total)

    def create_order(self, user_id: int, lines: Iterable[Union[OrderLineInput, dict]]) -> int:
        """创建订单，返回订单ID（即笔记ID）

        所有明细解析成功后才写入笔记，任何一步失败都不会留下部分订单。
        """
        items = self.validate_lines(lines)
        resolved, total = self.resolve_lines(items)

        now = order_codec.utcnow()
        content = order_codec.encode(resolved, total, now=now)
        title = f"Order placed on {now:%Y-%m-%d %H:%M:%S} UTC"

        order_id = self.notes.create(user_id, title, content)
        logger.info(
            f"Order {order_id} created for user {user_id}: "
            f"{len(resolved)} items, total {total}"
        )
        return order_id

    # ==================== 查询 ====================

    @staticmethod
    def to_order(note: Optional[Note]) -> Optional[OrderView]:
        """笔记转订单视图，不是有效订单返回 None"""
        if note is None:
            return None
        record = order_codec.decode(note.content)
        if record is None:
            return None
        return OrderView.from_note(note, record)

    def _to_orders(self, notes: Iterable[Note]) -> List[OrderView]:
        orders = []
        for note in notes:
            order = self.to_order(note)
            if order is None:
                # 普通笔记直接跳过，只有标记为订单却无法解码的才记录
                if note.is_order:
                    logger.warning(f"Skipping note {note.id}: flagged as order but content is corrupt")
                continue
            orders.append(order)
        return orders

    def get_order_by_id(self, order_id: int, user_id: int) -> Optional[OrderView]:
        """查询用户自己的订单，不存在、不属于该用户或不是订单都返回 None"""
        return self.to_order(self.notes.get_by_id(order_id, user_id))

    def get_all_orders(self, user_id: int) -> List[OrderView]:
        """查询用户全部订单（按存储顺序），跳过普通笔记和损坏的内容"""
        return self._to_orders(self.notes.list_by_owner(user_id))

    def admin_get_all_orders(self, limit: int, offset: int) -> Tuple[List[OrderView], int]:
        """管理员分页查询全部订单

        分页和 total 基于 is_order 索引字段：标记为订单但内容无法解码的笔记计入
        total，却不会出现在返回列表中，因此某一页可能少于 limit 条。
        """
        notes, total = self.notes.list_all(limit, offset, orders_only=True)
        return self._to_orders(notes), total

    def admin_get_order_by_id(self, order_id: int) -> Optional[OrderView]:
        return self.to_order(self.notes.get_by_id_unchecked(order_id))

    # ==================== 变更 ====================

    def admin_update_order_status(self, order_id: int, new_status: str) -> Dict[str, object]:
        """管理员修改订单状态

        Raises:
            ValidationError: 状态不在枚举范围内（在任何查询之前校验）
            NotFound: 笔记不存在
            NotAnOrder: 笔记不是有效订单
        """
        if new_status not in ORDER_STATUSES:
            raise ValidationError(
                f"无效的订单状态: {new_status}",
                errors=[{"loc": ["status"], "msg": f"必须是 {', '.join(ORDER_STATUSES)} 之一"}],
            )
        status = OrderStatus(new_status)

        note = self.notes.get_by_id_unchecked(order_id)
        if note is None:
            raise NotFound("订单不存在")
        if not is_order(note.content):
            logger.warning(f"Refusing status update on note {order_id}: not an order")
            raise NotAnOrder()

        new_content = order_codec.update_status(note.content, status)
        if self.notes.update_content_unchecked(order_id, new_content) == 0:
            # 读取之后被并发删除
            raise StorageError("订单状态更新失败")

        logger.info(f"Order {order_id} status updated to {status.value}")
        return {"order_id": order_id, "new_status": status}

    def delete_order(self, order_id: int, user_id: int):
        """用户删除自己的订单（订单专用删除入口）"""
        note = self.notes.get_by_id(order_id, user_id)
        if note is None or not is_order(note.content):
            raise NotFound("订单不存在")
        if self.notes.delete(order_id, user_id) == 0:
            # 读取之后被并发删除
            raise NotFound("订单不存在")
        logger.info(f"Order {order_id} deleted by user {user_id}")
