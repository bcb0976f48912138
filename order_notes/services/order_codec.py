"""订单内容编解码

订单以 JSON 字符串的形式存放在笔记的 content 字段里。所有读取路径都通过
decode 把字符串还原为 OrderRecord。decode 从不抛异常，解析失败时是静默跳过
还是报错由调用方决定：批量列表跳过，精确操作报错。
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Union

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from order_notes.core.exceptions import NotAnOrder
from order_notes.schemas.order import (
    OrderRecord,
    OrderStatus,
    ResolvedOrderLine,
    round_money,
)

logger = logging.getLogger(__name__)

# 与 OrderRecord 序列化时间字段的格式保持一致
_datetime_adapter = TypeAdapter(datetime)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def load_content(raw_content) -> Optional[dict]:
    """把 content 解析为 JSON 对象，失败返回 None

    浮点数按 Decimal 解析，避免金额在往返过程中产生误差。
    """
    if not raw_content or not isinstance(raw_content, str):
        return None
    try:
        data = json.loads(raw_content, parse_float=Decimal)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def serialize(record: OrderRecord) -> str:
    return record.model_dump_json(by_alias=True, exclude_none=True)


def encode(
    resolved_lines: Iterable[Union[ResolvedOrderLine, dict]],
    total_amount,
    now: Optional[datetime] = None,
) -> str:
    """生成新订单的 content 字符串，状态固定为 PENDING

    Args:
        resolved_lines: 已按商品目录解析的订单明细
        total_amount: 各明细小计之和，必须与明细一致
        now: 下单时间，默认当前 UTC 时间

    Raises:
        ValueError: 明细为空，或合计金额与明细小计之和不一致
    """
    lines = [
        line if isinstance(line, ResolvedOrderLine) else ResolvedOrderLine.model_validate(line)
        for line in resolved_lines
    ]
    if not lines:
        raise ValueError("订单至少需要包含一个商品")

    total = round_money(total_amount)
    expected = sum((line.line_total for line in lines), Decimal("0.00"))
    if total != expected:
        raise ValueError(f"订单合计 {total} 与明细小计之和 {expected} 不一致")

    record = OrderRecord(
        order_items=lines,
        total_amount=total,
        status=OrderStatus.PENDING,
        order_date=now or utcnow(),
    )
    return serialize(record)


def decode(raw_content) -> Optional[OrderRecord]:
    """把 content 还原为 OrderRecord，不是有效订单时返回 None"""
    data = load_content(raw_content)
    if data is None or "order_items" not in data or data.get("total_amount") is None:
        return None
    try:
        return OrderRecord.model_validate(data)
    except (PydanticValidationError, ArithmeticError) as e:
        logger.debug(f"Order content rejected: {e}")
        return None


def update_status(
    raw_content,
    new_status: Union[OrderStatus, str],
    now: Optional[datetime] = None,
) -> str:
    """修改订单状态，只改写 status 和 updated_at

    其余字段（包括模型未声明的字段）按原样保留，金额不经过 Decimal 重新格式化。

    Raises:
        NotAnOrder: content 不是有效订单
        ValueError: 状态不在枚举范围内
    """
    status = OrderStatus(new_status)
    if decode(raw_content) is None:
        raise NotAnOrder()

    data = json.loads(raw_content)
    data["status"] = status.value
    data["updated_at"] = _datetime_adapter.dump_python(now or utcnow(), mode="json")
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
