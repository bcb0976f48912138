"""订单识别：判断笔记内容是订单还是普通文本"""

from order_notes.services.order_codec import load_content


def is_order(raw_content) -> bool:
    """content 是否为订单

    要求能解析为 JSON 对象，order_items 为非空列表，并且带有 total_amount 字段
    （合计为 0 也算存在）。任何解析失败都视为普通笔记。
    """
    data = load_content(raw_content)
    if data is None:
        return False
    items = data.get("order_items")
    return isinstance(items, list) and len(items) > 0 and "total_amount" in data
