"""业务异常定义

服务层只抛出这里定义的异常，HTTP 状态码的映射由 main.py 中的全局异常处理器完成。
"""


class OrderNotesError(Exception):
    """业务异常基类"""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "服务器内部错误"):
        super().__init__(message)
        self.message = message


class ValidationError(OrderNotesError):
    """输入数据不合法（订单明细、状态枚举、笔记内容）"""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "请求数据验证失败", errors: list = None):
        super().__init__(message)
        self.errors = errors or []


class ProductUnavailable(OrderNotesError):
    """商品不存在或已下架，订单创建中止"""

    status_code = 404
    code = "PRODUCT_UNAVAILABLE"

    def __init__(self, product_id: int):
        super().__init__(f"商品 {product_id} 不可用")
        self.product_id = product_id


class NotFound(OrderNotesError):
    """记录不存在或不属于当前用户（两种情况不做区分）"""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "记录不存在"):
        super().__init__(message)


class NotAnOrder(OrderNotesError):
    """目标笔记存在，但内容不是有效订单"""

    status_code = 400
    code = "NOT_AN_ORDER"

    def __init__(self, message: str = "该记录不是有效订单，无法更新状态"):
        super().__init__(message)


class Forbidden(OrderNotesError):
    """目标笔记是订单，不允许通过普通笔记接口修改或删除"""

    status_code = 403
    code = "ORDER_LOCKED"

    def __init__(self, message: str = "该记录是订单，不能通过笔记接口修改或删除"):
        super().__init__(message)


class StorageError(OrderNotesError):
    """底层存储故障，对外只暴露笼统信息"""

    status_code = 500
    code = "STORAGE_ERROR"

    def __init__(self, message: str = "数据存储失败"):
        super().__init__(message)
