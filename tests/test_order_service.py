"""订单服务单元测试"""
import json
import pytest
from decimal import Decimal
from unittest.mock import Mock, call

from order_notes.core.exceptions import (
    Forbidden,
    NotAnOrder,
    NotFound,
    ProductUnavailable,
    ValidationError,
)
from order_notes.models.note import Note
from order_notes.schemas.order import OrderStatus
from order_notes.schemas.product import ProductSnapshot
from order_notes.services import order_codec
from order_notes.services.note_store import NoteStore
from order_notes.services.order_service import OrderService
from order_notes.services.product_service import ProductService

USER_ID = 1

MOCK_PIZZA = ProductSnapshot(id=101, name="Pizza", price=Decimal("15.00"), is_active=True)
MOCK_DRINK = ProductSnapshot(id=102, name="Cola", price=Decimal("3.00"), is_active=True)
MOCK_INACTIVE = ProductSnapshot(id=103, name="Out of Stock", price=Decimal("10.00"), is_active=False)


def make_order_content(total="10.00"):
    return json.dumps({
        "order_items": [{"productId": 101, "name": "Pizza", "price": 5.0, "quantity": 2, "lineTotal": 10.0}],
        "total_amount": float(total),
    })


@pytest.fixture
def mock_notes():
    return Mock(spec=NoteStore)


@pytest.fixture
def mock_products():
    return Mock(spec=ProductService)


@pytest.fixture
def service(mock_notes, mock_products):
    return OrderService(mock_notes, mock_products)


class TestCreateOrder:
    """下单测试"""

    def test_create_order_calculates_total(self, service, mock_notes, mock_products, sample_order_lines):
        """测试下单：计算合计并保存为笔记"""
        mock_products.get_product_by_id.side_effect = [MOCK_PIZZA, MOCK_DRINK]
        mock_notes.create.return_value = 50

        result = service.create_order(USER_ID, sample_order_lines)

        assert result == 50
        # 按输入顺序查询商品
        assert mock_products.get_product_by_id.call_args_list == [call(101), call(102)]

        owner_id, title, content = mock_notes.create.call_args[0]
        assert owner_id == USER_ID
        assert title.startswith("Order placed on")
        record = order_codec.decode(content)
        assert record.total_amount == Decimal("33.00")
        assert len(record.order_items) == 2
        assert record.status == OrderStatus.PENDING
        assert [item.line_total for item in record.order_items] == [Decimal("30.00"), Decimal("3.00")]

    def test_client_price_and_name_are_ignored(self, service, mock_notes, mock_products):
        """测试不信任客户端提交的单价和名称"""
        mock_products.get_product_by_id.return_value = MOCK_PIZZA
        mock_notes.create.return_value = 7

        service.create_order(USER_ID, [{"productId": 101, "quantity": 1, "price": 0.01, "name": "Free"}])

        record = order_codec.decode(mock_notes.create.call_args[0][2])
        assert record.order_items[0].price == Decimal("15.00")
        assert record.order_items[0].name == "Pizza"
        assert record.total_amount == Decimal("15.00")

    def test_line_total_rounds_half_up(self, service, mock_notes, mock_products):
        mock_products.get_product_by_id.return_value = ProductSnapshot(
            id=5, name="Candy", price=Decimal("0.125"), is_active=True
        )
        mock_notes.create.return_value = 1

        service.create_order(USER_ID, [{"productId": 5, "quantity": 3}])

        record = order_codec.decode(mock_notes.create.call_args[0][2])
        # 单价先舍入为 0.13，再乘数量
        assert record.order_items[0].price == Decimal("0.13")
        assert record.total_amount == Decimal("0.39")

    def test_product_not_found(self, service, mock_notes, mock_products, sample_order_lines):
        """测试商品不存在时整单失败"""
        mock_products.get_product_by_id.return_value = None

        with pytest.raises(ProductUnavailable) as exc_info:
            service.create_order(USER_ID, sample_order_lines)

        assert exc_info.value.product_id == 101
        # 第一个不可用商品即中止，后续明细不再查询
        mock_products.get_product_by_id.assert_called_once_with(101)
        mock_notes.create.assert_not_called()

    def test_product_inactive(self, service, mock_notes, mock_products, sample_order_lines):
        """测试商品已下架时整单失败"""
        mock_products.get_product_by_id.return_value = MOCK_INACTIVE

        with pytest.raises(ProductUnavailable) as exc_info:
            service.create_order(USER_ID, sample_order_lines)

        assert exc_info.value.product_id == 101
        mock_notes.create.assert_not_called()

    def test_second_product_unavailable(self, service, mock_notes, mock_products, sample_order_lines):
        mock_products.get_product_by_id.side_effect = [MOCK_PIZZA, None]

        with pytest.raises(ProductUnavailable) as exc_info:
            service.create_order(USER_ID, sample_order_lines)

        assert exc_info.value.product_id == 102
        mock_notes.create.assert_not_called()

    def test_empty_order(self, service, mock_notes, mock_products):
        """测试空订单"""
        with pytest.raises(ValidationError):
            service.create_order(USER_ID, [])

        mock_products.get_product_by_id.assert_not_called()
        mock_notes.create.assert_not_called()

    @pytest.mark.parametrize("line", [
        {"productId": 101, "quantity": 0},
        {"productId": -1, "quantity": 1},
        {"quantity": 1},
        {"productId": "abc", "quantity": 1},
        {"productId": "101", "quantity": 1},
        {"productId": True, "quantity": 1},
        {"productId": 101, "quantity": True},
        {"productId": 101, "quantity": "2"},
    ])
    def test_invalid_line(self, service, mock_products, line):
        with pytest.raises(ValidationError) as exc_info:
            service.create_order(USER_ID, [line])

        assert exc_info.value.errors
        mock_products.get_product_by_id.assert_not_called()


class TestReadOrders:
    """订单查询测试"""

    def test_get_order_by_id(self, service, mock_notes):
        mock_notes.get_by_id.return_value = Note(
            id=50, title="Test Order", owner_id=USER_ID, content=make_order_content("10.00"), is_order=True
        )

        order = service.get_order_by_id(50, USER_ID)

        assert order.order_id == 50
        assert order.title == "Test Order"
        assert order.owner_id == USER_ID
        assert order.total_amount == Decimal("10.00")
        mock_notes.get_by_id.assert_called_once_with(50, USER_ID)

    def test_get_order_by_id_not_found(self, service, mock_notes):
        mock_notes.get_by_id.return_value = None

        assert service.get_order_by_id(999, USER_ID) is None

    @pytest.mark.parametrize("content", ["Invalid JSON", "{invalid: json}", "just a plain note"])
    def test_get_order_by_id_not_an_order(self, service, mock_notes, content):
        """测试非订单内容视为订单不存在"""
        mock_notes.get_by_id.return_value = Note(id=50, title="Note", owner_id=USER_ID, content=content)

        assert service.get_order_by_id(50, USER_ID) is None

    def test_get_all_orders_skips_corrupt_notes(self, service, mock_notes):
        """测试批量查询静默跳过损坏的订单和普通笔记"""
        mock_notes.list_by_owner.return_value = [
            Note(id=1, title="Order 1", owner_id=USER_ID, content=make_order_content("10.00"), is_order=True),
            Note(id=2, title="Broken", owner_id=USER_ID, content='{"order_items": [', is_order=True),
            Note(id=3, title="Order 2", owner_id=USER_ID, content=make_order_content("20.00"), is_order=True),
            Note(id=4, title="Plain", owner_id=USER_ID, content="hello", is_order=False),
        ]

        orders = service.get_all_orders(USER_ID)

        assert [order.order_id for order in orders] == [1, 3]
        assert [order.total_amount for order in orders] == [Decimal("10.00"), Decimal("20.00")]

    def test_admin_get_all_orders(self, service, mock_notes):
        """total 是标记为订单的行数，损坏的记录计入 total 但不返回"""
        mock_notes.list_all.return_value = (
            [
                Note(id=9, title="Order", owner_id=2, content=make_order_content(), is_order=True),
                Note(id=8, title="Stale flag", owner_id=3, content="plain", is_order=True),
            ],
            2,
        )

        orders, total = service.admin_get_all_orders(limit=20, offset=0)

        assert [order.order_id for order in orders] == [9]
        assert total == 2
        mock_notes.list_all.assert_called_once_with(20, 0, orders_only=True)


class TestAdminUpdateOrderStatus:
    """管理员修改订单状态测试"""

    def test_update_status_success(self, service, mock_notes):
        original = make_order_content("10.00")
        mock_notes.get_by_id_unchecked.return_value = Note(
            id=50, title="Order", owner_id=USER_ID, content=original, is_order=True
        )
        mock_notes.update_content_unchecked.return_value = 1

        result = service.admin_update_order_status(50, "READY")

        assert result == {"order_id": 50, "new_status": OrderStatus.READY}
        note_id, new_content = mock_notes.update_content_unchecked.call_args[0]
        assert note_id == 50
        record = order_codec.decode(new_content)
        assert record.status == OrderStatus.READY
        assert record.updated_at is not None
        assert record.total_amount == Decimal("10.00")
        assert record.order_items == order_codec.decode(original).order_items

    @pytest.mark.parametrize("status", ["SHIPPED", "ready", "", None])
    def test_invalid_status_rejected_before_lookup(self, service, mock_notes, status):
        """测试非法状态在查询之前就被拒绝"""
        with pytest.raises(ValidationError):
            service.admin_update_order_status(50, status)

        mock_notes.get_by_id_unchecked.assert_not_called()
        mock_notes.update_content_unchecked.assert_not_called()

    def test_note_not_found(self, service, mock_notes):
        mock_notes.get_by_id_unchecked.return_value = None

        with pytest.raises(NotFound):
            service.admin_update_order_status(404, "READY")

        mock_notes.update_content_unchecked.assert_not_called()

    def test_plain_note_is_not_an_order(self, service, mock_notes):
        """测试普通笔记不能修改状态，也不会写入"""
        mock_notes.get_by_id_unchecked.return_value = Note(
            id=51, title="Note", owner_id=USER_ID, content="plain text", is_order=False
        )

        with pytest.raises(NotAnOrder):
            service.admin_update_order_status(51, "DELIVERED")

        mock_notes.update_content_unchecked.assert_not_called()


class TestDeleteOrder:
    """用户删除订单测试"""

    def test_delete_order(self, service, mock_notes):
        mock_notes.get_by_id.return_value = Note(
            id=50, title="Order", owner_id=USER_ID, content=make_order_content(), is_order=True
        )
        mock_notes.delete.return_value = 1

        service.delete_order(50, USER_ID)

        mock_notes.delete.assert_called_once_with(50, USER_ID)

    def test_delete_order_already_gone(self, service, mock_notes):
        """读取之后被并发删除，返回不存在"""
        mock_notes.get_by_id.return_value = Note(
            id=50, title="Order", owner_id=USER_ID, content=make_order_content(), is_order=True
        )
        mock_notes.delete.return_value = 0

        with pytest.raises(NotFound):
            service.delete_order(50, USER_ID)

    def test_delete_plain_note_via_order_path(self, service, mock_notes):
        mock_notes.get_by_id.return_value = Note(id=51, title="Note", owner_id=USER_ID, content="plain")

        with pytest.raises(NotFound):
            service.delete_order(51, USER_ID)

        mock_notes.delete.assert_not_called()


class TestOrderServiceWithDatabase:
    """订单服务与真实存储（SQLite）集成测试"""

    def test_scenario_total_33(self, order_service, sample_products, sample_order_lines):
        order_id = order_service.create_order(USER_ID, sample_order_lines)

        order = order_service.get_order_by_id(order_id, USER_ID)
        assert order.total_amount == Decimal("33.00")
        assert len(order.order_items) == 2
        assert order.status == OrderStatus.PENDING

    def test_inactive_product_creates_nothing(self, order_service, note_store, sample_products):
        with pytest.raises(ProductUnavailable) as exc_info:
            order_service.create_order(USER_ID, [{"productId": 101, "quantity": 1}, {"productId": 103, "quantity": 1}])

        assert exc_info.value.product_id == 103
        assert note_store.list_by_owner(USER_ID) == []

    def test_orders_are_private(self, order_service, sample_products, sample_order_lines):
        order_id = order_service.create_order(USER_ID, sample_order_lines)

        assert order_service.get_order_by_id(order_id, 2) is None
        assert order_service.get_all_orders(2) == []

    def test_get_all_orders_mixed_storage(self, order_service, note_store, sample_products, sample_order_lines):
        """测试 2 个有效订单和 1 条损坏 JSON 混在一起时返回 2 个订单"""
        first = order_service.create_order(USER_ID, sample_order_lines)
        note_store.create(USER_ID, "Corrupt", '{"order_items": [{"productId": 1}], "total_amount": ')
        second = order_service.create_order(USER_ID, [{"productId": 102, "quantity": 4}])

        orders = order_service.get_all_orders(USER_ID)

        assert [order.order_id for order in orders] == [first, second]
        assert orders[1].total_amount == Decimal("12.00")

    def test_admin_total_counts_flagged_rows(self, order_service, note_store, sample_products, sample_order_lines):
        """结构像订单但明细不完整的笔记计入 total，但不出现在列表中"""
        order_id = order_service.create_order(USER_ID, sample_order_lines)
        note_store.create(USER_ID, "Broken", '{"order_items": [{"productId": 1}], "total_amount": 10}')
        note_store.create(USER_ID, "Plain", "text")

        orders, total = order_service.admin_get_all_orders(limit=20, offset=0)

        assert [order.order_id for order in orders] == [order_id]
        assert total == 2

    def test_status_update_persists(self, order_service, sample_products, sample_order_lines):
        order_id = order_service.create_order(USER_ID, sample_order_lines)

        order_service.admin_update_order_status(order_id, "IN_PROGRESS")

        order = order_service.get_order_by_id(order_id, USER_ID)
        assert order.status == OrderStatus.IN_PROGRESS
        assert order.updated_at is not None
        assert order.total_amount == Decimal("33.00")

    def test_snapshot_survives_price_change(self, order_service, db_session, sample_products, sample_order_lines):
        """测试已下订单保存的是下单时的价格快照"""
        order_id = order_service.create_order(USER_ID, sample_order_lines)
        sample_products[0].price = Decimal("99.00")
        db_session.commit()

        order = order_service.get_order_by_id(order_id, USER_ID)
        assert order.order_items[0].price == Decimal("15.00")
        assert order.total_amount == Decimal("33.00")

    def test_order_guard_scenario(self, order_service, note_service, sample_products, sample_order_lines):
        """测试订单不能通过笔记接口修改或删除，只能通过订单接口删除"""
        order_id = order_service.create_order(USER_ID, sample_order_lines)

        with pytest.raises(Forbidden):
            note_service.update_note(order_id, USER_ID, "Edited", "edited content")
        with pytest.raises(Forbidden):
            note_service.delete_note(order_id, USER_ID)

        order_service.delete_order(order_id, USER_ID)

        assert order_service.get_order_by_id(order_id, USER_ID) is None
