"""Tests for order placement with stock reservation."""

import json

import pytest
from sqlalchemy.exc import SQLAlchemyError

from database import SessionLocal
from models.log import Log
from models.order import Order, OrderStatus
from models.product import Product
from schemas.order import PlaceOrderPayload
from utils import checkout
from utils.checkout import CheckoutError, parse_items, place_order


def _payload(items, **overrides):
    data = {
        "orderNumber": "ORD-1700000000000",
        "customerName": "Arta Krasniqi",
        "customerEmail": "arta@example.com",
        "date": "2026-10-18T09:30:00.000Z",
        "items": json.dumps(items),
        "address": "Rruga Nënë Tereza 12, Prishtinë",
    }
    data.update(overrides)
    return PlaceOrderPayload(**data)


def _stock(product_id):
    session = SessionLocal()
    try:
        return session.get(Product, product_id).stock
    finally:
        session.close()


def _order_count():
    session = SessionLocal()
    try:
        return session.query(Order).count()
    finally:
        session.close()


class RecordingNotifier:
    def __init__(self):
        self.orders = []

    def send_order_notifications(self, order):
        self.orders.append(order.order_number)


class BrokenNotifier:
    def send_order_notifications(self, order):
        raise RuntimeError("mail API unreachable")


class TestParseItems:
    def test_merges_duplicate_products(self):
        items = parse_items([
            {"productId": "a", "quantity": 2},
            {"productId": "b", "quantity": 1},
            {"productId": "a", "quantity": 3},
        ])
        assert items == [("a", 5), ("b", 1)]

    def test_accepts_json_string_and_client_cart_shape(self):
        raw = json.dumps([{"product": {"id": "a", "name": "PLA"}, "quantity": 2}])
        assert parse_items(raw) == [("a", 2)]

    def test_accepts_snake_case_and_integral_float(self):
        assert parse_items([{"product_id": "a", "quantity": 2.0}]) == [("a", 2)]

    @pytest.mark.parametrize("raw", [None, "", "[]", "not json", [], {"productId": "a"}])
    def test_empty_cart(self, raw):
        with pytest.raises(CheckoutError) as exc:
            parse_items(raw)
        assert exc.value.kind == CheckoutError.EMPTY_CART
        assert exc.value.message == "Shporta është bosh."

    @pytest.mark.parametrize("entry", [
        {"productId": "a", "quantity": 0},
        {"productId": "a", "quantity": -2},
        {"productId": "a", "quantity": 1.5},
        {"productId": "a", "quantity": True},
        {"productId": "a", "quantity": "3"},
        {"productId": "a"},
        {"quantity": 1},
        "a",
    ])
    def test_invalid_entries(self, entry):
        with pytest.raises(CheckoutError) as exc:
            parse_items([{"productId": "b", "quantity": 1}, entry])
        assert exc.value.kind == CheckoutError.INVALID_QUANTITY
        assert exc.value.message == "Sasi e pavlefshme."


class TestPlaceOrder:
    def test_success_reserves_stock_and_computes_total(self, db_session, make_product):
        p = make_product(name="PLA Black", price=5.0, stock=10)

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 3}]))

        assert result.ok is True
        assert result.order_id
        assert result.message == "OK"
        assert _stock(p.id) == 7

        order = db_session.get(Order, result.order_id)
        assert order.total == 15.0
        assert order.status == OrderStatus.CREATED
        assert order.order_number == "ORD-1700000000000"
        assert order.items == [{
            "product_id": p.id, "quantity": 3, "name": "PLA Black", "type": "PLA",
            "color": "Black", "hex": "#000000", "weight": "1kg", "image_url": None,
            "unit_price": 5.0, "line_total": 15.0,
        }]
        assert order.address == "Rruga Nënë Tereza 12, Prishtinë"

    def test_client_total_is_ignored(self, db_session, make_product):
        p = make_product(price=7.5, stock=4)

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 2}], total=0.01))

        assert result.ok
        assert db_session.get(Order, result.order_id).total == 15.0

    def test_multiple_products(self, db_session, make_product):
        a = make_product(name="PLA Black", price=19.99, stock=5)
        b = make_product(name="PETG Blue", price=22.5, stock=3)

        result = place_order(db_session, _payload([
            {"productId": a.id, "quantity": 2},
            {"productId": b.id, "quantity": 3},
        ]))

        assert result.ok
        assert _stock(a.id) == 3
        assert _stock(b.id) == 0
        assert db_session.get(Order, result.order_id).total == 107.48

    def test_duplicate_lines_behave_like_one_line(self, db_session, make_product):
        p = make_product(price=5.0, stock=10)
        q = make_product(name="PLA White", price=5.0, stock=10)

        split = place_order(db_session, _payload([
            {"productId": p.id, "quantity": 2},
            {"productId": p.id, "quantity": 3},
        ]))
        single = place_order(db_session, _payload([{"productId": q.id, "quantity": 5}]))

        assert split.ok and single.ok
        assert _stock(p.id) == _stock(q.id) == 5
        split_order = db_session.get(Order, split.order_id)
        single_order = db_session.get(Order, single.order_id)
        assert split_order.total == single_order.total == 25.0
        assert len(split_order.items) == 1
        assert split_order.items[0]["quantity"] == 5

    def test_structured_address_is_stored_as_object(self, db_session, make_product):
        p = make_product(stock=2)
        address = {
            "id": "addr-1", "first_name": "Arta", "last_name": "Krasniqi", "email": "arta@example.com",
            "country": "Kosovë", "city": "Tjetër", "custom_city": "Drenas",
            "address": "Rruga e Dëshmorëve 4", "postal_code": "13000", "phone": "+38344111222",
            "is_default": True,
        }

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 1}], address=json.dumps(address)))

        assert result.ok
        stored = db_session.get(Order, result.order_id).address
        assert stored["custom_city"] == "Drenas"
        assert stored["postal_code"] == "13000"

    def test_camel_case_address_keeps_every_field(self, db_session, make_product):
        p = make_product(stock=2)
        address = {
            "id": "addr-2", "firstName": "Arta", "lastName": "Krasniqi", "email": "arta@example.com",
            "country": "Kosovë", "city": "Tjetër", "customCity": "Drenas",
            "address": "Rruga 4", "postalCode": "13000", "phone": "+383", "isDefault": True,
        }

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 1}], address=json.dumps(address)))

        assert result.ok
        stored = db_session.get(Order, result.order_id).address
        assert stored["first_name"] == "Arta"
        assert stored["last_name"] == "Krasniqi"
        assert stored["custom_city"] == "Drenas"
        assert stored["postal_code"] == "13000"
        assert stored["is_default"] is True

    def test_generates_order_number_and_date(self, db_session, make_product):
        p = make_product(stock=2)

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 1}], orderNumber=None, date=None))

        order = db_session.get(Order, result.order_id)
        assert order.order_number.startswith("ORD-")
        assert order.date

    def test_insufficient_stock_changes_nothing(self, db_session, make_product):
        q = make_product(name="TPU Red", stock=0)

        result = place_order(db_session, _payload([{"productId": q.id, "quantity": 1}]))

        assert result.ok is False
        assert result.order_id == ""
        assert "TPU Red" in result.message
        assert "tejkalon stokun" in result.message
        assert _order_count() == 0
        assert _stock(q.id) == 0

    def test_insufficient_stock_on_later_line_leaves_earlier_stock(self, db_session, make_product):
        a = make_product(name="PLA Black", stock=5)
        b = make_product(name="ABS Grey", stock=1)

        result = place_order(db_session, _payload([
            {"productId": a.id, "quantity": 2},
            {"productId": b.id, "quantity": 2},
        ]))

        assert not result.ok
        assert result.message == 'Sasia e kërkuar për "ABS Grey" tejkalon stokun.'
        assert _stock(a.id) == 5
        assert _stock(b.id) == 1
        assert _order_count() == 0

    def test_unknown_product(self, db_session):
        result = place_order(db_session, _payload([{"productId": "missing", "quantity": 1}]))

        assert result.ok is False
        assert result.message == "Produkti nuk u gjet."

    def test_empty_cart(self, db_session):
        result = place_order(db_session, _payload([]))

        assert result.ok is False
        assert result.message == "Shporta është bosh."

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_invalid_quantity_fails_before_store_access(self, db_session, make_product, monkeypatch, quantity):
        p = make_product(stock=10)

        def _must_not_load(db, items):
            raise AssertionError("store accessed")

        monkeypatch.setattr(checkout, "load_reservations", _must_not_load)

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": quantity}]))

        assert result.ok is False
        assert result.message == "Sasi e pavlefshme."
        assert _stock(p.id) == 10

    def test_order_insert_failure_reserves_nothing(self, db_session, make_product, monkeypatch):
        p = make_product(stock=10)

        def _failing_flush(*args, **kwargs):
            raise SQLAlchemyError("insert rejected")

        monkeypatch.setattr(db_session, "flush", _failing_flush)

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 2}]))

        assert result.ok is False
        assert result.message == "Porosia nuk u krijua."
        assert _stock(p.id) == 10
        assert _order_count() == 0

    def test_unexpected_error_becomes_result(self, db_session, make_product, monkeypatch):
        p = make_product(stock=10)

        def _boom(db, items):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(checkout, "load_reservations", _boom)

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 1}]))

        assert result.ok is False
        assert result.message == "connection reset"

    def test_writes_audit_entry(self, db_session, make_product):
        p = make_product(stock=3)

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 1}]), actor_email="arta@example.com")

        entry = db_session.query(Log).filter(Log.action == "ORDER_PLACE").one()
        assert entry.actor_email == "arta@example.com"
        assert entry.meta["order_id"] == result.order_id


class TestConcurrentCheckout:
    def test_stock_of_one_sells_once(self, db_session, make_product, monkeypatch):
        p = make_product(name="ASA White", stock=1)
        original = checkout.load_reservations
        raced = []
        competing = []

        def _racing_load(db, items):
            reservations = original(db, items)
            if not raced:
                raced.append(True)
                # Another customer completes checkout between our stock read and our update
                other = SessionLocal()
                try:
                    competing.append(place_order(other, _payload([{"productId": p.id, "quantity": 1}])))
                finally:
                    other.close()
            return reservations

        monkeypatch.setattr(checkout, "load_reservations", _racing_load)

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 1}]))

        assert competing[0].ok is True
        assert result.ok is False
        assert result.message == 'Sasia e produktit "ASA White" ndryshoi gjatë përpunimit. Ju lutem provoni përsëri.'
        assert _stock(p.id) == 0
        assert _order_count() == 1

    def test_stock_update_rejection_rolls_back_order(self, db_session, make_product, monkeypatch):
        a = make_product(name="PLA Black", stock=5)
        b = make_product(name="PETG Blue", stock=5)
        original = checkout.load_reservations

        def _stale_load(db, items):
            reservations = original(db, items)
            # Admin edits the second product's stock after it was read
            other = SessionLocal()
            try:
                other.get(Product, b.id).stock = 4
                other.commit()
            finally:
                other.close()
            return reservations

        monkeypatch.setattr(checkout, "load_reservations", _stale_load)

        result = place_order(db_session, _payload([
            {"productId": a.id, "quantity": 1},
            {"productId": b.id, "quantity": 1},
        ]))

        assert result.ok is False
        assert "ndryshoi" in result.message
        assert _order_count() == 0
        assert _stock(a.id) == 5
        assert _stock(b.id) == 4


class TestNotifications:
    def test_notifier_called_after_success(self, db_session, make_product):
        p = make_product(stock=2)
        notifier = RecordingNotifier()

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 1}]), notifier=notifier)

        assert result.ok
        assert notifier.orders == ["ORD-1700000000000"]

    def test_notifier_not_called_on_failure(self, db_session, make_product):
        p = make_product(stock=0)
        notifier = RecordingNotifier()

        place_order(db_session, _payload([{"productId": p.id, "quantity": 1}]), notifier=notifier)

        assert notifier.orders == []

    def test_notifier_failure_does_not_change_result(self, db_session, make_product):
        p = make_product(stock=2)

        result = place_order(db_session, _payload([{"productId": p.id, "quantity": 1}]), notifier=BrokenNotifier())

        assert result.ok is True
        assert _stock(p.id) == 1
        assert _order_count() == 1
