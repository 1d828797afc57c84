"""Tests for the simulated checkout."""

from decimal import Decimal

import pytest

from storefront_server.cart import CartStore
from storefront_server.checkout import (
    format_card_number,
    format_cvv,
    format_expiry,
    order_summary,
    place_order,
    validate_form,
)
from storefront_server.exceptions import CheckoutError
from storefront_server.models import CheckoutForm
from storefront_server.storage import MemoryStorage


def make_form(**overrides) -> CheckoutForm:
    data = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "address": "12 Analytical St",
        "card_number": "4242 4242 4242 4242",
        "expiry": "12/30",
        "cvv": "123",
    }
    data.update(overrides)
    return CheckoutForm(**data)


@pytest.fixture
def store(storage: MemoryStorage) -> CartStore:
    cart_store = CartStore(storage)
    cart_store.load()
    return cart_store


class TestInputFormatting:
    """Checkout field formatting."""

    @pytest.mark.parametrize(
        "raw, formatted",
        [
            ("4242424242424242", "4242 4242 4242 4242"),
            ("4242-4242 42", "4242 4242 42"),
            ("", ""),
        ],
    )
    def test_card_number(self, raw, formatted):
        assert format_card_number(raw) == formatted

    @pytest.mark.parametrize("raw, formatted", [("1230", "12/30"), ("1", "1"), ("12/3", "12/3")])
    def test_expiry(self, raw, formatted):
        assert format_expiry(raw) == formatted

    def test_cvv_keeps_digits(self):
        assert format_cvv("1a2b3") == "123"


class TestValidation:
    """Form validation."""

    def test_valid_form_has_no_errors(self):
        assert validate_form(make_form()) == []

    def test_bad_fields_are_reported(self):
        errors = validate_form(make_form(card_number="1234", expiry="13/30", cvv="1", email="nope"))

        assert len(errors) == 4


class TestPlaceOrder:
    """Order placement."""

    def test_summary_includes_shipping(self, store: CartStore):
        store.add(1, "Widget", 9.99, "img.png")

        summary = order_summary(store)

        assert summary.totals.shipping == Decimal("9.99")
        assert summary.totals.total == Decimal("20.78")

    def test_place_order_clears_cart(self, store: CartStore, storage: MemoryStorage):
        store.add(1, "Widget", 60, "")
        store.add(1, "Widget", 60, "")

        confirmation = place_order(store, make_form())

        assert confirmation.totals.subtotal == Decimal("120.00")
        assert confirmation.totals.shipping == Decimal("0.00")
        assert confirmation.totals.total == Decimal("129.60")
        assert confirmation.card_last4 == "4242"
        assert [line.quantity for line in confirmation.lines] == [2]
        assert store.item_count() == 0
        assert storage.get("cart") == "[]"

    def test_empty_cart_cannot_be_checked_out(self, store: CartStore):
        with pytest.raises(CheckoutError, match="empty"):
            place_order(store, make_form())

    def test_invalid_form_keeps_cart(self, store: CartStore):
        store.add(1, "Widget", 9.99, "")

        with pytest.raises(CheckoutError):
            place_order(store, make_form(cvv="x"))

        assert store.item_count() == 1
