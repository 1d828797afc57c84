"""Tests for text rendering."""

from decimal import Decimal

from storefront_server import presentation
from storefront_server.cart import CartStore
from storefront_server.models import Product
from storefront_server.storage import MemoryStorage


def make_store() -> CartStore:
    store = CartStore(MemoryStorage())
    store.load()
    return store


class TestStars:
    def test_whole_rating(self):
        assert presentation.render_stars(Decimal("4")) == "★★★★☆"

    def test_half_rating(self):
        assert presentation.render_stars(Decimal("3.9")) == "★★★½☆"

    def test_zero_rating(self):
        assert presentation.render_stars(Decimal("0")) == "☆☆☆☆☆"


class TestCartRendering:
    def test_empty_cart(self):
        assert presentation.render_cart(make_store().snapshot()) == "Your cart is empty"

    def test_cart_shows_lines_and_totals_without_shipping(self):
        store = make_store()
        store.add(1, "Widget", 9.99, "img.png")
        store.add(1, "Widget", 9.99, "img.png")

        text = presentation.render_cart(store.snapshot())

        assert "Shopping Cart (2 items)" in text
        assert "2 x $9.99 = $19.98" in text
        assert "Subtotal: $19.98" in text
        assert "Tax (8%): $1.60" in text
        assert "Total: $21.58" in text
        assert "Shipping" not in text

    def test_order_summary_shows_free_shipping(self):
        store = make_store()
        store.add(1, "Expensive thing", 150, "")

        text = presentation.render_order_summary(store.snapshot(include_shipping=True))

        assert "Shipping: Free" in text
        assert "Total: $162.00" in text


class TestProductRendering:
    def test_long_titles_are_shortened_in_toast(self):
        text = presentation.render_added("A" * 40, 3)

        assert f'"{"A" * 30}..."' in text
        assert text.endswith("Cart: 🛒 3 item(s)")

    def test_product_list_with_summary(self):
        product = Product(id=1, title="Mug", price=Decimal("7.5"), rating={"rate": 4, "count": 2})

        text = presentation.render_product_list([product], "Showing 1 of 4 products")

        assert text.startswith("Showing 1 of 4 products")
        assert "Price: $7.50" in text

    def test_empty_product_list(self):
        assert presentation.render_product_list([]) == "No products match your filters"

    def test_categories_use_known_icons(self):
        text = presentation.render_categories(["electronics", "garden"], {"electronics": 2})

        assert "📱 electronics (2 products)" in text
        assert "🛍️ garden (0 products)" in text

    def test_featured_product(self):
        product = Product(id=3, title="Mug", price=Decimal("7.5"))

        text = presentation.render_featured(product)

        assert text.startswith("⭐ Featured product")
        assert "ID: 3" in text

    def test_no_featured_product(self):
        assert presentation.render_featured(None) == "No products available"

    def test_badge(self):
        assert presentation.render_badge(4) == "🛒 4 item(s)"
