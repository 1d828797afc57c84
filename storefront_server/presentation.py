"""Text rendering of catalog, cart and checkout state."""

import math
from decimal import Decimal
from typing import Optional

from .models import Cart, CartTotals, OrderConfirmation, Product

CATEGORY_CONFIG: dict[str, dict[str, str]] = {
    "electronics": {
        "icon": "📱",
        "description": "Latest gadgets, smartphones, laptops and tech accessories",
    },
    "jewelery": {
        "icon": "💎",
        "description": "Beautiful jewelry, rings, necklaces and precious accessories",
    },
    "men's clothing": {
        "icon": "👔",
        "description": "Stylish clothing, shirts, pants and fashion for men",
    },
    "women's clothing": {
        "icon": "👗",
        "description": "Fashion-forward clothing, dresses and accessories for women",
    },
}
DEFAULT_CATEGORY = {"icon": "🛍️", "description": "Browse our collection"}

FETCH_ERROR_TEXT = (
    "❌ Could not load products from the store.\n"
    "Please check your connection and try again."
)


def format_price(amount: Decimal) -> str:
    return f"${amount:.2f}"


def short_title(title: str, limit: int = 30) -> str:
    return title if len(title) <= limit else f"{title[:limit]}..."


def render_stars(rate: Decimal) -> str:
    """Five-star rating: full stars, an optional half star, then empty stars."""
    value = float(rate)
    full = math.floor(value)
    half = value % 1 != 0
    empty = 5 - math.ceil(value)
    return "★" * full + ("½" if half else "") + "☆" * empty


def category_info(category: str) -> dict[str, str]:
    return CATEGORY_CONFIG.get(category, DEFAULT_CATEGORY)


def render_category_header(category: str, product_count: int) -> str:
    info = category_info(category)
    return (
        f"{info['icon']} {category[:1].upper()}{category[1:]}\n"
        f"{info['description']}\n"
        f"{product_count} product(s)"
    )


def render_categories(categories: list[str], counts: dict[str, int]) -> str:
    if not categories:
        return "No categories available"

    result_lines = [f"Found {len(categories)} categor{'y' if len(categories) == 1 else 'ies'}:\n"]
    for category in categories:
        info = category_info(category)
        result_lines.append(f"{info['icon']} {category} ({counts.get(category, 0)} products)")
        result_lines.append(f"   {info['description']}")
    return "\n".join(result_lines)


def render_product(product: Product) -> str:
    """Detailed view of one product."""
    result_lines = [
        product.title,
        f"   ID: {product.id}",
        f"   Price: {format_price(product.price)}",
        f"   Category: {product.category}",
    ]
    if product.rating:
        result_lines.append(
            f"   Rating: {render_stars(product.rating.rate)} {product.rating.rate} ({product.rating.count} reviews)"
        )
    if product.description:
        result_lines.append(f"   Description: {product.description}")
    if product.image:
        result_lines.append(f"   Image: {product.image}")
    return "\n".join(result_lines)


def render_product_list(products: list[Product], summary: Optional[str] = None) -> str:
    if not products:
        return "No products match your filters"

    result_lines = [summary or f"Found {len(products)} product(s):"]
    for i, product in enumerate(products, 1):
        result_lines.append(f"\n{i}. {product.title}")
        result_lines.append(f"   ID: {product.id}")
        result_lines.append(f"   Price: {format_price(product.price)}")
        if product.rating:
            result_lines.append(f"   Rating: {render_stars(product.rating.rate)} ({product.rating.count})")
    return "\n".join(result_lines)


def render_featured(product: Optional[Product]) -> str:
    if product is None:
        return "No products available"
    return f"⭐ Featured product\n\n{render_product(product)}"


def render_badge(count: int) -> str:
    """Cart badge shown next to cart output."""
    return f"🛒 {count} item(s)"


def render_added(title: str, count: int) -> str:
    return f'✅ Added "{short_title(title)}" to cart!\nCart: {render_badge(count)}'


def _render_totals(totals: CartTotals) -> list[str]:
    result_lines = [f"Subtotal: {format_price(totals.subtotal)}"]
    if totals.shipping is not None:
        shipping = "Free" if totals.free_shipping else format_price(totals.shipping)
        result_lines.append(f"Shipping: {shipping}")
    result_lines.append(f"Tax (8%): {format_price(totals.tax)}")
    result_lines.append(f"Total: {format_price(totals.total)}")
    return result_lines


def render_cart(cart: Cart) -> str:
    """Cart page: lines with quantities and line totals, then totals without shipping."""
    if cart.is_empty:
        return "Your cart is empty"

    result_lines = [f"Shopping Cart ({cart.item_count} items):\n"]
    for line in cart.lines:
        result_lines.append(f"  - [{line.id}] {line.title}")
        result_lines.append(
            f"    {line.quantity} x {format_price(line.price)} = {format_price(line.line_total)}"
        )
    result_lines.append("")
    result_lines.extend(_render_totals(cart.totals))
    return "\n".join(result_lines)


def render_order_summary(cart: Cart) -> str:
    """Checkout page summary: line items plus subtotal, shipping, tax and total."""
    if cart.is_empty:
        return "Your cart is empty, nothing to check out"

    result_lines = ["Order Summary:\n"]
    for line in cart.lines:
        result_lines.append(
            f"  {short_title(line.title)} x{line.quantity}  {format_price(line.line_total)}"
        )
    result_lines.append("")
    result_lines.extend(_render_totals(cart.totals))
    return "\n".join(result_lines)


def render_order_confirmation(confirmation: OrderConfirmation) -> str:
    result_lines = [
        f"✅ Order {confirmation.order_number} placed successfully!",
        f"Thank you, {confirmation.customer_name}. A confirmation will be sent to {confirmation.email}.",
        f"Paid with card ending in {confirmation.card_last4}",
        "",
    ]
    result_lines.extend(_render_totals(confirmation.totals))
    return "\n".join(result_lines)
