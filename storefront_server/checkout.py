"""Simulated checkout flow. No payment is processed."""

import logging
import re
import uuid
from datetime import datetime

from .cart import CartStore
from .exceptions import CheckoutError
from .models import Cart, CheckoutForm, OrderConfirmation

logger = logging.getLogger(__name__)


def format_card_number(value: str) -> str:
    """Keep digits only and group them in blocks of four."""
    digits = re.sub(r"\D", "", value)
    return " ".join(digits[i:i + 4] for i in range(0, len(digits), 4))


def format_expiry(value: str) -> str:
    """Format raw expiry input as MM/YY."""
    digits = re.sub(r"\D", "", value)
    if len(digits) >= 2:
        return f"{digits[:2]}/{digits[2:4]}"
    return digits


def format_cvv(value: str) -> str:
    return re.sub(r"\D", "", value)


def validate_form(form: CheckoutForm) -> list[str]:
    """Return a list of problems with the checkout form, empty if it is usable."""
    errors = []

    card_digits = re.sub(r"\D", "", form.card_number)
    if not 12 <= len(card_digits) <= 19:
        errors.append("Card number must have between 12 and 19 digits")

    expiry = format_expiry(form.expiry)
    match = re.fullmatch(r"(\d{2})/(\d{2})", expiry)
    if not match or not 1 <= int(match.group(1)) <= 12:
        errors.append("Expiry must be a valid MM/YY date")

    if not re.fullmatch(r"\d{3,4}", format_cvv(form.cvv)):
        errors.append("CVV must be 3 or 4 digits")

    if "@" not in form.email:
        errors.append("Email address is invalid")

    return errors


def order_summary(store: CartStore) -> Cart:
    """Cart snapshot with shipping included, as shown on the checkout page."""
    return store.snapshot(include_shipping=True)


def place_order(store: CartStore, form: CheckoutForm) -> OrderConfirmation:
    """
    Place a simulated order and empty the cart.

    Raises:
        CheckoutError: If the cart is empty or the form is invalid
    """
    summary = order_summary(store)
    if summary.is_empty:
        raise CheckoutError("Cart is empty")

    errors = validate_form(form)
    if errors:
        raise CheckoutError("; ".join(errors))

    card_digits = re.sub(r"\D", "", form.card_number)
    confirmation = OrderConfirmation(
        order_number=uuid.uuid4().hex[:10].upper(),
        created_at=datetime.now(),
        customer_name=form.name,
        email=form.email,
        lines=summary.lines,
        totals=summary.totals,
        card_last4=card_digits[-4:],
    )

    store.clear()
    logger.info(f"Order {confirmation.order_number} placed, total {confirmation.totals.total}")
    return confirmation
