"""Shopping cart state, persisted to a key-value storage slot."""

import json
import logging
from decimal import Decimal
from typing import Any, Callable, Optional

from pydantic import TypeAdapter, ValidationError

from .exceptions import NotFoundError, StorageDecodeError
from .models import Cart, CartLine, CartTotals, round2, to_decimal
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

CART_KEY = "cart"
TAX_RATE = Decimal("0.08")
SHIPPING_FEE = Decimal("9.99")
FREE_SHIPPING_THRESHOLD = Decimal("100")

_lines_adapter = TypeAdapter(list[CartLine])


def decode_snapshot(raw: Optional[str]) -> list[CartLine]:
    """
    Decode a persisted cart snapshot.

    Raises:
        StorageDecodeError: If the snapshot is absent or cannot be decoded
    """
    if raw is None:
        raise StorageDecodeError("No cart snapshot stored")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageDecodeError(f"Cart snapshot is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise StorageDecodeError(f"Cart snapshot must be a list, got {type(data).__name__}")

    if any(isinstance(item, dict) and "qty" in item and "quantity" not in item for item in data):
        logger.warning("Cart snapshot uses legacy 'qty' field, it will be saved as 'quantity'")

    try:
        lines = _lines_adapter.validate_python(data)
    except ValidationError as e:
        raise StorageDecodeError(f"Cart snapshot has invalid lines: {e}") from e

    # Restore one line per product id
    merged: dict[int, CartLine] = {}
    for line in lines:
        if line.id in merged:
            merged[line.id].quantity += line.quantity
        else:
            merged[line.id] = line
    return list(merged.values())


def encode_snapshot(lines: list[CartLine]) -> str:
    """Serialize cart lines to the persisted JSON layout."""
    return json.dumps([line.model_dump() for line in lines])


def compute_totals(lines: list[CartLine], include_shipping: bool = False) -> CartTotals:
    """
    Compute cart amounts.

    Amounts accumulate in full precision and are rounded to cents only in
    the result. Shipping is free above the threshold and only applies in the
    checkout context.
    """
    subtotal = sum((line.line_total for line in lines), Decimal("0"))
    tax = subtotal * TAX_RATE
    total = subtotal + tax

    shipping: Optional[Decimal] = None
    if include_shipping:
        shipping = Decimal("0") if subtotal > FREE_SHIPPING_THRESHOLD else SHIPPING_FEE
        total += shipping

    return CartTotals(
        subtotal=round2(subtotal),
        tax=round2(tax),
        shipping=round2(shipping) if shipping is not None else None,
        total=round2(total),
    )


class CartStore:
    """Owns the cart lines and keeps the persisted snapshot in sync."""

    def __init__(self, storage: KeyValueStorage, key: str = CART_KEY) -> None:
        """
        Initialize the cart store.

        Args:
            storage: Key-value storage holding the cart snapshot
            key: Storage key of the snapshot
        """
        self.storage = storage
        self.key = key
        self._lines: dict[int, CartLine] = {}
        self._listeners: list[Callable[[int], None]] = []

    def load(self) -> Cart:
        """Rehydrate the cart from storage; a missing or corrupt snapshot gives an empty cart."""
        try:
            lines = decode_snapshot(self.storage.get(self.key))
        except StorageDecodeError as e:
            logger.warning(f"Starting with an empty cart: {e}")
            lines = []
        except Exception as e:
            logger.error(f"Could not read cart storage, starting empty: {e}", exc_info=True)
            lines = []

        self._lines = {line.id: line for line in lines}
        logger.info(f"Loaded cart with {len(self._lines)} line(s)")
        self._notify()
        return self.snapshot()

    def subscribe(self, callback: Callable[[int], None]) -> None:
        """Register a listener that receives the item count after every change."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        count = self.item_count()
        for callback in self._listeners:
            callback(count)

    def _commit(self, lines: dict[int, CartLine]) -> None:
        """Persist a new set of lines, then make it current.

        The in-memory cart is only replaced once the write succeeded, so a
        storage error leaves both unchanged.
        """
        self.storage.set(self.key, encode_snapshot(list(lines.values())))
        self._lines = lines
        self._notify()

    def add(self, product_id: int, title: str, price: Any, image: str = "") -> int:
        """
        Add one unit of a product.

        Returns:
            Total number of items in the cart
        """
        lines = dict(self._lines)
        line = lines.get(product_id)
        if line is not None:
            lines[product_id] = line.model_copy(update={"quantity": line.quantity + 1})
        else:
            lines[product_id] = CartLine(
                id=product_id,
                title=title,
                price=to_decimal(price),
                image=image or "",
                quantity=1,
            )
        self._commit(lines)
        logger.info(f"Added product {product_id} to cart")
        return self.item_count()

    def change_quantity(self, product_id: int, delta: int) -> Cart:
        """Apply a quantity delta; lines reaching zero are removed. Unknown ids are ignored."""
        line = self._lines.get(product_id)
        if line is None:
            logger.debug(f"Product {product_id} not in cart, nothing to update")
            return self.snapshot()

        lines = dict(self._lines)
        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            del lines[product_id]
        else:
            lines[product_id] = line.model_copy(update={"quantity": new_quantity})
        self._commit(lines)

        if new_quantity <= 0:
            logger.info(f"Removed product {product_id} from cart")
        else:
            logger.info(f"Product {product_id} quantity is now {new_quantity}")
        return self.snapshot()

    def remove(self, product_id: int) -> Cart:
        """Remove the line for a product if present."""
        removed = product_id in self._lines
        self._commit({line_id: line for line_id, line in self._lines.items() if line_id != product_id})
        if removed:
            logger.info(f"Removed product {product_id} from cart")
        return self.snapshot()

    def clear(self) -> Cart:
        """Empty the cart."""
        self._commit({})
        logger.info("Cart cleared")
        return self.snapshot()

    def get_line(self, product_id: int) -> CartLine:
        line = self._lines.get(product_id)
        if line is None:
            raise NotFoundError("Cart line", product_id)
        return line.model_copy()

    def lines(self) -> list[CartLine]:
        return [line.model_copy() for line in self._lines.values()]

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def totals(self, include_shipping: bool = False) -> CartTotals:
        return compute_totals(list(self._lines.values()), include_shipping=include_shipping)

    def snapshot(self, include_shipping: bool = False) -> Cart:
        """Current cart state for rendering."""
        return Cart(
            lines=self.lines(),
            item_count=self.item_count(),
            totals=self.totals(include_shipping=include_shipping),
        )
