"""Product filtering and sorting."""

import unicodedata
from decimal import Decimal
from typing import Optional, Union

from .models import FilterState, PriceBracket, Product, SortKey

# Bounds are inclusive, so a price equal to a bound matches both neighbours
PRICE_BRACKETS: dict[PriceBracket, tuple[Optional[Decimal], Optional[Decimal]]] = {
    PriceBracket.UNDER_25: (None, Decimal("25")),
    PriceBracket.FROM_25_TO_50: (Decimal("25"), Decimal("50")),
    PriceBracket.FROM_50_TO_100: (Decimal("50"), Decimal("100")),
    PriceBracket.OVER_100: (Decimal("100"), None),
}


def in_price_bracket(product: Product, bracket: PriceBracket) -> bool:
    """Check whether a product's price falls inside a bracket."""
    if bracket == PriceBracket.ALL:
        return True
    low, high = PRICE_BRACKETS[bracket]
    if low is not None and product.price < low:
        return False
    if high is not None and product.price > high:
        return False
    return True


def matches_search(product: Product, term: str) -> bool:
    """Case-insensitive substring match on title or description."""
    if not term:
        return True
    needle = term.lower()
    return needle in product.title.lower() or needle in product.description.lower()


def collation_key(text: str) -> str:
    """Sort key that ignores case and accents, so 'émile' sorts next to 'Emile'."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def sort_products(products: list[Product], sort_key: SortKey) -> list[Product]:
    """Return products in the requested order. Sorting is stable for every key."""
    if sort_key == SortKey.PRICE_LOW:
        return sorted(products, key=lambda p: p.price)
    if sort_key == SortKey.PRICE_HIGH:
        return sorted(products, key=lambda p: p.price, reverse=True)
    if sort_key == SortKey.RATING:
        return sorted(products, key=lambda p: p.rating_rate, reverse=True)
    if sort_key == SortKey.NAME:
        return sorted(products, key=lambda p: collation_key(p.title))
    return list(products)


def apply_filters(products: list[Product], state: FilterState) -> list[Product]:
    """
    Derive the visible product list from a catalog and filter settings.

    Args:
        products: Catalog products in their original order
        state: Price bracket, search term and sort key to apply

    Returns:
        New list; the input is left untouched
    """
    filtered = [
        product
        for product in products
        if in_price_bracket(product, state.price_bracket)
        and matches_search(product, state.search_term)
    ]
    return sort_products(filtered, state.sort_key)


class FilterSortEngine:
    """Holds the filter settings for one product listing."""

    def __init__(self, products: Optional[list[Product]] = None) -> None:
        self.products: list[Product] = list(products or [])
        self.state = FilterState()

    def set_products(self, products: list[Product]) -> list[Product]:
        """Replace the catalog the engine filters; current settings are kept."""
        self.products = list(products)
        return self.filtered_products()

    def set_price_bracket(self, bracket: Union[PriceBracket, str]) -> list[Product]:
        self.state.price_bracket = PriceBracket(bracket)
        return self.filtered_products()

    def set_search_term(self, term: str) -> list[Product]:
        self.state.search_term = term or ""
        return self.filtered_products()

    def set_sort(self, sort_key: Union[SortKey, str]) -> list[Product]:
        self.state.sort_key = SortKey(sort_key)
        return self.filtered_products()

    def update(
        self,
        price_bracket: Union[PriceBracket, str, None] = None,
        search_term: Optional[str] = None,
        sort_key: Union[SortKey, str, None] = None,
    ) -> list[Product]:
        """Change any combination of settings at once."""
        if price_bracket is not None:
            self.state.price_bracket = PriceBracket(price_bracket)
        if search_term is not None:
            self.state.search_term = search_term
        if sort_key is not None:
            self.state.sort_key = SortKey(sort_key)
        return self.filtered_products()

    def clear_filters(self) -> list[Product]:
        """Reset every setting to its default."""
        self.state = FilterState()
        return self.filtered_products()

    def filtered_products(self) -> list[Product]:
        return apply_filters(self.products, self.state)

    def results_summary(self) -> str:
        return f"Showing {len(self.filtered_products())} of {len(self.products)} products"
