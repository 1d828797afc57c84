"""Data models for storefront entities."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_serializer, field_validator

CENT = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    """Round a currency amount half-up to whole cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Convert an API/JSON number to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Rating(BaseModel):
    """Aggregated customer rating of a product."""

    rate: Decimal = Field(default=Decimal("0"), ge=0, le=5, description="Average rating (0-5)")
    count: int = Field(default=0, ge=0, description="Number of ratings")

    @field_validator("rate", mode="before")
    @classmethod
    def _parse_rate(cls, value: Any) -> Decimal:
        return to_decimal(value)


class Product(BaseModel):
    """Represents a product from the catalog API."""

    id: int = Field(description="Product ID")
    title: str = Field(description="Product title")
    price: Decimal = Field(ge=0, description="Product price")
    image: str = Field(default="", description="Product image URL")
    description: str = Field(default="", description="Product description")
    category: str = Field(default="", description="Category name")
    rating: Optional[Rating] = Field(None, description="Customer rating")

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Decimal:
        return to_decimal(value)

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> str:
        return value or ""

    @property
    def rating_rate(self) -> Decimal:
        """Rating used for sorting, missing ratings count as zero."""
        return self.rating.rate if self.rating else Decimal("0")


class CategorySummary(BaseModel):
    """A category with its product count and thumbnail."""

    name: str
    product_count: int = Field(ge=0, description="Products in the whole store with this category")
    image: str = Field(description="Thumbnail, the first product image of the category")


class CartLine(BaseModel):
    """One product entry in the cart with an aggregated quantity."""

    id: int
    title: str
    price: Decimal = Field(ge=0, description="Unit price when the product was added")
    image: str = ""
    quantity: int = Field(
        gt=0,
        validation_alias=AliasChoices("quantity", "qty"),
        description="Quantity of the product",
    )

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Decimal:
        return to_decimal(value)

    @field_serializer("price")
    def _serialize_price(self, value: Decimal) -> float:
        """
        Write the unit price as a JSON number, the layout of persisted carts.

        A float holds about 15 significant digits, which is exact for cent
        prices. Decimals with more digits than that are rounded on save.
        """
        return float(value)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class CartTotals(BaseModel):
    """Derived cart amounts, rounded to cents."""

    subtotal: Decimal = Decimal("0.00")
    tax: Decimal = Decimal("0.00")
    shipping: Optional[Decimal] = Field(None, description="Shipping fee, only set in checkout context")
    total: Decimal = Decimal("0.00")

    @property
    def free_shipping(self) -> bool:
        return self.shipping is not None and self.shipping == 0


class Cart(BaseModel):
    """Snapshot of the shopping cart."""

    lines: list[CartLine] = Field(default_factory=list, description="Cart lines in insertion order")
    item_count: int = Field(default=0, description="Total number of items")
    totals: CartTotals = Field(default_factory=CartTotals)

    @property
    def is_empty(self) -> bool:
        return not self.lines


class PriceBracket(str, Enum):
    """Price ranges offered by the product filter."""

    ALL = "all"
    UNDER_25 = "0-25"
    FROM_25_TO_50 = "25-50"
    FROM_50_TO_100 = "50-100"
    OVER_100 = "100+"


class SortKey(str, Enum):
    """Product list orderings."""

    DEFAULT = "default"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    RATING = "rating"
    NAME = "name"


class FilterState(BaseModel):
    """Page-local product filter settings."""

    price_bracket: PriceBracket = PriceBracket.ALL
    search_term: str = ""
    sort_key: SortKey = SortKey.DEFAULT


class CheckoutForm(BaseModel):
    """Customer details submitted on the checkout page."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    address: str = Field(min_length=1)
    card_number: str = Field(description="Card number, spaces allowed")
    expiry: str = Field(description="Card expiry as MM/YY")
    cvv: str


class OrderConfirmation(BaseModel):
    """Result of a simulated order."""

    order_number: str
    created_at: datetime
    customer_name: str
    email: str
    lines: list[CartLine] = Field(default_factory=list)
    totals: CartTotals
    card_last4: str


class Settings(BaseModel):
    """Runtime configuration, read from the environment."""

    api_url: str = "https://fakestoreapi.com"
    cart_file: Optional[str] = None
    timeout: float = 30.0
