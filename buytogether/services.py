import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Prefetch
from django.urls import reverse

from .models import Cart, CartItem, Order, OrderItem, ProductVariation, Store
from .pricing import CurrencyFormatter, CurrencyMismatch, Price
from .recommendations import (
    COMPLETED_STATE,
    MIN_ORDER_PRODUCTS,
    LineItem,
    OrderSnapshot,
    SetCount,
    entity_id,
    find_most_frequent_set,
)
from .utils import parse_product_ids

logger = logging.getLogger(__name__)

NO_PRODUCTS_MESSAGE = "No products to display."
MAX_PRODUCTS = 3
DEFAULT_CART_TYPE = "default"


class CartUnavailable(Exception):
    """No cart could be found or created for the caller."""


@dataclass
class CartContext:
    store: Optional[Store] = None
    user: Any = None
    session_key: Optional[str] = None


@dataclass
class ProductEntry:
    id: Any
    url: str
    image: str
    price: str
    title: str


@dataclass
class RecommendationView:
    products: List[ProductEntry] = field(default_factory=list)
    total_price: str = ""
    add_to_cart_url: str = ""
    message: str = ""

    @classmethod
    def empty(cls) -> "RecommendationView":
        return cls(message=NO_PRODUCTS_MESSAGE)

    @property
    def is_empty(self) -> bool:
        return not self.products

    @property
    def product_ids(self) -> List[Any]:
        return [p.id for p in self.products]


@dataclass
class AddToCartResult:
    cart: Optional[Cart] = None
    added: List[Any] = field(default_factory=list)
    skipped: List[Any] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.skipped)


# === ORM-backed collaborators ===

class OrderHistory:
    """Enumerates orders in a given state, oldest first, with their line items."""

    def __init__(self, state: str = COMPLETED_STATE):
        self.state = state

    def completed_orders(self) -> Iterator[OrderSnapshot]:
        items_qs = (
            OrderItem.objects
            .filter(is_active=True)
            .select_related("purchased_entity__product")
            .order_by("id")
        )
        orders = (
            Order.objects
            .filter(state=self.state, is_active=True)
            .order_by("id")
            .prefetch_related(Prefetch("items", queryset=items_qs))
        )
        for order in orders:
            yield OrderSnapshot(
                id=order.pk,
                state=order.state,
                items=tuple(
                    LineItem(purchased_entity=live_variation(oi.purchased_entity), quantity=oi.quantity)
                    for oi in order.items.all()
                ),
            )


def live_variation(variation) -> Optional[ProductVariation]:
    """The variation if it and its product are still active, else None."""
    if variation is None or not variation.is_active or not variation.product.is_active:
        return None
    return variation


class Catalog:
    def load_variation(self, variation_id) -> Optional[ProductVariation]:
        try:
            pk = int(variation_id)
        except (TypeError, ValueError):
            return None
        return (
            ProductVariation.objects
            .filter(pk=pk, is_active=True, product__is_active=True)
            .select_related("product")
            .first()
        )


class CartProvider:
    """
    Carts are keyed by (owner, store, cart type). The owner is the
    authenticated user when there is one, the session key otherwise.
    """

    def _owned(self, cart_type, store, context: CartContext):
        if store is None:
            raise CartUnavailable("No store available.")
        qs = Cart.objects.filter(store=store, cart_type=cart_type)
        if context.user is not None:
            return qs.filter(user=context.user)
        if context.session_key:
            return qs.filter(session_key=context.session_key, user__isnull=True)
        raise CartUnavailable("Missing session key.")

    def get_cart(self, cart_type, store, context: CartContext) -> Optional[Cart]:
        return self._owned(cart_type, store, context).order_by("-updated_at").first()

    def create_cart(self, cart_type, store, context: CartContext) -> Cart:
        self._owned(cart_type, store, context)
        if context.user is not None:
            owner = {"user": context.user, "session_key": None}
        else:
            owner = {"user": None, "session_key": context.session_key}
        try:
            with transaction.atomic():
                return Cart.objects.create(store=store, cart_type=cart_type, **owner)
        except IntegrityError:
            # A concurrent request created the active cart first.
            cart = self.get_cart(cart_type, store, context)
            if cart is None:
                raise
            logger.info("Buy together: reusing concurrently created cart id=%s", cart.pk)
            return cart

    def add_order_item(self, cart: Cart, variation: ProductVariation, quantity: int = 1) -> CartItem:
        return CartItem.objects.create(
            cart=cart,
            purchased_entity=variation,
            quantity=quantity,
            unit_price=variation.price,
            currency_code=variation.currency_code,
            title=variation.product.title,
        )


def default_action_url(product_ids: List[Any]) -> str:
    return reverse(
        "buy-together-add-to-cart",
        kwargs={"product_ids": ",".join(str(pid) for pid in product_ids)},
    )


# === Façade ===

class BuyTogetherService:
    def __init__(
        self,
        order_history,
        catalog,
        carts,
        formatter,
        max_products: int = MAX_PRODUCTS,
        min_order_products: int = MIN_ORDER_PRODUCTS,
        order_state: str = COMPLETED_STATE,
        cart_type: str = DEFAULT_CART_TYPE,
        action_url: Callable[[List[Any]], str] = default_action_url,
        media_url: Callable[[str], str] = str,
    ):
        self.order_history = order_history
        self.catalog = catalog
        self.carts = carts
        self.formatter = formatter
        # The block never lists more than MAX_PRODUCTS; settings may only lower it.
        self.max_products = min(max_products, MAX_PRODUCTS)
        self.min_order_products = min_order_products
        self.order_state = order_state
        self.cart_type = cart_type
        self.action_url = action_url
        self.media_url = media_url

    @classmethod
    def from_settings(cls, **overrides) -> "BuyTogetherService":
        conf = getattr(settings, "BUY_TOGETHER", {})
        state = conf.get("ORDER_STATE", COMPLETED_STATE)
        kwargs = dict(
            order_history=OrderHistory(state=state),
            catalog=Catalog(),
            carts=CartProvider(),
            formatter=CurrencyFormatter(),
            max_products=conf.get("MAX_PRODUCTS", MAX_PRODUCTS),
            min_order_products=conf.get("MIN_ORDER_PRODUCTS", MIN_ORDER_PRODUCTS),
            order_state=state,
            cart_type=conf.get("CART_TYPE", DEFAULT_CART_TYPE),
        )
        kwargs.update(overrides)
        return cls(**kwargs)

    def most_frequent_set(self) -> Optional[SetCount]:
        return find_most_frequent_set(
            self.order_history.completed_orders(),
            min_products=self.min_order_products,
            state=self.order_state,
        )

    def recommend(self) -> RecommendationView:
        return self.build_recommendation(self.most_frequent_set())

    def build_recommendation(self, set_count: Optional[SetCount]) -> RecommendationView:
        if set_count is None:
            return RecommendationView.empty()

        selected = set_count.products[: self.max_products]
        if not selected:
            return RecommendationView.empty()

        entries = []
        total = None
        try:
            for variation in selected:
                price = variation.get_price()
                total = price if total is None else total.add(price)
                entries.append(self._entry(variation, price))
        except CurrencyMismatch as exc:
            logger.warning("Buy together: mixed currencies in set %s (%s)", set_count.signature, exc)
            return RecommendationView.empty()

        ids = [e.id for e in entries]
        return RecommendationView(
            products=entries,
            total_price=self.formatter.format(total.number, total.currency_code),
            add_to_cart_url=self.action_url(ids) if ids else "",
        )

    def _entry(self, variation, price: Price) -> ProductEntry:
        product = variation.product
        image_url = ""
        image = product.primary_image
        if image is not None and image.image:
            image_url = self.media_url(image.image.url)
        return ProductEntry(
            id=entity_id(variation),
            url=product.get_absolute_url(),
            image=image_url,
            price=self.formatter.format(price.number, price.currency_code),
            title=product.title,
        )

    def add_selected_to_cart(self, product_ids, context: CartContext) -> AddToCartResult:
        ids = parse_product_ids(product_ids)
        result = AddToCartResult()
        try:
            with transaction.atomic():
                cart = self.carts.get_cart(self.cart_type, context.store, context)
                if cart is None:
                    cart = self.carts.create_cart(self.cart_type, context.store, context)
                    logger.info("Buy together: created cart id=%s", cart.pk)
                result.cart = cart

                for pid in ids:
                    variation = self.catalog.load_variation(pid)
                    if variation is None:
                        logger.info("Buy together: skipping unknown variation %r", pid)
                        result.skipped.append(pid)
                        continue
                    self.carts.add_order_item(cart, variation, 1)
                    result.added.append(pid)
        except CartUnavailable as exc:
            logger.warning("Buy together: cart unavailable (%s)", exc)
            return AddToCartResult(cart=None, added=[], skipped=list(ids))

        logger.info(
            "Buy together: cart id=%s added=%s skipped=%s",
            result.cart.pk, result.added, result.skipped,
        )
        return result
