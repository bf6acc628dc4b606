# buytogether/recommendations.py
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

"""
"Frequently bought together" co-purchase logic:
- Only completed orders are considered.
- Each order is reduced to the set of products it contains (line items whose
  purchased entity no longer resolves are ignored).
- Orders with fewer than MIN_ORDER_PRODUCTS distinct products do not count.
- Orders are grouped by their sorted product-id signature and counted.
- The most frequent signature wins; on a tie the one seen first wins.
"""

COMPLETED_STATE = "completed"
MIN_ORDER_PRODUCTS = 3
SIGNATURE_SEPARATOR = "_"


@dataclass(frozen=True)
class LineItem:
    purchased_entity: Optional[Any]
    quantity: int = 1


@dataclass(frozen=True)
class OrderSnapshot:
    id: Any
    state: str
    items: Sequence[LineItem] = ()


@dataclass
class SetCount:
    signature: str
    products: List[Any] = field(default_factory=list)
    count: int = 1

    @property
    def product_ids(self) -> List[Any]:
        return [entity_id(p) for p in self.products]


def entity_id(entity: Any) -> Any:
    """Identifier of a purchased entity: Django's ``pk`` when present, else ``id``."""
    pk = getattr(entity, "pk", None)
    if pk is not None:
        return pk
    return getattr(entity, "id", None)


def _sort_key(value: Any):
    # Integers compare numerically and sort before everything else.
    if isinstance(value, int) and not isinstance(value, bool):
        return (0, value, "")
    return (1, 0, str(value))


def product_set_signature(product_ids: Iterable[Any]) -> str:
    distinct = set(product_ids)
    return SIGNATURE_SEPARATOR.join(str(v) for v in sorted(distinct, key=_sort_key))


def resolve_products(order: OrderSnapshot) -> List[Any]:
    """
    Purchased entities of an order in line-item order, first occurrence of
    each product only. Items without a resolvable entity are skipped.
    """
    products = []
    seen = set()
    for item in order.items:
        entity = item.purchased_entity
        if entity is None:
            continue
        pid = entity_id(entity)
        if pid is None or pid in seen:
            continue
        seen.add(pid)
        products.append(entity)
    return products


def count_product_sets(
    orders: Iterable[OrderSnapshot],
    min_products: int = MIN_ORDER_PRODUCTS,
    state: str = COMPLETED_STATE,
) -> Dict[str, SetCount]:
    """Signature -> SetCount, in the order each signature was first seen."""
    set_count: Dict[str, SetCount] = {}
    for order in orders:
        if order.state != state:
            continue

        products = resolve_products(order)
        if len(products) < min_products:
            continue

        key = product_set_signature(entity_id(p) for p in products)
        if key in set_count:
            set_count[key].count += 1
        else:
            set_count[key] = SetCount(signature=key, products=products, count=1)
    return set_count


def find_most_frequent_set(
    orders: Iterable[OrderSnapshot],
    min_products: int = MIN_ORDER_PRODUCTS,
    state: str = COMPLETED_STATE,
) -> Optional[SetCount]:
    set_count = count_product_sets(orders, min_products=min_products, state=state)
    if not set_count:
        return None
    # max() keeps the first of equal counts, i.e. the earliest signature.
    return max(set_count.values(), key=lambda s: s.count)
