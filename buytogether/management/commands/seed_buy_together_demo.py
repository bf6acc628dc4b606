from decimal import Decimal
from django.core.management.base import BaseCommand
from django.db import transaction

from buytogether.models import Store, Product, ProductVariation, Order, OrderItem, Cart

DEMO_PRODUCTS = [
    ("Pommes Bio", "APPLE-1KG", Decimal("2.99")),
    ("Carottes", "CARROT-1KG", Decimal("1.49")),
    ("Poireaux", "LEEK-BUNCH", Decimal("2.20")),
    ("Pain de campagne", "BREAD-500G", Decimal("3.10")),
    ("Fromage de chèvre", "GOAT-200G", Decimal("4.75")),
]

# Orders as indexes into DEMO_PRODUCTS; the first set is the most frequent.
DEMO_ORDERS = [
    (0, 1, 2),
    (2, 0, 1),
    (0, 1, 2, 3),
    (3, 4, 0),
    (1, 2, 0),
    (3, 4),
]


class Command(BaseCommand):
    help = "Create a demo store, catalogue and completed order history (wipes existing buy together data with --reset)."

    def add_arguments(self, parser):
        parser.add_argument("--reset", action="store_true", help="Delete existing orders, carts and products first.")

    @transaction.atomic
    def handle(self, *args, **options):
        if options["reset"]:
            Cart.all_objects.all().delete()
            Order.objects.all().delete()
            Product.objects.all().delete()
            Store.objects.all().delete()

        store, _ = Store.objects.get_or_create(
            name="Greencart demo",
            defaults={"default_currency": "USD", "is_default": True},
        )

        variations = []
        for title, sku, price in DEMO_PRODUCTS:
            product, _ = Product.objects.get_or_create(store=store, title=title)
            variation, _ = ProductVariation.objects.get_or_create(
                sku=sku,
                defaults={"product": product, "price": price, "currency_code": store.default_currency},
            )
            variations.append(variation)

        for indexes in DEMO_ORDERS:
            order = Order.objects.create(store=store, state="completed")
            for i in indexes:
                OrderItem.objects.create(
                    order=order,
                    purchased_entity=variations[i],
                    quantity=1,
                    unit_price=variations[i].price,
                )

        self.stdout.write(self.style.SUCCESS(
            f"✅ {len(variations)} products and {len(DEMO_ORDERS)} completed orders created in {store.name}."
        ))
