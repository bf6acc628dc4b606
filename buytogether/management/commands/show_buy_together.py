from django.core.management.base import BaseCommand

from buytogether.services import BuyTogetherService


class Command(BaseCommand):
    help = "Print the most frequently bought together product set and the block it renders."

    def add_arguments(self, parser):
        parser.add_argument(
            "--min-products",
            type=int,
            default=None,
            help="Minimum distinct products an order needs to be counted (default: settings).",
        )

    def handle(self, *args, **options):
        overrides = {}
        if options["min_products"] is not None:
            overrides["min_order_products"] = options["min_products"]
        service = BuyTogetherService.from_settings(**overrides)

        set_count = service.most_frequent_set()
        if set_count is None:
            self.stdout.write(self.style.WARNING("No products to display."))
            return

        self.stdout.write(f"Set {set_count.signature} bought together {set_count.count} time(s).")
        view = service.build_recommendation(set_count)
        for entry in view.products:
            self.stdout.write(f"  #{entry.id} {entry.title}: {entry.price}")
        if view.products:
            self.stdout.write(f"Total: {view.total_price}")
            self.stdout.write(f"Add to cart: {view.add_to_cart_url}")
        else:
            self.stdout.write(self.style.WARNING(view.message))
