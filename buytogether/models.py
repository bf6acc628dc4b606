from decimal import Decimal
from django.db import models
from django.conf import settings
from django.db.models import Q
from django.urls import reverse
from django.utils import timezone
from django.utils.text import slugify
import uuid

from .pricing import Price


class ActiveManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)


# === Common abstract models ===

class BaseModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        abstract = True

    def soft_deactivate(self):
        self.is_active = False
        self.deactivated_at = timezone.now()
        self.save(update_fields=["is_active", "deactivated_at", "updated_at"])


# === Stores ===

class Store(BaseModel):
    name = models.CharField(max_length=150)
    default_currency = models.CharField(max_length=3, default="USD")
    is_default = models.BooleanField(default=False)

    def __str__(self):
        return self.name


# === Products ===

class Product(BaseModel):
    store = models.ForeignKey(Store, on_delete=models.CASCADE, related_name="products")
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, blank=True)
    description = models.TextField(blank=True)

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.title)[:255]
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse("product-detail", kwargs={"pk": self.pk})

    @property
    def primary_image(self):
        """First image by id, or None when the product has no image."""
        return self.images.order_by("id").first()

    def __str__(self):
        return self.title


class ProductImage(models.Model):
    product = models.ForeignKey(
        "Product",
        on_delete=models.CASCADE,
        related_name="images"
    )
    image = models.ImageField(upload_to="product_images/")
    alt_text = models.CharField(max_length=255, blank=True)

    def __str__(self):
        return f"Image for {self.product.title}"


class ProductVariation(BaseModel):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="variations")
    sku = models.CharField(max_length=64, unique=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    currency_code = models.CharField(max_length=3, default="USD")

    def get_price(self):
        return Price(self.price, self.currency_code)

    def __str__(self):
        return f"{self.product.title} ({self.sku})"


# === Orders, cart ===

class Order(BaseModel):
    STATE_CHOICES = [
        ("draft", "Draft"),
        ("placed", "Placed"),
        ("completed", "Completed"),
        ("canceled", "Canceled"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    store = models.ForeignKey(Store, on_delete=models.PROTECT, related_name="orders")
    order_number = models.CharField(max_length=20, unique=True, editable=False)
    state = models.CharField(max_length=20, choices=STATE_CHOICES, default="draft", db_index=True)
    placed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    @property
    def total_price(self):
        total = Decimal("0.00")
        for item in self.items.all():
            total += item.unit_price * item.quantity
        return total

    def save(self, *args, **kwargs):
        if not self.order_number:
            self.order_number = uuid.uuid4().hex[:10].upper()
        if self.state == "completed" and not self.completed_at:
            self.completed_at = timezone.now()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Order {self.order_number} ({self.state})"


class OrderItem(BaseModel):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    # The variation may be deleted after the order was placed.
    purchased_entity = models.ForeignKey(
        ProductVariation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    title = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    class Meta:
        ordering = ["id"]

    def save(self, *args, **kwargs):
        if self.purchased_entity_id and not self.title:
            self.title = self.purchased_entity.product.title
        super().save(*args, **kwargs)


class Cart(BaseModel):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True,
                             on_delete=models.CASCADE, related_name="carts")
    session_key = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    store = models.ForeignKey(Store, on_delete=models.CASCADE, related_name="carts")
    cart_type = models.CharField(max_length=32, default="default")

    objects = ActiveManager()
    all_objects = models.Manager()

    class Meta:
        indexes = [models.Index(fields=["session_key"], name="buytogether_cart_session_idx")]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "store", "cart_type"],
                condition=Q(is_active=True, user__isnull=False),
                name="uniq_active_user_cart",
            ),
            models.UniqueConstraint(
                fields=["session_key", "store", "cart_type"],
                condition=Q(is_active=True, user__isnull=True),
                name="uniq_active_session_cart",
            ),
        ]

    @property
    def total_price(self):
        total = Decimal("0.00")
        for item in self.items.all():
            total += item.unit_price * item.quantity
        return total

    def __str__(self):
        owner = self.user.get_username() if self.user_id else (self.session_key or "no-owner")
        return f"Cart<{owner}>"


class CartItem(BaseModel):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items")
    purchased_entity = models.ForeignKey(ProductVariation, on_delete=models.CASCADE, related_name="cart_items")
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    currency_code = models.CharField(max_length=3, default="USD")
    title = models.CharField(max_length=255, blank=True)

    objects = ActiveManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["id"]
