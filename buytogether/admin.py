from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Store,
    Product,
    ProductImage,
    ProductVariation,
    Order,
    OrderItem,
    Cart,
    CartItem,
)


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 1
    fields = ("image", "alt_text", "image_preview")
    readonly_fields = ("image_preview",)

    def image_preview(self, obj):
        if obj and getattr(obj, "image", None):
            return format_html('<img src="{}" style="height:60px;border-radius:6px;" />', obj.image.url)
        return "-"

    image_preview.short_description = "Preview"


class ProductVariationInline(admin.TabularInline):
    model = ProductVariation
    extra = 1
    fields = ("sku", "price", "currency_code", "is_active")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "store", "is_active")
    list_filter = ("store", "is_active")
    search_fields = ("title", "slug", "variations__sku")
    inlines = [ProductVariationInline, ProductImageInline]


@admin.register(ProductVariation)
class ProductVariationAdmin(admin.ModelAdmin):
    list_display = ("id", "sku", "product", "price", "currency_code", "is_active")
    list_filter = ("currency_code", "is_active")
    search_fields = ("sku", "product__title")


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("purchased_entity", "title", "quantity", "unit_price")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "order_number", "user", "store", "state", "created_at", "completed_at")
    list_filter = ("state", "store")
    search_fields = ("order_number", "user__username", "user__email")
    readonly_fields = ("order_number",)
    inlines = [OrderItemInline]
    actions = ["mark_completed"]

    def mark_completed(self, request, queryset):
        updated = 0
        for order in queryset.exclude(state="completed"):
            order.state = "completed"
            order.save()
            updated += 1
        self.message_user(request, f"{updated} order(s) marked as Completed.")

    mark_completed.short_description = "Mark selected orders as Completed"


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "session_key", "store", "cart_type", "is_active", "created_at", "updated_at")
    list_filter = ("is_active", "cart_type", "store")
    search_fields = ("user__username", "user__email", "session_key")
    ordering = ("-created_at",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.model.all_objects.all()


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "cart",
        "purchased_entity",
        "title",
        "unit_price",
        "quantity",
        "is_active",
        "created_at",
    )
    list_filter = ("is_active", "created_at")
    search_fields = ("title", "purchased_entity__sku", "cart__user__username")
    ordering = ("-created_at",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.model.all_objects.all()


admin.site.register(Store)
