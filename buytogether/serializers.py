from rest_framework import serializers

from .models import Cart, CartItem, Product, ProductVariation


# === Buy together block ===

class ProductEntrySerializer(serializers.Serializer):
    id = serializers.CharField()
    url = serializers.CharField()
    image = serializers.CharField(allow_blank=True)
    price = serializers.CharField()
    title = serializers.CharField()


class RecommendationSerializer(serializers.Serializer):
    products = ProductEntrySerializer(many=True)
    total_price = serializers.CharField(allow_blank=True)
    add_to_cart_url = serializers.CharField(allow_blank=True)
    message = serializers.CharField(allow_blank=True)


# === Catalogue ===

class ProductVariationSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductVariation
        fields = ["id", "sku", "price", "currency_code"]


class ProductSerializer(serializers.ModelSerializer):
    variations = ProductVariationSerializer(many=True, read_only=True)
    image = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ["id", "title", "slug", "description", "image", "variations"]

    def get_image(self, obj):
        img = obj.primary_image
        if img is None or not img.image:
            return None
        request = self.context.get("request")
        url = img.image.url
        return request.build_absolute_uri(url) if request else url


# === Cart ===

class CartItemSerializer(serializers.ModelSerializer):
    id = serializers.IntegerField(read_only=True)
    purchased_entity = serializers.IntegerField(source="purchased_entity_id", read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "purchased_entity",
            "title",
            "quantity",
            "unit_price",
            "currency_code",
        ]


class CartSerializer(serializers.ModelSerializer):
    items = serializers.SerializerMethodField()
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Cart
        fields = ["id", "cart_type", "store", "items", "total_price"]

    def get_items(self, obj):
        qs = obj.items.order_by("id")
        return CartItemSerializer(qs, many=True, context=self.context).data
