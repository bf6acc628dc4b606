import logging

from django.conf import settings
from django.contrib import messages
from django.shortcuts import redirect, render
from django.urls import reverse
from rest_framework import viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Product
from .serializers import CartSerializer, ProductSerializer, RecommendationSerializer
from .services import BuyTogetherService, CartContext, CartProvider, CartUnavailable
from .utils import abs_media_url, get_current_store, get_session_key

logger = logging.getLogger(__name__)


def cart_context_from_request(request) -> CartContext:
    user = request.user if request.user.is_authenticated else None
    return CartContext(
        store=get_current_store(),
        user=user,
        session_key=None if user else get_session_key(request),
    )


def build_service(request) -> BuyTogetherService:
    return BuyTogetherService.from_settings(
        media_url=lambda url: abs_media_url(request, url),
    )


class BuyTogetherView(APIView):
    """JSON rendition of the frequently-bought-together block."""
    permission_classes = [AllowAny]

    def get(self, request):
        view = build_service(request).recommend()
        return Response(RecommendationSerializer(view).data)


def buy_together_block(request):
    """HTML rendition of the block, for server-rendered pages."""
    view = build_service(request).recommend()
    return render(request, "buytogether/buy_together_block.html", {"recommendation": view})


class BuyTogetherAddToCartView(APIView):
    """
    Adds one unit of every listed variation to the caller's cart and always
    redirects to the cart, whether all, some or none of the ids resolved.
    """
    permission_classes = [AllowAny]

    def get(self, request, product_ids=""):
        result = build_service(request).add_selected_to_cart(
            product_ids, cart_context_from_request(request)
        )
        if result.cart is None:
            messages.error(request._request, "Your cart could not be opened.")
        elif result.is_partial:
            messages.warning(
                request._request,
                f"{len(result.skipped)} product(s) are no longer available and were not added.",
            )
        elif result.added:
            messages.success(request._request, f"{len(result.added)} product(s) added to your cart.")

        conf = getattr(settings, "BUY_TOGETHER", {})
        return redirect(conf.get("CART_REDIRECT_URL") or reverse("cart"))


class CartView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        context = cart_context_from_request(request)
        conf = getattr(settings, "BUY_TOGETHER", {})
        provider = CartProvider()
        cart_type = conf.get("CART_TYPE", "default")
        try:
            cart = provider.get_cart(cart_type, context.store, context)
            if cart is None:
                cart = provider.create_cart(cart_type, context.store, context)
        except CartUnavailable as exc:
            logger.warning("Cart view: %s", exc)
            return Response({"detail": str(exc)}, status=400)
        ser = CartSerializer(cart, context={"request": request})
        return Response(ser.data)


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [AllowAny]
    serializer_class = ProductSerializer
    queryset = Product.objects.filter(is_active=True).prefetch_related("variations", "images").order_by("id")
