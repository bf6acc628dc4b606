from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from django.conf import settings
from django.conf.urls.static import static

from .views import (
    BuyTogetherView,
    BuyTogetherAddToCartView,
    CartView,
    ProductViewSet,
    buy_together_block,
)


router = DefaultRouter()

router.register(r'products', ProductViewSet, basename='product')

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include(router.urls)),

    # Buy together
    path('api/buy-together/', BuyTogetherView.as_view(), name='buy-together'),
    path('buy-together/block/', buy_together_block, name='buy-together-block'),
    path('buy-together/add/<str:product_ids>/', BuyTogetherAddToCartView.as_view(), name='buy-together-add-to-cart'),

    # Cart
    path('api/cart/', CartView.as_view(), name='cart'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
