# inventory/urls.py

"""
INVENTORY URLS

Mounted at /api/inventory/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from inventory.views import LocationViewSet, ProductViewSet, StockViewSet

app_name = "inventory"

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")
router.register(r"locations", LocationViewSet, basename="locations")
router.register(r"stock", StockViewSet, basename="stock")

urlpatterns = [
    path("", include(router.urls)),
]
