# purchases/api/urls.py

"""
PURCHASES API URLS

Mounted at /api/purchases/
"providers" is registered before the root purchase routes.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from purchases.api.views import ProviderViewSet, PurchaseViewSet

router = SimpleRouter()

router.register(r"providers", ProviderViewSet, basename="providers")
router.register(r"", PurchaseViewSet, basename="purchases")

urlpatterns = [
    path("", include(router.urls)),
]
