# sales/api/urls.py

"""
SALES API URLS

Mounted at /api/sales/

Rules:
- "clients" MUST be registered BEFORE the root sale routes,
  otherwise the router treats "clients" as a <pk>.
- SimpleRouter: a root API view would shadow the list route at "/".
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.sale import ClientViewSet, SaleViewSet

router = SimpleRouter()

router.register(r"clients", ClientViewSet, basename="clients")
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("", include(router.urls)),
]
