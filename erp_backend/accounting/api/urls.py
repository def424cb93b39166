# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from accounting.api.views import CashFlowViewSet

router = DefaultRouter()
router.register("cash-flow", CashFlowViewSet, basename="cash-flow")

urlpatterns = [
    path("", include(router.urls)),
]
