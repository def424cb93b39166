# transfers/api/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from transfers.api.views import TransferViewSet

router = SimpleRouter()
router.register(r"", TransferViewSet, basename="transfers")

urlpatterns = [
    path("", include(router.urls)),
]
