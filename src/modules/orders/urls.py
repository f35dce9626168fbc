"""Service-order URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.orders.views import ServiceOrderViewSet

router = DefaultRouter(trailing_slash=True)
router.register("service-orders", ServiceOrderViewSet, basename="service-order")

urlpatterns = router.urls
