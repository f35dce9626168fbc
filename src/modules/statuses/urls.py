"""Status URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.statuses.views import StatusViewSet

router = DefaultRouter(trailing_slash=True)
router.register("statuses", StatusViewSet, basename="status")

urlpatterns = router.urls
