"""Integration settings URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.notifications.views import IntegrationSettingViewSet

router = DefaultRouter(trailing_slash=True)
router.register("settings", IntegrationSettingViewSet, basename="integration-setting")

urlpatterns = router.urls
