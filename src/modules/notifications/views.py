"""Integration settings API views.

``GET`` / ``PUT /api/v1/settings/{email|whatsapp}/``. Both verbs need the
Django model permissions for ``IntegrationSetting`` (view / change).
Secrets come back masked.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.permissions import DjangoModelPermissions, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.notifications.exceptions import UnknownSettingsDocument
from modules.notifications.models import IntegrationSetting
from modules.notifications.repositories.django_repository import (
    SettingsDjangoRepository,
)
from modules.notifications.services import IntegrationSettingsService


class SettingsModelPermissions(DjangoModelPermissions):
    """Reads need ``view_integrationsetting`` as well."""

    perms_map = {
        **DjangoModelPermissions.perms_map,
        "GET": ["%(app_label)s.view_%(model_name)s"],
    }


class IntegrationSettingViewSet(GenericViewSet):
    queryset = IntegrationSetting.objects.all()
    permission_classes = [IsAuthenticated, SettingsModelPermissions]
    pagination_class = None
    lookup_field = "key"
    lookup_value_regex = "|".join(
        [IntegrationSetting.EMAIL, IntegrationSetting.WHATSAPP]
    )

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = IntegrationSettingsService(SettingsDjangoRepository())

    def retrieve(self, request: Request, key: str | None = None) -> Response:
        """GET /api/v1/settings/{key}/"""
        try:
            document = self._service.get_settings(str(key))
        except UnknownSettingsDocument as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response(document)

    def update(self, request: Request, key: str | None = None) -> Response:
        """PUT /api/v1/settings/{key}/ (replaces the whole document)"""
        if not isinstance(request.data, dict):
            return Response(
                {"detail": "Expected a JSON object."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            document = self._service.update_settings(str(key), request.data)
        except UnknownSettingsDocument as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except PydanticValidationError as exc:
            return Response(
                {
                    "detail": "Invalid settings payload.",
                    "errors": exc.errors(include_url=False, include_context=False),
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(document)
