"""Django ORM implementation of the settings document repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

from modules.notifications.models import IntegrationSetting
from modules.notifications.repositories.interfaces import ISettingsRepository


class SettingsDjangoRepository(ISettingsRepository):
    def get_document(self, key: str) -> Optional[Dict[str, Any]]:
        setting = IntegrationSetting.objects.filter(key=key).first()
        if setting is None:
            return None
        return dict(setting.data or {})

    def save_document(self, key: str, data: Dict[str, Any]) -> Dict[str, Any]:
        setting, _ = IntegrationSetting.objects.update_or_create(
            key=key, defaults={"data": data}
        )
        return dict(setting.data)
