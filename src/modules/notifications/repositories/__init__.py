"""Notification settings repositories package."""

from modules.notifications.repositories.django_repository import (
    SettingsDjangoRepository,
)
from modules.notifications.repositories.interfaces import ISettingsRepository

__all__ = ["ISettingsRepository", "SettingsDjangoRepository"]
