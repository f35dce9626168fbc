"""Notification channels (email, WhatsApp)."""

from modules.notifications.channels.base import NotificationChannel
from modules.notifications.channels.email import EmailChannel
from modules.notifications.channels.whatsapp import WhatsappChannel

__all__ = ["EmailChannel", "NotificationChannel", "WhatsappChannel"]
