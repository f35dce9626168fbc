"""Notification exceptions.

``NotificationError`` subclasses never leave the pipeline: each channel run
catches them and reports a ``NotificationOutcome``. ``UnknownSettingsDocument``
belongs to the settings API.
"""

from __future__ import annotations


class NotificationError(Exception):
    """Base class; ``stage`` names the pipeline stage that failed."""

    stage = "deliver"


class RecipientMissing(NotificationError):
    """The order has no address/number for this channel."""

    stage = "resolve_recipient"


class ChannelNotConfigured(NotificationError):
    """The settings document for this channel is absent or incomplete."""

    stage = "load_settings"


class TemplateMissing(NotificationError):
    """The target status has no body template for this channel."""

    stage = "render"


class TransportError(NotificationError):
    """The provider could not be reached or rejected the message."""

    stage = "deliver"


class UnknownSettingsDocument(Exception):
    """The settings API was asked for a document it does not manage."""
