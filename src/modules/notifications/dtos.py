"""Notification DTOs.

- ``NotificationSubject``: the order data a message is rendered from,
  built by the order service so this app does not import orders.
- ``EmailSettings`` / ``WhatsappSettings``: parsed settings documents.
  Both snake_case and the legacy camelCase keys are accepted.
- ``Recipient``, ``RenderedMessage``: intermediate stage results.
- ``NotificationOutcome``: per-channel result returned to the caller.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class NotificationSubject(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str
    order_number: str
    created_at: datetime
    client_name: str = ""
    client_email: str = ""
    collaborator_name: str = ""
    collaborator_email: str = ""
    collaborator_phone: str = ""
    equipment: Dict[str, str] = {}
    reported_problem: str = ""
    technical_solution: str = ""

    @property
    def equipment_label(self) -> str:
        parts = (self.equipment.get(k, "") for k in ("type", "brand", "model"))
        return " ".join(p for p in parts if p)


class Recipient(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    name: str = ""


class RenderedMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    body: str
    subject: str = ""
    text: str = ""


class NotificationOutcome(BaseModel):
    """Result of one channel run. ``reason`` is empty when sent."""

    model_config = ConfigDict(frozen=True)

    channel: str
    sent: bool
    reason: str = ""
    stage: Optional[str] = None


# ---------------------------------------------------------------------------
# Settings documents
# ---------------------------------------------------------------------------


class EmailProvider(StrEnum):
    SMTP = "smtp"
    MAILERSEND = "mailersend"


class SmtpSecurity(StrEnum):
    NONE = "none"
    SSL = "ssl"
    TLS = "tls"
    SSLTLS = "ssltls"
    STARTTLS = "starttls"


class EmailSettings(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider: EmailProvider = EmailProvider.SMTP
    smtp_server: str = Field(
        default="", validation_alias=AliasChoices("smtp_server", "smtpServer")
    )
    smtp_port: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("smtp_port", "smtpPort")
    )
    smtp_security: SmtpSecurity = Field(
        default=SmtpSecurity.NONE,
        validation_alias=AliasChoices("smtp_security", "smtpSecurity"),
    )
    sender_email: str = Field(
        default="", validation_alias=AliasChoices("sender_email", "senderEmail")
    )
    smtp_password: str = Field(
        default="", validation_alias=AliasChoices("smtp_password", "smtpPassword")
    )
    api_key: str = Field(default="", validation_alias=AliasChoices("api_key", "apiKey"))

    @property
    def use_ssl(self) -> bool:
        return self.smtp_security in (SmtpSecurity.SSL, SmtpSecurity.SSLTLS)

    @property
    def use_tls(self) -> bool:
        return self.smtp_security in (SmtpSecurity.TLS, SmtpSecurity.STARTTLS)

    @property
    def port(self) -> int:
        if self.smtp_port:
            return self.smtp_port
        if self.use_ssl:
            return 465
        if self.use_tls:
            return 587
        return 25

    def missing_fields(self) -> List[str]:
        required = ["sender_email"]
        if self.provider == EmailProvider.MAILERSEND:
            required.append("api_key")
        else:
            required.extend(["smtp_server", "smtp_password"])
        return [name for name in required if not getattr(self, name)]


class WhatsappSettings(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    endpoint: str = ""
    bearer_token: str = Field(
        default="", validation_alias=AliasChoices("bearer_token", "bearerToken")
    )

    def missing_fields(self) -> List[str]:
        return [
            name for name in ("endpoint", "bearer_token") if not getattr(self, name)
        ]
