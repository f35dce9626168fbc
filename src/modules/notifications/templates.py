"""Notification template rendering.

Status templates may use either placeholder syntax:

======================  =========================  ======================
variable                current                    legacy
======================  =========================  ======================
client name             ``{{clientName}}``         ``{client_name}``
collaborator name       ``{{collaboratorName}}``   ``{collaborator_name}``
order number            ``{{osNumber}}``           ``{os_number}``
equipment               ``{{equipment}}``          ``{equipment}``
status name             ``{{statusName}}``         ``{status_name}``
entry date              ``{{entryDate}}``          ``{entry_date}``
pickup date             ``{{pickupDate}}``         ``{pickup_date}``
technical solution      ``{{technicalSolution}}``  ``{technical_solution}``
======================  =========================  ======================

Unrecognised placeholders are left untouched. Email bodies escape the
substituted values, turn newlines into ``<br>`` and are wrapped in the
``notifications/email.html`` layout; WhatsApp bodies stay plain text.
"""

from __future__ import annotations

import re
from datetime import date
from typing import TYPE_CHECKING, Callable, Dict, Optional

from django.conf import settings
from django.template.loader import render_to_string
from django.utils import formats, timezone, translation
from django.utils.html import escape
from django.utils.safestring import mark_safe

from modules.core.phones import format_phone_for_display
from modules.notifications.dtos import RenderedMessage
from modules.notifications.exceptions import TemplateMissing

if TYPE_CHECKING:
    from modules.notifications.dtos import NotificationSubject
    from modules.statuses.dtos import StatusDTO

NOT_AVAILABLE = "N/A"
NO_TECHNICAL_SOLUTION = "Nenhuma solução técnica detalhada foi fornecida."
DEFAULT_EMAIL_SUBJECT = "Atualização da OS {os_number} - Status: {status_name}"
EMAIL_LAYOUT = "notifications/email.html"

CAMEL_CASE_NAMES = {
    "clientName": "client_name",
    "collaboratorName": "collaborator_name",
    "osNumber": "os_number",
    "equipment": "equipment",
    "statusName": "status_name",
    "entryDate": "entry_date",
    "pickupDate": "pickup_date",
    "technicalSolution": "technical_solution",
}

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z]+)\s*\}\}|\{([a-z_]+)\}")


def format_short_date(value: date) -> str:
    """Localised short date (``dd/mm/YYYY`` for pt-br)."""
    with translation.override(settings.LANGUAGE_CODE):
        return formats.date_format(value, "SHORT_DATE_FORMAT")


def build_variables(
    subject: NotificationSubject,
    status: StatusDTO,
    today: Optional[date] = None,
) -> Dict[str, str]:
    """Resolve every placeholder value for ``subject`` entering ``status``."""
    today = today or timezone.localdate()
    created = subject.created_at
    if timezone.is_aware(created):
        created = timezone.localtime(created)
    return {
        "client_name": subject.client_name or NOT_AVAILABLE,
        "collaborator_name": subject.collaborator_name or NOT_AVAILABLE,
        "os_number": subject.order_number,
        "equipment": subject.equipment_label,
        "status_name": status.name,
        "entry_date": format_short_date(created.date()),
        "pickup_date": format_short_date(today) if status.is_pickup_status else "",
        "technical_solution": subject.technical_solution.strip()
        or NO_TECHNICAL_SOLUTION,
    }


def substitute(
    template: str,
    variables: Dict[str, str],
    transform: Callable[[str], str] = str,
) -> str:
    """Replace both placeholder syntaxes; ``transform`` is applied to values."""

    def _replace(match: re.Match) -> str:
        camel, snake = match.group(1), match.group(2)
        key = CAMEL_CASE_NAMES.get(camel) if camel else snake
        if key is None or key not in variables:
            return match.group(0)
        return transform(variables[key])

    return _PLACEHOLDER_RE.sub(_replace, template)


def require_template(template: str, status: StatusDTO, channel: str) -> str:
    """Raises ``TemplateMissing`` when ``template`` is blank."""
    if not template or not template.strip():
        raise TemplateMissing(
            f"Status '{status.name}' has no {channel} template configured."
        )
    return template


def render_email(
    subject: NotificationSubject,
    status: StatusDTO,
    variables: Dict[str, str],
    recipient_name: str = "",
) -> RenderedMessage:
    """Render subject, HTML body and plain-text alternative.

    Raises:
        TemplateMissing: ``status.email_body`` is blank.
    """
    template = require_template(status.email_body, status, "email")

    text = substitute(template, variables)
    html_body = substitute(template, variables, transform=escape)
    html_body = html_body.replace("\r\n", "\n").replace("\n", "<br>")

    subject_template = status.email_subject.strip() or DEFAULT_EMAIL_SUBJECT
    email_subject = " ".join(substitute(subject_template, variables).split())

    html = render_to_string(
        EMAIL_LAYOUT,
        {
            "os_number": variables["os_number"],
            "recipient_name": recipient_name or variables["client_name"],
            "body": mark_safe(html_body),
            "equipment": variables["equipment"],
            "reported_problem": subject.reported_problem,
            "collaborator_phone": (
                format_phone_for_display(subject.collaborator_phone)
                if subject.collaborator_phone
                else ""
            ),
            "status_name": variables["status_name"],
        },
    )
    return RenderedMessage(subject=email_subject, body=html, text=text)


def render_whatsapp(status: StatusDTO, variables: Dict[str, str]) -> RenderedMessage:
    """Raises ``TemplateMissing`` when ``status.whatsapp_body`` is blank."""
    template = require_template(status.whatsapp_body, status, "WhatsApp")
    body = substitute(template, variables)
    return RenderedMessage(body=body, text=body)
