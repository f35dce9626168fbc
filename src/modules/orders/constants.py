"""Service-order constants."""

from __future__ import annotations

ORDER_NUMBER_PREFIX = "OS"
ORDER_NUMBER_SEQUENCE = "service_order"

CREATION_OBSERVATION = "OS criada no sistema."
DETAILS_EDITED_OBSERVATION = "Detalhes da OS editados."
MISSING_CLIENT_NAME = "Cliente não encontrado"

COLLABORATOR_FIELDS = ("name", "email", "phone")
EQUIPMENT_FIELDS = ("type", "brand", "model", "serial_number")

# Fields the detail editor may change, and whose changes are audited.
AUDITED_FIELDS = ("client_id", "reported_problem", "technical_solution")
AUDITED_NESTED_FIELDS = {
    "collaborator": COLLABORATOR_FIELDS,
    "equipment": EQUIPMENT_FIELDS,
}


def format_order_number(value: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}-{value:03d}"
