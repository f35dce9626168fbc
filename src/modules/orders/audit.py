"""Detail-edit diffing for the service-order edit log.

Only fields present in the partial update are compared. Values are
compared by their JSON serialisation; a missing value counts as ``null``.
Nested collaborator/equipment fields are reported with dotted names such
as ``equipment.brand``.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, List

from modules.orders.constants import AUDITED_FIELDS, AUDITED_NESTED_FIELDS
from modules.orders.dtos import EditLogChangeDTO

if TYPE_CHECKING:
    from modules.orders.models import ServiceOrder


def _serialize(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def snapshot(order: ServiceOrder) -> Dict[str, Any]:
    """The audited fields of ``order`` in the shape ``diff_fields`` expects."""
    return {
        "client_id": str(order.client_id) if order.client_id else None,
        "reported_problem": order.reported_problem,
        "technical_solution": order.technical_solution,
        "collaborator": dict(order.collaborator or {}),
        "equipment": dict(order.equipment or {}),
    }


def diff_fields(
    current: Dict[str, Any], changes: Dict[str, Any]
) -> List[EditLogChangeDTO]:
    """Return one change per audited field whose value actually differs."""
    diffs: List[EditLogChangeDTO] = []

    for field in AUDITED_FIELDS:
        if field not in changes:
            continue
        old, new = current.get(field), changes[field]
        if _serialize(old) != _serialize(new):
            diffs.append(EditLogChangeDTO(field=field, old_value=old, new_value=new))

    for group, fields in AUDITED_NESTED_FIELDS.items():
        patch = changes.get(group)
        if not patch:
            continue
        existing = current.get(group) or {}
        for field in fields:
            if field not in patch:
                continue
            old, new = existing.get(field), patch[field]
            if _serialize(old) != _serialize(new):
                diffs.append(
                    EditLogChangeDTO(
                        field=f"{group}.{field}", old_value=old, new_value=new
                    )
                )

    return diffs
