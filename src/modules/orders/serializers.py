"""Service-order DRF serializers for API input.

Serializers validate request payloads at the Interface layer; the views
then build Pydantic DTOs from ``validated_data`` for the Service Layer.
Responses are rendered straight from the output DTOs.
"""

from __future__ import annotations

from rest_framework import serializers


class CollaboratorSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=30
    )


class EquipmentSerializer(serializers.Serializer):
    type = serializers.CharField(min_length=2, max_length=100)
    brand = serializers.CharField(min_length=2, max_length=100)
    model = serializers.CharField(min_length=1, max_length=100)
    serial_number = serializers.CharField(min_length=1, max_length=100)


class CreateServiceOrderSerializer(serializers.Serializer):
    """Validates the service-order creation payload."""

    client_id = serializers.UUIDField()
    status_id = serializers.CharField(required=False, allow_blank=True)
    collaborator = CollaboratorSerializer()
    equipment = EquipmentSerializer()
    reported_problem = serializers.CharField(min_length=10)
    attachments = serializers.ListField(
        child=serializers.CharField(), required=False, default=list
    )


class TransitionSerializer(serializers.Serializer):
    """Validates ``POST /service-orders/{id}/transition/``.

    Omitted optional fields reach the service as ``None`` (unchanged).
    """

    status_id = serializers.CharField()
    technical_solution = serializers.CharField(required=False, allow_blank=True)
    observation = serializers.CharField(required=False, allow_blank=True)
    attachments = serializers.ListField(
        child=serializers.CharField(), required=False
    )
    confirmed_service_ids = serializers.ListField(
        child=serializers.CharField(), required=False
    )


class UpdateServiceOrderDetailsSerializer(serializers.Serializer):
    """Validates ``PATCH /service-orders/{id}/``.

    Meant to be bound with ``partial=True``: nested groups then accept any
    subset of their keys, with the same constraints as creation. ``null``
    means unchanged.
    """

    client_id = serializers.UUIDField(required=False, allow_null=True)
    reported_problem = serializers.CharField(
        min_length=10, required=False, allow_null=True
    )
    technical_solution = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )
    collaborator = CollaboratorSerializer(required=False, allow_null=True)
    equipment = EquipmentSerializer(required=False, allow_null=True)
