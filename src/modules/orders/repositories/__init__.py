"""Service-order repositories package."""

from modules.orders.repositories.django_repository import ServiceOrderDjangoRepository
from modules.orders.repositories.interfaces import IServiceOrderRepository

__all__ = ["IServiceOrderRepository", "ServiceOrderDjangoRepository"]
