"""Client records and their lifecycle operations."""

from src.clients.schemas import ClientCreate, ClientFilters, ClientPage, ClientUpdate
from src.clients.service import ClientService

__all__ = [
    "ClientCreate",
    "ClientFilters",
    "ClientPage",
    "ClientService",
    "ClientUpdate",
]
