"""Session-bound repositories for clients, icons and assignments."""

from src.repositories.assignments import AssignmentRepository
from src.repositories.clients import ClientQuery, ClientRepository, escape_like
from src.repositories.icons import IconRepository

__all__ = [
    "AssignmentRepository",
    "ClientQuery",
    "ClientRepository",
    "IconRepository",
    "escape_like",
]
