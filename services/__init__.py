"""
Модуль: `services/__init__.py`.
Назначение: Сервисный слой – операции над данными с явной передачей сессии БД.
"""

from .errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    WishTreeError,
)

__all__ = [
    "AuthorizationError",
    "ConflictError",
    "NotFoundError",
    "ValidationError",
    "WishTreeError",
]
