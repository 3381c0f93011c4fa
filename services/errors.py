"""
Модуль: `services/errors.py`.
Назначение: Доменные исключения сервисного слоя.

Маршруты переводят их в навигацию: конфликт и ошибка валидации возвращаются
в исходную форму, отсутствие прав превращается в редирект.
"""


class WishTreeError(Exception):
    """Базовое исключение доменного уровня."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ConflictError(WishTreeError):
    """Нарушение уникальности: логин, email или код приглашения заняты."""


class NotFoundError(WishTreeError):
    """Неверный код приглашения, отсутствующая позиция или подарок."""


class AuthorizationError(WishTreeError):
    """Пользователь не вошёл, не состоит в семье или не владеет объектом."""


class ValidationError(WishTreeError):
    """Обязательное поле формы не заполнено."""
