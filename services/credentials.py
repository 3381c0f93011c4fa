"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: services/credentials.py – учётные записи и проверка паролей.

Назначение модуля:
- Хеширование паролей (scrypt через werkzeug) и их проверка.
- Создание пользователя с переводом нарушения уникальности в ConflictError.
- Вход по логину и паролю без раскрытия причины отказа.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask_login import UserMixin
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from models.user import User
from services.errors import ConflictError, ValidationError
from utils.contact_normalizer import normalize_email

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128


@dataclass(frozen=True)
class UserRecord(UserMixin):
    """Данные пользователя без хеша пароля; именно он хранится в current_user."""

    id: int
    username: str
    email: str
    display_name: str

    @classmethod
    def from_model(cls, user: User) -> "UserRecord":
        """Снимок модели без хеша пароля."""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            display_name=user.display_name,
        )


def hash_password(password: str) -> str:
    """Хеширует пароль алгоритмом scrypt."""
    return generate_password_hash(password, method="scrypt")


def verify_password(password: str, password_hash: str) -> bool:
    """Сверяет пароль с хешем; пустые значения никогда не совпадают."""
    if not password or not password_hash:
        return False
    return check_password_hash(password_hash, password)


def _validate_username(username: str) -> str | None:
    """Текст ошибки для недопустимого логина или None."""
    if not username:
        return "Username is required."
    if len(username) < 3:
        return "Username must be at least 3 characters long."
    if len(username) > 80:
        return "Username must not exceed 80 characters."
    if any(ch.isspace() for ch in username):
        return "Username must not contain spaces."
    return None


def _validate_password(password: str) -> str | None:
    """Текст ошибки для недопустимого пароля или None."""
    if not (MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH):
        return f"Password must be between {MIN_PASSWORD_LENGTH} and {MAX_PASSWORD_LENGTH} characters."
    if not password.strip():
        return "Password must not be blank."
    return None


def create_user(
    session: Session,
    username: str,
    email: str,
    password: str,
    display_name: str,
) -> int:
    """Создаёт пользователя и возвращает его id.

    Уникальность логина и email проверяет только база: IntegrityError при
    фиксации откатывается и превращается в ConflictError, так что две
    одновременные регистрации не создадут дубликатов.
    """
    username = (username or "").strip()
    display_name = (display_name or "").strip()
    password = password or ""

    username_error = _validate_username(username)
    if username_error:
        raise ValidationError(username_error)

    normalized_email = normalize_email(email)
    if not normalized_email:
        raise ValidationError("Please enter a valid email address.")

    password_error = _validate_password(password)
    if password_error:
        raise ValidationError(password_error)

    user = User(
        username=username,
        email=normalized_email,
        password_hash=hash_password(password),
        display_name=display_name or username,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError("Username or email already exists") from exc
    return user.id


def find_by_username(session: Session, username: str | None) -> User | None:
    """Пользователь по точному логину или None."""
    if not username:
        return None
    return session.query(User).filter_by(username=username.strip()).first()


def find_by_id(session: Session, user_id: int | None) -> UserRecord | None:
    """Безопасная запись пользователя по id или None."""
    if user_id is None:
        return None
    user = session.get(User, user_id)
    if user is None:
        return None
    return UserRecord.from_model(user)


def login(session: Session, username: str | None, password: str | None) -> UserRecord | None:
    """Возвращает пользователя при верных данных, иначе None.

    Неизвестный логин и неверный пароль неотличимы для вызывающего кода.
    """
    user = find_by_username(session, username)
    if user is None:
        return None
    if not verify_password(password or "", user.password_hash):
        return None
    return UserRecord.from_model(user)
