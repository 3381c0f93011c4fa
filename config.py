"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: config.py – конфигурация приложения.

Назначение модуля:
- Определение базовых параметров приложения Flask (секретный ключ, строка подключения к БД).
- Настройка сессии: время жизни cookie, флаги безопасности.
- Дата «раскрытия» подарков на ёлке и каталог для хранения базы данных.
"""

import os
import warnings
from datetime import date, timedelta


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Преобразует переменную окружения в bool."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_int(name: str, default: int) -> int:
    """Преобразует переменную окружения в int."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _get_env_date(names: tuple[str, ...], default: date) -> date:
    """Читает ISO-дату из первой заданной переменной окружения."""
    for name in names:
        value = os.environ.get(name)
        if not value:
            continue
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            warnings.warn(
                f"{name}={value!r} is not an ISO date, using {default.isoformat()}.",
                RuntimeWarning,
                stacklevel=1,
            )
    return default


def _is_production() -> bool:
    """Определяет production-режим по FLASK_ENV."""
    return os.environ.get("FLASK_ENV", "").strip().lower() == "production"


def _default_data_dir() -> str:
    """Каталог для файла БД: том Railway, DATA_DIR или instance/ рядом с кодом."""
    return (
        os.environ.get("DATA_DIR")
        or os.environ.get("RAILWAY_VOLUME_MOUNT_PATH")
        or os.path.join(os.path.dirname(os.path.abspath(__file__)), "instance")
    )


class Config:
    """Базовая конфигурация приложения."""

    _PRODUCTION = _is_production()

    PORT = _get_env_int("PORT", 3001)

    SECRET_KEY = os.environ.get("SECRET_KEY") or os.environ.get("SESSION_SECRET")
    if not SECRET_KEY:
        if _PRODUCTION:
            raise RuntimeError(
                "SECRET_KEY environment variable is required in production. "
                "Set a strong random value before starting the app."
            )
        SECRET_KEY = "dev-insecure-secret-key"
        warnings.warn(
            "SECRET_KEY is not set. Using insecure development fallback key.",
            RuntimeWarning,
            stacklevel=1,
        )

    DATA_DIR = _default_data_dir()
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(DATA_DIR, "christmas.db"),
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Сессия живёт 30 дней с момента входа
    SESSION_LIFETIME_DAYS = _get_env_int("SESSION_LIFETIME_DAYS", 30)
    PERMANENT_SESSION_LIFETIME = timedelta(days=SESSION_LIFETIME_DAYS)
    REMEMBER_COOKIE_DURATION = timedelta(days=SESSION_LIFETIME_DAYS)
    SESSION_COOKIE_SECURE = _get_env_bool("SESSION_COOKIE_SECURE", default=_PRODUCTION)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")
    REMEMBER_COOKIE_SECURE = SESSION_COOKIE_SECURE
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = SESSION_COOKIE_SAMESITE

    REVEAL_DATE = _get_env_date(("REVEAL_DATE", "CHRISTMAS_DATE"), date(2025, 12, 25))

    INVITE_CODE_MAX_ATTEMPTS = _get_env_int("INVITE_CODE_MAX_ATTEMPTS", 10)
    RATE_LIMIT_ENABLED = _get_env_bool("RATE_LIMIT_ENABLED", default=True)
    CSRF_ENABLED = _get_env_bool("CSRF_ENABLED", default=True)

    SUPPORTED_LANGUAGES = ("en",)
    DEFAULT_LANGUAGE = os.environ.get("DEFAULT_LANGUAGE", "en").strip().lower() or "en"
