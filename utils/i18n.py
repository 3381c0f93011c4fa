"""
Модуль: `utils/i18n.py`.
Назначение: Выбор языка интерфейса для Flask-Babel.
"""

from __future__ import annotations

from flask import Request


def is_supported_language(lang: str | None, supported_languages: tuple[str, ...]) -> bool:
    """Поддерживается ли язык интерфейсом."""
    if not lang:
        return False
    return lang.strip().lower() in supported_languages


def resolve_request_language(
    request: Request,
    supported_languages: tuple[str, ...],
    default_language: str,
) -> str:
    """Язык из Accept-Language, иначе язык по умолчанию."""
    if not is_supported_language(default_language, supported_languages):
        default_language = supported_languages[0]

    preferred = request.accept_languages.best_match(supported_languages)
    if preferred:
        return preferred

    return default_language
