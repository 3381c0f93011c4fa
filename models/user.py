"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: models/user.py – модель пользователя системы.

Назначение модуля:
- Описание ORM-модели User для работы с таблицей пользователей в базе данных.
- Хранение учётных записей (логин, email, хеш пароля, отображаемое имя).
"""

from datetime import datetime

from extensions import db


class User(db.Model):
    """Класс `User` описывает зарегистрированного участника."""
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(200), nullable=False)
    display_name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    memberships = db.relationship(
        "FamilyMember",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    wishlist_items = db.relationship(
        "WishlistItem",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
