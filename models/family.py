"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: models/family.py – модель семейной группы.

Назначение модуля:
- Описание ORM-модели Family: название, уникальный код приглашения, создатель.
- Каскадное удаление участников, списков желаний, покупок и подарков на ёлке.
"""

from datetime import datetime

from extensions import db

INVITE_CODE_LENGTH = 8


class Family(db.Model):
    """Класс `Family` описывает группу, обменивающуюся подарками."""
    __tablename__ = "families"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    invite_code = db.Column(db.String(INVITE_CODE_LENGTH), unique=True, nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    creator = db.relationship("User")
    members = db.relationship(
        "FamilyMember",
        back_populates="family",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    wishlist_items = db.relationship(
        "WishlistItem",
        back_populates="family",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    purchases = db.relationship("Purchase", cascade="all, delete-orphan", passive_deletes=True)
    tree_presents = db.relationship("TreePresent", cascade="all, delete-orphan", passive_deletes=True)
