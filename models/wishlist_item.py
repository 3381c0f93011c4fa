"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: models/wishlist_item.py – позиция списка желаний.

Назначение модуля:
- Описание ORM-модели WishlistItem: что хочет получить участник внутри конкретной семьи.
- Необязательные поля (описание, ссылка, цена, картинка) хранятся как NULL.
"""

from datetime import datetime

from extensions import db


class WishlistItem(db.Model):
    """Класс `WishlistItem` описывает желаемый подарок участника."""
    __tablename__ = "wishlist_items"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    family_id = db.Column(
        db.Integer, db.ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    link = db.Column(db.String(500), nullable=True)
    # Цена хранится как введённый текст («~30€», «до 2000»)
    price = db.Column(db.String(50), nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    priority = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    owner = db.relationship("User", back_populates="wishlist_items")
    family = db.relationship("Family", back_populates="wishlist_items")
    purchase = db.relationship(
        "Purchase",
        back_populates="wishlist_item",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
