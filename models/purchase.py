"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: models/purchase.py – отметка о покупке подарка.

Назначение модуля:
- Описание ORM-модели Purchase: кто купил какую позицию и для кого.
- Уникальность по wishlist_item_id: у позиции не больше одной покупки.
- Флаг unwrapped меняется только с False на True (после даты раскрытия).
"""

from datetime import datetime

from extensions import db


class Purchase(db.Model):
    """Класс `Purchase` описывает купленный подарок."""
    __tablename__ = "purchases"

    id = db.Column(db.Integer, primary_key=True)
    wishlist_item_id = db.Column(
        db.Integer,
        db.ForeignKey("wishlist_items.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    purchased_by = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purchased_for = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    family_id = db.Column(
        db.Integer, db.ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purchased_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    unwrapped = db.Column(db.Boolean, nullable=False, default=False)
    unwrapped_at = db.Column(db.DateTime, nullable=True)
    thank_you_sent = db.Column(db.Boolean, nullable=False, default=False)

    wishlist_item = db.relationship("WishlistItem", back_populates="purchase")
    purchaser = db.relationship("User", foreign_keys=[purchased_by])
    recipient = db.relationship("User", foreign_keys=[purchased_for])
    tree_present = db.relationship(
        "TreePresent",
        back_populates="purchase",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
