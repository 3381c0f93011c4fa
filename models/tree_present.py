"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: models/tree_present.py – декоративная коробка под ёлкой.
"""

from extensions import db


class TreePresent(db.Model):
    """Визуальное представление покупки; ровно одна коробка на покупку."""
    __tablename__ = "tree_presents"

    id = db.Column(db.Integer, primary_key=True)
    purchase_id = db.Column(
        db.Integer,
        db.ForeignKey("purchases.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    # Получатель подарка
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    family_id = db.Column(
        db.Integer, db.ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True
    )
    size = db.Column(db.String(10), nullable=False)
    color = db.Column(db.String(10), nullable=False)
    # Позицию назначает шаблон ёлки при отрисовке
    position_x = db.Column(db.Float, nullable=True)
    position_y = db.Column(db.Float, nullable=True)

    purchase = db.relationship("Purchase", back_populates="tree_present")
