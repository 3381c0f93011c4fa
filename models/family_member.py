"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: models/family_member.py – членство пользователя в семье.
"""

from datetime import datetime

from extensions import db


class FamilyMember(db.Model):
    """Пара (семья, пользователь); не более одной записи на пару."""
    __tablename__ = "family_members"

    id = db.Column(db.Integer, primary_key=True)
    family_id = db.Column(
        db.Integer, db.ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    joined_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    family = db.relationship("Family", back_populates="members")
    user = db.relationship("User", back_populates="memberships")

    __table_args__ = (
        db.UniqueConstraint("family_id", "user_id", name="uq_family_member"),
    )
