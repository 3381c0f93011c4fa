"""
Модуль: `models/__init__.py`.
Назначение: Импорт моделей для корректной регистрации в SQLAlchemy metadata.
"""

from .user import User
from .family import Family
from .family_member import FamilyMember
from .wishlist_item import WishlistItem
from .purchase import Purchase
from .tree_present import TreePresent

__all__ = ["User", "Family", "FamilyMember", "WishlistItem", "Purchase", "TreePresent"]
