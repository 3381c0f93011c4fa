"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: services/wishlist.py – личные списки желаний участников.

Назначение модуля:
- Добавление и удаление позиций своего списка внутри семьи.
- Выборка своего списка и списков остальных участников для страницы покупок.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from models.purchase import Purchase
from models.user import User
from models.wishlist_item import WishlistItem
from services.errors import ValidationError

MAX_TITLE_LENGTH = 200


@dataclass(frozen=True)
class ShopItem:
    """Позиция чужого списка вместе с отметкой о покупке."""

    id: int
    title: str
    description: str | None
    link: str | None
    price: str | None
    created_at: datetime
    purchase_id: int | None
    purchased_by: int | None

    @property
    def is_purchased(self) -> bool:
        """Куплена ли позиция кем-либо."""
        return self.purchase_id is not None


@dataclass
class OwnerWishlist:
    """Список одного участника на странице покупок."""

    owner_id: int
    owner_name: str
    items: list[ShopItem] = field(default_factory=list)


def _optional(value: str | None) -> str | None:
    """Пустая строка из формы хранится как NULL."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def add_item(
    session: Session,
    user_id: int,
    family_id: int,
    title: str,
    description: str | None = None,
    link: str | None = None,
    price: str | None = None,
) -> int:
    """Добавляет позицию в список пользователя и возвращает её id."""
    title = (title or "").strip()
    if not title:
        raise ValidationError("Please enter a title for your wish.")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must not exceed {MAX_TITLE_LENGTH} characters.")

    item = WishlistItem(
        user_id=user_id,
        family_id=family_id,
        title=title,
        description=_optional(description),
        link=_optional(link),
        price=_optional(price),
    )
    session.add(item)
    session.commit()
    return item.id


def delete_item(session: Session, user_id: int, family_id: int, item_id: int) -> bool:
    """Удаляет позицию, только если она принадлежит пользователю в этой семье.

    Проверка владельца входит в условие DELETE: чужая или отсутствующая
    позиция просто не попадает под него. Покупка и коробка под ёлкой
    удаляются каскадом внешних ключей.
    """
    deleted = (
        session.query(WishlistItem)
        .filter_by(id=item_id, user_id=user_id, family_id=family_id)
        .delete(synchronize_session="fetch")
    )
    session.commit()
    return deleted > 0


def list_own_items(session: Session, user_id: int, family_id: int) -> list[WishlistItem]:
    """Свои позиции в семье, новые сверху."""
    return (
        session.query(WishlistItem)
        .filter_by(user_id=user_id, family_id=family_id)
        .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        .all()
    )


def list_others_items(session: Session, family_id: int, excluding_user_id: int) -> list[OwnerWishlist]:
    """Списки остальных участников, сгруппированные по владельцу.

    Владельцы упорядочены по отображаемому имени, позиции – от новых к старым.
    """
    rows = (
        session.query(WishlistItem, User.id, User.display_name, Purchase.id, Purchase.purchased_by)
        .join(User, WishlistItem.user_id == User.id)
        .outerjoin(Purchase, Purchase.wishlist_item_id == WishlistItem.id)
        .filter(WishlistItem.family_id == family_id, WishlistItem.user_id != excluding_user_id)
        .order_by(
            User.display_name,
            User.id,
            WishlistItem.created_at.desc(),
            WishlistItem.id.desc(),
        )
        .all()
    )

    grouped: dict[int, OwnerWishlist] = {}
    for item, owner_id, owner_name, purchase_id, purchased_by in rows:
        group = grouped.get(owner_id)
        if group is None:
            group = grouped[owner_id] = OwnerWishlist(owner_id=owner_id, owner_name=owner_name)
        group.items.append(
            ShopItem(
                id=item.id,
                title=item.title,
                description=item.description,
                link=item.link,
                price=item.price,
                created_at=item.created_at,
                purchase_id=purchase_id,
                purchased_by=purchased_by,
            )
        )
    # dict сохраняет порядок вставки, то есть порядок сортировки запроса
    return list(grouped.values())
