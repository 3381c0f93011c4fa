"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: services/gifts.py – покупки, подарки под ёлкой и их распаковка.

Назначение модуля:
- Отметка покупки позиции (побеждает первый покупатель) и создание коробки под ёлкой.
- Выборка коробок получателя с названием подарка и именем дарителя.
- Распаковка подарка не раньше даты раскрытия, строго один раз.

Жизненный цикл позиции: не куплена -> куплена (запакована) -> распакована.
Обратных переходов нет.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, datetime

from flask import current_app
from sqlalchemy import false
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.purchase import Purchase
from models.tree_present import TreePresent
from models.user import User
from models.wishlist_item import WishlistItem

PRESENT_SIZES = ("small", "medium", "large")
PRESENT_COLORS = ("red", "green", "blue", "gold", "silver")

_system_random = random.SystemRandom()


@dataclass(frozen=True)
class PresentView:
    """Коробка под ёлкой для страницы получателя."""

    id: int
    size: str
    color: str
    position_x: float | None
    position_y: float | None
    title: str
    gifter_name: str
    unwrapped: bool
    unwrapped_at: datetime | None


def _find_purchase(session: Session, item_id: int) -> Purchase | None:
    """Покупка позиции или None."""
    return session.query(Purchase).filter_by(wishlist_item_id=item_id).first()


def purchase_item(
    session: Session,
    item_id: int,
    purchaser_id: int,
    family_id: int,
    rng: random.Random | None = None,
) -> Purchase | None:
    """Отмечает позицию купленной и кладёт коробку под ёлку владельца.

    Повторная покупка ничего не меняет и не сообщает, кто успел первым:
    возвращается уже существующая запись. Позиция из другой семьи или своя
    собственная не покупается (None).
    """
    item = session.query(WishlistItem).filter_by(id=item_id, family_id=family_id).first()
    if item is None:
        return None
    if item.user_id == purchaser_id:
        return None

    existing = _find_purchase(session, item_id)
    if existing is not None:
        return existing

    rng = rng or _system_random
    purchase = Purchase(
        wishlist_item_id=item.id,
        purchased_by=purchaser_id,
        purchased_for=item.user_id,
        family_id=family_id,
    )
    purchase.tree_present = TreePresent(
        user_id=item.user_id,
        family_id=family_id,
        size=rng.choice(PRESENT_SIZES),
        color=rng.choice(PRESENT_COLORS),
    )
    session.add(purchase)
    try:
        session.commit()
    except IntegrityError:
        # Уникальность wishlist_item_id решает, кто купил первым
        session.rollback()
        existing = _find_purchase(session, item_id)
        if existing is None:
            raise
        return existing

    current_app.logger.info(
        "Позиция %s куплена пользователем %s (семья %s)", item.id, purchaser_id, family_id
    )
    return purchase


def list_tree_presents(session: Session, user_id: int, family_id: int) -> list[PresentView]:
    """Коробки под ёлкой получателя в порядке покупки."""
    rows = (
        session.query(TreePresent, Purchase, WishlistItem.title, User.display_name)
        .join(Purchase, TreePresent.purchase_id == Purchase.id)
        .join(WishlistItem, Purchase.wishlist_item_id == WishlistItem.id)
        .join(User, Purchase.purchased_by == User.id)
        .filter(TreePresent.user_id == user_id, TreePresent.family_id == family_id)
        .order_by(TreePresent.id)
        .all()
    )
    return [
        PresentView(
            id=present.id,
            size=present.size,
            color=present.color,
            position_x=present.position_x,
            position_y=present.position_y,
            title=title,
            gifter_name=gifter_name,
            unwrapped=bool(purchase.unwrapped),
            unwrapped_at=purchase.unwrapped_at,
        )
        for present, purchase, title, gifter_name in rows
    ]


def is_revealed(reveal_date: date, today: date | None = None) -> bool:
    """Наступила ли дата раскрытия."""
    return (today or date.today()) >= reveal_date


def days_until_reveal(reveal_date: date, today: date | None = None) -> int:
    """Число дней до раскрытия; ноль или меньше – подарки уже можно открывать."""
    return (reveal_date - (today or date.today())).days


def unwrap_present(
    session: Session,
    present_id: int,
    family_id: int,
    requester_id: int,
    reveal_date: date,
    today: date | None = None,
    now: datetime | None = None,
) -> bool:
    """Распаковывает коробку получателя; True только при первом переходе."""
    if not is_revealed(reveal_date, today):
        return False

    present = (
        session.query(TreePresent)
        .filter_by(id=present_id, family_id=family_id, user_id=requester_id)
        .first()
    )
    if present is None:
        return False

    # Условный UPDATE: при двух одновременных запросах сработает только один
    updated = (
        session.query(Purchase)
        .filter(Purchase.id == present.purchase_id, Purchase.unwrapped == false())
        .update(
            {Purchase.unwrapped: True, Purchase.unwrapped_at: now or datetime.utcnow()},
            synchronize_session="fetch",
        )
    )
    session.commit()
    if updated:
        current_app.logger.info("Подарок %s распакован пользователем %s", present_id, requester_id)
    return updated > 0
