"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: services/families.py – семьи, коды приглашения и членство.

Назначение модуля:
- Создание семьи вместе с членством создателя одной транзакцией.
- Генерация кода приглашения с повторной попыткой при совпадении.
- Вступление по коду (без учёта регистра), проверка членства, список участников.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.family import INVITE_CODE_LENGTH, Family
from models.family_member import FamilyMember
from models.user import User
from services.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError


INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_MAX_CODE_ATTEMPTS = 10
MAX_FAMILY_NAME_LENGTH = 100


@dataclass(frozen=True)
class MemberRecord:
    """Участник семьи для страницы семьи."""

    user_id: int
    display_name: str
    username: str


@dataclass(frozen=True)
class FamilySummary:
    """Строка кабинета: семья, код приглашения и число участников."""

    id: int
    name: str
    invite_code: str
    member_count: int
    created_at: datetime


def generate_invite_code(rng=secrets) -> str:
    """8 символов A-Z0-9; `rng` – любой объект с методом choice()."""
    return "".join(rng.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def normalize_invite_code(code: str | None) -> str:
    """Приводит введённый код к каноническому виду (без пробелов, верхний регистр)."""
    return (code or "").strip().upper()


def _invite_code_taken(session: Session, code: str) -> bool:
    """True, если код уже принадлежит какой-либо семье."""
    return session.query(Family.id).filter_by(invite_code=code).first() is not None


def create_family(
    session: Session,
    name: str,
    creator_id: int,
    code_factory: Callable[[], str] = generate_invite_code,
    max_attempts: int = DEFAULT_MAX_CODE_ATTEMPTS,
) -> int:
    """Создаёт семью и членство создателя; обе записи фиксируются одним commit.

    Каждый сгенерированный код – одна попытка из `max_attempts`, будь то
    совпадение при проверке или проигранная гонка на уникальном индексе.
    Прочие нарушения целостности (например, несуществующий создатель)
    пробрасываются как есть.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Family name is required.")
    if len(name) > MAX_FAMILY_NAME_LENGTH:
        raise ValidationError(f"Family name must not exceed {MAX_FAMILY_NAME_LENGTH} characters.")

    for _ in range(max(1, max_attempts)):
        code = code_factory()
        if _invite_code_taken(session, code):
            current_app.logger.warning("Код приглашения %s уже занят, генерируем новый", code)
            continue

        family = Family(name=name, invite_code=code, created_by=creator_id)
        family.members.append(FamilyMember(user_id=creator_id))
        session.add(family)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            # Код мог занять параллельный запрос между проверкой и вставкой
            if not _invite_code_taken(session, code):
                raise
            current_app.logger.warning("Гонка за код приглашения %s, повторяем", code)
            continue

        current_app.logger.info("Создана семья %s (id=%s) пользователем %s", name, family.id, creator_id)
        return family.id

    raise ConflictError("Could not generate a unique invite code. Please try again.")


def join_family(session: Session, user_id: int, invite_code: str | None) -> int:
    """Добавляет пользователя в семью по коду; повторное вступление ничего не меняет."""
    code = normalize_invite_code(invite_code)
    family = session.query(Family).filter_by(invite_code=code).first() if code else None
    if family is None:
        raise NotFoundError("Invalid invite code")

    if find_membership(session, user_id, family.id) is not None:
        return family.id

    session.add(FamilyMember(family_id=family.id, user_id=user_id))
    try:
        session.commit()
    except IntegrityError:
        # Параллельный запрос уже добавил это членство
        session.rollback()
        if find_membership(session, user_id, family.id) is None:
            raise
    else:
        current_app.logger.info("Пользователь %s вступил в семью %s", user_id, family.id)
    return family.id


def find_membership(session: Session, user_id: int, family_id: int) -> FamilyMember | None:
    """Членство пользователя в семье или None."""
    return (
        session.query(FamilyMember)
        .filter_by(family_id=family_id, user_id=user_id)
        .first()
    )


def require_membership(session: Session, user_id: int | None, family_id: int) -> FamilyMember:
    """Возвращает членство или бросает AuthorizationError."""
    if user_id is None:
        raise AuthorizationError("Not authenticated")
    membership = find_membership(session, user_id, family_id)
    if membership is None:
        raise AuthorizationError("Not a member of this family")
    return membership


def get_family(session: Session, family_id: int) -> Family | None:
    """Семья по id или None."""
    return session.get(Family, family_id)


def list_members(session: Session, family_id: int) -> list[MemberRecord]:
    """Участники семьи по отображаемому имени, затем по логину."""
    rows = (
        session.query(User.id, User.display_name, User.username)
        .join(FamilyMember, FamilyMember.user_id == User.id)
        .filter(FamilyMember.family_id == family_id)
        .order_by(User.display_name, User.username)
        .all()
    )
    return [
        MemberRecord(user_id=row.id, display_name=row.display_name, username=row.username)
        for row in rows
    ]


def list_user_families(session: Session, user_id: int) -> list[FamilySummary]:
    """Семьи пользователя с числом участников, новые сверху."""
    own_family_ids = (
        session.query(FamilyMember.family_id)
        .filter(FamilyMember.user_id == user_id)
        .scalar_subquery()
    )
    rows = (
        session.query(
            Family.id,
            Family.name,
            Family.invite_code,
            Family.created_at,
            func.count(FamilyMember.id).label("member_count"),
        )
        .join(FamilyMember, FamilyMember.family_id == Family.id)
        .filter(Family.id.in_(own_family_ids))
        .group_by(Family.id, Family.name, Family.invite_code, Family.created_at)
        .order_by(Family.created_at.desc(), Family.id.desc())
        .all()
    )
    return [
        FamilySummary(
            id=row.id,
            name=row.name,
            invite_code=row.invite_code,
            member_count=row.member_count,
            created_at=row.created_at,
        )
        for row in rows
    ]
