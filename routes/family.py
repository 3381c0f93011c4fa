"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: routes/family.py – маршруты семейных групп.

Назначение модуля:
- Создание семьи и вступление по коду приглашения.
- Просмотр семьи, своего списка желаний и списков остальных участников.
- Отметка покупок и распаковка подарков под ёлкой после даты раскрытия.

Любая семейная страница сначала проверяет членство; посторонний пользователь
молча возвращается в кабинет.
"""

from datetime import date
from functools import wraps

from flask import current_app, flash, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import current_user, login_required

from extensions import db
from services import families, gifts, wishlist
from services.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError


def member_required(view):
    """Подставляет семью в обработчик или перенаправляет в кабинет."""

    @wraps(view)
    def wrapped(family_id, *args, **kwargs):
        """Проверяет членство до вызова обработчика."""
        try:
            families.require_membership(db.session, current_user.id, family_id)
        except AuthorizationError:
            return redirect(url_for("dashboard"))

        family = families.get_family(db.session, family_id)
        if family is None:
            return redirect(url_for("dashboard"))
        return view(family, *args, **kwargs)

    return login_required(wrapped)


def _reveal_date() -> date:
    """Дата раскрытия подарков из конфигурации."""
    return current_app.config["REVEAL_DATE"]


def register_routes(app):
    """Регистрирует все страницы /family/*."""

    @app.route("/family/create", methods=["GET", "POST"])
    @login_required
    def create_family():
        """Форма создания семьи; после успеха – страница новой семьи."""
        if request.method == "POST":
            name = (request.form.get("familyName") or request.form.get("name") or "").strip()
            try:
                family_id = families.create_family(
                    db.session,
                    name,
                    current_user.id,
                    max_attempts=app.config["INVITE_CODE_MAX_ATTEMPTS"],
                )
            except (ConflictError, ValidationError) as exc:
                return render_template("create_family.html", error=_(exc.message), name=name)
            return redirect(url_for("family_detail", family_id=family_id))

        return render_template("create_family.html", error=None, name="")

    @app.route("/family/join", methods=["GET", "POST"])
    @login_required
    def join_family():
        """Вступление в семью по коду приглашения."""
        if request.method == "POST":
            code = request.form.get("inviteCode") or request.form.get("invite_code") or ""
            try:
                family_id = families.join_family(db.session, current_user.id, code)
            except NotFoundError:
                return render_template("join_family.html", error=_("Invalid invite code"), code=code)
            return redirect(url_for("family_detail", family_id=family_id))

        return render_template("join_family.html", error=None, code="")

    @app.get("/family/<int:family_id>")
    @member_required
    def family_detail(family):
        """Страница семьи: код приглашения и участники."""
        members = families.list_members(db.session, family.id)
        return render_template("family.html", family=family, members=members)

    @app.get("/family/<int:family_id>/my-list")
    @member_required
    def my_list(family):
        """Собственный список желаний без сведений о покупках."""
        items = wishlist.list_own_items(db.session, current_user.id, family.id)
        return render_template("my_list.html", family=family, items=items)

    @app.post("/family/<int:family_id>/my-list/add")
    @member_required
    def add_wishlist_item(family):
        """Добавляет позицию в свой список."""
        try:
            wishlist.add_item(
                db.session,
                current_user.id,
                family.id,
                title=request.form.get("title") or "",
                description=request.form.get("description"),
                link=request.form.get("link"),
                price=request.form.get("price"),
            )
        except ValidationError as exc:
            flash(_(exc.message), "error")
        return redirect(url_for("my_list", family_id=family.id))

    @app.post("/family/<int:family_id>/my-list/delete/<int:item_id>")
    @member_required
    def delete_wishlist_item(family, item_id):
        """Удаляет свою позицию; чужая остаётся нетронутой."""
        wishlist.delete_item(db.session, current_user.id, family.id, item_id)
        return redirect(url_for("my_list", family_id=family.id))

    @app.get("/family/<int:family_id>/shop")
    @member_required
    def shop(family):
        """Списки остальных участников со статусом покупки."""
        items_by_owner = wishlist.list_others_items(db.session, family.id, current_user.id)
        return render_template("shop.html", family=family, items_by_owner=items_by_owner)

    @app.post("/family/<int:family_id>/shop/purchase/<int:item_id>")
    @member_required
    def purchase_item(family, item_id):
        """Отмечает чужую позицию купленной."""
        gifts.purchase_item(db.session, item_id, current_user.id, family.id)
        return redirect(url_for("shop", family_id=family.id))

    @app.get("/family/<int:family_id>/tree")
    @member_required
    def tree(family):
        """Ёлка получателя с обратным отсчётом до даты раскрытия."""
        presents = gifts.list_tree_presents(db.session, current_user.id, family.id)
        days_left = gifts.days_until_reveal(_reveal_date())
        return render_template(
            "tree.html",
            family=family,
            presents=presents,
            days_until_reveal=days_left,
            is_revealed=days_left <= 0,
        )

    @app.post("/family/<int:family_id>/tree/unwrap/<int:present_id>")
    @member_required
    def unwrap_present(family, present_id):
        """Распаковывает подарок, если дата раскрытия наступила."""
        gifts.unwrap_present(
            db.session,
            present_id,
            family.id,
            current_user.id,
            reveal_date=_reveal_date(),
        )
        return redirect(url_for("tree", family_id=family.id))
