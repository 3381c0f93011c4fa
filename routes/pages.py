"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: routes/pages.py – главная страница и личный кабинет.
"""

from flask import redirect, render_template, url_for
from flask_login import current_user, login_required

from extensions import db
from services import families


def register_routes(app):
    """Регистрирует общие страницы приложения."""

    @app.get("/")
    def index():
        """Гостю – приветственная страница, вошедшему – кабинет."""
        if current_user.is_authenticated:
            return redirect(url_for("dashboard"))
        return render_template("index.html")

    @app.get("/dashboard")
    @login_required
    def dashboard():
        """Список семей пользователя с числом участников."""
        user_families = families.list_user_families(db.session, current_user.id)
        return render_template("dashboard.html", families=user_families)
