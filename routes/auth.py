"""
Программа: «WishTree» – веб-приложение для семейных рождественских списков желаний.
Модуль: routes/auth.py – маршруты аутентификации и управления сессиями.

Назначение модуля:
- Регистрация новых пользователей.
- Вход и выход из системы с использованием Flask-Login (сессия на 30 дней).
- Загрузка пользователя по идентификатору из сессии.
"""

from urllib.parse import urlsplit

from flask import flash, redirect, render_template, request, session, url_for
from flask_babel import gettext as _
from flask_login import current_user, login_user, logout_user

from extensions import db, login_manager
from services import credentials
from services.errors import ConflictError, ValidationError
from utils.rate_limit import is_rate_limited


@login_manager.user_loader
def load_user(user_id):
    """Загружает пользователя по id из сессии или cookie «запомнить меня»."""
    try:
        return credentials.find_by_id(db.session, int(user_id))
    except (TypeError, ValueError):
        return None


def _safe_next_url(target: str | None) -> str | None:
    """Разрешает только относительные пути внутри сайта."""
    if not target:
        return None
    parts = urlsplit(target)
    if parts.scheme or parts.netloc or not target.startswith("/") or target.startswith("//"):
        return None
    return target


def _start_session(user) -> None:
    """Открывает постоянную сессию на срок SESSION_LIFETIME_DAYS."""
    session.permanent = True
    login_user(user, remember=True)


def register_routes(app):
    """Регистрирует маршруты входа, регистрации и выхода."""

    @app.route("/login", methods=["GET", "POST"])
    def login():
        """Страница входа: проверка лимитов, учётных данных и безопасный редирект."""
        if current_user.is_authenticated:
            return redirect(url_for("dashboard"))

        if request.method == "POST":
            username = (request.form.get("username") or "").strip()
            password = request.form.get("password") or ""

            if is_rate_limited("login_ip", limit=20, window_seconds=10 * 60):
                return render_template(
                    "login.html",
                    error=_("Too many login attempts. Please try again later."),
                    username=username,
                ), 429

            username_key = username.lower() or "anonymous"
            if is_rate_limited("login_user", limit=10, window_seconds=10 * 60, identity=username_key):
                return render_template(
                    "login.html",
                    error=_("Too many login attempts for this user. Please try again later."),
                    username=username,
                ), 429

            user = credentials.login(db.session, username, password)
            if user is None:
                return render_template(
                    "login.html",
                    error=_("Invalid username or password"),
                    username=username,
                )

            _start_session(user)
            next_url = _safe_next_url(request.args.get("next") or request.form.get("next"))
            return redirect(next_url or url_for("dashboard"))

        return render_template("login.html", error=None, username="")

    @app.route("/signup", methods=["GET", "POST"])
    def signup():
        """Регистрация с немедленным входом в систему."""
        if current_user.is_authenticated:
            return redirect(url_for("dashboard"))

        form = {
            "username": (request.form.get("username") or "").strip(),
            "email": (request.form.get("email") or "").strip(),
            "display_name": (request.form.get("displayName") or request.form.get("display_name") or "").strip(),
        }

        if request.method == "POST":
            if is_rate_limited("signup", limit=10, window_seconds=15 * 60):
                return render_template(
                    "signup.html",
                    error=_("Too many sign-up attempts. Please try again in a few minutes."),
                    form=form,
                ), 429

            try:
                user_id = credentials.create_user(
                    db.session,
                    username=form["username"],
                    email=form["email"],
                    password=request.form.get("password") or "",
                    display_name=form["display_name"],
                )
            except (ConflictError, ValidationError) as exc:
                return render_template("signup.html", error=_(exc.message), form=form)

            app.logger.info("Зарегистрирован пользователь %s (id=%s)", form["username"], user_id)
            _start_session(credentials.find_by_id(db.session, user_id))
            return redirect(url_for("dashboard"))

        return render_template("signup.html", error=None, form=form)

    @app.route("/logout", methods=["GET", "POST"])
    def logout():
        """Завершает сессию и удаляет cookie «запомнить меня»."""
        # logout_user() оставляет в сессии метку для удаления remember-cookie
        session.clear()
        logout_user()
        flash(_("You have been logged out."), "info")
        return redirect(url_for("index"))
