"""
Название: «WishTree»
Язык: Python (Flask)
Краткое описание: веб-приложение, в котором семьи ведут рождественские списки желаний,
договариваются о покупках без спойлеров и открывают подарки под ёлкой после заданной даты
"""

import hmac
import os
import secrets

from flask import (
    Flask,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from flask_babel import gettext as _

from config import Config
from extensions import db, login_manager, babel
import models  # noqa: F401 - регистрирует модели для db.create_all()
from routes.pages import register_routes as register_page_routes
from routes.auth import register_routes as register_auth_routes
from routes.family import register_routes as register_family_routes
from utils.i18n import resolve_request_language
from utils.rate_limit import InMemoryRateLimiter


def _ensure_sqlite_directory(database_uri: str) -> None:
    """Создаёт каталог для файла SQLite, если он ещё не существует."""
    prefix = "sqlite:///"
    if not database_uri.startswith(prefix):
        return
    path = database_uri[len(prefix):]
    if not path or path == ":memory:":
        return
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def create_app(config_overrides: dict | None = None) -> Flask:
    """Фабрика приложения, собирающая все модули воедино."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    _ensure_sqlite_directory(app.config["SQLALCHEMY_DATABASE_URI"])
    app.logger.info("Используется база данных %s", app.config["SQLALCHEMY_DATABASE_URI"])

    # Инициализация расширений
    db.init_app(app)
    login_manager.init_app(app)

    def select_locale() -> str:
        """Язык интерфейса для текущего запроса."""
        return resolve_request_language(
            request=request,
            supported_languages=app.config["SUPPORTED_LANGUAGES"],
            default_language=app.config["DEFAULT_LANGUAGE"],
        )

    babel.init_app(app, locale_selector=select_locale)

    login_manager.login_view = "login"
    login_manager.login_message = "Please log in to access this page."
    login_manager.login_message_category = "error"
    app.extensions["rate_limiter"] = InMemoryRateLimiter()

    # Регистрация роутов по модулям
    register_page_routes(app)
    register_auth_routes(app)
    register_family_routes(app)

    with app.app_context():
        db.create_all()

    def _ensure_csrf_token() -> str:
        """Возвращает CSRF-токен сессии, создавая его при первом обращении."""
        token = session.get("csrf_token")
        if not token:
            token = secrets.token_urlsafe(32)
            session["csrf_token"] = token
        return token

    def _is_csrf_valid() -> bool:
        """Сверяет токен из формы или заголовка с токеном сессии."""
        expected = session.get("csrf_token")
        provided = request.headers.get("X-CSRF-Token") or request.form.get("csrf_token")
        if not expected or not provided:
            return False
        return hmac.compare_digest(expected, provided)

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        """Неавторизованный запрос – это переход на страницу входа, а не ошибка."""
        flash(_(login_manager.login_message), login_manager.login_message_category)
        next_url = request.full_path if request.query_string else request.path
        if next_url.endswith("?"):
            next_url = next_url[:-1]
        return redirect(url_for("login", next=next_url))

    @app.context_processor
    def inject_template_globals():
        """Переменные, доступные во всех шаблонах."""
        return {
            "csrf_token": _ensure_csrf_token(),
            "reveal_date": app.config["REVEAL_DATE"],
        }

    @app.before_request
    def enforce_csrf():
        """Отклоняет изменяющие запросы без корректного CSRF-токена."""
        if not app.config["CSRF_ENABLED"]:
            return None

        if request.method in {"GET", "HEAD", "OPTIONS", "TRACE"}:
            return None

        if request.endpoint in {"healthz"}:
            return None

        if _is_csrf_valid():
            return None

        app.logger.warning("Отклонён POST %s: неверный CSRF-токен", request.path)
        flash(_("Your form session expired. Please refresh the page and try again."), "error")
        return redirect(request.referrer or url_for("index"))

    @app.after_request
    def apply_security_headers(response):
        """Базовые заголовки безопасности для каждого ответа."""
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Permissions-Policy", "camera=(), microphone=(), geolocation=()")
        return response

    @app.errorhandler(500)
    def internal_error(error):
        """Непредвиденные ошибки хранилища не классифицируются: логируем и отдаём общую страницу."""
        db.session.rollback()
        app.logger.exception("Необработанная ошибка при обработке %s %s", request.method, request.path)
        return render_template("error.html"), 500

    @app.get("/healthz")
    def healthz():
        """Проверка живости для платформы развёртывания."""
        return {"status": "ok"}, 200

    return app


if __name__ == "__main__":
    app = create_app()
    is_production = os.environ.get("FLASK_ENV", "").lower() == "production"
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=not is_production)
