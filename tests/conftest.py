"""
Модуль: `tests/conftest.py`.
Назначение: Общие фикстуры – приложение на SQLite в памяти, клиент, фабрики данных.
"""

from datetime import date

import pytest

from app import create_app
from extensions import db
from services import credentials, families

PASSWORD = "snowflake-42"


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "REVEAL_DATE": date(2025, 12, 25),
            "CSRF_ENABLED": False,
            "RATE_LIMIT_ENABLED": False,
        }
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    """Сессия БД для тестов сервисов; держит контекст приложения весь тест.

    Тесты маршрутов её не используют: Flask переиспользует открытый контекст
    для запросов тестового клиента, и состояние Flask-Login в `g` перетекало
    бы между запросами.
    """
    with app.app_context():
        yield db.session


@pytest.fixture
def in_app(app):
    """Выполняет функцию от db.session в отдельном коротком контексте приложения."""

    def _in_app(fn):
        with app.app_context():
            return fn(db.session)

    return _in_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(in_app):
    def _make_user(username: str, display_name: str | None = None) -> int:
        return in_app(
            lambda db_session: credentials.create_user(
                db_session,
                username=username,
                email=f"{username}@example.com",
                password=PASSWORD,
                display_name=display_name or username.capitalize(),
            )
        )

    return _make_user


@pytest.fixture
def make_family(in_app):
    def _make_family(creator_id: int, name: str = "Smiths", members: tuple[int, ...] = ()) -> int:
        def _create(db_session):
            family_id = families.create_family(db_session, name, creator_id)
            code = families.get_family(db_session, family_id).invite_code
            for user_id in members:
                families.join_family(db_session, user_id, code)
            return family_id

        return in_app(_create)

    return _make_family


@pytest.fixture
def log_in(client):
    def _log_in(username: str, password: str = PASSWORD):
        return client.post("/login", data={"username": username, "password": password})

    return _log_in
