from datetime import date

import pytest

from app import create_app
from extensions import db
from models.family import Family
from models.purchase import Purchase
from models.user import User
from models.wishlist_item import WishlistItem
from services import families, gifts, wishlist


def _location(response):
    return response.headers["Location"]


def test_healthz(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_security_headers(client):
    response = client.get("/")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_landing_for_guests_dashboard_for_users(client, make_user, log_in):
    assert client.get("/").status_code == 200

    make_user("alice")
    log_in("alice")

    response = client.get("/")
    assert response.status_code == 302
    assert _location(response).endswith("/dashboard")


@pytest.mark.parametrize(
    "path",
    ["/dashboard", "/family/create", "/family/join", "/family/1", "/family/1/shop", "/family/1/tree"],
)
def test_protected_pages_redirect_to_login(client, path):
    response = client.get(path)

    assert response.status_code == 302
    assert "/login" in _location(response)


def test_signup_logs_user_in(client, in_app):
    response = client.post(
        "/signup",
        data={
            "username": "alice",
            "email": "alice@example.com",
            "password": "snowflake-42",
            "displayName": "Alice",
        },
    )

    assert response.status_code == 302
    assert _location(response).endswith("/dashboard")
    assert client.get("/dashboard").status_code == 200
    assert in_app(lambda s: s.query(User).filter_by(username="alice").count()) == 1


def test_signup_conflict_is_shown_in_form(client, in_app, make_user):
    make_user("alice")

    response = client.post(
        "/signup",
        data={
            "username": "alice",
            "email": "new@example.com",
            "password": "snowflake-42",
            "displayName": "Alice",
        },
    )

    assert response.status_code == 200
    assert b"Username or email already exists" in response.data
    assert in_app(lambda s: s.query(User).count()) == 1


def test_login_failure_message(client, make_user, log_in):
    make_user("alice")

    response = log_in("alice", "wrong-password")

    assert response.status_code == 200
    assert b"Invalid username or password" in response.data


def test_login_redirects_to_safe_next_only(client, make_user):
    make_user("alice")

    ok = client.post(
        "/login?next=/family/join",
        data={"username": "alice", "password": "snowflake-42"},
    )
    assert _location(ok).endswith("/family/join")

    client.get("/logout")
    evil = client.post(
        "/login?next=https://evil.example/",
        data={"username": "alice", "password": "snowflake-42"},
    )
    assert _location(evil).endswith("/dashboard")


def test_logout_ends_session(client, make_user, log_in):
    make_user("alice")
    log_in("alice")
    assert client.get("/dashboard").status_code == 200

    client.get("/logout")

    assert "/login" in _location(client.get("/dashboard"))


def test_logout_deletes_remember_cookie(client):
    client.post(
        "/signup",
        data={
            "username": "alice",
            "email": "alice@example.com",
            "password": "snowflake-42",
            "displayName": "Alice",
        },
    )
    assert client.get_cookie("remember_token") is not None

    response = client.get("/logout")

    assert any(h.startswith("remember_token=;") for h in response.headers.getlist("Set-Cookie"))
    assert client.get_cookie("remember_token") is None
    dashboard = client.get("/dashboard")
    assert dashboard.status_code == 302
    assert "/login" in _location(dashboard)


def test_remember_cookie_alone_restores_login(app, client, make_user, log_in):
    make_user("alice")
    log_in("alice")
    remember = client.get_cookie("remember_token").value

    # Новый браузер без cookie сессии, только с «запомнить меня»
    other = app.test_client()
    other.set_cookie("remember_token", remember)

    assert other.get("/dashboard").status_code == 200


def test_session_cookie_lasts_thirty_days(app):
    assert app.config["PERMANENT_SESSION_LIFETIME"].days == 30
    assert app.config["REMEMBER_COOKIE_DURATION"].days == 30


def test_create_family_and_dashboard(client, in_app, make_user, log_in):
    alice = make_user("alice")
    log_in("alice")

    response = client.post("/family/create", data={"familyName": "Smiths"})

    family_id = in_app(lambda s: s.query(Family).one().id)
    assert _location(response).endswith(f"/family/{family_id}")
    assert in_app(lambda s: families.find_membership(s, alice, family_id)) is not None
    dashboard = client.get("/dashboard")
    assert b"Smiths" in dashboard.data


def test_create_family_without_name_shows_error(client, in_app, make_user, log_in):
    make_user("alice")
    log_in("alice")

    response = client.post("/family/create", data={"familyName": "  "})

    assert response.status_code == 200
    assert b"Family name is required." in response.data
    assert in_app(lambda s: s.query(Family).count()) == 0


def test_join_family_with_lowercase_code(client, in_app, make_user, make_family, log_in):
    alice = make_user("alice")
    bob = make_user("bob")
    family_id = make_family(alice)
    code = in_app(lambda s: families.get_family(s, family_id).invite_code)
    log_in("bob")

    response = client.post("/family/join", data={"inviteCode": code.lower()})

    assert _location(response).endswith(f"/family/{family_id}")
    assert in_app(lambda s: families.find_membership(s, bob, family_id)) is not None
    assert b"Bob" in client.get(f"/family/{family_id}").data


def test_join_family_invalid_code(client, make_user, log_in):
    make_user("bob")
    log_in("bob")

    response = client.post("/family/join", data={"inviteCode": "NOPE0000"})

    assert response.status_code == 200
    assert b"Invalid invite code" in response.data


@pytest.mark.parametrize("suffix", ["", "/my-list", "/shop", "/tree"])
def test_non_member_is_sent_to_dashboard(client, make_user, make_family, log_in, suffix):
    alice = make_user("alice")
    make_user("mallory")
    family_id = make_family(alice)
    log_in("mallory")

    response = client.get(f"/family/{family_id}{suffix}")

    assert response.status_code == 302
    assert _location(response).endswith("/dashboard")


def test_non_member_cannot_add_items(client, in_app, make_user, make_family, log_in):
    alice = make_user("alice")
    make_user("mallory")
    family_id = make_family(alice)
    log_in("mallory")

    response = client.post(f"/family/{family_id}/my-list/add", data={"title": "Pony"})

    assert _location(response).endswith("/dashboard")
    assert in_app(lambda s: s.query(WishlistItem).count()) == 0


def test_add_and_delete_own_item(client, in_app, make_user, make_family, log_in):
    alice = make_user("alice")
    family_id = make_family(alice)
    log_in("alice")

    client.post(f"/family/{family_id}/my-list/add", data={"title": "Bike", "price": "200"})
    item_id, price, description = in_app(
        lambda s: s.query(WishlistItem.id, WishlistItem.price, WishlistItem.description).one()
    )
    assert price == "200" and description is None
    assert b"Bike" in client.get(f"/family/{family_id}/my-list").data

    response = client.post(f"/family/{family_id}/my-list/delete/{item_id}")

    assert _location(response).endswith(f"/family/{family_id}/my-list")
    assert in_app(lambda s: s.query(WishlistItem).count()) == 0


def test_member_cannot_delete_someone_elses_item(client, in_app, make_user, make_family, log_in):
    alice = make_user("alice")
    bob = make_user("bob")
    family_id = make_family(alice, members=(bob,))
    item_id = in_app(lambda s: wishlist.add_item(s, alice, family_id, "Bike"))
    log_in("bob")

    client.post(f"/family/{family_id}/my-list/delete/{item_id}")

    assert in_app(lambda s: s.query(WishlistItem).filter_by(id=item_id).count()) == 1


def test_shop_purchase_and_tree(client, in_app, make_user, make_family, log_in):
    alice = make_user("alice", "Alice")
    bob = make_user("bob", "Bob")
    family_id = make_family(alice, members=(bob,))
    item_id = in_app(lambda s: wishlist.add_item(s, alice, family_id, "Bike"))

    log_in("bob")
    shop = client.get(f"/family/{family_id}/shop")
    assert b"Bike" in shop.data and b"Alice" in shop.data
    response = client.post(f"/family/{family_id}/shop/purchase/{item_id}")
    assert _location(response).endswith(f"/family/{family_id}/shop")
    client.post(f"/family/{family_id}/shop/purchase/{item_id}")
    assert in_app(lambda s: s.query(Purchase).count()) == 1

    client.get("/logout")
    log_in("alice")
    presents = in_app(lambda s: gifts.list_tree_presents(s, alice, family_id))
    assert [(p.title, p.gifter_name, p.unwrapped) for p in presents] == [("Bike", "Bob", False)]
    assert client.get(f"/family/{family_id}/tree").status_code == 200
    # Свой список не показывает, кто купил подарок
    assert b"Bob" not in client.get(f"/family/{family_id}/my-list").data


def test_switching_user_shows_new_user_pages(client, make_user, make_family, log_in):
    alice = make_user("alice", "Alice")
    make_user("mallory", "Mallory")
    family_id = make_family(alice)

    log_in("alice")
    assert client.get(f"/family/{family_id}").status_code == 200
    client.get("/logout")
    log_in("mallory")

    response = client.get(f"/family/{family_id}")
    assert response.status_code == 302
    assert _location(response).endswith("/dashboard")


def test_owner_purchase_via_route_is_ignored(client, in_app, make_user, make_family, log_in):
    alice = make_user("alice")
    family_id = make_family(alice)
    item_id = in_app(lambda s: wishlist.add_item(s, alice, family_id, "Bike"))
    log_in("alice")

    client.post(f"/family/{family_id}/shop/purchase/{item_id}")

    assert in_app(lambda s: s.query(Purchase).count()) == 0


@pytest.mark.parametrize(
    "reveal_date, expected",
    [(date(2999, 12, 25), False), (date(2000, 12, 25), True)],
)
def test_unwrap_route_respects_reveal_date(
    app, client, in_app, make_user, make_family, log_in, reveal_date, expected
):
    app.config["REVEAL_DATE"] = reveal_date
    alice = make_user("alice")
    bob = make_user("bob")
    family_id = make_family(alice, members=(bob,))
    item_id = in_app(lambda s: wishlist.add_item(s, alice, family_id, "Bike"))
    present_id = in_app(lambda s: gifts.purchase_item(s, item_id, bob, family_id).tree_present.id)
    log_in("alice")

    response = client.post(f"/family/{family_id}/tree/unwrap/{present_id}")

    assert _location(response).endswith(f"/family/{family_id}/tree")
    presents = in_app(lambda s: gifts.list_tree_presents(s, alice, family_id))
    assert presents[0].unwrapped is expected


def test_post_without_csrf_token_is_rejected():
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "RATE_LIMIT_ENABLED": False,
        }
    )
    client = app.test_client()

    response = client.post(
        "/signup",
        data={
            "username": "alice",
            "email": "alice@example.com",
            "password": "snowflake-42",
            "displayName": "Alice",
        },
    )

    assert response.status_code == 302
    with app.app_context():
        assert db.session.query(User).count() == 0
        db.drop_all()


def test_login_rate_limit(app, client, make_user):
    app.config["RATE_LIMIT_ENABLED"] = True
    make_user("alice")

    statuses = [
        client.post("/login", data={"username": "alice", "password": "wrong-password"}).status_code
        for _ in range(11)
    ]

    assert statuses[:10] == [200] * 10
    assert statuses[10] == 429
