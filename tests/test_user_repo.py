"""
Tests for user registration, authentication and updates.
"""

import pytest

from errors import ConflictError, MalformedRequestError, NotFoundError, UnauthorizedError
from repositories.user_repo import UserRepository


def fake_hash(plain: str) -> str:
    return f"hashed:{plain}"


def fake_verify(plain: str, hashed: str) -> bool:
    return hashed == f"hashed:{plain}"


@pytest.fixture
def users(executor) -> UserRepository:
    return UserRepository(executor, hasher=fake_hash, verifier=fake_verify)


@pytest.fixture
def new_user() -> dict:
    return {
        "username": "testy",
        "password": "secret",
        "firstName": "Testy",
        "lastName": "Test",
        "email": "test@mail.com",
        "phone": "5555555555",
    }


def test_register_creates_linked_customer(users, new_user, executor):
    user = users.register(new_user)

    assert user["username"] == "testy"
    assert "password" not in user
    assert executor.count("customers") == 1
    customer = users.customers.get(user["customerId"])
    assert customer["email"] == "test@mail.com"


def test_register_stores_hashed_password(users, new_user, executor):
    users.register(new_user)

    stored = executor.conn.execute("SELECT password FROM users").fetchone()[0]
    assert stored == "hashed:secret"


def test_duplicate_username_conflicts_before_any_write(users, new_user, executor):
    users.register(new_user)
    writes_before = len(executor.writes())

    with pytest.raises(ConflictError):
        users.register({**new_user, "email": "other@mail.com"})

    assert len(executor.writes()) == writes_before
    assert executor.count("customers") == 1


def test_register_requires_username_and_password(users, new_user):
    with pytest.raises(MalformedRequestError):
        users.register({**new_user, "password": ""})
    with pytest.raises(MalformedRequestError):
        users.register({k: v for k, v in new_user.items() if k != "username"})


def test_unique_username_violation_from_store_is_conflict(users, executor):
    users.insert({"username": "taken", "password": "x"})

    with pytest.raises(ConflictError):
        users.insert({"username": "taken", "password": "y"})


def test_authenticate(users, new_user):
    registered = users.register(new_user)

    user = users.authenticate("testy", "secret")

    assert user == registered
    assert "password" not in user


@pytest.mark.parametrize("username, password", [("testy", "wrong"), ("nobody", "secret")])
def test_authenticate_rejects_bad_credentials(users, new_user, username, password):
    users.register(new_user)

    with pytest.raises(UnauthorizedError):
        users.authenticate(username, password)


def test_update_rehashes_password(users, new_user, executor):
    user = users.register(new_user)

    updated = users.update(user["id"], {"password": "new-secret", "lastName": "Tested"})

    assert updated["lastName"] == "Tested"
    assert "password" not in updated
    assert users.authenticate("testy", "new-secret")["id"] == user["id"]


def test_get_by_username(users, new_user):
    users.register(new_user)

    assert users.get_by_username("testy")["email"] == "test@mail.com"
    with pytest.raises(NotFoundError):
        users.get_by_username("nobody")


def test_remove_by_username(users, new_user, executor):
    user = users.register(new_user)

    users.remove_by_username("testy")

    assert executor.count("users") == 0
    assert executor.count("customers") == 1
    with pytest.raises(NotFoundError):
        users.get(user["id"])


def test_remove_by_unknown_username(users, executor):
    with pytest.raises(NotFoundError):
        users.remove_by_username("nobody")

    sql, params = executor.statements[-1]
    assert sql == "DELETE FROM users WHERE username = $1 RETURNING id"
    assert params == ["nobody"]
