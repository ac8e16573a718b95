"""Unit tests for auth/credentials.py -- register() and login().

Covers:
- register() stores a bcrypt hash and returns a token for the new id
- duplicate email / username raise Conflict and create nothing
- login() by email, by username, and email-first fallback
- unknown account and wrong password raise the same InvalidCredentials
"""

import pytest

from auth import credentials
from auth.store import UserStore
from auth.tokens import TokenService, verify_password
from core.errors import Conflict, InvalidCredentials


@pytest.fixture
def store():
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def tokens():
    return TokenService("credentials-test-secret-0123456789abcdef")


@pytest.fixture
def ada(store, tokens):
    user, _ = credentials.register(store, tokens, "ada", "ada@uni.edu", "analytical")
    return user


class TestRegister:
    def test_token_resolves_to_new_user(self, store, tokens):
        user, token = credentials.register(store, tokens, "ada", "ada@uni.edu", "analytical")
        assert tokens.verify(token).id == user.id
        assert store.get_by_id(user.id).username == "ada"

    def test_password_is_hashed(self, store, ada):
        stored = store.get_by_id(ada.id)
        assert stored.hashed_password != "analytical"
        assert verify_password("analytical", stored.hashed_password)

    def test_duplicate_email_conflicts(self, store, tokens, ada):
        with pytest.raises(Conflict, match="email already exists"):
            credentials.register(store, tokens, "someone-else", "ada@uni.edu", "pw")
        assert store.count_users() == 1

    def test_duplicate_username_conflicts(self, store, tokens, ada):
        with pytest.raises(Conflict, match="Username is already taken"):
            credentials.register(store, tokens, "ada", "lovelace@uni.edu", "pw")
        assert store.count_users() == 1


class TestLogin:
    def test_login_by_email(self, store, tokens, ada):
        user, token = credentials.login(store, tokens, "analytical", email="ada@uni.edu")
        assert user.id == ada.id
        assert tokens.verify(token).id == ada.id

    def test_login_by_username(self, store, tokens, ada):
        user, _ = credentials.login(store, tokens, "analytical", username="ada")
        assert user.id == ada.id

    def test_unknown_email_falls_back_to_username(self, store, tokens, ada):
        user, _ = credentials.login(store, tokens, "analytical", email="nobody@uni.edu", username="ada")
        assert user.id == ada.id

    def test_wrong_password_and_unknown_user_look_the_same(self, store, tokens, ada):
        with pytest.raises(InvalidCredentials) as wrong_pw:
            credentials.login(store, tokens, "difference-engine", email="ada@uni.edu")
        with pytest.raises(InvalidCredentials) as unknown:
            credentials.login(store, tokens, "analytical", email="nobody@uni.edu")
        assert wrong_pw.value.message == unknown.value.message == "Invalid credentials"

    def test_no_identifier_is_invalid(self, store, tokens, ada):
        with pytest.raises(InvalidCredentials):
            credentials.login(store, tokens, "analytical")
