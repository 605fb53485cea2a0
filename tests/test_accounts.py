"""
Tests for registration, account maintenance and input validation.
"""

import pytest

from vidgraph.errors import Conflict, InvalidArgument, InvalidCredentials
from vidgraph.models import User
from vidgraph.schemas import (
    AccountUpdateInput,
    ImageUpdateInput,
    LoginInput,
    PasswordChangeInput,
    RegisterInput,
    parse_id,
    parse_input,
)
from vidgraph.services import accounts, sessions


def _registration(**overrides):
    data = dict(
        full_name="Alice Liddell",
        email="Alice@Example.com",
        username="Alice",
        password="wonderland",
        avatar="https://img.example.com/alice.png",
    )
    data.update(overrides)
    return parse_input(RegisterInput, **data)


class TestRegistration:
    """Test account creation."""

    def test_register_normalizes_and_hides_secrets(self, db):
        user = accounts.register_user(db, _registration())

        assert user["username"] == "alice"
        assert user["email"] == "alice@example.com"
        assert "password_hash" not in user
        assert db.get(User, user["id"]).password_hash != "wonderland"

    def test_duplicate_username_or_email(self, db):
        accounts.register_user(db, _registration())
        db.commit()

        with pytest.raises(Conflict):
            accounts.register_user(db, _registration(email="other@example.com"))
        with pytest.raises(Conflict):
            accounts.register_user(db, _registration(username="someone"))

    def test_required_fields(self):
        with pytest.raises(InvalidArgument):
            _registration(avatar="")
        with pytest.raises(InvalidArgument):
            _registration(email="not-an-email")
        with pytest.raises(InvalidArgument):
            _registration(full_name="   ")

    def test_unknown_fields_rejected(self):
        with pytest.raises(InvalidArgument):
            _registration(is_admin=True)


class TestAccountMaintenance:
    """Test password and profile changes."""

    def test_change_password(self, db, make_user, password):
        alice = make_user("alice")

        with pytest.raises(InvalidCredentials):
            accounts.change_password(db, alice.id, PasswordChangeInput(old_password="nope", new_password="x1"))

        accounts.change_password(db, alice.id, PasswordChangeInput(old_password=password, new_password="n3w"))
        assert sessions.authenticate(db, "n3w", username="alice").id == alice.id

    def test_update_details(self, db, make_user):
        alice = make_user("alice")

        user = accounts.update_account_details(
            db, alice.id, AccountUpdateInput(full_name="Alice L", email="NEW@example.com")
        )

        assert user["full_name"] == "Alice L"
        assert user["email"] == "new@example.com"

    def test_email_taken(self, db, make_user):
        alice = make_user("alice")
        make_user("bob")

        with pytest.raises(Conflict):
            accounts.update_account_details(
                db, alice.id, AccountUpdateInput(full_name="Alice", email="bob@example.com")
            )

    def test_email_claimed_after_check(self, db, make_user, monkeypatch):
        """The unique index still rejects an email the pre-check missed."""
        alice = make_user("alice")
        make_user("bob")
        monkeypatch.setattr(accounts, "_email_taken", lambda *args: False)

        with pytest.raises(Conflict):
            accounts.update_account_details(
                db, alice.id, AccountUpdateInput(full_name="Alice", email="bob@example.com")
            )

        assert db.get(User, alice.id).email == "alice@example.com"

    def test_update_images(self, db, make_user):
        alice = make_user("alice")

        assert accounts.update_avatar(db, alice.id, ImageUpdateInput(url="https://img/a.png"))["avatar"] == "https://img/a.png"
        assert accounts.update_cover_image(db, alice.id, ImageUpdateInput(url="https://img/c.png"))["cover_image"] == "https://img/c.png"


class TestInputParsing:
    """Test identifier and struct validation."""

    def test_parse_id_canonicalizes(self):
        assert parse_id("  6F9619FF-8B86-D011-B42D-00C04FC964FF ") == "6f9619ff-8b86-d011-b42d-00c04fc964ff"

    @pytest.mark.parametrize("value", [None, "", "   ", "42", "not-a-uuid"])
    def test_parse_id_rejects(self, value):
        with pytest.raises(InvalidArgument):
            parse_id(value, "video id")

    def test_login_needs_an_identifier(self):
        with pytest.raises(InvalidArgument):
            parse_input(LoginInput, password="x")
        assert parse_input(LoginInput, username="alice", password="x").username == "alice"
