"""Tests for the credential store."""

from uuid import uuid4

import pytest

from notemaker.errors import DuplicateEmailError, UserNotFoundError, ValidationError
from notemaker.utils import now


class TestUserService:
    """Tests for UserService against the in-memory database."""

    async def test_create_with_password_hashes(self, core):
        """Test plaintext passwords are stored as bcrypt hashes."""
        user = await core.services.user.create_with_password(" A@B.com ", "Abcdef1!", " Jo ", "Li")

        assert user.email == "a@b.com"
        assert user.first_name == "Jo"
        assert user.password_hash.startswith("$2b$04$")
        assert user.is_email_verified is False
        assert await core.services.user.verify_password(user, "Abcdef1!") is True
        assert await core.services.user.verify_password(user, "abcdef1!") is False

    async def test_create_with_hash_stores_value_as_is(self, core):
        """Test an already computed hash is not hashed again."""
        password_hash = await core.services.user.hash_password("Abcdef1!")
        user = await core.services.user.create_with_hash("a@b.com", password_hash, "Jo", "Li", verified=True)

        assert user.password_hash == password_hash
        assert user.is_email_verified is True
        assert await core.services.user.verify_password(user, "Abcdef1!") is True

    async def test_duplicate_email(self, core):
        """Test emails are unique regardless of case."""
        await core.services.user.create_with_password("a@b.com", "Abcdef1!", "Jo", "Li")
        with pytest.raises(DuplicateEmailError):
            await core.services.user.create_with_password("A@B.COM", "Abcdef1!", "Jo", "Li")

    async def test_placeholder_never_verifies(self, core):
        """Test a non-bcrypt placeholder fails verification instead of raising."""
        user = await core.services.user.create_with_hash("a@b.com", "oauth:abc", "Jo", "Li")
        assert await core.services.user.verify_password(user, "oauth:abc") is False

    async def test_short_password_rejected(self, core):
        """Test create_with_password enforces the minimum length."""
        with pytest.raises(ValidationError):
            await core.services.user.create_with_password("a@b.com", "short", "Jo", "Li")

    async def test_find_and_get(self, core):
        """Test lookups by email and by id."""
        user = await core.services.user.create_with_password("a@b.com", "Abcdef1!", "Jo", "Li")

        assert (await core.services.user.find_by_email("A@b.com")).id == user.id
        assert await core.services.user.find_by_email("c@d.com") is None
        assert (await core.services.user.get_user(user.id)).email == "a@b.com"
        with pytest.raises(UserNotFoundError):
            await core.services.user.get_user(uuid4())

    async def test_set_password(self, core):
        """Test set_password replaces the hash."""
        user = await core.services.user.create_with_password("a@b.com", "Abcdef1!", "Jo", "Li")
        await core.services.user.set_password(user.id, "Zyxwvu9$", now())

        updated = await core.services.user.get_user(user.id)
        assert await core.services.user.verify_password(updated, "Zyxwvu9$") is True
        assert await core.services.user.verify_password(updated, "Abcdef1!") is False

    async def test_set_password_unknown_user(self, core):
        """Test set_password on a missing user raises."""
        with pytest.raises(UserNotFoundError):
            await core.services.user.set_password(uuid4(), "Zyxwvu9$")
