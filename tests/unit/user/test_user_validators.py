"""Tests for user input validators."""

import time

import pytest

from notemaker.core.modules.user.validators import validate_email, validate_name, validate_password
from notemaker.errors import ValidationError
from notemaker.utils import is_email


class TestValidateEmail:
    """Tests for validate_email."""

    @pytest.mark.parametrize("email", ["a@b.com", "first.last@mail.example.org", "x-y@z.io"])
    def test_valid(self, email):
        """Test common addresses pass."""
        validate_email(email)
        assert is_email(email)

    @pytest.mark.parametrize("email", ["", "plain", "a@b", "@b.com", "a b@c.com", "a@@b.com"])
    def test_invalid(self, email):
        """Test malformed addresses fail with a field error."""
        with pytest.raises(ValidationError) as exc_info:
            validate_email(email)
        assert exc_info.value.errors == [{"field": "email", "message": "Please enter a valid email address"}]

    @pytest.mark.parametrize("email", ["a" * 24 + "!", "a" * 5000, "a." * 2000 + "b@c"])
    def test_long_malformed_input_is_rejected_quickly(self, email):
        """Test rejection time does not grow explosively with input length."""
        started = time.perf_counter()
        assert not is_email(email)
        assert time.perf_counter() - started < 1.0


class TestValidatePassword:
    """Tests for validate_password."""

    def test_valid(self):
        """Test 8 characters is enough."""
        validate_password("12345678")

    def test_too_short(self):
        """Test fewer than 8 characters fails."""
        with pytest.raises(ValidationError, match="at least 8 characters"):
            validate_password("1234567")

    def test_field_name(self):
        """Test the reported field can be renamed."""
        with pytest.raises(ValidationError) as exc_info:
            validate_password("short", field="newPassword")
        assert exc_info.value.errors[0]["field"] == "newPassword"


class TestValidateName:
    """Tests for validate_name."""

    @pytest.mark.parametrize("name", ["Jo", "A" * 50, "  Li  "])
    def test_valid(self, name):
        validate_name(name, "firstName")

    @pytest.mark.parametrize("name", ["", "J", "  J  ", "A" * 51])
    def test_invalid(self, name):
        """Test names outside 2..50 characters after trimming fail."""
        with pytest.raises(ValidationError) as exc_info:
            validate_name(name, "lastName")
        assert exc_info.value.errors[0]["field"] == "lastName"
