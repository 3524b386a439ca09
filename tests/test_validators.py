from datetime import timedelta
from types import SimpleNamespace

import pytest

from salon_api.security_utils import (
    create_access_token,
    create_jwt_token,
    generate_random_password,
    hash_password_bcrypt,
    mask_phone,
    verify_jwt_token,
    verify_password_bcrypt,
)
from salon_api.services.notification_service import personalize
from salon_api.shared.validators import (
    normalize_payment_method,
    to_international_phone,
    validate_email,
    validate_phone,
)


class TestPhoneValidation:
    @pytest.mark.parametrize("phone", ["+250788123456", "0788123456", "078 812 3456", "+14155552671"])
    def test_accepts_valid_numbers(self, phone):
        assert validate_phone(phone) == phone.replace(" ", "")

    @pytest.mark.parametrize("phone", ["+25078812345", "+250688123456", "07881234567", "12345", "abc"])
    def test_rejects_invalid_numbers(self, phone):
        with pytest.raises(ValueError):
            validate_phone(phone)

    def test_international_form(self):
        assert to_international_phone("0788123456") == "+250788123456"
        assert to_international_phone("250788123456") == "+250788123456"
        assert to_international_phone("+250788123456") == "+250788123456"


def test_email_is_lowercased():
    assert validate_email(" Marie@Example.COM ") == "marie@example.com"
    with pytest.raises(ValueError):
        validate_email("not-an-email")


def test_payment_method_normalization():
    assert normalize_payment_method("bank_card") == "BANK_CARD"
    assert normalize_payment_method(None) == "CASH"
    assert normalize_payment_method("bitcoin") == "CASH"


def test_personalize_uses_first_name():
    assert personalize("Hi {name}!", "Grace Mukamana") == "Hi Grace!"
    assert personalize("Hi {name}!", "") == "Hi Customer!"


class TestPasswords:
    def test_generated_password_has_every_character_class(self):
        for _ in range(50):
            password = generate_random_password(8)
            assert len(password) == 8
            assert any(c.islower() for c in password)
            assert any(c.isupper() for c in password)
            assert any(c.isdigit() for c in password)

    def test_bcrypt_round_trip(self):
        hashed = hash_password_bcrypt("secret123")
        assert verify_password_bcrypt("secret123", hashed)
        assert not verify_password_bcrypt("wrong", hashed)


class TestTokens:
    def test_access_token_claims(self):
        user = SimpleNamespace(id=7, phone="0788000001", role="ADMIN")
        payload = verify_jwt_token(create_access_token(user))
        assert payload["userId"] == 7
        assert payload["role"] == "ADMIN"

    def test_expired_token_is_rejected(self):
        token = create_jwt_token({"userId": 1}, expires_delta=timedelta(seconds=-10))
        assert verify_jwt_token(token) is None

    def test_tampered_token_is_rejected(self):
        assert verify_jwt_token("not.a.token") is None


def test_mask_phone_keeps_last_digits():
    assert mask_phone("+250788123456") == "*********3456"
    assert mask_phone("123") == "123"
    assert mask_phone(None) == ""
