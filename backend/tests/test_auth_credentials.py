"""Credential verification against the users table."""

import pytest
from sqlmodel import Session

from app.auth.credentials import (
    CredentialError,
    InvalidCredentialError,
    InvalidInputError,
    UserNotFoundError,
    authorize,
)
from app.auth.security import hash_password, verify_password


def test_valid_credentials_return_projection(session: Session, make_user):
    user = make_user(email="a@x.com", password="P@ss1", name="Auth", surnames="Test", country="ES")

    result = authorize(session, "a@x.com", "P@ss1")

    assert result.email == "a@x.com"
    assert result.id == str(user.id)
    assert result.name == "Auth"
    assert result.surnames == "Test"
    assert result.country == "ES"


def test_projection_never_carries_password(session: Session, make_user):
    make_user(email="a@x.com", password="P@ss1")

    result = authorize(session, "a@x.com", "P@ss1").to_dict()

    assert "password" not in result
    assert set(result) == {"id", "email", "name", "surnames", "phone", "country", "image"}


def test_image_comes_from_image_url(session: Session, make_user):
    make_user(email="img@x.com", image_url="https://i.pravatar.cc/200?u=1")

    result = authorize(session, "img@x.com", "P@ssw0rd!")

    assert result.image == "https://i.pravatar.cc/200?u=1"


def test_wrong_password_is_rejected(session: Session, make_user):
    make_user(email="a@x.com", password="P@ss1")

    with pytest.raises(InvalidCredentialError):
        authorize(session, "a@x.com", "wrong")


def test_unknown_email_is_rejected(session: Session, make_user):
    make_user(email="a@x.com")

    with pytest.raises(UserNotFoundError):
        authorize(session, "nobody@x.com", "P@ssw0rd!")


def test_email_match_is_case_sensitive(session: Session, make_user):
    make_user(email="a@x.com")

    with pytest.raises(UserNotFoundError):
        authorize(session, "A@X.COM", "P@ssw0rd!")


@pytest.mark.parametrize(
    "email,password",
    [("", "P@ssw0rd!"), ("a@x.com", ""), ("", ""), (None, "P@ssw0rd!"), ("a@x.com", None)],
)
def test_missing_fields_are_invalid_input(session: Session, make_user, email, password):
    make_user(email="a@x.com")

    with pytest.raises(InvalidInputError):
        authorize(session, email, password)


def test_login_failures_share_one_public_message():
    assert UserNotFoundError().message == InvalidCredentialError().message == "Invalid credentials"
    assert issubclass(UserNotFoundError, CredentialError)
    assert UserNotFoundError.status_code == 401


def test_hash_roundtrip_and_garbage_hash():
    hashed = hash_password("S3cret!pass")

    assert hashed != "S3cret!pass"
    assert verify_password("S3cret!pass", hashed)
    assert not verify_password("other", hashed)
    assert not verify_password("S3cret!pass", "not-a-hash")
    assert not verify_password("", hashed)


def test_hash_rejects_blank_password():
    with pytest.raises(ValueError):
        hash_password("")
