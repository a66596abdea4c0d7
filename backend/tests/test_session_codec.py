from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.auth.credentials import UserProjection
from app.auth.session import SessionClaims, SessionCodec
from app.errors import UnauthorizedError

SECRET = "codec-secret"
DAY = 24 * 60 * 60

USER = UserProjection(
    id="7",
    email="a@x.com",
    name="Ana",
    surnames="Lopez Garcia",
    phone="+34612345678",
    country="ES",
    image="https://example.com/a.png",
)


@pytest.fixture
def codec():
    return SessionCodec(secret=SECRET, max_age=30 * DAY, update_age=DAY)


def test_claims_copy_user_fields(codec):
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    claims = codec.claims_for(USER, now)

    assert claims.sub == "7"
    assert (claims.email, claims.name, claims.surnames) == ("a@x.com", "Ana", "Lopez Garcia")
    assert (claims.phone, claims.country) == ("+34612345678", "ES")
    assert claims.exp - claims.iat == 30 * DAY


def test_token_payload_has_exactly_the_session_fields(codec):
    token = codec.issue(USER)
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])

    assert set(payload) == {"sub", "email", "name", "surnames", "phone", "country", "iat", "exp"}
    assert "image" not in payload
    assert "password" not in payload


def test_materialize_converts_subject_to_int(codec):
    session = codec.materialize(codec.decode(codec.issue(USER)))

    assert session.user.id == 7
    assert isinstance(session.user.id, int)
    assert session.user.email == "a@x.com"
    assert session.user.country == "ES"


def test_expires_matches_exp_claim(codec):
    now = datetime(2026, 3, 1, tzinfo=timezone.utc)
    claims = codec.claims_for(USER, now)
    session = codec.materialize(claims)

    assert session.expires == now + timedelta(days=30)


def test_tampered_token_is_unauthorized(codec):
    token = codec.issue(USER)
    other = SessionCodec(secret="someone-else", max_age=DAY, update_age=DAY)

    with pytest.raises(UnauthorizedError):
        other.decode(token)

    forged_payload = codec.issue(UserProjection(id="8", email="b@x.com", name="Bea")).split(".")[1]
    header, _, signature = token.split(".")
    with pytest.raises(UnauthorizedError):
        codec.decode(f"{header}.{forged_payload}.{signature}")


def test_expired_token_is_unauthorized(codec):
    past = datetime.now(timezone.utc) - timedelta(days=31)
    token = codec.encode(codec.claims_for(USER, past))

    with pytest.raises(UnauthorizedError):
        codec.decode(token)


def test_blank_token_is_unauthorized(codec):
    with pytest.raises(UnauthorizedError):
        codec.decode("")


def test_non_numeric_subject_is_unauthorized(codec):
    claims = SessionClaims(
        sub="abc", email="a@x.com", name="Ana", surnames=None, phone=None, country=None, iat=0, exp=1
    )
    with pytest.raises(UnauthorizedError):
        codec.materialize(claims)


def test_refresh_cadence(codec):
    issued = datetime(2026, 1, 1, tzinfo=timezone.utc)
    claims = codec.claims_for(USER, issued)

    assert not codec.needs_refresh(claims, issued + timedelta(hours=23))
    assert codec.needs_refresh(claims, issued + timedelta(hours=24))


def test_refresh_keeps_snapshot_and_slides_expiry(codec):
    issued = datetime(2026, 1, 1, tzinfo=timezone.utc)
    later = issued + timedelta(days=2)
    claims = codec.claims_for(USER, issued)

    refreshed = codec.refresh(claims, later)

    assert refreshed.sub == claims.sub
    assert (refreshed.name, refreshed.phone, refreshed.country) == (claims.name, claims.phone, claims.country)
    assert refreshed.iat == int(later.timestamp())
    assert refreshed.exp == int((later + timedelta(days=30)).timestamp())


def test_codec_requires_secret():
    with pytest.raises(ValueError):
        SessionCodec(secret="", max_age=DAY, update_age=DAY)
