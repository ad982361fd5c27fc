from datetime import timedelta

import pytest
from bson import ObjectId

from hamkar.core.exceptions import NotFoundError, UnauthorizedError
from hamkar.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from hamkar.db.base import parse_object_id, to_str_id
from hamkar.models.account import AccountKind, Role
from hamkar.utils.validators import validate_filename, validate_url


def test_password_hash_roundtrip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_verify_password_without_hash():
    assert not verify_password("secret123", None)
    assert not verify_password("secret123", "not-a-bcrypt-hash")


def test_token_carries_subject_kind_and_role():
    subject = str(ObjectId())
    payload = decode_token(create_access_token(subject, AccountKind.EMPLOYER, Role.ADMIN))
    assert payload["sub"] == subject
    assert payload["kind"] == "Employer"
    assert payload["role"] == "Admin"


def test_expired_token():
    token = create_access_token(
        str(ObjectId()), AccountKind.DEVELOPER, Role.DEVELOPER, expires_delta=timedelta(seconds=-5)
    )
    with pytest.raises(UnauthorizedError) as exc_info:
        decode_token(token)
    assert exc_info.value.message == "Token expired"
    assert exc_info.value.reason == UnauthorizedError.TOKEN_EXPIRED


def test_tampered_token():
    token = create_access_token(str(ObjectId()), AccountKind.DEVELOPER, Role.DEVELOPER)
    with pytest.raises(UnauthorizedError) as exc_info:
        decode_token(token[:-3] + "abc")
    assert exc_info.value.message == "Invalid token"
    assert exc_info.value.reason == UnauthorizedError.INVALID_TOKEN


def test_malformed_object_id_is_not_found():
    with pytest.raises(NotFoundError) as exc_info:
        parse_object_id("not-an-id", "Project")
    assert exc_info.value.message == "Project not found"


def test_to_str_id():
    oid, nested = ObjectId(), ObjectId()
    doc = to_str_id({"_id": oid, "developer": {"_id": nested}, "projects": [nested]})
    assert doc == {"id": str(oid), "developer": {"_id": str(nested)}, "projects": [str(nested)]}


@pytest.mark.parametrize(
    "name,ok",
    [
        ("resume-1700000000000-42.pdf", True),
        ("../etc/passwd", False),
        ("a\\b.png", False),
        ("..", False),
        ("", False),
    ],
)
def test_validate_filename(name, ok):
    assert validate_filename(name) is ok


def test_validate_url():
    assert validate_url("https://github.com/sara")
    assert validate_url("http://example.org/path?q=1")
    assert not validate_url("ftp://example.org")
    assert not validate_url("github.com/sara")
