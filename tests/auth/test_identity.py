from unittest.mock import MagicMock

import pytest

from imagemax.core.errors import UnauthorizedError
from imagemax.services.auth.identity import get_current_user, issue_token, verify_token


def _request(headers):
    request = MagicMock()
    request.headers = headers
    return request


def test_issued_token_verifies_to_user_id():
    token = issue_token("user-42", secret_key="s3cret")
    assert verify_token(token, secret_key="s3cret") == "user-42"


def test_token_signed_with_other_key_is_rejected():
    token = issue_token("user-42", secret_key="s3cret")
    assert verify_token(token, secret_key="other") is None


def test_tampered_token_is_rejected():
    token = issue_token("user-42", secret_key="s3cret")
    assert verify_token(token[:-2] + "xx", secret_key="s3cret") is None


def test_expired_token_is_rejected():
    token = issue_token("user-42", secret_key="s3cret")
    assert verify_token(token, secret_key="s3cret", max_age=-1) is None


def test_current_user_from_bearer_header():
    token = issue_token("user-42")

    user = get_current_user(_request({"Authorization": f"Bearer {token}"}))

    assert user.id == "user-42"


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer "}, {"Authorization": "Bearer junk"}])
def test_missing_or_invalid_credentials_are_unauthorized(headers):
    with pytest.raises(UnauthorizedError):
        get_current_user(_request(headers))
