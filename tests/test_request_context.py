import json
import logging

from auth_api.middleware.request_context import REDACTED, body_preview, redact
from auth_api.utils.logger import TokenRedactingFilter
from auth_api.utils.validation_utils import format_validation_errors


def test_redact_masks_credentials_recursively():
    body = {
        "email": "a@b.com",
        "password": "Abcd123!",
        "nested": {"refreshToken": "x", "items": [{"clientSecret": "y", "name": "z"}]},
    }

    assert redact(body) == {
        "email": "a@b.com",
        "password": REDACTED,
        "nested": {"refreshToken": REDACTED, "items": [{"clientSecret": REDACTED, "name": "z"}]},
    }


def test_body_preview():
    assert body_preview(b"") == ""
    assert json.loads(body_preview(b'{"code": "abc", "state": "s"}')) == {"code": REDACTED, "state": "s"}
    assert body_preview(b"\x89PNG\x00\x01") == "<6 bytes>"


def test_format_validation_errors():
    errors = [
        {"type": "missing", "loc": ("body", "email"), "msg": "Field required"},
        {"type": "value_error", "loc": ("body", "avatarUrl"), "msg": "Value error, Avatar URL must be a valid http(s) URL"},
        {
            "type": "password_complexity",
            "loc": ("body", "password"),
            "msg": "Password does not meet complexity requirements",
            "ctx": {"rules": ["Password must contain at least one number"]},
        },
        {"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error"},
    ]

    assert format_validation_errors(errors) == [
        "email: Field required",
        "avatarUrl: Avatar URL must be a valid http(s) URL",
        "Password must contain at least one number",
        "JSON decode error",
    ]


def test_log_records_never_carry_tokens():
    record = logging.LogRecord(
        "auth-api", logging.INFO, __file__, 1,
        "header=%s refresh=%s",
        ("Bearer abc.def-ghi", "eyJhbGciOi.eyJzdWIiOi.c2lnbmF0dXJl"),
        None,
    )

    assert TokenRedactingFilter().filter(record) is True
    assert record.getMessage() == "header=Bearer *** refresh=***"
